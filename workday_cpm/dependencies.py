from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from .models import DependencyType, ParsedPredecessor

PLACEHOLDERS = {"-", "—", "–"}  # hyphen, em-dash, en-dash

TOKEN_PATTERN = re.compile(
    r"""
    ^\s*
    (?P<ref>\d+)                  # predecessor id
    \s*
    (?P<type>FS|SS|FF|SF)?        # optional relationship, FS when omitted
    \s*
    (?P<lag>[+-]\s*\d+)?          # optional signed lag in workdays
    \s*(?:d|days?)?               # optional unit suffix
    \s*$
    """,
    re.IGNORECASE | re.VERBOSE,
)


def _split_tokens(text: Optional[str]) -> List[str]:
    if text is None:
        return []
    text = str(text).strip()
    if not text or text in PLACEHOLDERS:
        return []
    return [part.strip() for part in re.split(r"[;,]", text) if part.strip()]


def parse_token(token: str) -> Optional[ParsedPredecessor]:
    """Decode one token such as ``"5SS+3"``; ``None`` when it does not parse."""
    match = TOKEN_PATTERN.match(token)
    if not match:
        return None
    rel_type = DependencyType((match.group("type") or "FS").upper())
    lag_raw = match.group("lag")
    lag = int(lag_raw.replace(" ", "")) if lag_raw else 0
    return ParsedPredecessor(int(match.group("ref")), rel_type, lag)


def parse_predecessors_checked(
    text: Optional[str],
) -> Tuple[List[ParsedPredecessor], List[str]]:
    """
    Parse a predecessors string, reporting every token that was dropped.

    Args:
        text: Predecessors in format "4FS,5SS+3,6" (type defaults to FS, lag to 0)

    Returns:
        Tuple of (edges, errors)
    """
    edges: List[ParsedPredecessor] = []
    errors: List[str] = []
    for token in _split_tokens(text):
        edge = parse_token(token)
        if edge is None:
            errors.append(
                f"Invalid predecessor format: '{token}'. Use 'ID', 'IDTYPE' or 'IDTYPE+LAG' (e.g., '4FS', '5SS+3')."
            )
            continue
        edges.append(edge)
    return edges, errors


def parse_predecessors(text: Optional[str]) -> List[ParsedPredecessor]:
    """Lenient parse: unparsable tokens are silently dropped."""
    edges, _ = parse_predecessors_checked(text)
    return edges


def format_predecessors(edges: Iterable[ParsedPredecessor]) -> str:
    return ",".join(str(edge) for edge in edges)
