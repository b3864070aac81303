"""
Structural soundness checks for a candidate activity list.

A schedule is sound when it starts at a single "Project Start" activity,
ends at a "Project End" activity, every predecessor reference resolves,
every task leads somewhere, and every task is reachable from the start.
Problems are collected into a list instead of raised, so a caller can
feed all of them back at once.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import networkx as nx

from .dependencies import parse_predecessors
from .models import Activity, SentinelKind, ValidationResult

logger = logging.getLogger(__name__)

PASS_MESSAGE = "Pass: The schedule forms a single, fully connected graph."


def build_graph(activities: Sequence[Activity]) -> nx.DiGraph:
    """Directed predecessor -> successor graph over resolvable edges."""
    graph = nx.DiGraph()
    for act in activities:
        graph.add_node(act.id, activity=act)
    for act in activities:
        for edge in parse_predecessors(act.predecessors):
            if edge.ref_id in graph:
                graph.add_edge(
                    edge.ref_id, act.id, rel_type=edge.type.value, lag=edge.lag
                )
    return graph


def _find_sentinel(
    activities: Sequence[Activity], kind: SentinelKind, label: str, errors: List[str]
) -> Optional[Activity]:
    matches = [act for act in activities if act.sentinel is kind]
    if not matches:
        errors.append(f'The schedule is missing a "{label}" activity.')
        return None
    if len(matches) > 1:
        ids = ", ".join(str(act.id) for act in matches)
        errors.append(f'The schedule has more than one "{label}" activity (IDs {ids}).')
    return matches[0]


def _fail(errors: List[str]) -> ValidationResult:
    logger.debug("Schedule failed validation with %d error(s)", len(errors))
    return ValidationResult(errors=errors, message="Fail: " + " ".join(errors))


def validate(activities: Sequence[Activity]) -> ValidationResult:
    """
    Validate the connectivity of a schedule.

    Checks for:
    - Missing "Project Start" / "Project End" activities (stops here)
    - Duplicate activity ids
    - References to non-existent predecessors
    - Dangling tasks (no successor, other than "Project End")
    - Orphan tasks (unreachable from "Project Start")
    - Circular dependencies
    """
    activities = list(activities)
    errors: List[str] = []

    project_start = _find_sentinel(activities, SentinelKind.START, "Project Start", errors)
    project_end = _find_sentinel(activities, SentinelKind.END, "Project End", errors)
    if project_start is None or project_end is None:
        return _fail(errors)

    by_id: Dict[int, Activity] = {}
    for act in activities:
        if act.id in by_id:
            errors.append(f'Activity "{act.name}" reuses ID {act.id}, which must be unique.')
            continue
        by_id[act.id] = act

    for act in activities:
        for edge in parse_predecessors(act.predecessors):
            if edge.ref_id not in by_id:
                errors.append(
                    f'Activity "{act.name}" lists a non-existent predecessor with ID {edge.ref_id}.'
                )

    graph = build_graph(activities)

    for act_id in by_id:
        if act_id != project_end.id and graph.out_degree(act_id) == 0:
            errors.append(
                f'Dangling Task: Activity "{by_id[act_id].name}" (ID {act_id}) is a dead end. '
                f'It must connect to tasks that lead towards "Project End".'
            )

    reachable = nx.descendants(graph, project_start.id) | {project_start.id}
    for act_id, act in by_id.items():
        if act_id not in reachable:
            errors.append(
                f'Orphan Task: Activity "{act.name}" (ID {act_id}) is unreachable from "Project Start".'
            )

    try:
        cycle = nx.find_cycle(graph, orientation="original")
    except nx.NetworkXNoCycle:
        cycle = []
    if cycle:
        path = [str(u) for u, _, _ in cycle] + [str(cycle[0][0])]
        errors.append(f"Circular dependency detected: {' -> '.join(path)}.")

    if errors:
        return _fail(errors)
    return ValidationResult(errors=[], message=PASS_MESSAGE)
