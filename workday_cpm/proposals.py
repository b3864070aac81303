"""Scoring of candidate schedules proposed as successor suggestions."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Union

from .engine import calculate_schedule
from .models import Activity, DependencyType, ParsedPredecessor
from .dependencies import format_predecessors
from .workdays import count_workdays, subtract_workdays

INVALID_GRAPH = "Invalid Graph"

Score = Union[int, str]


@dataclass(frozen=True)
class SuccessorSuggestion:
    successor_id: int
    dependency_type: DependencyType = DependencyType.FS


@dataclass(frozen=True)
class ActivityProposal:
    """An activity as proposed by a generator, linked forward to its successors."""

    id: int
    name: str
    duration: int
    successors: List[SuccessorSuggestion] = field(default_factory=list)


def proposal_to_activities(proposal: Sequence[ActivityProposal]) -> List[Activity]:
    """
    Invert successor suggestions into predecessor strings.

    Suggestions naming an unknown successor are ignored. Proposals carry
    no lag, so every generated edge has lag 0.
    """
    incoming: Dict[int, List[ParsedPredecessor]] = {item.id: [] for item in proposal}
    for source in proposal:
        for suggestion in source.successors:
            if suggestion.successor_id in incoming:
                incoming[suggestion.successor_id].append(
                    ParsedPredecessor(source.id, DependencyType(suggestion.dependency_type))
                )
    return [
        Activity(
            id=item.id,
            name=item.name,
            duration=item.duration,
            predecessors=format_predecessors(incoming[item.id]),
        )
        for item in proposal
    ]


def evaluate_proposal(
    proposal: Sequence[ActivityProposal], project_start: object
) -> Dict[str, Score]:
    """Schedule a proposal and summarise it for side-by-side comparison."""
    if not proposal:
        return {"Total Activities": 0, "Overall Status": "Failed - No activities"}

    schedule = calculate_schedule(proposal_to_activities(proposal), project_start)
    start = next((item for item in schedule if item.activity.is_project_start), None)
    end = next((item for item in schedule if item.activity.is_project_end), None)

    duration: Score = INVALID_GRAPH
    if (
        start is not None
        and end is not None
        and start.early_start is not None
        and end.early_finish is not None
    ):
        finish = end.early_finish
        if end.duration <= 0:
            # A milestone end marks the start of its day
            finish = subtract_workdays(end.early_start, 1)
        duration = count_workdays(start.early_start, finish)

    has_start_end = start is not None and end is not None
    failed = duration == INVALID_GRAPH or not has_start_end
    return {
        "Calculated Duration (workdays)": duration,
        "Total Activities": len(proposal),
        "Total Successor Links": sum(len(item.successors) for item in proposal),
        "Has Start/End": "Yes" if has_start_end else "No",
        "Overall Status": "Failed" if failed else "Success",
    }
