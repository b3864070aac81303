from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class DependencyType(str, Enum):
    """Precedence relationship between a predecessor and its successor."""

    FS = "FS"  # Finish-to-Start
    SS = "SS"  # Start-to-Start
    FF = "FF"  # Finish-to-Finish
    SF = "SF"  # Start-to-Finish


class SentinelKind(str, Enum):
    """Zero-duration marker activities bounding a schedule."""

    START = "start"
    END = "end"


START_MARKER = "project start"
END_MARKER = "project end"


@dataclass(frozen=True)
class ParsedPredecessor:
    """A single predecessor edge decoded from a predecessors string."""

    ref_id: int
    type: DependencyType = DependencyType.FS
    lag: int = 0  # Workdays, can be positive or negative

    def __str__(self) -> str:
        if self.lag == 0:
            return f"{self.ref_id}{self.type.value}"
        lag_str = f"+{self.lag}" if self.lag > 0 else str(self.lag)
        return f"{self.ref_id}{self.type.value}{lag_str}"


@dataclass(frozen=True)
class Activity:
    """Represents a project activity as supplied by the caller."""

    id: int
    name: str
    duration: int
    predecessors: str = ""  # Encoded, e.g. "4FS,5SS+3"
    kind: Optional[SentinelKind] = None

    @property
    def sentinel(self) -> Optional[SentinelKind]:
        """Explicit kind if set, otherwise a literal name substring match."""
        if self.kind is not None:
            return self.kind
        lowered = (self.name or "").lower()
        if START_MARKER in lowered:
            return SentinelKind.START
        if END_MARKER in lowered:
            return SentinelKind.END
        return None

    @property
    def is_project_start(self) -> bool:
        return self.sentinel is SentinelKind.START

    @property
    def is_project_end(self) -> bool:
        return self.sentinel is SentinelKind.END


@dataclass
class ScheduledActivity:
    """An activity with all calculated scheduling attributes."""

    activity: Activity

    # Forward pass results
    early_start: Optional[date] = None
    early_finish: Optional[date] = None

    # Backward pass results
    late_start: Optional[date] = None
    late_finish: Optional[date] = None

    total_float: int = 0  # Workdays
    is_critical: bool = False

    @property
    def id(self) -> int:
        return self.activity.id

    @property
    def name(self) -> str:
        return self.activity.name

    @property
    def duration(self) -> int:
        return self.activity.duration

    @property
    def predecessors(self) -> str:
        return self.activity.predecessors


@dataclass
class ValidationResult:
    """Outcome of a connectivity check, errors in the order they were found."""

    errors: List[str] = field(default_factory=list)
    message: str = ""

    @property
    def ok(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.ok
