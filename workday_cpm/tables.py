from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Sequence

import pandas as pd

from .models import Activity, ScheduledActivity, ValidationResult

COLUMN_ALIASES = {
    "id": ("id", "ID", "TaskID", "Task ID"),
    "name": ("name", "Name", "Activity", "Description", "Task Name"),
    "duration": ("duration", "Duration"),
    "predecessors": ("predecessors", "Predecessors"),
}


def _is_missing(value: object) -> bool:
    try:
        return value is None or bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _safe_str(value: object) -> str:
    if _is_missing(value):
        return ""
    return str(value).strip()


def _safe_int(value: object, default: int = 0) -> int:
    if _is_missing(value):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def _lookup(record: Mapping[str, Any], field_name: str) -> Any:
    for key in COLUMN_ALIASES[field_name]:
        if key in record:
            return record[key]
    return None


def activities_from_records(records: Iterable[Mapping[str, Any]]) -> List[Activity]:
    """
    Build activities from already-parsed rows.

    Missing names and predecessors become empty strings and a missing
    duration becomes 0. A non-positive id or a negative duration raises
    ValueError, naming the offending row.
    """
    activities: List[Activity] = []
    for row_number, record in enumerate(records, start=1):
        activity_id = _safe_int(_lookup(record, "id"), default=-1)
        if activity_id <= 0:
            raise ValueError(f"Row {row_number}: activity ID must be a positive integer.")
        duration = _safe_int(_lookup(record, "duration"))
        if duration < 0:
            raise ValueError(f"Row {row_number}: duration must be non-negative.")
        predecessors = _lookup(record, "predecessors")
        # Spreadsheets turn a single predecessor like "4" into a float
        if isinstance(predecessors, float) and not _is_missing(predecessors):
            predecessors = _safe_int(predecessors)
        activities.append(
            Activity(
                id=activity_id,
                name=_safe_str(_lookup(record, "name")),
                duration=duration,
                predecessors=_safe_str(predecessors),
            )
        )
    return activities


def activities_from_dataframe(df: pd.DataFrame) -> List[Activity]:
    return activities_from_records(df.to_dict(orient="records"))


def schedule_to_dataframe(schedule: Sequence[ScheduledActivity]) -> pd.DataFrame:
    """Get calculation results as a pandas DataFrame, in schedule order."""
    data = []
    for item in schedule:
        data.append(
            {
                "ID": item.id,
                "Name": item.name,
                "Duration": item.duration,
                "Predecessors": item.predecessors,
                "Early Start": item.early_start,
                "Early Finish": item.early_finish,
                "Late Start": item.late_start,
                "Late Finish": item.late_finish,
                "Total Float": item.total_float,
                "Critical": "Yes" if item.is_critical else "No",
            }
        )
    columns = [
        "ID", "Name", "Duration", "Predecessors", "Early Start", "Early Finish",
        "Late Start", "Late Finish", "Total Float", "Critical",
    ]
    return pd.DataFrame(data, columns=columns)


def validation_to_dataframe(result: ValidationResult) -> pd.DataFrame:
    return pd.DataFrame({"Error": list(result.errors)}, columns=["Error"])
