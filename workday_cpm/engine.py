from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .dependencies import parse_predecessors
from .models import Activity, DependencyType, ParsedPredecessor, ScheduledActivity
from .workdays import (
    count_workdays,
    finish_date,
    first_workday_on_or_after,
    next_workday,
    shift_workdays,
    subtract_workdays,
    to_date,
)

logger = logging.getLogger(__name__)

EarlyDates = Dict[int, Tuple[Optional[date], Optional[date]]]
SuccessorMap = Dict[int, List[Tuple[int, ParsedPredecessor]]]


class ScheduleError(Exception):
    """Base class for scheduling failures."""


class ScheduleConvergenceError(ScheduleError):
    """Raised in strict mode when a pass hits its iteration cap."""

    def __init__(self, pass_name: str, iterations: int):
        self.pass_name = pass_name
        self.iterations = iterations
        super().__init__(
            f"{pass_name} reached max iterations ({iterations}). Possible cyclic dependency."
        )


class CPMScheduler:
    """
    Critical Path Method scheduler over a Monday-Friday workday calendar.

    Supports FS, SS, FF and SF relationships with signed lags. Both passes
    are fixed-point relaxations, so activities may be given in any order.
    SF is scheduled exactly like FS.
    """

    def __init__(
        self,
        project_start: object,
        max_iterations: Optional[int] = None,
        strict: bool = False,
    ):
        self.project_start: date = first_workday_on_or_after(to_date(project_start))
        self.max_iterations = max_iterations
        self.strict = strict
        self.calculation_log: List[str] = []

    def _log(self, message: str) -> None:
        self.calculation_log.append(message)

    def _iteration_cap(self, count: int) -> int:
        if self.max_iterations is not None:
            return self.max_iterations
        return max(2, count * count)

    def _not_converged(self, pass_name: str, iterations: int) -> None:
        message = f"{pass_name} reached max iterations ({iterations}). Possible cyclic dependency."
        self._log(f"WARNING: {message}")
        if self.strict:
            raise ScheduleConvergenceError(pass_name, iterations)
        logger.warning(message)

    def calculate(self, activities: Sequence[Activity]) -> List[ScheduledActivity]:
        """
        Perform the full calculation: forward pass, backward pass, floats.

        Returns scheduled activities sorted by (early start, id).
        """
        self.calculation_log.clear()
        if not activities:
            self._log("No activities defined.")
            return []

        self._log("=" * 70)
        self._log("CPM CALCULATION")
        self._log(f"Project Start: {self.project_start.isoformat()}")
        self._log("=" * 70)

        early = self.forward_pass(activities)
        late_finish = self.backward_pass(activities, early)
        schedule = self.classify(activities, early, late_finish)

        critical = [act.id for act in schedule if act.is_critical]
        self._log("")
        self._log("=" * 70)
        self._log("CALCULATION COMPLETE")
        self._log(f"Critical activities: {', '.join(map(str, critical)) or '(none)'}")
        self._log("=" * 70)
        return schedule

    def forward_pass(self, activities: Sequence[Activity]) -> EarlyDates:
        """
        Forward pass calculation to determine Early Start (ES) and Early Finish (EF).

        Activities keep placeholder ``None`` dates until first computed; a
        missing or not yet computed predecessor contributes no constraint.
        """
        self._log("FORWARD PASS (Calculating ES and EF)")
        self._log("-" * 50)

        parsed = {act.id: parse_predecessors(act.predecessors) for act in activities}
        by_id = {act.id: act for act in activities}
        early: EarlyDates = {act.id: (None, None) for act in activities}

        cap = self._iteration_cap(len(activities))
        changed = True
        iteration = 0
        while changed and iteration < cap:
            changed = False
            iteration += 1
            for act in activities:
                es = self.project_start
                for edge in parsed[act.id]:
                    pred_es, pred_ef = early.get(edge.ref_id, (None, None))
                    if pred_es is None or pred_ef is None:
                        continue
                    candidate = self._candidate_start(
                        act, by_id[edge.ref_id], edge, pred_es, pred_ef
                    )
                    if candidate > es:
                        es = candidate
                ef = finish_date(es, act.duration)
                if early[act.id] != (es, ef):
                    early[act.id] = (es, ef)
                    changed = True

        if changed:
            self._not_converged("Forward pass", iteration)
        else:
            self._log(f"Converged after {iteration} iteration(s).")

        for act in activities:
            es, ef = early[act.id]
            self._log(f"  {act.id}: ES = {es}, EF = {ef}")
        return early

    @staticmethod
    def _candidate_start(
        act: Activity,
        pred: Activity,
        edge: ParsedPredecessor,
        pred_es: date,
        pred_ef: date,
    ) -> date:
        if edge.type is DependencyType.SS:
            base = pred_es
        elif edge.type is DependencyType.FF:
            base = subtract_workdays(pred_ef, max(0, act.duration - 1))
        elif pred.duration <= 0:
            # A milestone finishes at the start of its day
            base = pred_ef
        else:
            # FS, and SF which is scheduled identically
            base = next_workday(pred_ef)
        return shift_workdays(base, edge.lag)

    def backward_pass(
        self, activities: Sequence[Activity], early: EarlyDates
    ) -> Dict[int, date]:
        """
        Backward pass calculation to determine Late Finish (LF).

        Every late finish starts at the project end and only moves earlier.
        """
        self._log("\n\nBACKWARD PASS (Calculating LF)")
        self._log("-" * 50)

        finishes = [ef for _, ef in early.values() if ef is not None]
        project_end = max(finishes) if finishes else self.project_start
        self._log(f"Project Finish = max(all EF values) = {project_end}")

        by_id = {act.id: act for act in activities}
        successors = successor_map(activities)
        late_finish: Dict[int, date] = {act.id: project_end for act in activities}

        order = sorted(
            activities,
            key=lambda a: (early[a.id][0] or date.min, a.id),
            reverse=True,
        )

        cap = self._iteration_cap(len(activities))
        changed = True
        iteration = 0
        while changed and iteration < cap:
            changed = False
            iteration += 1
            for act in order:
                succ_list = successors.get(act.id)
                if not succ_list:
                    continue
                candidates = [
                    self._candidate_finish(act, by_id[succ_id], edge, late_finish[succ_id])
                    for succ_id, edge in succ_list
                ]
                new_lf = min(candidates)
                if new_lf < late_finish[act.id]:
                    late_finish[act.id] = new_lf
                    changed = True

        if changed:
            self._not_converged("Backward pass", iteration)
        else:
            self._log(f"Converged after {iteration} iteration(s).")

        for act in activities:
            self._log(f"  {act.id}: LF = {late_finish[act.id]}")
        return late_finish

    @staticmethod
    def _candidate_finish(
        act: Activity, succ: Activity, edge: ParsedPredecessor, succ_lf: date
    ) -> date:
        if edge.type is DependencyType.FF:
            return shift_workdays(succ_lf, -edge.lag)
        succ_ls = late_start(succ_lf, succ.duration)
        if edge.type is DependencyType.SS:
            return finish_date(shift_workdays(succ_ls, -edge.lag), act.duration)
        if act.duration <= 0:
            return shift_workdays(succ_ls, -edge.lag)
        return subtract_workdays(shift_workdays(succ_ls, -edge.lag), 1)

    def classify(
        self,
        activities: Sequence[Activity],
        early: EarlyDates,
        late_finish: Dict[int, date],
    ) -> List[ScheduledActivity]:
        """Calculate Total Float (TF) and flag critical activities."""
        self._log("\n\nFLOAT CALCULATIONS")
        self._log("-" * 50)

        schedule: List[ScheduledActivity] = []
        for act in activities:
            es, ef = early[act.id]
            lf = late_finish.get(act.id)
            total_float = 0
            if ef is not None and lf is not None:
                total_float = max(0, count_workdays(ef, lf) - 1)
            item = ScheduledActivity(
                activity=act,
                early_start=es,
                early_finish=ef,
                late_start=late_start(lf, act.duration) if lf is not None else None,
                late_finish=lf,
                total_float=total_float,
                is_critical=total_float <= 0,
            )
            schedule.append(item)
            flag = "CRITICAL" if item.is_critical else "Not critical"
            self._log(f"{act.id}: TF = {total_float} -> {flag}")

        schedule.sort(key=_schedule_sort_key)
        return schedule


def _schedule_sort_key(item: ScheduledActivity) -> Tuple[bool, date, int]:
    # Placeholder dates sort after every scheduled activity
    return (item.early_start is None, item.early_start or date.min, item.id)


def late_start(late_finish: date, duration: int) -> date:
    return subtract_workdays(late_finish, max(0, duration - 1))


def successor_map(activities: Iterable[Activity]) -> SuccessorMap:
    """Invert predecessor edges; references to unknown ids are skipped."""
    activities = list(activities)
    known = {act.id for act in activities}
    successors: SuccessorMap = defaultdict(list)
    for act in activities:
        for edge in parse_predecessors(act.predecessors):
            if edge.ref_id in known:
                successors[edge.ref_id].append((act.id, edge))
    return successors


def calculate_schedule(
    activities: Sequence[Activity],
    project_start: object,
    max_iterations: Optional[int] = None,
    strict: bool = False,
) -> List[ScheduledActivity]:
    """Schedule ``activities`` from ``project_start``; see ``CPMScheduler``."""
    scheduler = CPMScheduler(project_start, max_iterations=max_iterations, strict=strict)
    return scheduler.calculate(activities)


def critical_paths(schedule: Sequence[ScheduledActivity]) -> List[List[int]]:
    """Build sequential representations of all critical paths (lists of ids)."""
    critical = {item.id: item for item in schedule if item.is_critical}
    if not critical:
        return []

    successors: Dict[int, List[int]] = defaultdict(list)
    incoming: Dict[int, int] = defaultdict(int)
    for succ in critical.values():
        for edge in parse_predecessors(succ.predecessors):
            pred = critical.get(edge.ref_id)
            if pred is None:
                continue
            if _is_driving_link(pred, succ, edge):
                successors[pred.id].append(succ.id)
                incoming[succ.id] += 1

    def order_key(act_id: int) -> Tuple[bool, date, int]:
        return _schedule_sort_key(critical[act_id])

    for pred_id in successors:
        successors[pred_id] = sorted(set(successors[pred_id]), key=order_key)

    start_nodes = sorted((nid for nid in critical if incoming[nid] == 0), key=order_key)

    paths: List[List[int]] = []

    def dfs(node: int, path: List[int]) -> None:
        new_path = path + [node]
        if not successors.get(node):
            paths.append(new_path)
            return
        for succ_id in successors[node]:
            if succ_id not in new_path:
                dfs(succ_id, new_path)

    for start in start_nodes:
        dfs(start, [])
    return paths


def _is_driving_link(
    pred: ScheduledActivity, succ: ScheduledActivity, edge: ParsedPredecessor
) -> bool:
    if pred.early_start is None or pred.early_finish is None or succ.early_start is None:
        return False
    candidate = CPMScheduler._candidate_start(
        succ.activity, pred.activity, edge, pred.early_start, pred.early_finish
    )
    return candidate == succ.early_start
