from __future__ import annotations

from fractions import Fraction
from typing import Iterable, Sequence

from focus_scheduler.core.model import Algorithm, ScheduleResult, Task


def index_by_id(tasks: Iterable[Task]) -> dict[str, Task]:
    out: dict[str, Task] = {}
    for t in tasks:
        out.setdefault(t.id, t)
    return out


def dependencies_satisfied(task: Task, tasks_by_id: dict[str, Task], selected_ids: set[str]) -> bool:
    """Every dependency resolves to a completed task or one already selected in this run.

    A dependency id with no task in the snapshot never resolves.
    """
    for dep_id in task.depends_on:
        dep = tasks_by_id.get(dep_id)
        if dep is None or not (dep.completed or dep_id in selected_ids):
            return False
    return True


def value_density(task: Task) -> Fraction:
    return Fraction(task.value, task.duration_minutes)


def build_result(selected: Sequence[Task], algorithm: Algorithm, explanation: str) -> ScheduleResult:
    return ScheduleResult(
        selected_tasks=tuple(selected),
        total_duration=sum(t.duration_minutes for t in selected),
        total_energy=sum(t.energy_cost for t in selected),
        total_value=sum(t.value for t in selected),
        algorithm=algorithm,
        explanation=explanation,
    )
