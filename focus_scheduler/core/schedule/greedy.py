from __future__ import annotations

import logging
from typing import Sequence

from focus_scheduler.core.model import ScheduleResult, Task
from focus_scheduler.core.schedule.common import (
    build_result,
    dependencies_satisfied,
    index_by_id,
    value_density,
)

logger = logging.getLogger(__name__)


def schedulable_tasks(
    tasks: Sequence[Task], tasks_by_id: dict[str, Task], selected_ids: set[str]
) -> list[Task]:
    return [
        t
        for t in tasks
        if not t.completed
        and t.id not in selected_ids
        and dependencies_satisfied(t, tasks_by_id, selected_ids)
    ]


def schedule_greedy(tasks: Sequence[Task], time_budget: int, energy_budget: int) -> ScheduleResult:
    """Value-density greedy that respects dependencies.

    Each round re-filters the schedulable set (so tasks unlocked by the last pick
    are considered), ranks it by value/duration descending and takes the first
    task that fits both remaining budgets. Equal ratios keep snapshot order.
    Stops when a round selects nothing. Not optimal; roughly O(n^2 log n).
    """
    tasks_by_id = index_by_id(tasks)
    selected: list[Task] = []
    selected_ids: set[str] = set()
    time_left = time_budget
    energy_left = energy_budget

    while True:
        ranked = sorted(
            schedulable_tasks(tasks, tasks_by_id, selected_ids),
            key=lambda t: -value_density(t),
        )
        pick = next(
            (
                t
                for t in ranked
                if t.duration_minutes <= time_left and t.energy_cost <= energy_left
            ),
            None,
        )
        if pick is None:
            break
        selected.append(pick)
        selected_ids.add(pick.id)
        time_left -= pick.duration_minutes
        energy_left -= pick.energy_cost
        logger.debug(
            "greedy picked %s (time_left=%d, energy_left=%d)", pick.id, time_left, energy_left
        )

    total_value = sum(t.value for t in selected)
    explanation = (
        f"Greedy scheduling selected {len(selected)} task(s) by value/duration ratio, "
        f"respecting dependencies, to maximize value ({total_value} points) "
        f"within {time_budget}min and energy level {energy_budget}."
    )
    return build_result(selected, "greedy", explanation)
