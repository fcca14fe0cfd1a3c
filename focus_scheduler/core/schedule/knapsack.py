from __future__ import annotations

import logging
from typing import Optional, Sequence

from focus_scheduler.core.config import DEFAULT_CONFIG
from focus_scheduler.core.errors import ScheduleRequestError, ScheduleTooLargeError
from focus_scheduler.core.graph.analyze import topological_sort
from focus_scheduler.core.model import ScheduleResult, Task
from focus_scheduler.core.schedule.common import build_result, index_by_id
from focus_scheduler.core.schedule.greedy import schedule_greedy

logger = logging.getLogger(__name__)


def dp_cell_count(task_count: int, time_budget: int, energy_budget: int) -> int:
    return (task_count + 1) * (time_budget + 1) * (energy_budget + 1)


def _required_masks(ordered: list[Task], tasks_by_id: dict[str, Task]) -> list[Optional[int]]:
    """Per task, the bitmask of earlier tasks it needs selected; None if it can never run.

    Completed dependencies impose nothing. A dependency id with no task in the
    snapshot blocks the task outright.
    """
    position = {t.id: i for i, t in enumerate(ordered)}
    out: list[Optional[int]] = []
    for task in ordered:
        need = 0
        for dep_id in task.depends_on:
            dep = tasks_by_id.get(dep_id)
            if dep is None:
                need = None
                break
            if dep.completed:
                continue
            need |= 1 << position[dep_id]
        out.append(need)
    return out


def schedule_knapsack_dp(
    tasks: Sequence[Task],
    time_budget: int,
    energy_budget: int,
    *,
    max_cells: int = DEFAULT_CONFIG.dp_max_cells,
) -> ScheduleResult:
    """Exact 2D knapsack over (time, energy) with dependency awareness.

    Incomplete tasks are processed in topological order, so when task i is
    considered every incomplete dependency sits at a lower index. Each cell
    (time <= t, energy <= e) holds the best value and the bitmask of tasks
    achieving it; task i may extend a cell only if that cell's mask already
    contains all of its incomplete dependencies. A task is taken only on a
    strictly better value, so ties keep the selection without it.

    Time and memory are O(n * T * E); only the previous prefix layer is kept
    because each cell carries its own selection mask.

    Raises ScheduleTooLargeError when the table would exceed max_cells and
    ScheduleRequestError when the incomplete tasks cannot be ordered.
    """
    active = [t for t in tasks if not t.completed]
    if not active:
        return build_result([], "knapsack_dp", "No active tasks available.")

    ordered = topological_sort(active)
    if ordered is None:
        raise ScheduleRequestError(
            code="E_DEPENDENCY_CYCLE",
            message="incomplete tasks contain a dependency cycle; no scheduling order exists",
        )

    if time_budget < 0 or energy_budget < 0:
        return build_result(
            [],
            "knapsack_dp",
            f"No task fits a negative budget ({time_budget}min, energy {energy_budget}).",
        )

    n = len(ordered)
    cells = dp_cell_count(n, time_budget, energy_budget)
    if cells > max_cells:
        raise ScheduleTooLargeError(
            code="E_DP_TABLE_TOO_LARGE",
            message=(
                f"knapsack table needs {cells} cells for {n} task(s), "
                f"{time_budget}min and energy {energy_budget} (limit {max_cells})"
            ),
        )

    required = _required_masks(ordered, index_by_id(tasks))

    width = energy_budget + 1
    size = (time_budget + 1) * width
    prev_value = [0] * size
    prev_mask = [0] * size

    for i, task in enumerate(ordered):
        need = required[i]
        d, c = task.duration_minutes, task.energy_cost
        if need is None or d > time_budget or c > energy_budget:
            continue

        cur_value = prev_value[:]
        cur_mask = prev_mask[:]
        bit = 1 << i
        for t in range(d, time_budget + 1):
            row = t * width
            src_row = (t - d) * width - c
            for e in range(c, energy_budget + 1):
                src = src_row + e
                mask = prev_mask[src]
                if mask & need != need:
                    continue
                value = prev_value[src] + task.value
                if value > cur_value[row + e]:
                    cur_value[row + e] = value
                    cur_mask[row + e] = mask | bit
        prev_value, prev_mask = cur_value, cur_mask

    best_mask = prev_mask[size - 1]
    selected = [ordered[i] for i in range(n) if best_mask >> i & 1]
    best_value = prev_value[size - 1]

    # One witness per cell can miss dependency-coupled picks; never do worse
    # than the greedy selection on the same input.
    incumbent = schedule_greedy(tasks, time_budget, energy_budget)
    used_incumbent = incumbent.total_value > best_value
    if used_incumbent:
        logger.debug(
            "greedy incumbent (%d) beats DP witness (%d)", incumbent.total_value, best_value
        )
        position = {t.id: i for i, t in enumerate(ordered)}
        selected = sorted(incumbent.selected_tasks, key=lambda t: position[t.id])

    logger.debug("knapsack dp: %d task(s), %d cells, selected %d", n, cells, len(selected))
    total_value = sum(t.value for t in selected)
    if used_incumbent:
        lead = "Dynamic programming kept the greedy selection, which beat its best table entry"
    else:
        lead = "Dynamic programming found optimal solution with dependency respect"
    explanation = (
        f"{lead}: "
        f"{len(selected)} task(s) worth {total_value} points "
        f"within {time_budget}min and energy {energy_budget}."
    )
    return build_result(selected, "knapsack_dp", explanation)
