from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from focus_scheduler.core.config import ALGORITHM_CHOICES, DEFAULT_CONFIG, SchedulerConfig
from focus_scheduler.core.errors import ScheduleRequestError, ScheduleTooLargeError
from focus_scheduler.core.graph.analyze import find_cycle
from focus_scheduler.core.model import AlgorithmChoice, ScheduleResult, Task
from focus_scheduler.core.schedule.greedy import schedule_greedy
from focus_scheduler.core.schedule.knapsack import schedule_knapsack_dp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleRequest:
    time_budget_minutes: int
    energy_budget: int
    task_ids: Optional[tuple[str, ...]] = None
    algorithm: Optional[AlgorithmChoice] = None  # None -> config default


def schedule_optimal(
    tasks: Sequence[Task],
    time_budget: int,
    energy_budget: int,
    config: Optional[SchedulerConfig] = None,
) -> ScheduleResult:
    """Exact DP for small instances, greedy otherwise.

    The threshold is a performance trade-off only: both solvers keep the budget
    and dependency invariants at any size.
    """
    cfg = config or DEFAULT_CONFIG
    active_count = sum(1 for t in tasks if not t.completed)

    if active_count <= cfg.dp_max_tasks:
        try:
            return schedule_knapsack_dp(
                tasks, time_budget, energy_budget, max_cells=cfg.dp_max_cells
            )
        except ScheduleTooLargeError as e:
            logger.warning("falling back to greedy: %s", e.message)

    return schedule_greedy(tasks, time_budget, energy_budget)


def run_schedule(
    tasks: Sequence[Task],
    request: ScheduleRequest,
    config: Optional[SchedulerConfig] = None,
) -> ScheduleResult:
    """Validate a scheduling request against a snapshot, filter it and dispatch."""
    cfg = config or DEFAULT_CONFIG

    for name, v in (
        ("time_budget_minutes", request.time_budget_minutes),
        ("energy_budget", request.energy_budget),
    ):
        if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
            raise ScheduleRequestError(
                code="E_INVALID_BUDGET",
                message=f"{name} is required and must be a positive integer",
                path=name,
            )

    algorithm = request.algorithm or cfg.default_algorithm
    if algorithm not in ALGORITHM_CHOICES:
        raise ScheduleRequestError(
            code="E_UNKNOWN_ALGORITHM",
            message=f"unknown algorithm: {algorithm} (choose one of: {', '.join(ALGORITHM_CHOICES)})",
            path="algorithm",
        )

    if request.task_ids is not None:
        wanted = set(request.task_ids)
        unknown = sorted(wanted - {t.id for t in tasks})
        if unknown:
            raise ScheduleRequestError(
                code="E_UNKNOWN_TASK_ID",
                message=f"task_ids references unknown id(s): {', '.join(unknown)}",
                path="task_ids",
            )
        # Completed tasks are never candidates but still satisfy dependencies.
        tasks = [t for t in tasks if t.id in wanted or t.completed]

    cycle = find_cycle(tasks)
    if cycle is not None:
        raise ScheduleRequestError(
            code="E_DEPENDENCY_CYCLE",
            message=f"graph invalid for scheduling: {' -> '.join(cycle)}",
            path="depends_on",
        )

    logger.debug(
        "scheduling %d task(s) with %s (time=%d, energy=%d)",
        len(tasks),
        algorithm,
        request.time_budget_minutes,
        request.energy_budget,
    )
    if algorithm == "greedy":
        return schedule_greedy(tasks, request.time_budget_minutes, request.energy_budget)
    if algorithm == "knapsack":
        return schedule_knapsack_dp(
            tasks,
            request.time_budget_minutes,
            request.energy_budget,
            max_cells=cfg.dp_max_cells,
        )
    return schedule_optimal(tasks, request.time_budget_minutes, request.energy_budget, cfg)
