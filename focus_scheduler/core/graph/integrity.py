from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Sequence

from focus_scheduler.core.errors import DependencyCycleError, TaskHasDependentsError
from focus_scheduler.core.graph.analyze import find_cycle, get_dependent_tasks, would_create_cycle
from focus_scheduler.core.model import Task

logger = logging.getLogger(__name__)


# Guards run *before* a mutation is committed by the storage layer. They never
# mutate the snapshot; they raise when the mutation would break the graph.


def check_create(tasks: Sequence[Task], new_task: Task) -> None:
    if not new_task.depends_on:
        return
    _raise_on_cycle(
        [*tasks, new_task],
        task_id=new_task.id,
        message="cannot create task: would create circular dependency",
    )


def check_update(tasks: Sequence[Task], task_id: str, depends_on: Iterable[str]) -> None:
    deps = tuple(depends_on)
    updated = [replace(t, depends_on=deps) if t.id == task_id else t for t in tasks]
    _raise_on_cycle(
        updated,
        task_id=task_id,
        message="cannot update task: would create circular dependency",
    )


def check_new_dependency(tasks: Sequence[Task], task_id: str, dependency_id: str) -> dict[str, bool]:
    return {"would_create_cycle": would_create_cycle(tasks, task_id, dependency_id)}


def check_delete(tasks: Sequence[Task], task_id: str) -> None:
    dependents = get_dependent_tasks(tasks, task_id)
    if not dependents:
        return
    logger.info("delete of %s blocked by %d dependent(s)", task_id, len(dependents))
    raise TaskHasDependentsError(
        code="E_TASK_HAS_DEPENDENTS",
        message=f"cannot delete task: {len(dependents)} other task(s) depend on it",
        path=task_id,
        dependents=tuple((t.id, t.title) for t in dependents),
    )


def _raise_on_cycle(tasks: Sequence[Task], *, task_id: str, message: str) -> None:
    cycle = find_cycle(tasks)
    if cycle is None:
        return
    logger.info("rejected mutation of %s: cycle %s", task_id, " -> ".join(cycle))
    raise DependencyCycleError(
        code="E_DEPENDENCY_CYCLE",
        message=f"{message} ({' -> '.join(cycle)})",
        path=task_id,
        cycle=tuple(cycle),
    )
