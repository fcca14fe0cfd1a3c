from __future__ import annotations

from typing import Any, Iterable, Optional, cast

from focus_scheduler.core.errors import TaskValidationError
from focus_scheduler.core.graph.analyze import find_cycle
from focus_scheduler.core.model import Task, TaskSnapshot


# field -> (default, min, max); bounds mirror what the task form accepts.
INT_FIELDS: dict[str, tuple[int, int, int]] = {
    "duration_minutes": (30, 1, 480),
    "energy_cost": (3, 1, 5),
    "value": (50, 1, 100),
}


def _is_list_of_str(v: Any) -> bool:
    return isinstance(v, list) and all(isinstance(x, str) for x in v)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def validate_tasks(
    raw: dict[str, Any], *, check_cycles: bool = True
) -> tuple[Optional[TaskSnapshot], list[TaskValidationError]]:
    """Validate a task snapshot document.

    Returns (snapshot, errors). Snapshot is None when errors exist.
    With check_cycles=False a cyclic graph is accepted, for inspection tools
    that must be able to show the cycle.
    """

    file = cast(Optional[str], raw.get("__file__"))
    errors: list[TaskValidationError] = []

    def err(code: str, message: str, path: str) -> None:
        errors.append(TaskValidationError(code=code, message=message, file=file, path=path))

    schema_version = raw.get("schema_version")
    if not isinstance(schema_version, str) or not schema_version.strip():
        err(
            "E_REQUIRED_FIELD",
            "schema_version is required and must be a non-empty string",
            "schema_version",
        )

    items = raw.get("tasks")
    if not isinstance(items, list):
        err("E_REQUIRED_FIELD", "tasks is required and must be an array", "tasks")
        return None, _sorted(errors)

    tasks: list[Task] = []
    positions: dict[str, int] = {}

    for i, item in enumerate(items):
        task_path = f"tasks[{i}]"
        if not isinstance(item, dict):
            err("E_INVALID_TYPE", "task must be an object", task_path)
            continue

        tid = item.get("id")
        if not isinstance(tid, str) or not tid.strip():
            err("E_REQUIRED_FIELD", "id is required and must be a non-empty string", f"{task_path}.id")
            continue

        if tid in positions:
            err("E_DUPLICATE_ID", f"duplicate task id: {tid}", f"{task_path}.id")
            continue

        ok = True
        ints: dict[str, int] = {}
        for name, (default, lo, hi) in INT_FIELDS.items():
            v = item.get(name, default)
            if not _is_int(v):
                err("E_INVALID_TYPE", f"{name} must be an integer", f"{task_path}.{name}")
                ok = False
            elif not lo <= v <= hi:
                err("E_OUT_OF_RANGE", f"{name} must be between {lo} and {hi}", f"{task_path}.{name}")
                ok = False
            else:
                ints[name] = v

        title = item.get("title", "")
        if not isinstance(title, str):
            err("E_INVALID_TYPE", "title must be a string", f"{task_path}.title")
            ok = False

        notes = item.get("notes")
        if notes is not None and not isinstance(notes, str):
            err("E_INVALID_TYPE", "notes must be a string", f"{task_path}.notes")
            ok = False

        deps = item.get("depends_on", [])
        if not _is_list_of_str(deps):
            err("E_INVALID_TYPE", "depends_on must be an array of strings", f"{task_path}.depends_on")
            ok = False

        completed = item.get("completed", False)
        if not isinstance(completed, bool):
            err("E_INVALID_TYPE", "completed must be a boolean", f"{task_path}.completed")
            ok = False

        positions[tid] = i
        if not ok:
            continue

        tasks.append(
            Task(
                id=tid,
                title=title,
                duration_minutes=ints["duration_minutes"],
                energy_cost=ints["energy_cost"],
                value=ints["value"],
                # set semantics: drop repeats, keep first-seen order
                depends_on=tuple(dict.fromkeys(deps)),
                completed=completed,
                notes=notes,
            )
        )

    # Referential integrity.
    for task in tasks:
        for di, dep in enumerate(task.depends_on):
            if dep not in positions:
                err(
                    "E_UNKNOWN_DEPENDENCY",
                    f"depends_on references unknown id: {dep}",
                    f"tasks[{positions[task.id]}].depends_on[{di}]",
                )

    cycle = find_cycle(tasks) if check_cycles else None
    if cycle is not None:
        err(
            "E_DEPENDENCY_CYCLE",
            "dependency cycle detected: " + " -> ".join(cycle),
            f"tasks[{positions[cycle[0]]}].depends_on" if cycle[0] in positions else "tasks",
        )

    if errors:
        return None, _sorted(errors)

    snapshot = TaskSnapshot(
        schema_version=cast(str, schema_version),
        tasks=tuple(tasks),
        tasks_by_id={t.id: t for t in tasks},
    )
    return snapshot, []


def summarize_snapshot(snapshot: TaskSnapshot) -> str:
    completed = sum(1 for t in snapshot.tasks if t.completed)
    edges = sum(len(t.depends_on) for t in snapshot.tasks)
    return (
        f"OK: {len(snapshot.tasks)} tasks "
        f"(completed={completed}, active={len(snapshot.tasks) - completed}, dependencies={edges})"
    )


def _sorted(errors: Iterable[TaskValidationError]) -> list[TaskValidationError]:
    return sorted(
        list(errors),
        key=lambda e: (
            e.file or "",
            e.path or "",
            e.code,
        ),
    )
