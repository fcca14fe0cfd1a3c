from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import yaml

from focus_scheduler.core.errors import TaskLoadError


# suffix -> (parser, parse-error code)
PARSERS: dict[str, tuple[Callable[[str], Any], str]] = {
    ".yaml": (yaml.safe_load, "E_YAML_PARSE"),
    ".yml": (yaml.safe_load, "E_YAML_PARSE"),
    ".json": (json.loads, "E_JSON_PARSE"),
}


def load_tasks(path: str) -> dict[str, Any]:
    """Read a task snapshot file into the raw document `validate_tasks` expects.

    The file must be a mapping holding a `tasks` list; a bare list is refused
    so the schema_version stays explicit. Task entries are passed through as-is.
    """
    p = Path(path)
    if p.suffix.lower() not in PARSERS:
        raise TaskLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message=f"task files must be one of {', '.join(sorted(PARSERS))}",
            file=str(p),
        )
    parse, parse_code = PARSERS[p.suffix.lower()]

    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise TaskLoadError(code="E_FILE_NOT_FOUND", message="file does not exist", file=str(p)) from e
    except OSError as e:
        raise TaskLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        data = parse(text)
    except (yaml.YAMLError, ValueError) as e:
        raise TaskLoadError(code=parse_code, message=str(e), file=str(p)) from e

    if not isinstance(data, dict):
        raise TaskLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="snapshot must be a mapping with schema_version and tasks",
            file=str(p),
        )
    if "tasks" not in data:
        raise TaskLoadError(
            code="E_TASKS_MISSING",
            message="snapshot has no tasks key",
            file=str(p),
            path="tasks",
        )
    tasks = data["tasks"]
    if not isinstance(tasks, list):
        raise TaskLoadError(
            code="E_TASKS_NOT_A_LIST",
            message=f"tasks must be a list, got {type(tasks).__name__}",
            file=str(p),
            path="tasks",
        )

    return {
        "schema_version": data.get("schema_version"),
        "tasks": tasks,
        "__file__": str(p),
    }
