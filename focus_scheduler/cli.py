from __future__ import annotations

import json
import logging
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from focus_scheduler.core.config import ConfigError, SchedulerConfig, load_config
from focus_scheduler.core.errors import (
    ScheduleRequestError,
    ScheduleTooLargeError,
    TaskError,
    TaskHasDependentsError,
    TaskLoadError,
    TaskValidationError,
)
from focus_scheduler.core.graph.analyze import analyze_graph
from focus_scheduler.core.graph.integrity import check_delete, check_new_dependency
from focus_scheduler.core.io.load_tasks import load_tasks
from focus_scheduler.core.model import ScheduleResult, TaskSnapshot
from focus_scheduler.core.schedule.select import ScheduleRequest, run_schedule
from focus_scheduler.core.validate.validate_tasks import summarize_snapshot, validate_tasks
from focus_scheduler.logging_setup import setup_logging

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()

FORMATS = ("text", "json")


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log scheduling decisions to stderr"),
    log_file: str | None = typer.Option(None, "--log-file", help="Also write DEBUG logs to this file"),
) -> None:
    """Dependency-aware task scheduler CLI."""
    setup_logging(level=logging.DEBUG if verbose else logging.WARNING, log_file=log_file)


@app.command("validate")
def validate(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Validate a task snapshot (field ranges, references, acyclicity)."""
    _check_format(format, "E_VALIDATE_UNKNOWN_FORMAT")

    try:
        raw = load_tasks(path)
    except TaskLoadError as e:
        if format == "json":
            _emit_json({"command": "validate", "ok": False, "errors": [_to_item(e)]}, 1)
        _fail([e], 1)

    snapshot, errors = validate_tasks(raw)
    if errors or snapshot is None:
        if format == "json":
            _emit_json(
                {
                    "command": "validate",
                    "ok": False,
                    "error_count": len(errors),
                    "errors": [_to_item(e) for e in errors],
                },
                2,
            )
        _fail(list(errors), 2)

    if format == "text":
        typer.echo(summarize_snapshot(snapshot))
        return

    completed = sum(1 for t in snapshot.tasks if t.completed)
    _emit_json(
        {
            "command": "validate",
            "ok": True,
            "error_count": 0,
            "errors": [],
            "summary": {
                "task_count": len(snapshot.tasks),
                "completed_count": completed,
                "active_count": len(snapshot.tasks) - completed,
            },
        },
        0,
    )


@app.command("graph")
def graph(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
) -> None:
    """Inspect the dependency graph: nodes, cycle flag and topological order."""
    _check_format(format, "E_GRAPH_UNKNOWN_FORMAT")
    snapshot = _load_snapshot(path, check_cycles=False)
    result = analyze_graph(snapshot.tasks)

    if format == "json":
        _emit_json(result.to_dict(), 0)

    typer.echo(f"Nodes: {len(result.nodes)}")
    typer.echo(f"Cycle: {'yes' if result.has_cycle else 'no'}")
    if result.topological_order is None:
        typer.echo("Order: <none: graph has a cycle>")
    else:
        typer.echo("Order: " + " -> ".join(result.topological_order))


@app.command("check-cycle")
def check_cycle(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    task_id: str = typer.Argument(..., help="Task that would gain the dependency"),
    dependency_id: str = typer.Argument(..., help="Proposed new dependency"),
) -> None:
    """Report whether adding one dependency edge would create a cycle."""
    snapshot = _load_snapshot(path, check_cycles=False)
    unknown = [x for x in (task_id, dependency_id) if x not in snapshot.tasks_by_id]
    if unknown:
        _fail(
            [
                ScheduleRequestError(
                    code="E_UNKNOWN_TASK_ID",
                    message=f"unknown task id(s): {', '.join(unknown)}",
                    file=path,
                    path="task_id" if task_id in unknown else "dependency_id",
                )
            ],
            2,
        )
    typer.echo(json.dumps(check_new_dependency(snapshot.tasks, task_id, dependency_id), sort_keys=True))


@app.command("check-delete")
def check_delete_cmd(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    task_id: str = typer.Argument(..., help="Task proposed for deletion"),
) -> None:
    """Refuse deletion while other tasks still depend on the task."""
    snapshot = _load_snapshot(path, check_cycles=False)
    if task_id not in snapshot.tasks_by_id:
        _fail(
            [
                ScheduleRequestError(
                    code="E_UNKNOWN_TASK_ID",
                    message=f"unknown task id: {task_id}",
                    file=path,
                    path="task_id",
                )
            ],
            2,
        )
    try:
        check_delete(snapshot.tasks, task_id)
    except TaskHasDependentsError as e:
        typer.echo(str(e), err=True)
        for dep_id, title in e.dependents:
            typer.echo(f"  - {dep_id}: {title}" if title else f"  - {dep_id}", err=True)
        raise typer.Exit(code=2)
    typer.echo(f"OK: {task_id} has no dependents")


@app.command("schedule")
def schedule(
    path: str = typer.Argument(..., help="Path to a task file (.yaml/.yml/.json)"),
    time_budget: int = typer.Option(..., "--time", help="Time budget in minutes"),
    energy_budget: int = typer.Option(..., "--energy", help="Energy budget"),
    task: list[str] | None = typer.Option(None, "--task", help="Restrict to this task id (repeatable)"),
    algorithm: str | None = typer.Option(
        None, "--algorithm", help="greedy|knapsack|auto (default from config)"
    ),
    format: str = typer.Option("text", "--format", help="Output format: text|json"),
    config_file: str | None = typer.Option(None, "--config", help="Optional YAML scheduler config"),
) -> None:
    """Select a value-maximizing set of tasks within the time and energy budgets."""
    _check_format(format, "E_SCHEDULE_UNKNOWN_FORMAT")
    config = _load_config(config_file)
    snapshot = _load_snapshot(path, check_cycles=True)

    request = ScheduleRequest(
        time_budget_minutes=time_budget,
        energy_budget=energy_budget,
        task_ids=tuple(task) if task else None,
        algorithm=algorithm,
    )
    try:
        result = run_schedule(snapshot.tasks, request, config)
    except (ScheduleRequestError, ScheduleTooLargeError) as e:
        _fail([e], 2)

    if format == "json":
        _emit_json(result.to_dict(), 0)
    _print_schedule(result)


def _print_schedule(result: ScheduleResult) -> None:
    table = Table(title=f"schedule ({result.algorithm})")
    table.add_column("#")
    table.add_column("Task")
    table.add_column("Title")
    table.add_column("Minutes", justify="right")
    table.add_column("Energy", justify="right")
    table.add_column("Value", justify="right")
    for i, t in enumerate(result.selected_tasks, start=1):
        table.add_row(
            str(i), t.id, t.title, str(t.duration_minutes), str(t.energy_cost), str(t.value)
        )
    console.print(table)
    typer.echo(
        f"Total: {result.total_duration}min, energy {result.total_energy}, value {result.total_value}"
    )
    typer.echo(result.explanation)


def _load_snapshot(path: str, *, check_cycles: bool) -> TaskSnapshot:
    try:
        raw = load_tasks(path)
    except TaskLoadError as e:
        _fail([e], 1)

    snapshot, errors = validate_tasks(raw, check_cycles=check_cycles)
    if errors or snapshot is None:
        _fail(list(errors), 2)
    return snapshot


def _load_config(config_file: str | None) -> SchedulerConfig:
    try:
        return load_config(config_file)
    except FileNotFoundError:
        _fail(
            [
                TaskLoadError(
                    code="E_CONFIG_FILE_NOT_FOUND",
                    message=f"config file not found: {config_file}",
                    path="config",
                )
            ],
            1,
        )
    except ConfigError as e:
        _fail([TaskValidationError(code="E_CONFIG_INVALID", message=str(e), path="config")], 2)


def _check_format(format: str, code: str) -> None:
    if format not in FORMATS:
        _fail(
            [
                TaskValidationError(
                    code=code,
                    message=f"unknown format: {format} (choose one of: {', '.join(FORMATS)})",
                    path="format",
                )
            ],
            2,
        )


def _to_item(e: TaskError) -> dict[str, Any]:
    return {"code": e.code, "message": e.message, "file": e.file, "path": e.path}


def _emit_json(payload: dict[str, Any], exit_code: int) -> NoReturn:
    typer.echo(json.dumps({"tool": "focus-scheduler", **payload}, indent=2, sort_keys=True))
    raise typer.Exit(code=exit_code)


def _fail(errors: list[TaskError], exit_code: int) -> NoReturn:
    for e in sorted(errors, key=lambda e: (e.file or "", e.path or "", e.code)):
        typer.echo(str(e), err=True)
    raise typer.Exit(code=exit_code)


def main() -> None:
    app(prog_name="focus-scheduler")


cli = typer.main.get_command(app)

if __name__ == "__main__":
    main()
