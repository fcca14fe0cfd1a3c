import json

from typer.testing import CliRunner

from focus_scheduler.cli import app

runner = CliRunner()


def test_cli_schedule_json_auto():
    r = runner.invoke(app, ["schedule", "examples/basic-tasks.yaml", "--time", "120", "--energy", "5", "--format", "json"])
    assert r.exit_code == 0, r.stdout + r.stderr
    payload = json.loads(r.stdout)
    assert payload["algorithm"] == "knapsack_dp"
    assert [t["id"] for t in payload["selected_tasks"]] == ["setup-env", "write-api"]
    assert payload["total_value"] == 140
    assert payload["total_duration"] == 75
    assert payload["total_energy"] == 5


def test_cli_schedule_text():
    r = runner.invoke(app, ["schedule", "examples/basic-tasks.yaml", "--time", "120", "--energy", "5"])
    assert r.exit_code == 0, r.stdout + r.stderr
    assert "setup-env" in r.stdout
    assert "Total: 75min, energy 5, value 140" in r.stdout
    assert "Dynamic programming" in r.stdout


def test_cli_schedule_greedy_json_input():
    r = runner.invoke(
        app,
        ["schedule", "examples/scenario-b.json", "--time", "100", "--energy", "5", "--algorithm", "greedy", "--format", "json"],
    )
    assert r.exit_code == 0, r.stdout + r.stderr
    payload = json.loads(r.stdout)
    assert payload["algorithm"] == "greedy"
    assert [t["id"] for t in payload["selected_tasks"]] == ["T1"]
    assert payload["total_value"] == 95


def test_cli_schedule_config_threshold():
    r = runner.invoke(
        app,
        ["schedule", "examples/basic-tasks.yaml", "--time", "120", "--energy", "5", "--config", "examples/scheduler-config.yaml", "--format", "json"],
    )
    assert r.exit_code == 0, r.stdout + r.stderr
    assert json.loads(r.stdout)["algorithm"] == "greedy"


def test_cli_schedule_task_filter_unknown_id():
    r = runner.invoke(app, ["schedule", "examples/basic-tasks.yaml", "--time", "60", "--energy", "3", "--task", "NOPE"])
    assert r.exit_code == 2
    assert "E_UNKNOWN_TASK_ID" in (r.stdout + r.stderr)


def test_cli_schedule_invalid_budget():
    r = runner.invoke(app, ["schedule", "examples/basic-tasks.yaml", "--time", "0", "--energy", "3"])
    assert r.exit_code == 2
    assert "E_INVALID_BUDGET" in (r.stdout + r.stderr)


def test_cli_schedule_rejects_cycle():
    r = runner.invoke(app, ["schedule", "examples/cycle-tasks.yaml", "--time", "60", "--energy", "3"])
    assert r.exit_code == 2
    assert "E_DEPENDENCY_CYCLE" in (r.stdout + r.stderr)


def test_cli_schedule_missing_file():
    r = runner.invoke(app, ["schedule", "examples/nope.yaml", "--time", "60", "--energy", "3"])
    assert r.exit_code == 1
    assert "E_FILE_NOT_FOUND" in (r.stdout + r.stderr)


def test_cli_schedule_missing_config():
    r = runner.invoke(
        app,
        ["schedule", "examples/basic-tasks.yaml", "--time", "60", "--energy", "3", "--config", "examples/nope.yaml"],
    )
    assert r.exit_code == 1
    assert "E_CONFIG_FILE_NOT_FOUND" in (r.stdout + r.stderr)
