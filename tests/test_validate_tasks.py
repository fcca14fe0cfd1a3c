from focus_scheduler.core.io.load_tasks import load_tasks
from focus_scheduler.core.validate.validate_tasks import summarize_snapshot, validate_tasks


def test_validate_happy_path():
    snapshot, errors = validate_tasks(load_tasks("examples/basic-tasks.yaml"))
    assert errors == []
    assert snapshot is not None
    assert len(snapshot.tasks) == 6
    assert snapshot.tasks_by_id["deploy"].depends_on == ("write-tests", "review-pr")
    inbox = snapshot.tasks_by_id["inbox"]
    assert inbox.depends_on == ()
    assert inbox.completed is False
    assert summarize_snapshot(snapshot) == "OK: 6 tasks (completed=1, active=5, dependencies=4)"


def test_defaults_applied():
    snapshot, errors = validate_tasks({"schema_version": "0.1.0", "tasks": [{"id": "A"}]})
    assert errors == []
    task = snapshot.tasks[0]
    assert (task.duration_minutes, task.energy_cost, task.value) == (30, 3, 50)


def test_duplicate_dependencies_collapse():
    raw = {"schema_version": "0.1.0", "tasks": [{"id": "A"}, {"id": "B", "depends_on": ["A", "A"]}]}
    snapshot, errors = validate_tasks(raw)
    assert errors == []
    assert snapshot.tasks_by_id["B"].depends_on == ("A",)


def test_validate_unknown_dependency():
    snapshot, errors = validate_tasks(load_tasks("examples/invalid-unknown-dep.yaml"))
    assert snapshot is None
    assert any(e.code == "E_UNKNOWN_DEPENDENCY" and e.path == "tasks[0].depends_on[0]" for e in errors)


def test_validate_out_of_range():
    snapshot, errors = validate_tasks(load_tasks("examples/invalid-out-of-range.yaml"))
    assert snapshot is None
    paths = {e.path for e in errors if e.code == "E_OUT_OF_RANGE"}
    assert paths == {"tasks[0].duration_minutes", "tasks[1].energy_cost"}


def test_validate_duplicate_id():
    snapshot, errors = validate_tasks(load_tasks("examples/invalid-duplicate-id.yaml"))
    assert snapshot is None
    assert [e.code for e in errors] == ["E_DUPLICATE_ID"]


def test_validate_bad_types():
    raw = {
        "schema_version": "0.1.0",
        "tasks": [
            {"id": "A", "value": True},
            {"id": "B", "depends_on": "A"},
            {"id": "C", "completed": "yes"},
            "not-a-task",
        ],
    }
    snapshot, errors = validate_tasks(raw)
    assert snapshot is None
    assert {e.path for e in errors if e.code == "E_INVALID_TYPE"} == {
        "tasks[0].value",
        "tasks[1].depends_on",
        "tasks[2].completed",
        "tasks[3]",
    }


def test_validate_missing_top_level_fields():
    snapshot, errors = validate_tasks({})
    assert snapshot is None
    assert {e.path for e in errors} == {"schema_version", "tasks"}


def test_validate_cycle():
    raw = load_tasks("examples/cycle-tasks.yaml")
    snapshot, errors = validate_tasks(raw)
    assert snapshot is None
    assert [e.code for e in errors] == ["E_DEPENDENCY_CYCLE"]

    snapshot, errors = validate_tasks(raw, check_cycles=False)
    assert errors == []
    assert [t.id for t in snapshot.tasks] == ["A", "B", "C"]
