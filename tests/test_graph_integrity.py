import pytest

from focus_scheduler.core.errors import DependencyCycleError, TaskHasDependentsError
from focus_scheduler.core.graph.integrity import (
    check_create,
    check_delete,
    check_new_dependency,
    check_update,
)
from focus_scheduler.core.model import Task


TASKS = [
    Task(id="A", title="Plan"),
    Task(id="B", title="Build", depends_on=("A",)),
    Task(id="C", title="Ship", depends_on=("B",)),
    Task(id="D", title="Unrelated"),
]


def test_check_create_accepts_dag():
    check_create(TASKS, Task(id="E", depends_on=("C", "D")))


def test_check_create_rejects_self_cycle():
    with pytest.raises(DependencyCycleError) as exc:
        check_create(TASKS, Task(id="E", depends_on=("E",)))
    assert exc.value.code == "E_DEPENDENCY_CYCLE"
    assert exc.value.cycle == ("E", "E")


def test_check_update_rejects_cycle():
    with pytest.raises(DependencyCycleError) as exc:
        check_update(TASKS, "A", ["C"])
    assert set(exc.value.cycle) == {"A", "B", "C"}
    assert "circular dependency" in str(exc.value)


def test_check_update_accepts_dag():
    check_update(TASKS, "B", [])
    check_update(TASKS, "A", ["D"])


def test_check_new_dependency_payload():
    assert check_new_dependency(TASKS, "A", "C") == {"would_create_cycle": True}
    assert check_new_dependency(TASKS, "D", "C") == {"would_create_cycle": False}


def test_check_delete_lists_transitive_dependents():
    with pytest.raises(TaskHasDependentsError) as exc:
        check_delete(TASKS, "A")
    assert exc.value.code == "E_TASK_HAS_DEPENDENTS"
    assert exc.value.dependents == (("B", "Build"), ("C", "Ship"))
    assert "2 other task(s)" in exc.value.message


def test_check_delete_leaf_is_allowed():
    check_delete(TASKS, "C")
    check_delete(TASKS, "D")
