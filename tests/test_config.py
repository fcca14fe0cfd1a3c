import pytest

from focus_scheduler.core.config import ALGORITHM_CHOICES, ConfigError, SchedulerConfig, load_config


def test_defaults(monkeypatch):
    for k in ("DP_MAX_TASKS", "DP_MAX_CELLS", "DEFAULT_ALGORITHM"):
        monkeypatch.delenv(f"FOCUS_SCHEDULER_{k}", raising=False)
    assert load_config() == SchedulerConfig()
    assert load_config().dp_max_tasks == 40


def test_load_from_file(monkeypatch):
    monkeypatch.delenv("FOCUS_SCHEDULER_DP_MAX_TASKS", raising=False)
    cfg = load_config("examples/scheduler-config.yaml")
    assert cfg.dp_max_tasks == 2
    assert cfg.dp_max_cells == 1_000_000


def test_env_overrides_file(monkeypatch):
    monkeypatch.setenv("FOCUS_SCHEDULER_DP_MAX_TASKS", "12")
    monkeypatch.setenv("FOCUS_SCHEDULER_DEFAULT_ALGORITHM", "greedy")
    cfg = load_config("examples/scheduler-config.yaml")
    assert cfg.dp_max_tasks == 12
    assert cfg.default_algorithm == "greedy"


def test_env_invalid(monkeypatch):
    monkeypatch.setenv("FOCUS_SCHEDULER_DP_MAX_CELLS", "lots")
    with pytest.raises(ConfigError):
        load_config()


@pytest.mark.parametrize(
    "body",
    [
        "dp_max_tasks: 0\n",
        "dp_max_cells: many\n",
        "default_algorithm: magic\n",
        "surprise: 1\n",
        "- 1\n",
    ],
)
def test_invalid_file(tmp_path, body):
    p = tmp_path / "cfg.yaml"
    p.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(p))


def test_algorithm_choices_match_request_type():
    assert ALGORITHM_CHOICES == ("greedy", "knapsack", "auto")
