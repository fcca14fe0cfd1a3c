"""Scheduler settings: defaults, optional YAML file, environment overrides.

Format of the YAML file (all keys optional):

  dp_max_tasks: 40
  dp_max_cells: 20000000
  default_algorithm: auto
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional, get_args

import yaml

from focus_scheduler.core.model import AlgorithmChoice


ENV_PREFIX = "FOCUS_SCHEDULER"

ALGORITHM_CHOICES: tuple[str, ...] = get_args(AlgorithmChoice)


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class SchedulerConfig:
    # Incomplete-task count at or below which "auto" uses the exact DP solver.
    dp_max_tasks: int = 40
    # Ceiling on (n+1)*(T+1)*(E+1) DP cells; above it the DP solver refuses.
    dp_max_cells: int = 20_000_000
    default_algorithm: str = "auto"


DEFAULT_CONFIG = SchedulerConfig()


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _positive_int(name: str, v: Any) -> int:
    if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
        raise ConfigError(f"{name} must be a positive integer")
    return v


def _algorithm(name: str, v: Any) -> str:
    if not isinstance(v, str) or v not in ALGORITHM_CHOICES:
        raise ConfigError(f"{name} must be one of {list(ALGORITHM_CHOICES)}")
    return v


def load_config_file(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("config file must be a mapping")

    out: dict[str, Any] = {}
    for k, v in raw.items():
        if k in ("dp_max_tasks", "dp_max_cells"):
            out[k] = _positive_int(k, v)
        elif k == "default_algorithm":
            out[k] = _algorithm(k, v)
        else:
            raise ConfigError(f"unknown config key: {k}")
    return out


def _env_overrides() -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in ("dp_max_tasks", "dp_max_cells"):
        raw = os.getenv(_k(key.upper()))
        if raw is None or raw.strip() == "":
            continue
        try:
            out[key] = _positive_int(_k(key.upper()), int(raw))
        except ValueError as e:
            raise ConfigError(f"{_k(key.upper())} must be a positive integer") from e

    raw = os.getenv(_k("DEFAULT_ALGORITHM"))
    if raw is not None and raw.strip():
        out["default_algorithm"] = _algorithm(_k("DEFAULT_ALGORITHM"), raw.strip())
    return out


def load_config(config_file: Optional[str] = None) -> SchedulerConfig:
    """Defaults, then the optional file, then environment variables."""
    cfg = DEFAULT_CONFIG
    if config_file:
        cfg = replace(cfg, **load_config_file(config_file))
    return replace(cfg, **_env_overrides())
