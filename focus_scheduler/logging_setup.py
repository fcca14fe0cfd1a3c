from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional


class _ThirdPartyFilter(logging.Filter):
    """Keep focus_scheduler logs; only let other libraries through at ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("focus_scheduler."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    level: int = logging.WARNING,
    log_file: Optional[str | Path] = None,
) -> None:
    """
    Configure logging with:
    - Console handler on stderr (stdout is reserved for command output)
    - Optional file handler that records everything at DEBUG

    Call this ONCE, very early (before first logger.info).
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if log_file else level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_ThirdPartyFilter())
    root.addHandler(ch)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
