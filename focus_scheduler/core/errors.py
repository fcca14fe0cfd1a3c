from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TaskError(Exception):
    """Base error envelope. Prefer returning/printing these rather than raising raw exceptions."""

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.path:
            parts.append(self.path)
        loc = ":".join(parts) if parts else "<tasks>"
        return f"{loc}: {self.code}: {self.message}"


class TaskLoadError(TaskError):
    pass


class TaskValidationError(TaskError):
    pass


class ScheduleRequestError(TaskError):
    pass


class ScheduleTooLargeError(TaskError):
    pass


class GraphIntegrityError(TaskError):
    """A proposed mutation would break the dependency graph."""


@dataclass(frozen=True)
class DependencyCycleError(GraphIntegrityError):
    cycle: tuple[str, ...] = ()


@dataclass(frozen=True)
class TaskHasDependentsError(GraphIntegrityError):
    # (id, title) pairs, snapshot order
    dependents: tuple[tuple[str, str], ...] = ()
