from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional


Algorithm = Literal["greedy", "knapsack_dp"]
AlgorithmChoice = Literal["greedy", "knapsack", "auto"]


@dataclass(frozen=True)
class Task:
    id: str
    title: str = ""
    duration_minutes: int = 30
    energy_cost: int = 3
    value: int = 50
    depends_on: tuple[str, ...] = ()
    completed: bool = False

    notes: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "duration_minutes": self.duration_minutes,
            "energy_cost": self.energy_cost,
            "value": self.value,
            "depends_on": list(self.depends_on),
            "completed": self.completed,
        }
        if self.notes is not None:
            out["notes"] = self.notes
        return out


@dataclass(frozen=True)
class TaskSnapshot:
    schema_version: str
    tasks: tuple[Task, ...]
    tasks_by_id: dict[str, Task] = field(compare=False)


@dataclass(frozen=True)
class ScheduleResult:
    selected_tasks: tuple[Task, ...]
    total_duration: int
    total_energy: int
    total_value: int
    algorithm: Algorithm
    explanation: str

    @property
    def selected_ids(self) -> list[str]:
        return [t.id for t in self.selected_tasks]

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected_tasks": [t.to_dict() for t in self.selected_tasks],
            "total_duration": self.total_duration,
            "total_energy": self.total_energy,
            "total_value": self.total_value,
            "algorithm": self.algorithm,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class GraphNode:
    id: str
    title: str
    completed: bool
    value: int
    depends_on: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "value": self.value,
            "depends_on": list(self.depends_on),
        }


@dataclass(frozen=True)
class GraphAnalysisResult:
    nodes: tuple[GraphNode, ...]
    has_cycle: bool
    topological_order: Optional[tuple[str, ...]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "has_cycle": self.has_cycle,
            "topological_order": (
                list(self.topological_order) if self.topological_order is not None else None
            ),
        }
