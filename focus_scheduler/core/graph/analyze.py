from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Iterable, Optional, Sequence

from focus_scheduler.core.model import GraphAnalysisResult, GraphNode, Task

logger = logging.getLogger(__name__)

UNVISITED, IN_PROGRESS, DONE = 0, 1, 2


@dataclass(frozen=True)
class _IndexedGraph:
    """Task ids mapped to dense integer indices, edges as dependency -> dependents."""

    ids: list[str]
    index: dict[str, int]
    dependents: list[list[int]]


def _build_graph(tasks: Iterable[Task]) -> _IndexedGraph:
    ids: list[str] = []
    index: dict[str, int] = {}
    dependents: list[list[int]] = []

    def node(nid: str) -> int:
        i = index.get(nid)
        if i is None:
            i = len(ids)
            index[nid] = i
            ids.append(nid)
            dependents.append([])
        return i

    for task in tasks:
        ti = node(task.id)
        for dep in task.depends_on:
            dependents[node(dep)].append(ti)

    return _IndexedGraph(ids=ids, index=index, dependents=dependents)


def _find_cycle_indices(graph: _IndexedGraph) -> Optional[list[int]]:
    """Iterative three-state DFS. Returns the first cycle found as a closed index path."""
    state = [UNVISITED] * len(graph.ids)

    for root in range(len(graph.ids)):
        if state[root] != UNVISITED:
            continue
        state[root] = IN_PROGRESS
        stack = [(root, iter(graph.dependents[root]))]
        while stack:
            node, children = stack[-1]
            for child in children:
                if state[child] == IN_PROGRESS:
                    path = [frame[0] for frame in stack]
                    return path[path.index(child) :] + [child]
                if state[child] == UNVISITED:
                    state[child] = IN_PROGRESS
                    stack.append((child, iter(graph.dependents[child])))
                    break
            else:
                state[node] = DONE
                stack.pop()

    return None


def has_cycle(tasks: Sequence[Task]) -> bool:
    """Detect a cycle in the dependency graph in O(V + E).

    Dependency ids that name no task are still graph nodes, so a task depending
    on itself or on a missing id is handled uniformly.
    """
    return _find_cycle_indices(_build_graph(tasks)) is not None


def find_cycle(tasks: Sequence[Task]) -> Optional[list[str]]:
    """Return one cycle as ids along dependency -> dependent edges, first id repeated last."""
    graph = _build_graph(tasks)
    cycle = _find_cycle_indices(graph)
    if cycle is None:
        return None
    return [graph.ids[i] for i in cycle]


def would_create_cycle(tasks: Sequence[Task], task_id: str, new_dependency_id: str) -> bool:
    """Check a single proposed edge against a hypothetical copy of the graph."""
    updated = [
        replace(t, depends_on=t.depends_on + (new_dependency_id,)) if t.id == task_id else t
        for t in tasks
    ]
    return has_cycle(updated)


def get_dependent_tasks(tasks: Sequence[Task], task_id: str) -> list[Task]:
    """All tasks that depend on task_id directly or transitively, in snapshot order."""
    graph = _build_graph(tasks)
    start = graph.index.get(task_id)
    if start is None:
        return []

    found: set[int] = set()
    q: deque[int] = deque([start])
    while q:
        cur = q.popleft()
        for nxt in graph.dependents[cur]:
            if nxt not in found:
                found.add(nxt)
                q.append(nxt)

    found_ids = {graph.ids[i] for i in found}
    return [t for t in tasks if t.id in found_ids]


def topological_sort(tasks: Sequence[Task]) -> Optional[list[Task]]:
    """Order tasks so every dependency precedes its dependents.

    Returns None when the graph has a cycle; callers treat that as "graph invalid
    for scheduling". Independent tasks keep their snapshot order. Dependency ids
    outside `tasks` are ignored for ordering.
    """
    if has_cycle(tasks):
        return None

    index: dict[str, int] = {}
    nodes: list[Task] = []
    for t in tasks:
        if t.id not in index:
            index[t.id] = len(nodes)
            nodes.append(t)

    deps: list[list[int]] = [[index[d] for d in t.depends_on if d in index] for t in nodes]
    state = [UNVISITED] * len(nodes)
    order: list[Task] = []

    for root in range(len(nodes)):
        if state[root] != UNVISITED:
            continue
        state[root] = IN_PROGRESS
        stack = [(root, iter(deps[root]))]
        while stack:
            node, pending = stack[-1]
            for d in pending:
                if state[d] == IN_PROGRESS:
                    # Only reachable if the input changed under us.
                    logger.warning("cycle through %s during topological sort", nodes[d].id)
                    return None
                if state[d] == UNVISITED:
                    state[d] = IN_PROGRESS
                    stack.append((d, iter(deps[d])))
                    break
            else:
                state[node] = DONE
                order.append(nodes[node])
                stack.pop()

    return order


def tasks_to_graph_nodes(tasks: Sequence[Task]) -> list[GraphNode]:
    return [
        GraphNode(
            id=t.id,
            title=t.title,
            completed=t.completed,
            value=t.value,
            depends_on=t.depends_on,
        )
        for t in tasks
    ]


def analyze_graph(tasks: Sequence[Task]) -> GraphAnalysisResult:
    ordered = topological_sort(tasks)
    result = GraphAnalysisResult(
        nodes=tuple(tasks_to_graph_nodes(tasks)),
        has_cycle=ordered is None,
        topological_order=tuple(t.id for t in ordered) if ordered is not None else None,
    )
    logger.debug(
        "analyzed graph: %d nodes, has_cycle=%s", len(result.nodes), result.has_cycle
    )
    return result
