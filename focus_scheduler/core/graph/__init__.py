from focus_scheduler.core.graph.analyze import (
    analyze_graph,
    find_cycle,
    get_dependent_tasks,
    has_cycle,
    tasks_to_graph_nodes,
    topological_sort,
    would_create_cycle,
)

__all__ = [
    "analyze_graph",
    "find_cycle",
    "get_dependent_tasks",
    "has_cycle",
    "tasks_to_graph_nodes",
    "topological_sort",
    "would_create_cycle",
]
