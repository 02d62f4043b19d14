"""Inspection helpers for process graphs."""

from .graph import to_networkx, validate_process_graph
from .plain import (
    ProcessInspector,
    inspect_process,
    print_process_node,
    print_process_tree,
    render_process_node,
    render_process_tree,
)

__all__ = [
    "ProcessInspector",
    "inspect_process",
    "render_process_tree",
    "print_process_tree",
    "render_process_node",
    "print_process_node",
    "to_networkx",
    "validate_process_graph",
]
