"""
Graph views of serialized processes built on networkx.
"""

from __future__ import annotations

from typing import Any, Iterator, List, Mapping, Set

import networkx as nx

from .plain import ProcessSource, as_process, iter_callbacks


def iter_node_references(value: Any) -> Iterator[str]:
    """Yield ``from_node`` targets of an argument value, callbacks excluded."""
    if isinstance(value, Mapping):
        if "process_graph" in value:
            return
        target = value.get("from_node")
        if isinstance(target, str) and len(value) == 1:
            yield target
            return
        for item in value.values():
            yield from iter_node_references(item)
    elif isinstance(value, list):
        for item in value:
            yield from iter_node_references(item)


def to_networkx(source: ProcessSource) -> nx.DiGraph:
    """Directed graph of one process level, edges point from producer to consumer."""
    nodes = as_process(source)["process_graph"]
    graph = nx.DiGraph()
    for node_id, data in nodes.items():
        graph.add_node(
            node_id,
            process_id=data.get("process_id"),
            description=data.get("description"),
            result=bool(data.get("result", False)),
        )
    for node_id, data in nodes.items():
        for target in iter_node_references(data.get("arguments") or {}):
            graph.add_edge(target, node_id)
    return graph


def validate_process_graph(source: ProcessSource) -> List[str]:
    """Return a list of structural problems, empty for a valid process."""
    problems: List[str] = []
    _validate(as_process(source)["process_graph"], "", set(), problems)
    return problems


def _validate(
    nodes: Mapping[str, Any],
    location: str,
    visible: Set[str],
    problems: List[str],
) -> None:
    where = f" in callback '{location}'" if location else ""
    if not nodes:
        problems.append(f"Process graph{where} has no nodes")
        return

    graph = to_networkx(nodes)
    for target in graph.nodes:
        if target not in nodes and target not in visible:
            consumers = ", ".join(sorted(graph.successors(target)))
            problems.append(f"Node '{target}' referenced by {consumers}{where} does not exist")

    if not nx.is_directed_acyclic_graph(graph):
        cycle = " -> ".join(edge[0] for edge in nx.find_cycle(graph))
        problems.append(f"Process graph{where} contains a cycle: {cycle}")

    results = [node_id for node_id, data in nodes.items() if data.get("result")]
    if len(results) != 1:
        problems.append(
            f"Process graph{where} must have exactly one result node, found {len(results)}"
        )

    scope = visible | set(nodes)
    for node_id, data in nodes.items():
        for name, value in (data.get("arguments") or {}).items():
            for label, nested in iter_callbacks(value, name):
                path = f"{location}.{node_id}.{label}" if location else f"{node_id}.{label}"
                _validate(nested, path, scope, problems)


__all__ = ["iter_node_references", "to_networkx", "validate_process_graph"]
