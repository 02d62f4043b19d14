"""Human-friendly console inspection for process graphs."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from ..core.builder import ProcessBuilder

TreePath = Tuple[str, ...]
ProcessSource = Union[ProcessBuilder, Mapping[str, Any]]

ASCII_BRANCH_LAST = "+-- "
ASCII_BRANCH_MID = "|-- "
ASCII_PIPE_LAST = "    "
ASCII_PIPE_MID = "|   "


@dataclass
class TreeNode:
    name: str
    path: TreePath
    kind: str  # "graph" | "node"
    display_path: str
    process_id: Optional[str] = None
    arguments: Mapping[str, Any] = field(default_factory=dict)
    description: Optional[str] = None
    result: bool = False
    metadata: Mapping[str, Any] = field(default_factory=dict)
    children: List["TreeNode"] = field(default_factory=list)


def as_process(source: ProcessSource) -> Dict[str, Any]:
    """Return the serialized form of a builder, process or bare node map."""
    if isinstance(source, ProcessBuilder):
        return source.to_dict()
    if not isinstance(source, Mapping):
        raise TypeError(f"Expected a ProcessBuilder or a mapping, got {type(source)!r}")
    if isinstance(source.get("process_graph"), Mapping):
        return dict(source)
    return {"process_graph": dict(source)}


def iter_callbacks(value: Any, label: str) -> Iterator[Tuple[str, Mapping[str, Any]]]:
    """Yield (label, node map) for every callback nested in an argument value."""
    if isinstance(value, Mapping):
        graph = value.get("process_graph")
        if isinstance(graph, Mapping):
            yield label, graph
            return
        for key, item in value.items():
            yield from iter_callbacks(item, f"{label}.{key}")
    elif isinstance(value, list):
        for index, item in enumerate(value):
            yield from iter_callbacks(item, f"{label}[{index}]")


class ProcessInspector:
    """Compact inspector for a process graph and its callbacks."""

    def __init__(self, source: ProcessSource, *, root_name: Optional[str] = None) -> None:
        self.process = as_process(source)
        self.root_name = root_name or self.process.get("id") or "Process"
        metadata = {key: value for key, value in self.process.items() if key != "process_graph"}
        self.root = self._build_graph_tree(
            self.process["process_graph"], prefix=(), metadata=metadata
        )
        self._display_index: Dict[str, TreeNode] = {}
        self._relative_index: Dict[str, TreeNode] = {}
        self._register(self.root)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def render_tree(self) -> str:
        lines: List[str] = [self._format_node_label(self.root)]
        for idx, child in enumerate(self.root.children):
            self._render_subtree(
                node=child,
                lines=lines,
                prefix="",
                is_last=idx == len(self.root.children) - 1,
            )
        return "\n".join(lines)

    def render_node(self, path: str) -> str:
        node = self._resolve_path(path)
        return "\n".join(self._format_node_details(node))

    def resolve_paths(self) -> Sequence[str]:
        return sorted(key for key in self._relative_index if key)

    # ------------------------------------------------------------------ #
    # Tree building helpers
    # ------------------------------------------------------------------ #

    def _build_graph_tree(
        self,
        graph: Mapping[str, Any],
        *,
        prefix: TreePath,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> TreeNode:
        node = TreeNode(
            name=prefix[-1] if prefix else self.root_name,
            path=prefix,
            kind="graph",
            display_path=self._format_display_path(prefix),
            metadata=dict(metadata or {}),
        )
        for node_id, data in graph.items():
            node.children.append(self._build_leaf(node_id, data, prefix + (node_id,)))
        return node

    def _build_leaf(self, node_id: str, data: Mapping[str, Any], path: TreePath) -> TreeNode:
        arguments = dict(data.get("arguments") or {})
        leaf = TreeNode(
            name=node_id,
            path=path,
            kind="node",
            display_path=self._format_display_path(path),
            process_id=data.get("process_id"),
            arguments=arguments,
            description=data.get("description"),
            result=bool(data.get("result", False)),
        )
        for name, value in arguments.items():
            for label, graph in iter_callbacks(value, name):
                leaf.children.append(self._build_graph_tree(graph, prefix=path + (label,)))
        return leaf

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    def _render_subtree(
        self,
        *,
        node: TreeNode,
        lines: List[str],
        prefix: str,
        is_last: bool,
    ) -> None:
        branch = ASCII_BRANCH_LAST if is_last else ASCII_BRANCH_MID
        lines.append(f"{prefix}{branch}{self._format_node_label(node)}")
        child_prefix = f"{prefix}{ASCII_PIPE_LAST if is_last else ASCII_PIPE_MID}"
        for idx, child in enumerate(node.children):
            self._render_subtree(
                node=child,
                lines=lines,
                prefix=child_prefix,
                is_last=idx == len(node.children) - 1,
            )

    def _format_node_label(self, node: TreeNode) -> str:
        if node.kind == "graph":
            return f"{node.display_path} (graph)"
        label = f"{node.display_path} :: {node.process_id}"
        if node.result:
            label += " [result]"
        return label

    def _format_node_details(self, node: TreeNode) -> List[str]:
        lines: List[str] = []
        if node.kind == "graph":
            lines.append(f"Graph {node.display_path}")
            for key, value in node.metadata.items():
                if key == "parameters":
                    lines.append("Parameters:")
                    lines.extend(self._indent_lines(self._format_parameters(value)))
                else:
                    lines.append(f"{key}: {value!r}")
            lines.append("Nodes:")
            for child in node.children:
                suffix = " [result]" if child.result else ""
                lines.append(f"  - {child.name} :: {child.process_id}{suffix}")
        else:
            lines.append(f"Node {node.display_path}")
            lines.append(f"Process: {node.process_id}")
            if node.description:
                lines.append(f"Description: {node.description}")
            lines.append(f"Result: {'yes' if node.result else 'no'}")
            lines.append("Arguments:")
            lines.extend(self._indent_lines(self._format_arguments(node.arguments)))
            if node.children:
                lines.append("Callbacks:")
                for child in node.children:
                    lines.append(f"  - {child.name} ({len(child.children)} nodes)")
        return lines

    # ------------------------------------------------------------------ #
    # Indexing / resolution
    # ------------------------------------------------------------------ #

    def _register(self, node: TreeNode) -> None:
        self._display_index[node.display_path] = node
        self._relative_index[".".join(node.path)] = node
        for child in node.children:
            self._register(child)

    def _resolve_path(self, path: str) -> TreeNode:
        query = path.strip()
        if not query:
            return self.root
        if query in self._display_index:
            return self._display_index[query]
        parts = [part for part in query.split(".") if part]
        if parts and parts[0] == self.root_name:
            parts = parts[1:]
        normalized = ".".join(parts)
        if normalized in self._relative_index:
            return self._relative_index[normalized]
        raise KeyError(f"Unknown node path '{path}'")

    def _format_display_path(self, path: TreePath) -> str:
        if not path:
            return self.root_name
        return f"{self.root_name}." + ".".join(path)

    # ------------------------------------------------------------------ #
    # Formatting helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _format_arguments(arguments: Mapping[str, Any]) -> List[str]:
        if not arguments:
            return ["<none>"]
        lines: List[str] = []
        for name, value in arguments.items():
            if any(True for _ in iter_callbacks(value, name)):
                lines.append(f"{name}: <callback>")
            else:
                lines.append(f"{name}: {json.dumps(value, default=repr)}")
        return lines

    @staticmethod
    def _format_parameters(parameters: Iterable[Mapping[str, Any]]) -> List[str]:
        lines: List[str] = []
        for spec in parameters:
            name = spec.get("name", "<unnamed>")
            if spec.get("optional"):
                lines.append(f"{name}: default={spec.get('default')!r}")
            else:
                lines.append(f"{name}: <required>")
        return lines or ["<none>"]

    @staticmethod
    def _indent_lines(lines: Iterable[str], indent: str = "  ") -> List[str]:
        return [f"{indent}{line}" for line in lines]


# --------------------------------------------------------------------------- #
# Convenience entry points
# --------------------------------------------------------------------------- #


def inspect_process(source: ProcessSource, *, root_name: Optional[str] = None) -> ProcessInspector:
    """Build an inspector for a builder or a serialized process."""
    return ProcessInspector(source, root_name=root_name)


def render_process_tree(source: ProcessSource, *, root_name: Optional[str] = None) -> str:
    return inspect_process(source, root_name=root_name).render_tree()


def print_process_tree(source: ProcessSource, *, root_name: Optional[str] = None) -> None:
    print(render_process_tree(source, root_name=root_name))


def render_process_node(
    source: ProcessSource,
    path: str,
    *,
    root_name: Optional[str] = None,
) -> str:
    return inspect_process(source, root_name=root_name).render_node(path)


def print_process_node(
    source: ProcessSource,
    path: str,
    *,
    root_name: Optional[str] = None,
) -> None:
    print(render_process_node(source, path, root_name=root_name))


__all__ = [
    "ProcessInspector",
    "as_process",
    "inspect_process",
    "iter_callbacks",
    "print_process_node",
    "print_process_tree",
    "render_process_node",
    "render_process_tree",
]
