"""
Fluent construction of process graphs against a process catalog.
"""

from __future__ import annotations

from contextlib import contextmanager
import copy
from dataclasses import dataclass
import json
import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union, TYPE_CHECKING

from ..settings import get_strict_state
from .catalog import CatalogLookupError, ProcessCatalog, ProcessDescription
from .errors import ProcessGraphError
from .inspect import invoke_callback
from .nodes import ProcessNode
from .parameters import Parameter

if TYPE_CHECKING:
    from ..formula.compiler import Formula

logger = logging.getLogger(__name__)

PROCESS_META = (
    "id",
    "summary",
    "description",
    "categories",
    "parameters",
    "returns",
    "deprecated",
    "experimental",
    "exceptions",
    "examples",
    "links",
)

# Node ids are the first characters of the process id (underscores
# removed, lowercased) followed by a per-stem counter: reduce_dimension
# becomes reduc1, reduc2, ...
ID_STEM_LENGTH = 5

_SCALAR_TYPES = (type(None), bool, int, float, str)


class BuildError(ProcessGraphError):
    """Raised when the internal consistency of a builder is violated."""


class UnknownProcessError(ProcessGraphError):
    """Raised in strict mode when a process is not in the catalog."""


class CallbackError(ProcessGraphError):
    """Raised when a callback does not produce a process node."""


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal problem noticed while building a process."""

    code: str
    message: str
    process_id: Optional[str] = None
    parameter: Optional[str] = None


class ProcessBuilder:
    """Builds a process graph from the processes of a catalog.

    Every catalog process is available as a method::

        builder = ProcessBuilder(processes)
        cube = builder.load_collection("SENTINEL2", extent, ["2018-01-01", "2018-02-01"])
        cube = builder.reduce_dimension(cube, lambda data, builder: builder.min(data), "t")
        builder.set_result(builder.save_result(cube, "PNG"))

    ``processes`` is a :class:`ProcessCatalog`, a list of process
    descriptors or a ``GET /processes`` response.  Nested builders are
    created for callbacks and share the catalog of their parent.
    """

    def __init__(
        self,
        processes: Union[ProcessCatalog, List[Mapping[str, Any]], Mapping[str, Any]],
        parent: Optional["ProcessBuilder"] = None,
        *,
        parent_node: Optional[ProcessNode] = None,
        parent_parameter: Optional[str] = None,
        strict: Optional[bool] = None,
        id: Optional[str] = None,
    ):
        if isinstance(processes, ProcessCatalog):
            self.catalog = processes
        else:
            self.catalog = ProcessCatalog(processes)
        self.parent = parent
        self.parent_node: Optional[ProcessNode] = None
        self.parent_parameter: Optional[str] = None
        self.nodes: Dict[str, ProcessNode] = {}
        self.id_counter: Dict[str, int] = {}
        self.callback_parameter_cache: Dict[str, Parameter] = {}
        self.declared_parameters: List[Dict[str, Any]] = []
        self.metadata: Dict[str, Any] = {}
        self.diagnostics: List[Diagnostic] = []
        self._strict = strict
        self._callback_names: Optional[List[str]] = None
        if parent_node is not None:
            self.set_parent(parent_node, parent_parameter)
        if id is not None:
            self.metadata["id"] = id
        if parent is None:
            self._check_shadowed_processes()

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "ProcessBuilder":
        session = kwargs.pop("session", None)
        return cls(ProcessCatalog.from_url(url, session=session), **kwargs)

    @classmethod
    def from_version(cls, version: Optional[str] = None, **kwargs: Any) -> "ProcessBuilder":
        session = kwargs.pop("session", None)
        return cls(ProcessCatalog.from_version(version, session=session), **kwargs)

    # ------------------------------------------------------------------ #
    # Scope handling
    # ------------------------------------------------------------------ #

    @property
    def root(self) -> "ProcessBuilder":
        builder = self
        while builder.parent is not None:
            builder = builder.parent
        return builder

    @property
    def strict(self) -> bool:
        if self._strict is not None:
            return self._strict
        if self.parent is not None:
            return self.parent.strict
        return get_strict_state()

    def set_parent(
        self,
        node: ProcessNode,
        parameter_name: Optional[str],
        *,
        parent: Optional["ProcessBuilder"] = None,
    ) -> None:
        self.parent_node = node
        self.parent_parameter = parameter_name
        if parent is not None:
            self.parent = parent
        elif self.parent is None:
            self.parent = node.builder
        self._callback_names = None

    def create_child(self, node: ProcessNode, parameter_name: str) -> "ProcessBuilder":
        return ProcessBuilder(
            self.catalog,
            self,
            parent_node=node,
            parent_parameter=parameter_name,
            strict=self._strict,
        )

    def callback_parameter(self, name: str) -> Parameter:
        if name not in self.callback_parameter_cache:
            self.callback_parameter_cache[name] = Parameter.create(self, name)
        return self.callback_parameter_cache[name]

    def callback_parameter_names(self) -> List[str]:
        """Parameters this builder receives as the callback of its parent node."""
        if self._callback_names is None:
            self._callback_names = self._lookup_callback_names()
        return list(self._callback_names)

    def _lookup_callback_names(self) -> List[str]:
        if self.parent_node is None or self.parent_parameter is None:
            return []
        try:
            return self.catalog.callback_parameters(
                self.parent_node.process_id, self.parent_parameter
            )
        except CatalogLookupError as exc:
            self.warn(
                "callback-lookup-failed",
                f"Can't determine callback parameters: {exc}",
                process_id=self.parent_node.process_id,
                parameter=self.parent_parameter,
            )
            return []

    def parent_callback_parameters(self) -> List[Parameter]:
        return [self.callback_parameter(name) for name in self.callback_parameter_names()]

    def resolve_callback_scope(self, name: str) -> Optional["ProcessBuilder"]:
        """Nearest builder, this one included, receiving ``name`` as callback parameter."""
        builder: Optional[ProcessBuilder] = self
        while builder is not None:
            if name in builder.callback_parameter_names():
                return builder
            builder = builder.parent
        return None

    def add_parameter(self, parameter: Union[Parameter, Mapping[str, Any]], root: bool = True) -> None:
        """Declare a process parameter, merging with an earlier declaration of the same name."""
        spec = parameter.to_dict() if isinstance(parameter, Parameter) else dict(parameter)
        name = spec.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("Parameter declarations need a name")
        if self.resolve_callback_scope(name) is not None:
            return

        builder = self.root if root else self
        for existing in builder.declared_parameters:
            if existing.get("name") == name:
                existing.update(spec)
                return
        builder.declared_parameters.append(spec)

    def can_reference(self, node: ProcessNode) -> bool:
        builder: Optional[ProcessBuilder] = self
        while builder is not None:
            if builder.nodes.get(node.id) is node:
                return True
            builder = builder.parent
        return False

    # ------------------------------------------------------------------ #
    # Catalog access
    # ------------------------------------------------------------------ #

    def spec(self, process_id: str) -> Optional[ProcessDescription]:
        return self.catalog.get(process_id)

    def supports(self, process_id: str) -> bool:
        return self.catalog.supports(process_id)

    def _check_process(self, process_id: str) -> None:
        if self.catalog.supports(process_id):
            return
        message = f"Process '{process_id}' is not in the catalog"
        if self.strict:
            raise UnknownProcessError(message)
        self.warn("unknown-process", message, process_id=process_id)

    def _check_shadowed_processes(self) -> None:
        attributes = set(vars(self))
        for process_id in self.catalog.ids():
            if process_id in attributes or hasattr(type(self), process_id):
                self.warn(
                    "shadowed-process",
                    f"Process '{process_id}' clashes with a builder attribute; "
                    f"use builder.process('{process_id}', ...)",
                    process_id=process_id,
                )

    def warn(
        self,
        code: str,
        message: str,
        *,
        process_id: Optional[str] = None,
        parameter: Optional[str] = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(code=code, message=message, process_id=process_id, parameter=parameter)
        logger.warning(message)
        self.root.diagnostics.append(diagnostic)
        return diagnostic

    # ------------------------------------------------------------------ #
    # Graph construction
    # ------------------------------------------------------------------ #

    def process(
        self,
        process_id: str,
        arguments: Any = None,
        description: Optional[str] = None,
    ) -> ProcessNode:
        """Add a call of ``process_id`` and return its node."""
        return self._add_node(process_id, arguments, description=description)

    def _add_node(
        self,
        process_id: str,
        arguments: Any,
        *,
        description: Optional[str] = None,
        keywords: Optional[Mapping[str, Any]] = None,
    ) -> ProcessNode:
        self._check_process(process_id)
        with self.transaction():
            node = ProcessNode(self, process_id, arguments, description, keywords=keywords)
            if node.id in self.nodes:
                raise BuildError(f"Duplicate node id '{node.id}'")
            self.nodes[node.id] = node
        return node

    def __getattr__(self, name: str) -> Callable[..., ProcessNode]:
        if name.startswith("_"):
            raise AttributeError(name)
        catalog = self.__dict__.get("catalog")
        if catalog is None or name not in catalog:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r} "
                "and the catalog has no process of that name"
            )

        def _call(*args: Any, **kwargs: Any) -> ProcessNode:
            return self._add_node(name, list(args), keywords=kwargs)

        _call.__name__ = name
        _call.__doc__ = catalog.get(name).summary or None
        return _call

    def __dir__(self) -> List[str]:
        return sorted(set(super().__dir__()) | set(self.catalog.ids()))

    def create_callback(
        self,
        node: ProcessNode,
        parameter_name: str,
        func: Callable[..., Any],
    ) -> "ProcessBuilder":
        """Run ``func`` against a fresh nested builder and mark what it returns as result."""
        builder = self.create_child(node, parameter_name)
        value = invoke_callback(func, builder, builder.parent_callback_parameters())
        if isinstance(value, list) and builder.supports("array_create"):
            value = builder.process("array_create", [value])
        elif isinstance(value, _SCALAR_TYPES) and builder.supports("constant"):
            value = builder.process("constant", [value])
        if not isinstance(value, ProcessNode):
            raise CallbackError(
                f"Callback for parameter '{parameter_name}' of '{node.process_id}' "
                f"must return a process node, got {type(value).__name__}"
            )
        if value.builder is not builder:
            raise CallbackError(
                f"Callback for parameter '{parameter_name}' of '{node.process_id}' "
                f"returned node '{value.id}' of another process"
            )
        builder.set_result(value)
        return builder

    def compile_formula(self, formula: Union[str, "Formula"], *, result: bool = True) -> ProcessNode:
        """Compile an arithmetic formula into process calls of this builder."""
        from ..formula.compiler import Formula

        if not isinstance(formula, Formula):
            formula = Formula(formula)
        return formula.generate(self, result=result)

    def math(self, formula: Union[str, "Formula"]) -> ProcessNode:
        return self.compile_formula(formula, result=False)

    def set_result(self, node: ProcessNode) -> ProcessNode:
        if self.nodes.get(node.id) is not node:
            raise BuildError(f"Node '{node.id}' is not part of this process")
        for candidate in self.nodes.values():
            candidate.result = candidate is node
        return node

    @property
    def result_node(self) -> Optional[ProcessNode]:
        for node in self.nodes.values():
            if node.result:
                return node
        return None

    def set_metadata(self, **fields: Any) -> "ProcessBuilder":
        unknown = sorted(set(fields) - set(PROCESS_META))
        if unknown:
            raise KeyError(f"Unsupported process metadata: {', '.join(unknown)}")
        for key, value in fields.items():
            if key == "parameters":
                for parameter in value or []:
                    self.add_parameter(parameter, root=False)
            else:
                self.metadata[key] = value
        return self

    def generate_id(self, name: str) -> str:
        stem = name.replace("_", "").lower()[:ID_STEM_LENGTH]
        count = self.id_counter.get(stem, 0) + 1
        while f"{stem}{count}" in self.nodes:
            count += 1
        self.id_counter[stem] = count
        return f"{stem}{count}"

    @contextmanager
    def transaction(self) -> Iterator["ProcessBuilder"]:
        """Undo every node and parameter added inside the block if it raises."""
        root = self.root
        nodes = dict(self.nodes)
        counters = dict(self.id_counter)
        declared = copy.deepcopy(root.declared_parameters)
        try:
            yield self
        except BaseException:
            self.nodes = nodes
            self.id_counter = counters
            root.declared_parameters = declared
            for parameter in self.callback_parameter_cache.values():
                parameter.retain_elements(self.nodes)
            raise

    # ------------------------------------------------------------------ #
    # Serialisation
    # ------------------------------------------------------------------ #

    def to_dict(self) -> Dict[str, Any]:
        process: Dict[str, Any] = {
            "process_graph": {node_id: node.to_dict() for node_id, node in self.nodes.items()}
        }
        for key in PROCESS_META:
            if key == "parameters":
                if self.declared_parameters:
                    process[key] = [dict(param) for param in self.declared_parameters]
            elif key in self.metadata:
                process[key] = self.metadata[key]
        return process

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    def __repr__(self) -> str:
        scope = "root" if self.parent is None else f"callback of {self.parent_node!r}"
        return f"ProcessBuilder({len(self.nodes)} nodes, {scope})"


__all__ = [
    "BuildError",
    "CallbackError",
    "Diagnostic",
    "ID_STEM_LENGTH",
    "PROCESS_META",
    "ProcessBuilder",
    "UnknownProcessError",
]
