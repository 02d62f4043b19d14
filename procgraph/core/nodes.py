"""
Process nodes: one call of a catalog process inside a process graph.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, TYPE_CHECKING

from .arguments import (
    Argument,
    CallbackArgument,
    NodeReference,
    iter_arguments,
    normalize_argument,
)
from .catalog import ProcessDescription
from .errors import ProcessGraphError

if TYPE_CHECKING:
    from .builder import ProcessBuilder


class ArgumentBindingError(ProcessGraphError, TypeError):
    """Raised when call arguments cannot be bound to process parameters."""


class ProcessNode:
    """A single process call within a :class:`ProcessBuilder`.

    ``arguments`` may be given as a sequence, bound in the order the
    catalog declares the process parameters, or as a mapping keyed by
    parameter name.  Positional arguments for a process missing from
    the catalog are keyed by their index.
    """

    def __init__(
        self,
        builder: "ProcessBuilder",
        process_id: str,
        arguments: Any = None,
        description: Optional[str] = None,
        *,
        keywords: Optional[Mapping[str, Any]] = None,
    ):
        self.builder = builder
        self.process_id = process_id
        self.spec: Optional[ProcessDescription] = builder.spec(process_id)
        self.id = builder.generate_id(process_id)
        self._description = description
        self.result = False
        self.arguments: Dict[str, Argument] = {}
        for name, value in self.bind_arguments(arguments, keywords).items():
            self.arguments[name] = normalize_argument(value, node=self, name=name)

    def bind_arguments(
        self,
        arguments: Any,
        keywords: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        if arguments is None:
            bound: Dict[str, Any] = {}
        elif isinstance(arguments, Mapping):
            bound = {str(name): value for name, value in arguments.items()}
        elif isinstance(arguments, Sequence) and not isinstance(arguments, (str, bytes)):
            bound = self.named_arguments(list(arguments))
        else:
            raise ArgumentBindingError(
                f"Arguments for process '{self.process_id}' must be a list or a mapping, "
                f"got {type(arguments).__name__}"
            )
        for name, value in (keywords or {}).items():
            if name in bound:
                raise ArgumentBindingError(
                    f"Process '{self.process_id}' got multiple values for argument '{name}'"
                )
            bound[name] = value
        return bound

    def named_arguments(self, values: List[Any]) -> Dict[str, Any]:
        if self.spec is None:
            return {str(index): value for index, value in enumerate(values)}
        names = self.spec.parameter_names
        if len(values) > len(names):
            raise ArgumentBindingError(
                f"Process '{self.process_id}' takes {len(names)} arguments, "
                f"{len(values)} were given"
            )
        return dict(zip(names, values))

    def description(self, description: Optional[str] = None):
        """Return the description, or set it and return the node."""
        if description is None:
            return self._description
        self._description = description
        return self

    def set_argument(self, name: str, value: Any) -> "ProcessNode":
        self.arguments[name] = normalize_argument(value, node=self, name=name)
        return self

    def dependencies(self) -> List["ProcessNode"]:
        """Nodes of the same process this node reads from."""
        found: Dict[int, ProcessNode] = {}
        for argument in self.iter_arguments():
            if isinstance(argument, NodeReference):
                found.setdefault(id(argument.node), argument.node)
        return list(found.values())

    def callbacks(self) -> Dict[str, "ProcessBuilder"]:
        return {
            name: argument.builder
            for name, argument in self.arguments.items()
            if isinstance(argument, CallbackArgument)
        }

    def iter_arguments(self) -> Iterator[Argument]:
        for argument in self.arguments.values():
            yield from iter_arguments(argument)

    def ref(self) -> Dict[str, str]:
        return {"from_node": self.id}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "process_id": self.process_id,
            "arguments": {name: arg.to_dict() for name, arg in self.arguments.items()},
        }
        if isinstance(self._description, str):
            data["description"] = self._description
        if self.result:
            data["result"] = True
        return data

    def __repr__(self) -> str:
        return f"ProcessNode(id={self.id!r}, process_id={self.process_id!r})"


__all__ = ["ArgumentBindingError", "ProcessNode"]
