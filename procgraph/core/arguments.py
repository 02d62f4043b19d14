"""
Argument values of process nodes.

Every value handed to a process call is classified once into one of
the argument kinds below and exported to the wire format on demand.
"""

from __future__ import annotations

from dataclasses import dataclass
import datetime
import math
from typing import Any, Dict, List, Mapping, Tuple, Union, TYPE_CHECKING

from .errors import ProcessGraphError
from .parameters import Parameter

if TYPE_CHECKING:
    from .builder import ProcessBuilder
    from .nodes import ProcessNode


class SerializationError(ProcessGraphError, TypeError):
    """Raised when an argument cannot be represented in JSON."""


class NodeReferenceError(ProcessGraphError):
    """Raised when a node of an unrelated process is used as argument."""


@dataclass(frozen=True)
class LiteralArgument:
    value: Any

    def to_dict(self) -> Any:
        return export_literal(self.value)


@dataclass(frozen=True, eq=False)
class NodeReference:
    node: "ProcessNode"

    def to_dict(self) -> Dict[str, str]:
        return self.node.ref()


@dataclass(frozen=True, eq=False)
class ParameterReference:
    parameter: Parameter

    def to_dict(self) -> Dict[str, str]:
        return self.parameter.ref()


@dataclass(frozen=True, eq=False)
class CallbackArgument:
    builder: "ProcessBuilder"

    def to_dict(self) -> Dict[str, Any]:
        return {"process_graph": self.builder.to_dict()["process_graph"]}


@dataclass(frozen=True)
class ListArgument:
    items: Tuple["Argument", ...]

    def to_dict(self) -> List[Any]:
        return [item.to_dict() for item in self.items]


@dataclass(frozen=True)
class ObjectArgument:
    items: Tuple[Tuple[str, "Argument"], ...]

    def to_dict(self) -> Dict[str, Any]:
        return {key: value.to_dict() for key, value in self.items}


Argument = Union[
    LiteralArgument,
    NodeReference,
    ParameterReference,
    CallbackArgument,
    ListArgument,
    ObjectArgument,
]
ARGUMENT_TYPES = (
    LiteralArgument,
    NodeReference,
    ParameterReference,
    CallbackArgument,
    ListArgument,
    ObjectArgument,
)


def normalize_argument(value: Any, *, node: "ProcessNode", name: str) -> Argument:
    """Classify ``value`` passed for parameter ``name`` of ``node``."""
    from .builder import ProcessBuilder
    from .nodes import ProcessNode
    from ..formula.compiler import Formula

    builder = node.builder

    if isinstance(value, ARGUMENT_TYPES):
        return value

    if isinstance(value, ProcessNode):
        if not builder.can_reference(value):
            raise NodeReferenceError(
                f"Node '{value.id}' does not belong to the process of node '{node.id}'"
            )
        return NodeReference(value)

    if isinstance(value, Parameter):
        if value.declarable:
            builder.add_parameter(value)
        return ParameterReference(value)

    if isinstance(value, ProcessBuilder):
        if value.parent_node is None:
            value.set_parent(node, name, parent=builder)
        return CallbackArgument(value)

    if isinstance(value, Formula):
        nested = builder.create_child(node, name)
        value.generate(nested, result=True)
        return CallbackArgument(nested)

    if callable(value) and not isinstance(value, type):
        return CallbackArgument(builder.create_callback(node, name, value))

    if isinstance(value, Mapping):
        return ObjectArgument(
            tuple(
                (str(key), normalize_argument(item, node=node, name=name))
                for key, item in value.items()
            )
        )

    if isinstance(value, (list, tuple)):
        return ListArgument(tuple(normalize_argument(item, node=node, name=name) for item in value))

    return LiteralArgument(value)


def export_literal(value: Any) -> Any:
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise SerializationError(f"Non-finite number {value!r} is not valid JSON")
        return value
    if isinstance(value, (datetime.datetime, datetime.date)):
        return value.isoformat()
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise SerializationError(f"Value of type {type(value).__name__} is not JSON serializable")


def iter_arguments(argument: Argument):
    """Yield ``argument`` and every argument nested in it."""
    yield argument
    if isinstance(argument, ListArgument):
        for item in argument.items:
            yield from iter_arguments(item)
    elif isinstance(argument, ObjectArgument):
        for _, item in argument.items:
            yield from iter_arguments(item)


__all__ = [
    "ARGUMENT_TYPES",
    "Argument",
    "CallbackArgument",
    "ListArgument",
    "LiteralArgument",
    "NodeReference",
    "NodeReferenceError",
    "ObjectArgument",
    "ParameterReference",
    "SerializationError",
    "export_literal",
    "iter_arguments",
    "normalize_argument",
]
