"""
Named placeholders usable as argument values.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional, Tuple, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .builder import ProcessBuilder
    from .nodes import ProcessNode

_NO_DEFAULT = object()
_INDEX_PATTERN = re.compile(r"^(0|[1-9]\d*)$")


class Parameter:
    """Placeholder substituted at execution time.

    Parameters created by users are declared on the root process, with
    an empty schema when none is given.  Callback parameters are created
    by a builder through :meth:`ProcessBuilder.callback_parameter` and
    are satisfied by the enclosing process.

    Indexing a parameter that belongs to a builder (``data["B08"]`` or
    ``data[0]``) adds an ``array_element`` call to that builder.  The
    node is created once per key.
    """

    def __init__(
        self,
        name: str,
        schema: Union[str, Mapping[str, Any], None] = None,
        description: str = "",
        default: Any = _NO_DEFAULT,
    ):
        if not isinstance(name, str) or not name:
            raise ValueError("Parameter name must be a non-empty string")
        self.name = name
        if isinstance(schema, str):
            schema = {"type": schema}
        self.spec: Dict[str, Any] = {"name": name, "description": description}
        self.spec["schema"] = dict(schema or {})
        if default is not _NO_DEFAULT:
            self.spec["optional"] = True
            self.spec["default"] = default
        self.builder: Optional["ProcessBuilder"] = None
        self._element_cache: Dict[Tuple[str, Union[int, str]], "ProcessNode"] = {}

    @classmethod
    def create(cls, builder: "ProcessBuilder", name: str) -> "Parameter":
        parameter = cls(name)
        parameter.builder = builder
        return parameter

    @property
    def schema(self) -> Optional[Mapping[str, Any]]:
        return self.spec.get("schema")

    @property
    def declarable(self) -> bool:
        return self.builder is None

    def ref(self) -> Dict[str, str]:
        return {"from_parameter": self.name}

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.spec)

    def __getitem__(self, key: Union[int, str]) -> "ProcessNode":
        if self.builder is None:
            raise TypeError(
                f"Parameter '{self.name}' is not bound to a builder; "
                "array access needs a callback parameter"
            )
        if isinstance(key, bool) or not isinstance(key, (int, str)):
            raise TypeError(f"Array access needs an index or a label, got {type(key)!r}")
        if isinstance(key, int):
            if key < 0:
                raise IndexError("Array index must not be negative")
            element: Tuple[str, Union[int, str]] = ("index", key)
        elif _INDEX_PATTERN.match(key):
            element = ("index", int(key))
        else:
            element = ("label", key)
        if element not in self._element_cache:
            kind, value = element
            self._element_cache[element] = self.builder.process(
                "array_element", {"data": self, kind: value}
            )
        return self._element_cache[element]

    def retain_elements(self, nodes: Mapping[str, "ProcessNode"]) -> None:
        """Forget cached element nodes that are no longer part of ``nodes``."""
        self._element_cache = {
            key: node
            for key, node in self._element_cache.items()
            if nodes.get(node.id) is node
        }

    def __setitem__(self, key: Any, value: Any) -> None:
        raise TypeError("Array access on parameters is read-only")

    def __iter__(self):
        raise TypeError(f"Parameter '{self.name}' is not iterable")

    def __repr__(self) -> str:
        return f"Parameter(name={self.name!r})"


__all__ = ["Parameter"]
