"""
Read-only catalog of the processes offered by a back-end.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import requests

from .errors import ProcessGraphError

logger = logging.getLogger(__name__)

PROCESS_REGISTRY_URL = "https://processes.openeo.org"
CALLBACK_SUBTYPE = "process-graph"


class InvalidCatalogError(ProcessGraphError, ValueError):
    """Raised when a process listing cannot be turned into a catalog."""


class CatalogLookupError(ProcessGraphError, LookupError):
    """Raised when a process or one of its parameters is missing."""


@dataclass(frozen=True)
class ProcessParameter:
    """Parameter declared by a process."""

    name: str
    schema: Any = field(default_factory=dict)
    description: str = ""
    optional: bool = False
    default: Any = None

    @property
    def required(self) -> bool:
        return not self.optional

    def schemas(self) -> List[Mapping[str, Any]]:
        if isinstance(self.schema, Mapping):
            return [self.schema]
        if isinstance(self.schema, Sequence) and not isinstance(self.schema, (str, bytes)):
            return [item for item in self.schema if isinstance(item, Mapping)]
        return []

    def callback_parameters(self) -> Optional[List[Mapping[str, Any]]]:
        """Parameters handed to a callback bound here, ``None`` if not a callback."""
        for schema in self.schemas():
            if schema.get("subtype") == CALLBACK_SUBTYPE:
                params = schema.get("parameters")
                return [p for p in params if isinstance(p, Mapping)] if isinstance(params, list) else []
        return None

    def accepts_type(self, type_name: str) -> bool:
        for schema in self.schemas():
            declared = schema.get("type")
            if declared == type_name or (isinstance(declared, list) and type_name in declared):
                return True
        return False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProcessParameter":
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidCatalogError(f"Process parameter without a valid name: {data!r}")
        return cls(
            name=name,
            schema=data.get("schema", {}),
            description=data.get("description", "") or "",
            optional=bool(data.get("optional", False)),
            default=data.get("default"),
        )


@dataclass(frozen=True)
class ProcessDescription:
    """Immutable descriptor of one process offered by the back-end."""

    id: str
    parameters: Tuple[ProcessParameter, ...] = ()
    returns: Mapping[str, Any] = field(default_factory=dict)
    summary: str = ""
    description: str = ""
    categories: Tuple[str, ...] = ()
    deprecated: bool = False
    experimental: bool = False
    examples: Tuple[Any, ...] = ()
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def parameter_names(self) -> List[str]:
        return [param.name for param in self.parameters]

    def parameter(self, name: str) -> Optional[ProcessParameter]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProcessDescription":
        if not isinstance(data, Mapping):
            raise InvalidCatalogError(f"Process descriptor must be a mapping, got {type(data)!r}")
        process_id = data.get("id")
        if not isinstance(process_id, str) or not process_id:
            raise InvalidCatalogError(f"Process descriptor without a valid id: {data!r}")
        raw_params = data.get("parameters") or []
        if not isinstance(raw_params, list):
            raise InvalidCatalogError(f"Parameters of process '{process_id}' must be a list")
        return cls(
            id=process_id,
            parameters=tuple(ProcessParameter.from_dict(p) for p in raw_params),
            returns=dict(data.get("returns") or {}),
            summary=data.get("summary", "") or "",
            description=data.get("description", "") or "",
            categories=tuple(data.get("categories") or ()),
            deprecated=bool(data.get("deprecated", False)),
            experimental=bool(data.get("experimental", False)),
            examples=tuple(data.get("examples") or ()),
            raw=dict(data),
        )


class ProcessCatalog:
    """Catalog mapping process ids to their descriptions.

    Accepts either a list of process descriptors or a ``GET /processes``
    response (a mapping with a ``processes`` list).  The catalog is never
    mutated after construction and may be shared between builders.
    """

    def __init__(self, processes: Any):
        if isinstance(processes, ProcessCatalog):
            entries = list(processes)
        elif isinstance(processes, list):
            entries = [self._coerce(item) for item in processes]
        elif isinstance(processes, Mapping) and isinstance(processes.get("processes"), list):
            entries = [self._coerce(item) for item in processes["processes"]]
        else:
            raise InvalidCatalogError(
                "Processes are invalid; must be a list or a mapping with a 'processes' list"
            )
        self._entries: Dict[str, ProcessDescription] = {}
        for entry in entries:
            if entry.id in self._entries:
                logger.warning("Process '%s' listed more than once, keeping the first entry", entry.id)
                continue
            self._entries[entry.id] = entry

    @staticmethod
    def _coerce(item: Any) -> ProcessDescription:
        if isinstance(item, ProcessDescription):
            return item
        return ProcessDescription.from_dict(item)

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        session: Optional[Any] = None,
        timeout: float = 30,
    ) -> "ProcessCatalog":
        """Fetch a process listing and build a catalog from it."""
        http = session or requests
        logger.debug("Fetching process catalog from %s", url)
        response = http.get(url, timeout=timeout)
        response.raise_for_status()
        return cls(response.json())

    @classmethod
    def from_version(
        cls,
        version: Optional[str] = None,
        *,
        session: Optional[Any] = None,
    ) -> "ProcessCatalog":
        """Load the processes of the public registry, the latest if ``version`` is None."""
        if isinstance(version, str):
            url = f"{PROCESS_REGISTRY_URL}/{version}/processes.json"
        else:
            url = f"{PROCESS_REGISTRY_URL}/processes.json"
        return cls.from_url(url, session=session)

    def get(self, process_id: str) -> Optional[ProcessDescription]:
        return self._entries.get(process_id)

    def supports(self, process_id: str) -> bool:
        return process_id in self._entries

    def ids(self) -> List[str]:
        return list(self._entries.keys())

    def callback_parameters(self, process_id: str, parameter_name: str) -> List[str]:
        """Names of the parameters a callback bound to ``parameter_name`` receives."""
        process = self._entries.get(process_id)
        if process is None:
            raise CatalogLookupError(f"Process '{process_id}' is not in the catalog")
        param = process.parameter(parameter_name)
        if param is None:
            raise CatalogLookupError(
                f"Process '{process_id}' has no parameter '{parameter_name}'"
            )
        callback_params = param.callback_parameters()
        if callback_params is None:
            return []
        return [p["name"] for p in callback_params if isinstance(p.get("name"), str)]

    def callback_parameter_schemas(
        self, process_id: str, parameter_name: str
    ) -> Dict[str, Any]:
        process = self._entries.get(process_id)
        param = process.parameter(parameter_name) if process is not None else None
        if param is None:
            return {}
        return {
            p["name"]: p.get("schema", {})
            for p in (param.callback_parameters() or [])
            if isinstance(p.get("name"), str)
        }

    def __contains__(self, process_id: object) -> bool:
        return process_id in self._entries

    def __iter__(self) -> Iterator[ProcessDescription]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ProcessCatalog({len(self._entries)} processes)"


__all__ = [
    "CALLBACK_SUBTYPE",
    "CatalogLookupError",
    "InvalidCatalogError",
    "ProcessCatalog",
    "ProcessDescription",
    "ProcessParameter",
]
