"""Convenience exports for the procgraph package."""

from .core.arguments import NodeReferenceError, SerializationError
from .core.builder import (
    BuildError,
    CallbackError,
    Diagnostic,
    ProcessBuilder,
    UnknownProcessError,
)
from .core.catalog import (
    CatalogLookupError,
    InvalidCatalogError,
    ProcessCatalog,
    ProcessDescription,
    ProcessParameter,
)
from .core.errors import ProcessGraphError
from .core.nodes import ArgumentBindingError, ProcessNode
from .core.parameters import Parameter
from .formula import Formula, FormulaError, FormulaSyntaxError, parse_formula
from .settings import StrictContext, get_strict_state, set_strict_state

__version__ = "0.1.0"

__all__ = [
    "ProcessBuilder",
    "ProcessCatalog",
    "ProcessDescription",
    "ProcessParameter",
    "ProcessNode",
    "Parameter",
    "Formula",
    "Diagnostic",
    "parse_formula",
    "StrictContext",
    "get_strict_state",
    "set_strict_state",
    "ProcessGraphError",
    "InvalidCatalogError",
    "CatalogLookupError",
    "UnknownProcessError",
    "ArgumentBindingError",
    "NodeReferenceError",
    "CallbackError",
    "FormulaError",
    "FormulaSyntaxError",
    "SerializationError",
    "BuildError",
]
