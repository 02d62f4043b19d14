"""Public entrypoints for arithmetic formulas."""

from __future__ import annotations

from .compiler import Formula, FormulaCompiler, FormulaError
from .parser import FormulaSyntaxError, parse_formula

__all__ = [
    "Formula",
    "FormulaCompiler",
    "FormulaError",
    "FormulaSyntaxError",
    "parse_formula",
]
