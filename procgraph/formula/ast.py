"""Expression tree produced by the formula parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Union


@dataclass
class NumberLiteral:
    value: Union[int, float]
    position: int


@dataclass
class ConstantLiteral:
    value: Any
    position: int


@dataclass
class Variable:
    name: str
    explicit: bool
    position: int


@dataclass
class ParameterRef:
    name: str
    position: int


@dataclass
class Group:
    expression: "Expression"
    position: int


@dataclass
class UnaryOp:
    operator: str
    operand: "Expression"
    position: int


@dataclass
class BinaryOp:
    operator: str
    left: "Expression"
    right: "Expression"
    position: int


@dataclass
class FunctionCall:
    name: str
    args: List["Expression"] = field(default_factory=list)
    position: int = 0


Expression = Union[
    NumberLiteral,
    ConstantLiteral,
    Variable,
    ParameterRef,
    Group,
    UnaryOp,
    BinaryOp,
    FunctionCall,
]


__all__ = [
    "BinaryOp",
    "ConstantLiteral",
    "Expression",
    "FunctionCall",
    "Group",
    "NumberLiteral",
    "ParameterRef",
    "UnaryOp",
    "Variable",
]
