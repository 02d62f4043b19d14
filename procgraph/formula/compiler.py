"""Compilation of formula expression trees into process calls."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple, TYPE_CHECKING

from ..core.errors import ProcessGraphError
from ..core.nodes import ProcessNode
from ..core.parameters import Parameter
from .ast import (
    BinaryOp,
    ConstantLiteral,
    Expression,
    FunctionCall,
    Group,
    NumberLiteral,
    ParameterRef,
    UnaryOp,
    Variable,
)
from .parser import parse_formula

if TYPE_CHECKING:
    from ..core.builder import ProcessBuilder

OPERATOR_PROCESSES = {
    "+": "add",
    "-": "subtract",
    "*": "multiply",
    "/": "divide",
    "^": "power",
}


class FormulaError(ProcessGraphError):
    """Raised when a parsed formula cannot be turned into process calls."""


class Formula:
    """An arithmetic formula such as ``2.5 * (($B08 - $B04) / $B02)``.

    The text is parsed on construction, so syntax errors surface before
    any builder is touched.  Inside a callback ``$label`` and bare names
    read from the array the callback receives (``$0`` reads by index),
    ``#name`` references a parameter.  A Formula may be passed wherever
    a callback is expected.
    """

    def __init__(self, formula: str):
        self.formula = formula
        self.tree = parse_formula(formula)

    def generate(self, builder: "ProcessBuilder", *, result: bool = True) -> ProcessNode:
        return FormulaCompiler(builder).compile(self.tree, result=result)

    def __repr__(self) -> str:
        return f"Formula({self.formula!r})"


class FormulaCompiler:
    """Post-order walk emitting one process call per operator."""

    def __init__(self, builder: "ProcessBuilder"):
        self.builder = builder
        self._parameters: Dict[str, Parameter] = {}

    def compile(self, tree: Expression, *, result: bool = True) -> ProcessNode:
        with self.builder.transaction():
            value = self.visit(tree)
            if not isinstance(value, ProcessNode):
                raise FormulaError("Formula must contain at least one operation")
        if result:
            self.builder.set_result(value)
        return value

    def visit(self, tree: Expression) -> Any:
        """Evaluate ``tree`` bottom-up with an explicit stack."""
        values: List[Any] = []
        pending: List[Tuple[Expression, bool]] = [(tree, False)]
        while pending:
            node, ready = pending.pop()
            children = _children(node)
            if children is None:
                values.append(self.visit_leaf(node))
            elif not ready:
                pending.append((node, True))
                pending.extend((child, False) for child in reversed(children))
            else:
                start = len(values) - len(children)
                operands = values[start:]
                del values[start:]
                values.append(self.combine(node, operands))
        return values.pop()

    def visit_leaf(self, node: Expression) -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None:
            raise FormulaError(f"Unsupported expression {type(node).__name__}")
        return method(node)

    def combine(self, node: Expression, operands: List[Any]) -> Any:
        if isinstance(node, Group):
            return operands[0]
        if isinstance(node, UnaryOp):
            operand = operands[0]
            if node.operator == "+":
                return operand
            if isinstance(operand, (int, float)) and not isinstance(operand, bool):
                return -operand
            return self.operator_process("*", -1, operand)
        if isinstance(node, BinaryOp):
            return self.operator_process(node.operator, *operands)
        return self.builder.process(node.name, operands)

    def visit_NumberLiteral(self, node: NumberLiteral) -> Any:
        return node.value

    def visit_ConstantLiteral(self, node: ConstantLiteral) -> Any:
        return node.value

    def visit_ParameterRef(self, node: ParameterRef) -> Parameter:
        scope = self.builder.resolve_callback_scope(node.name)
        if scope is not None:
            return scope.callback_parameter(node.name)
        return self._process_parameter(node.name)

    def visit_Variable(self, node: Variable) -> Any:
        names = self.builder.callback_parameter_names()
        if not names:
            if node.name.isdigit():
                raise FormulaError(
                    f"Array element '{node.name}' can only be accessed inside a callback"
                )
            return self._process_parameter(node.name)
        if node.name in names:
            return self.builder.callback_parameter(node.name)
        data = self._array_parameter(names)
        if data is not None:
            return data[node.name]
        return self.builder.callback_parameter(node.name)

    def operator_process(self, operator: str, left: Any, right: Any) -> ProcessNode:
        process_id = OPERATOR_PROCESSES.get(operator)
        if process_id is None:
            raise FormulaError(f"Operator '{operator}' is not supported")
        spec = self.builder.spec(process_id)
        if spec is None:
            raise FormulaError(
                f"Operator '{operator}' needs the process '{process_id}', "
                "which is not in the catalog"
            )
        if len(spec.parameters) < 2:
            raise FormulaError(
                f"Process '{process_id}' for operator '{operator}' must have at least two parameters"
            )
        return self.builder.process(
            process_id,
            {spec.parameters[0].name: left, spec.parameters[1].name: right},
        )

    def _array_parameter(self, names) -> Optional[Parameter]:
        builder = self.builder
        schemas: Mapping[str, Any] = {}
        if builder.parent_node is not None and builder.parent_parameter is not None:
            schemas = builder.catalog.callback_parameter_schemas(
                builder.parent_node.process_id, builder.parent_parameter
            )
        for name in names:
            if _is_array_schema(schemas.get(name)):
                return builder.callback_parameter(name)
        if "data" in names:
            return builder.callback_parameter("data")
        return None

    def _process_parameter(self, name: str) -> Parameter:
        if name not in self._parameters:
            self._parameters[name] = Parameter(name, schema={})
        return self._parameters[name]


def _children(node: Expression) -> Optional[List[Expression]]:
    if isinstance(node, Group):
        return [node.expression]
    if isinstance(node, UnaryOp):
        return [node.operand]
    if isinstance(node, BinaryOp):
        return [node.left, node.right]
    if isinstance(node, FunctionCall):
        return list(node.args)
    return None


def _is_array_schema(schema: Any) -> bool:
    if isinstance(schema, Mapping):
        declared = schema.get("type")
        return declared == "array" or (isinstance(declared, list) and "array" in declared)
    if isinstance(schema, list):
        return any(_is_array_schema(item) for item in schema)
    return False


__all__ = ["Formula", "FormulaCompiler", "FormulaError", "OPERATOR_PROCESSES"]
