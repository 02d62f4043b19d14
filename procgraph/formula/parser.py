"""Parser for infix arithmetic formulas."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import re
from typing import Iterator, List, Optional, Union

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

CONSTANTS = {"true": True, "false": False, "null": None}

# Parentheses, calls, unary signs and exponents each open one level.
MAX_NESTING = 100

_TOKEN_PATTERN = re.compile(
    r"""
      (?P<WS>\s+)
    | (?P<NUMBER>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    | (?P<LABEL>\$[A-Za-z0-9_]+)
    | (?P<PARAM>\#[A-Za-z0-9_]+)
    | (?P<IDENT>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<OPERATOR>[-+*/^])
    | (?P<LPAREN>\()
    | (?P<RPAREN>\))
    | (?P<COMMA>,)
    """,
    re.VERBOSE,
)


class FormulaSyntaxError(SyntaxError):
    """Raised when a formula cannot be parsed."""

    def __init__(self, message: str, *, token: Optional[str] = None, position: Optional[int] = None):
        if position is not None:
            message = f"{message} (position {position})"
        super().__init__(message)
        self.token = token
        self.position = position


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    length = len(text)
    while pos < length:
        match = _TOKEN_PATTERN.match(text, pos)
        if match is None:
            char = text[pos]
            if char in "$#":
                raise FormulaSyntaxError(f"Expected a name after '{char}'", token=char, position=pos)
            raise FormulaSyntaxError(f"Unknown token '{char}'", token=char, position=pos)
        kind = match.lastgroup
        if kind != "WS":
            tokens.append(Token(kind, match.group(), pos))
        pos = match.end()
    tokens.append(Token("END", "", length))
    return tokens


class _FormulaParser:
    """Recursive descent parser.

    Precedence from loosest to tightest: ``+ -``, ``* /``, unary ``-``,
    ``^`` (right associative), then numbers, names, calls and groups.
    """

    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.index = 0
        self.depth = 0

    def parse(self) -> Expression:
        if self._current.kind == "END":
            raise FormulaSyntaxError("Empty formula", token="", position=0)
        expression = self._parse_additive()
        if self._current.kind != "END":
            raise self._unexpected()
        return expression

    def _parse_additive(self) -> Expression:
        left = self._parse_multiplicative()
        while self._at_operator("+-"):
            token = self._advance()
            right = self._parse_multiplicative()
            left = BinaryOp(token.text, left, right, token.position)
        return left

    def _parse_multiplicative(self) -> Expression:
        left = self._parse_unary()
        while self._at_operator("*/"):
            token = self._advance()
            right = self._parse_unary()
            left = BinaryOp(token.text, left, right, token.position)
        return left

    def _parse_unary(self) -> Expression:
        if self._at_operator("+-"):
            token = self._advance()
            with self._nested(token):
                return UnaryOp(token.text, self._parse_unary(), token.position)
        return self._parse_power()

    def _parse_power(self) -> Expression:
        base = self._parse_primary()
        if self._at_operator("^"):
            token = self._advance()
            with self._nested(token):
                return BinaryOp(token.text, base, self._parse_unary(), token.position)
        return base

    def _parse_primary(self) -> Expression:
        token = self._current
        if token.kind == "NUMBER":
            self._advance()
            return NumberLiteral(_to_number(token.text), token.position)
        if token.kind == "LABEL":
            self._advance()
            return Variable(token.text[1:], True, token.position)
        if token.kind == "PARAM":
            self._advance()
            return ParameterRef(token.text[1:], token.position)
        if token.kind == "IDENT":
            self._advance()
            if self._current.kind == "LPAREN":
                return self._parse_call(token)
            if token.text in CONSTANTS:
                return ConstantLiteral(CONSTANTS[token.text], token.position)
            return Variable(token.text, False, token.position)
        if token.kind == "LPAREN":
            self._advance()
            with self._nested(token):
                expression = self._parse_additive()
            self._expect("RPAREN", "')'")
            return Group(expression, token.position)
        raise self._unexpected()

    def _parse_call(self, name: Token) -> FunctionCall:
        self._expect("LPAREN", "'('")
        args: List[Expression] = []
        if self._current.kind != "RPAREN":
            with self._nested(name):
                args.append(self._parse_additive())
                while self._current.kind == "COMMA":
                    self._advance()
                    args.append(self._parse_additive())
        self._expect("RPAREN", "')'")
        return FunctionCall(name.text, args, name.position)

    @contextmanager
    def _nested(self, token: Token) -> Iterator[None]:
        if self.depth >= MAX_NESTING:
            raise FormulaSyntaxError(
                f"Formula is nested deeper than {MAX_NESTING} levels",
                token=token.text,
                position=token.position,
            )
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    @property
    def _current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token.kind != "END":
            self.index += 1
        return token

    def _at_operator(self, operators: str) -> bool:
        token = self._current
        return token.kind == "OPERATOR" and token.text in operators

    def _expect(self, kind: str, label: str) -> Token:
        token = self._current
        if token.kind != kind:
            if token.kind == "END":
                raise FormulaSyntaxError(
                    f"Expected {label} but reached the end of the formula",
                    token="",
                    position=token.position,
                )
            raise FormulaSyntaxError(
                f"Expected {label} but found '{token.text}'",
                token=token.text,
                position=token.position,
            )
        return self._advance()

    def _unexpected(self) -> FormulaSyntaxError:
        token = self._current
        if token.kind == "END":
            return FormulaSyntaxError(
                "Unexpected end of formula", token="", position=token.position
            )
        return FormulaSyntaxError(
            f"Unexpected token '{token.text}'", token=token.text, position=token.position
        )


def _to_number(text: str) -> Union[int, float]:
    if text.isdigit():
        return int(text)
    return float(text)


def parse_formula(text: str) -> Expression:
    if not isinstance(text, str):
        raise TypeError(f"Formula must be a string, got {type(text).__name__}")
    return _FormulaParser(text).parse()


__all__ = ["CONSTANTS", "MAX_NESTING", "FormulaSyntaxError", "Token", "parse_formula", "tokenize"]
