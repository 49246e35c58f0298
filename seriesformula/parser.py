"""Parser and evaluator for series formulas."""

from __future__ import annotations

import math
import operator
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from .lexer import Token, TokenType, tokenize

__all__ = ["FormulaError", "NodeType", "Node", "Parser", "evaluate"]

Series = list[float]

RESERVED_WORDS = frozenset(
    {"CLOSE", "OPEN", "HIGH", "LOW", "MA", "REF", "HHV", "LLV", "SMA", "WMA", "EMA"}
)


class FormulaError(ValueError):
    """Raised when a formula cannot be parsed or evaluated."""


class NodeType(str, Enum):
    """Kinds of node in a parsed expression tree."""

    NUMBER = "NUMBER"
    OPERATOR = "OPERATOR"
    EXPRESSION = "EXPRESSION"
    VARIABLE = "VARIABLE"
    SYMBOL = "SYMBOL"
    FUNCTION = "FUNCTION"


@dataclass
class Node:
    """A node of an expression tree.

    A binary expression holds its left operand, right operand and an
    operator node, in that order, as children.
    """

    type: NodeType
    value: str = ""
    children: list[Node] = field(default_factory=list)
    result: Series | None = None


def _valid_window(series: Series, end: int, period: int) -> Series:
    start = max(0, end - period + 1)
    return [x for x in series[start : end + 1] if not math.isnan(x)]


def _reference(series: Series, offset: int) -> Series:
    return [series[i - offset] if i >= offset else math.nan for i in range(len(series))]


def _moving_average(series: Series, period: int) -> Series:
    averages = []
    for end in range(len(series)):
        window = _valid_window(series, end, period)
        averages.append(sum(window) / len(window) if window else math.nan)
    return averages


def _highest(series: Series, period: int) -> Series:
    return [max(_valid_window(series, end, period), default=math.nan) for end in range(len(series))]


def _lowest(series: Series, period: int) -> Series:
    return [min(_valid_window(series, end, period), default=math.nan) for end in range(len(series))]


# name -> (implementation, whether the period must be positive)
_FUNCTIONS: dict[str, tuple[Callable[[Series, int], Series], bool]] = {
    "MA": (_moving_average, False),
    "REF": (_reference, False),
    "HHV": (_highest, True),
    "LLV": (_lowest, True),
}

_OPERATORS: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}


def _integer_argument(node: Node) -> int | None:
    text = node.value
    if text.isascii() and text.isdigit():
        return int(text)
    return None


class Parser:
    """Parses a token stream of statements and evaluates its assignments."""

    def __init__(self, tokens: Iterable[Token], data: Mapping[str, Sequence[float]]) -> None:
        self._tokens = list(tokens)
        self._pos = 0
        self._data = {name: [float(x) for x in values] for name, values in data.items()}
        self._symbols: dict[str, Series] = {}

    def result(self) -> dict[str, Series]:
        """Return the table of assigned variables."""
        return self._symbols

    def parse_app(self) -> dict[str, Series]:
        """Parse every statement, each terminated by ';', and return the table."""
        while self._peek() is not None:
            self._statement()
            terminator = self._peek()
            if terminator is None or terminator.type is not TokenType.SEMICOLON:
                raise FormulaError("expected ';'")
            self._pos += 1
        return self._symbols

    # token access

    def _peek(self, ahead: int = 0) -> Token | None:
        index = self._pos + ahead
        return self._tokens[index] if index < len(self._tokens) else None

    def _next(self) -> Token:
        token = self._peek()
        if token is None:
            raise FormulaError("no more tokens")
        self._pos += 1
        return token

    # grammar

    def _statement(self) -> None:
        first = self._peek()
        if first is not None and first.type is TokenType.IDENTIFIER:
            second = self._peek(1)
            if second is None:
                raise FormulaError("no more tokens")
            if second.type is TokenType.ASSIGN_OP:
                self._assignment()
                return
        # A bare expression is parsed for syntax but never evaluated.
        self._expression()

    def _assignment(self) -> None:
        name = self._next().value
        if name in RESERVED_WORDS:
            raise FormulaError(f"'{name}' is a reserved word")
        self._next()  # the assignment operator
        self._symbols[name] = self._eval(self._expression())

    def _binary(self, operand: Callable[[], Node], operators: str) -> Node:
        left = operand()
        while True:
            token = self._peek()
            if token is None or token.type is not TokenType.OPERATOR or token.value not in operators:
                return left
            self._pos += 1
            right = operand()
            left = Node(
                NodeType.EXPRESSION,
                children=[left, right, Node(NodeType.OPERATOR, token.value)],
            )

    def _expression(self) -> Node:
        return self._binary(self._term, "+-")

    def _term(self) -> Node:
        return self._binary(self._factor, "*/")

    def _factor(self) -> Node:
        token = self._next()
        if token.type is TokenType.NUMBER:
            return Node(NodeType.NUMBER, token.value)
        if token.type is TokenType.LPAREN:
            inner = self._expression()
            closing = self._peek()
            if closing is None or closing.type is not TokenType.RPAREN:
                raise FormulaError("expected ')'")
            self._pos += 1
            return inner
        if token.type is TokenType.IDENTIFIER:
            following = self._peek()
            if following is None:
                raise FormulaError("no more tokens")
            name = token.value
            if following.type is TokenType.LPAREN:
                return self._function_call(name)
            if name in RESERVED_WORDS:
                return Node(NodeType.VARIABLE, name)
            if name in self._symbols:
                return Node(NodeType.SYMBOL, name, result=self._symbols[name])
            raise FormulaError(f"undefined variable or function: {name}")
        raise FormulaError(f"unexpected token: {token.value}")

    def _function_call(self, name: str) -> Node:
        self._pos += 1  # the opening parenthesis
        node = Node(NodeType.FUNCTION, name)
        while True:
            node.children.append(self._expression())
            separator = self._next()
            if separator.type is TokenType.RPAREN:
                return node
            if separator.value != ",":
                raise FormulaError("expected ',' or ')'")

    # evaluation

    def _series_length(self) -> int:
        return len(next(iter(self._data.values()), []))

    def _eval(self, node: Node) -> Series:
        if node.type is NodeType.NUMBER:
            try:
                number = float(node.value)
            except ValueError:
                raise FormulaError(f"invalid number: {node.value}") from None
            return [number] * self._series_length()
        if node.type in (NodeType.EXPRESSION, NodeType.OPERATOR):
            if len(node.children) != 3:
                raise FormulaError("malformed expression")
            left, right, op = node.children
            return self._apply(op.value, self._eval(left), self._eval(right))
        if node.type is NodeType.VARIABLE:
            if node.value not in self._data:
                raise FormulaError(f"undefined variable: {node.value}")
            return list(self._data[node.value])
        if node.type is NodeType.SYMBOL:
            if node.value not in self._symbols:
                raise FormulaError(f"undefined symbol: {node.value}")
            return list(self._symbols[node.value])
        if node.type is NodeType.FUNCTION:
            return self._call(node)
        raise FormulaError(f"unknown node type: {node.type}")

    def _call(self, node: Node) -> Series:
        name = node.value
        if name not in _FUNCTIONS:
            raise FormulaError(f"undefined function: {name}")
        compute, positive = _FUNCTIONS[name]
        if len(node.children) != 2:
            raise FormulaError(f"{name} requires two arguments")
        series = self._eval(node.children[0])
        count = _integer_argument(node.children[1])
        if count is None or (positive and count <= 0):
            kind = "a positive integer" if positive else "an integer"
            raise FormulaError(f"the second argument of {name} must be {kind}")
        return compute(series, count)

    @staticmethod
    def _apply(op: str, left: Series, right: Series) -> Series:
        if len(left) != len(right):
            raise FormulaError("series length mismatch")
        if op not in _OPERATORS:
            raise FormulaError(f"unsupported operator: {op}")
        if op == "/" and any(x == 0 for x in right):
            raise FormulaError("division by zero")
        func = _OPERATORS[op]
        return [func(a, b) for a, b in zip(left, right)]


def evaluate(expression: str, data: Mapping[str, Sequence[float]]) -> dict[str, Series]:
    """Tokenize, parse and evaluate formula text, returning its assignments."""
    parser = Parser(tokenize(expression), data)
    parser.parse_app()
    return parser.result()