"""Tokenizer for the series formula language."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum

__all__ = ["TokenType", "Token", "LexerError", "Lexer", "tokenize"]


class TokenType(str, Enum):
    """Kinds of token produced by the lexer."""

    NUMBER = "NUMBER"
    OPERATOR = "OPERATOR"
    COMPARISON_OP = "COMPARISON_OP"
    SEMICOLON = "SEMICOLON"
    ASSIGN_OP = "ASSIGN_OP"
    IDENTIFIER = "IDENTIFIER"
    COMMA = "COMMA"
    EOF = "EOF"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"


@dataclass(frozen=True)
class Token:
    """A single lexical token."""

    type: TokenType
    value: str


class LexerError(ValueError):
    """Raised when the input holds a character the language does not allow."""

    def __init__(self, char: str) -> None:
        super().__init__(f"invalid character: {char}")
        self.char = char


# Arithmetic operators; the comma is reported with them as an operator token.
_OPERATORS = frozenset("+-*/,")
_COMPARISON_STARTS = frozenset("<>=!")
_SINGLE = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ";": TokenType.SEMICOLON,
}


def _is_number_char(char: str) -> bool:
    return char.isdecimal() or char == "."


def _is_identifier_char(char: str) -> bool:
    return char.isalpha() or char.isdecimal()


class Lexer:
    """Splits formula text into tokens."""

    def __init__(self, text: str) -> None:
        self._text = text

    def tokenize(self) -> list[Token]:
        """Return every token of the text, or raise LexerError."""
        return list(self._scan())

    def _run_end(self, start: int, accept: Callable[[str], bool]) -> int:
        text = self._text
        pos = start
        while pos < len(text) and accept(text[pos]):
            pos += 1
        return pos

    def _peek(self, pos: int) -> str:
        return self._text[pos] if pos < len(self._text) else ""

    def _scan(self) -> Iterator[Token]:
        text = self._text
        pos = 0
        while pos < len(text):
            char = text[pos]
            if char.isspace():
                pos += 1
            elif _is_number_char(char):
                stop = self._run_end(pos + 1, _is_number_char)
                yield Token(TokenType.NUMBER, text[pos:stop])
                pos = stop
            elif char.isalpha():
                stop = self._run_end(pos + 1, _is_identifier_char)
                yield Token(TokenType.IDENTIFIER, text[pos:stop])
                pos = stop
            elif char in _OPERATORS:
                yield Token(TokenType.OPERATOR, char)
                pos += 1
            elif char in _SINGLE:
                yield Token(_SINGLE[char], char)
                pos += 1
            elif char == ":":
                if self._peek(pos + 1) == "=":
                    yield Token(TokenType.ASSIGN_OP, ":=")
                    pos += 2
                else:
                    yield Token(TokenType.ASSIGN_OP, ":")
                    pos += 1
            elif char in _COMPARISON_STARTS:
                if self._peek(pos + 1) == "=":
                    yield Token(TokenType.COMPARISON_OP, char + "=")
                    pos += 2
                else:
                    yield Token(TokenType.COMPARISON_OP, char)
                    pos += 1
            else:
                raise LexerError(char)


def tokenize(text: str) -> list[Token]:
    """Tokenize formula text."""
    return Lexer(text).tokenize()