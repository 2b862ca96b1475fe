"""Tokenizer for KPI formula expressions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from ..errors import FormulaSyntaxError


class TokenType(str, Enum):
    """Token categories of the formula grammar."""

    NUMBER = "number"
    IDENT = "ident"
    OPERATOR = "operator"
    LPAREN = "lparen"
    RPAREN = "rparen"
    COMMA = "comma"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    """A lexical token with its offset in the expression."""

    type: TokenType
    text: str
    position: int

    @property
    def value(self) -> float:
        """Numeric value of a NUMBER token."""
        return float(self.text)


MAX_EXPRESSION_LENGTH = 10000

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<ws>\s+)
    | (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
    | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<operator>[+\-*/])
    | (?P<lparen>\()
    | (?P<rparen>\))
    | (?P<comma>,)
    """,
    re.VERBOSE,
)

_GROUP_TYPES = {
    "number": TokenType.NUMBER,
    "ident": TokenType.IDENT,
    "operator": TokenType.OPERATOR,
    "lparen": TokenType.LPAREN,
    "rparen": TokenType.RPAREN,
    "comma": TokenType.COMMA,
}


def tokenize(expression: str) -> list[Token]:
    """Split an expression into tokens.

    The returned list always ends with an EOF token.

    Raises:
        FormulaSyntaxError: On characters outside the formula grammar
    """
    if len(expression) > MAX_EXPRESSION_LENGTH:
        raise FormulaSyntaxError(f"Expression too long (max {MAX_EXPRESSION_LENGTH} chars)")

    tokens: list[Token] = []
    pos = 0
    while pos < len(expression):
        match = _TOKEN_PATTERN.match(expression, pos)
        if match is None:
            raise FormulaSyntaxError(f"Unexpected character {expression[pos]!r}", pos)
        kind = match.lastgroup
        if kind != "ws":
            tokens.append(Token(_GROUP_TYPES[kind], match.group(), pos))
        pos = match.end()

    tokens.append(Token(TokenType.EOF, "", len(expression)))
    return tokens
