"""Recursive-descent parser producing formula expression trees.

Grammar::

    call    := IDENT "(" [ expr ( "," expr )* ] ")"
    expr    := term ( ("+" | "-") term )*
    term    := unary ( ("*" | "/") unary )*
    unary   := ("+" | "-") unary | primary
    primary := NUMBER | IDENT | "(" expr ")"

Arithmetic formulas are a single ``expr``; function formulas are a single
``call`` whose arguments are arithmetic sub-expressions. Unary signs are
folded into ``BinaryOp`` nodes (``-x`` becomes ``0 - x``) so the tree only
holds literals, variable references and binary operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..errors import FormulaSyntaxError
from .tokenizer import Token, TokenType, tokenize

MAX_DEPTH = 50  # Maximum nesting depth of parentheses and unary signs


@dataclass(frozen=True)
class NumberLiteral:
    value: float


@dataclass(frozen=True)
class VariableRef:
    name: str


@dataclass(frozen=True)
class BinaryOp:
    op: str  # one of + - * /
    left: "Expr"
    right: "Expr"


Expr = Union[NumberLiteral, VariableRef, BinaryOp]


@dataclass(frozen=True)
class FunctionCall:
    """Top-level node of a function formula."""

    name: str  # lower-cased
    args: tuple[Expr, ...]


class Parser:
    """Parse a token list into an expression tree."""

    def __init__(self, tokens: list[Token]):
        self._tokens = tokens
        self._pos = 0
        self._depth = 0

    @property
    def _current(self) -> Token:
        return self._tokens[self._pos]

    def _advance(self) -> Token:
        token = self._tokens[self._pos]
        if token.type != TokenType.EOF:
            self._pos += 1
        return token

    def _expect(self, token_type: TokenType, what: str) -> Token:
        token = self._current
        if token.type != token_type:
            raise FormulaSyntaxError(f"Expected {what}, got {_describe(token)}", token.position)
        return self._advance()

    def _expect_end(self) -> None:
        token = self._current
        if token.type != TokenType.EOF:
            raise FormulaSyntaxError(f"Unexpected {_describe(token)}", token.position)

    def parse_expression(self) -> Expr:
        """Parse a complete arithmetic expression."""
        node = self._expr()
        self._expect_end()
        return node

    def parse_call(self) -> FunctionCall:
        """Parse a complete function call expression."""
        name_token = self._expect(TokenType.IDENT, "function name")
        self._expect(TokenType.LPAREN, "'('")

        args: list[Expr] = []
        if self._current.type != TokenType.RPAREN:
            args.append(self._expr())
            while self._current.type == TokenType.COMMA:
                self._advance()
                args.append(self._expr())

        self._expect(TokenType.RPAREN, "')'")
        self._expect_end()
        return FunctionCall(name=name_token.text.lower(), args=tuple(args))

    def _expr(self) -> Expr:
        node = self._term()
        while self._current.type == TokenType.OPERATOR and self._current.text in "+-":
            op = self._advance().text
            node = BinaryOp(op, node, self._term())
        return node

    def _term(self) -> Expr:
        node = self._unary()
        while self._current.type == TokenType.OPERATOR and self._current.text in "*/":
            op = self._advance().text
            node = BinaryOp(op, node, self._unary())
        return node

    def _unary(self) -> Expr:
        token = self._current
        if token.type == TokenType.OPERATOR and token.text in "+-":
            self._advance()
            with _Nesting(self, token):
                operand = self._unary()
            if token.text == "+":
                return operand
            return BinaryOp("-", NumberLiteral(0.0), operand)
        return self._primary()

    def _primary(self) -> Expr:
        token = self._current

        if token.type == TokenType.NUMBER:
            self._advance()
            return NumberLiteral(token.value)

        if token.type == TokenType.IDENT:
            self._advance()
            if self._current.type == TokenType.LPAREN:
                raise FormulaSyntaxError(
                    f"Function calls are not allowed here: {token.text}", token.position
                )
            return VariableRef(token.text)

        if token.type == TokenType.LPAREN:
            self._advance()
            with _Nesting(self, token):
                node = self._expr()
            self._expect(TokenType.RPAREN, "')'")
            return node

        raise FormulaSyntaxError(f"Unexpected {_describe(token)}", token.position)


class _Nesting:
    """Track nesting depth while parsing a sub-expression."""

    def __init__(self, parser: Parser, token: Token):
        self._parser = parser
        self._token = token

    def __enter__(self) -> None:
        self._parser._depth += 1
        if self._parser._depth > MAX_DEPTH:
            raise FormulaSyntaxError(
                "Formula is too complex (max depth exceeded)", self._token.position
            )

    def __exit__(self, *exc_info) -> None:
        self._parser._depth -= 1


def _describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of expression"
    return f"{token.type.value} {token.text!r}"


def parse_arithmetic(expression: str) -> Expr:
    """Parse an arithmetic formula into an expression tree.

    Raises:
        FormulaSyntaxError: If the expression is not valid arithmetic
    """
    return Parser(tokenize(expression)).parse_expression()


def parse_function_call(expression: str) -> FunctionCall:
    """Parse a function formula of the form ``name(arg, ...)``.

    Raises:
        FormulaSyntaxError: If the expression is not a single function call
    """
    return Parser(tokenize(expression)).parse_call()


def iter_variables(node: Expr | FunctionCall):
    """Yield variable names referenced by a tree, left to right."""
    # Operator chains build left-deep trees, so walk with an explicit stack
    stack: list[Expr] = list(reversed(node.args)) if isinstance(node, FunctionCall) else [node]
    while stack:
        current = stack.pop()
        if isinstance(current, VariableRef):
            yield current.name
        elif isinstance(current, BinaryOp):
            stack.append(current.right)
            stack.append(current.left)
