"""Safe formula evaluation over parsed expression trees."""

from __future__ import annotations

import logging
import math
import operator
from functools import lru_cache
from typing import Any, Callable, Mapping

from ..errors import (
    ArityError,
    DivisionByZeroError,
    FormulaError,
    FormulaSyntaxError,
    InvalidVariableTypeError,
    MissingVariableError,
    UnsupportedFunctionError,
)
from ..models.formula import Formula, FormulaKind
from .parser import (
    Expr,
    FunctionCall,
    NumberLiteral,
    VariableRef,
    parse_arithmetic,
    parse_function_call,
)
from .tokenizer import TokenType, tokenize

logger = logging.getLogger(__name__)


# Allowed binary operators
SAFE_BINARY_OPS: dict[str, Callable[[float, float], float]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}


def _sum(args: list[float]) -> float:
    return math.fsum(args)


def _average(args: list[float]) -> float:
    return math.fsum(args) / len(args)


def _count(args: list[float]) -> float:
    return float(len(args))


def _percentage(args: list[float]) -> float:
    value, total = args
    if total == 0:
        raise DivisionByZeroError("Cannot calculate percentage with zero total")
    return value / total * 100


# Function vocabulary: name -> (implementation, min args, max args or None)
SAFE_FUNCTIONS: dict[str, tuple[Callable[[list[float]], float], int, int | None]] = {
    "sum": (_sum, 0, None),
    "average": (_average, 1, None),
    "avg": (_average, 1, None),
    "min": (min, 1, None),
    "max": (max, 1, None),
    "count": (_count, 0, None),
    "percentage": (_percentage, 2, 2),
}

FUNCTION_NAMES = frozenset(SAFE_FUNCTIONS)


@lru_cache(maxsize=512)
def compile_expression(kind: FormulaKind, expression: str) -> Expr | FunctionCall:
    """Parse formula text into an expression tree (memoised).

    Raises:
        FormulaSyntaxError: If the text does not match the grammar of ``kind``
    """
    if kind == FormulaKind.FUNCTION:
        return parse_function_call(expression)
    return parse_arithmetic(expression)


def check_context(variables: list[str], context: Mapping[str, Any]) -> dict[str, float]:
    """Verify every variable has a finite numeric value.

    Returns:
        Mapping of the declared variables to float values

    Raises:
        MissingVariableError: If a variable is absent from the context
        InvalidVariableTypeError: If a value is not a finite int or float
    """
    values: dict[str, float] = {}
    for name in variables:
        if name not in context:
            raise MissingVariableError(name)
        value = context[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidVariableTypeError(name, value)
        if not math.isfinite(value):
            raise InvalidVariableTypeError(name, value)
        values[name] = float(value)
    return values


def _apply(op: str, left: float, right: float) -> float:
    if op == "/" and right == 0:
        raise DivisionByZeroError("Division by zero")
    return SAFE_BINARY_OPS[op](left, right)


def _eval_expr(node: Expr, values: Mapping[str, float]) -> float:
    """Evaluate an arithmetic tree (post-order, without recursion)."""
    stack: list[tuple[Expr, bool]] = [(node, False)]
    results: list[float] = []

    while stack:
        current, expanded = stack.pop()
        if isinstance(current, NumberLiteral):
            results.append(current.value)
        elif isinstance(current, VariableRef):
            if current.name not in values:
                raise FormulaSyntaxError(f"Unknown variable: {current.name}")
            results.append(values[current.name])
        elif expanded:
            right = results.pop()
            left = results.pop()
            results.append(_apply(current.op, left, right))
        else:
            stack.append((current, True))
            stack.append((current.right, False))
            stack.append((current.left, False))

    return results[0]


def check_call(call: FunctionCall) -> None:
    """Verify a call names a supported function with an accepted argument count.

    Raises:
        UnsupportedFunctionError: If the function is outside the vocabulary
        ArityError: If the argument count is out of range
    """
    if call.name not in SAFE_FUNCTIONS:
        raise UnsupportedFunctionError(call.name)

    _, min_args, max_args = SAFE_FUNCTIONS[call.name]
    count = len(call.args)
    if count < min_args:
        raise ArityError(
            call.name, f"Function {call.name} requires at least {min_args} argument(s), got {count}"
        )
    if max_args is not None and count > max_args:
        raise ArityError(
            call.name, f"Function {call.name} accepts at most {max_args} argument(s), got {count}"
        )


def _eval_call(call: FunctionCall, values: Mapping[str, float]) -> float:
    check_call(call)
    func = SAFE_FUNCTIONS[call.name][0]
    args = [_eval_expr(arg, values) for arg in call.args]
    return float(func(args))


def _compute(tree: Expr | FunctionCall, values: Mapping[str, float]) -> float:
    if isinstance(tree, FunctionCall):
        result = _eval_call(tree, values)
    else:
        result = _eval_expr(tree, values)

    if not math.isfinite(result):
        raise FormulaError(f"Formula result is not a finite number: {result}")
    return result


class FormulaEvaluator:
    """Evaluate a KPI formula without executing any code.

    The formula text is tokenized and parsed once; the tree is then
    evaluated against as many contexts as needed.

    Example:
        evaluator = FormulaEvaluator(Formula(
            kind=FormulaKind.ARITHMETIC,
            expression="(budget - actual_cost) / budget * 100",
            variables=["budget", "actual_cost"],
        ))
        result = evaluator.evaluate({"budget": 150000, "actual_cost": 142000})
    """

    def __init__(self, formula: Formula):
        """Initialize with a formula.

        Raises:
            FormulaSyntaxError: If the expression does not parse
        """
        self.formula = formula
        self._tree = compile_expression(formula.kind, formula.expression)

    def evaluate(self, context: Mapping[str, Any]) -> float:
        """Evaluate the formula with the given variable values.

        Raises:
            FormulaError: If variables are missing or evaluation fails
        """
        values = check_context(self.formula.variables, context)
        return _compute(self._tree, values)


def evaluate(formula: Formula, context: Mapping[str, Any]) -> float:
    """Evaluate a formula against a variable binding context.

    The context is checked before the expression is parsed or computed.

    Raises:
        MissingVariableError: If a declared variable is missing from the context
        InvalidVariableTypeError: If a declared variable is not a finite number
        DivisionByZeroError: On division by zero or a zero percentage total
        UnsupportedFunctionError: On a function outside the vocabulary
        ArityError: On a wrong number of function arguments
        FormulaSyntaxError: On text outside the grammar or undeclared identifiers
    """
    values = check_context(formula.variables, context)
    tree = compile_expression(formula.kind, formula.expression)
    result = _compute(tree, values)
    logger.debug(f"Evaluated {formula.kind.value} formula {formula.expression!r} = {result}")
    return result


def infer_kind(expression: str) -> FormulaKind:
    """Guess the formula kind from its text.

    An expression starting with ``name(`` is a function formula; anything
    else is arithmetic.
    """
    tokens = tokenize(expression)
    if (
        len(tokens) >= 2
        and tokens[0].type == TokenType.IDENT
        and tokens[1].type == TokenType.LPAREN
    ):
        return FormulaKind.FUNCTION
    return FormulaKind.ARITHMETIC


def extract_variables(expression: str) -> list[str]:
    """Get the distinct variable identifiers of an expression.

    Function names (case-insensitive) and numeric literals are excluded.
    Identifiers are returned in order of first appearance.

    Raises:
        FormulaSyntaxError: On characters outside the formula grammar
    """
    seen: dict[str, None] = {}
    for token in tokenize(expression):
        if token.type == TokenType.IDENT and token.text.lower() not in FUNCTION_NAMES:
            seen.setdefault(token.text, None)
    return list(seen)


def validate_expression(
    expression: str,
    variables: list[str],
    kind: FormulaKind | None = None,
) -> bool:
    """Check that an expression evaluates with every variable bound to 1.0.

    Returns False instead of raising on any formula error.
    """
    try:
        formula = Formula(
            kind=kind or infer_kind(expression),
            expression=expression,
            variables=list(dict.fromkeys(variables)),
        )
        evaluate(formula, {name: 1.0 for name in formula.variables})
    except (FormulaError, ValueError) as e:
        logger.debug(f"Expression {expression!r} failed validation: {e}")
        return False
    return True
