"""Formula evaluation module."""

from .engine import (
    FUNCTION_NAMES,
    FormulaEvaluator,
    check_call,
    compile_expression,
    evaluate,
    extract_variables,
    infer_kind,
    validate_expression,
)
from .parser import BinaryOp, FunctionCall, NumberLiteral, VariableRef
from .tokenizer import Token, TokenType, tokenize

__all__ = [
    "FUNCTION_NAMES",
    "FormulaEvaluator",
    "check_call",
    "compile_expression",
    "evaluate",
    "extract_variables",
    "infer_kind",
    "validate_expression",
    "BinaryOp",
    "FunctionCall",
    "NumberLiteral",
    "VariableRef",
    "Token",
    "TokenType",
    "tokenize",
]
