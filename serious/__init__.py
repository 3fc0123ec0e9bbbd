"""
serious: concise mathematical expressions evaluated against bound variables.

- Numbers are 64-bit floats; results that are infinite or NaN are errors.
- Variables are single letters `[A-Za-z]`.
- Multiplication is implicit where an operator is omitted: `2x`, `3(a+b)`.
- All operations are infix binary except unary minus, and all are
  left-associative unless parentheses say otherwise:

    ^      power      precedence 2
    * /    multiply   precedence 1
    + -    add        precedence 0

Example:

    from serious import create_context, interpret

    context = create_context(x=12.34, y=9999.0)
    interpret("34.2x + y^2(-2x^3 + 1)/5.2", context)
"""

__version__ = "0.1.0"

from serious.expr_evaluator.expr_context import Context, create_context
from serious.expr_evaluator.expr_evaluator import ExprEvaluator, interpret, interpret_tree
from serious.expr_lexer.expr_lexer import ExprLexer, lex
from serious.expr_parser.expr_parser import ExprParser, parse
from serious.system.errors import ErrorType, ExpressionError
from serious.system.models import (
    BinaryOperation, EngineConfig, Expression, ExpressionNode, Identifier,
    Negation, NumberLiteral, Operation, Token, TokenType,
)

__all__ = [
    "BinaryOperation",
    "Context",
    "EngineConfig",
    "ErrorType",
    "ExprEvaluator",
    "ExprLexer",
    "ExprParser",
    "Expression",
    "ExpressionError",
    "ExpressionNode",
    "Identifier",
    "Negation",
    "NumberLiteral",
    "Operation",
    "Token",
    "TokenType",
    "create_context",
    "interpret",
    "interpret_tree",
    "lex",
    "parse",
]
