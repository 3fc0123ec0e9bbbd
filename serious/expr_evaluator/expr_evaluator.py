"""
Expression evaluator. Computes the value of an Expression tree against a
Context of bound identifiers, reporting domain errors at the exact
sub-expression that caused them.
"""

import logging
import math
import operator
from typing import Any, Callable, Dict, List, Optional, Tuple

from serious.expr_evaluator.expr_context import Context
from serious.expr_parser.expr_parser import ExprParser
from serious.system.errors import ErrorType, ExpressionError
from serious.system.models import (
    BinaryOperation, EngineConfig, Expression, ExpressionNode, Identifier,
    Negation, NumberLiteral, Operation,
)

logger = logging.getLogger(__name__)


def _power(base: float, exponent: float) -> float:
    """C pow() semantics: infinities and NaN come back as values, not exceptions."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return math.inf
    except ValueError:
        # math.pow raises where C pow returns a pole (0^-n) or NaN
        if base == 0.0:
            return math.inf
        return math.nan


_OPERATIONS: Dict[Operation, Callable[[float, float], float]] = {
    Operation.ADD: operator.add,
    Operation.SUBTRACT: operator.sub,
    Operation.MULTIPLY: operator.mul,
    Operation.DIVIDE: operator.truediv,
    Operation.POWER: _power,
}


class ExprEvaluator:
    """
    Evaluates expressions from text or from pre-built trees.

    Both entry points share one evaluation routine, so a tree from
    `parse(text)` evaluates exactly as `text` does.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Args:
            config: Limits for the internal parser. Defaults to EngineConfig().
        """
        self.config = config if config is not None else EngineConfig()
        self.parser = ExprParser(self.config)

    def evaluate_string(self, text: str, context: Any = None) -> float:
        """
        Parses and evaluates an expression string.

        Args:
            text: The expression source.
            context: A Context, a mapping of identifiers to numbers, or None.

        Returns:
            The finite value of the expression.

        Raises:
            ExpressionError: The first tokenize, parse or evaluation failure.
        """
        logger.debug(f"Evaluating expression string: {text!r}")
        tree = self.parser.parse_string(text)
        return self.evaluate_tree(tree, context)

    def evaluate_tree(self, tree: Expression, context: Any = None) -> float:
        """
        Evaluates an already-built expression tree.

        Args:
            tree: Root node, e.g. from `parse`. Reusable across contexts.
            context: A Context, a mapping of identifiers to numbers, or None.

        Returns:
            The finite value of the expression.

        Raises:
            ExpressionError: UnboundIdentifier, UndefinedOperation or Overflow
                at the first failing node, visiting left operands first.
            TypeError: If `tree` is not an expression node.
        """
        if not isinstance(tree, ExpressionNode):
            raise TypeError(f"Expected an expression tree, got {type(tree).__name__}.")
        bound = Context.coerce(context)
        result = self._eval(tree, bound)
        logger.debug(f"Evaluated tree at {tree.start}..{tree.end} -> {result!r}")
        return result

    def _eval(self, tree: Expression, context: Context) -> float:
        """
        Post-order walk with an explicit stack. Left-nested chains such as
        1+1+...+1 are as deep as they are long, so recursion is avoided.
        """
        values: List[float] = []
        pending: List[Tuple[Expression, bool]] = [(tree, False)]
        while pending:
            node, operands_done = pending.pop()

            if isinstance(node, NumberLiteral):
                values.append(node.value)
            elif isinstance(node, Identifier):
                values.append(self._lookup(node, context))
            elif isinstance(node, Negation):
                if operands_done:
                    values.append(-values.pop())
                else:
                    pending.append((node, True))
                    pending.append((node.operand, False))
            elif isinstance(node, BinaryOperation):
                if operands_done:
                    rhs = values.pop()
                    lhs = values.pop()
                    values.append(self._apply(node, lhs, rhs))
                else:
                    # Pushed last so the left operand is evaluated first
                    pending.append((node, True))
                    pending.append((node.rhs, False))
                    pending.append((node.lhs, False))
            else:
                raise TypeError(f"Unknown expression node type: {type(node).__name__}")

        return values.pop()

    def _lookup(self, node: Identifier, context: Context) -> float:
        try:
            return context.lookup(node.name)
        except NameError as e:
            logger.debug(f"Unbound identifier {node.name!r} at {node.start}..{node.end}")
            raise ExpressionError(ErrorType.UNBOUND_IDENTIFIER, str(e), node.start, node.end) from e

    def _apply(self, node: BinaryOperation, lhs: float, rhs: float) -> float:
        if node.op is Operation.DIVIDE and rhs == 0.0:
            raise self._domain_error(
                ErrorType.UNDEFINED_OPERATION, f"{_describe(node.op, lhs, rhs)} is undefined", node
            )

        result = _OPERATIONS[node.op](lhs, rhs)
        if math.isnan(result):
            raise self._domain_error(
                ErrorType.UNDEFINED_OPERATION, f"{_describe(node.op, lhs, rhs)} is undefined", node
            )
        if math.isinf(result):
            raise self._domain_error(
                ErrorType.OVERFLOW, f"{_describe(node.op, lhs, rhs)} overflows a 64-bit float", node
            )
        return result

    def _domain_error(self, error_type: ErrorType, message: str, node: BinaryOperation) -> ExpressionError:
        logger.debug(f"{error_type.value} at {node.start}..{node.end}: {message}")
        return ExpressionError(error_type, message, node.start, node.end)


def _format_operand(value: float, parenthesize_negative: bool) -> str:
    if value.is_integer() and abs(value) < 1e16:
        text = str(int(value))
    else:
        text = repr(value)
    if parenthesize_negative and value < 0:
        return f"({text})"
    return text


def _describe(op: Operation, lhs: float, rhs: float) -> str:
    """Writes out an operation on concrete values, e.g. '4.3/0' or '(-8)^0.5'."""
    left = _format_operand(lhs, parenthesize_negative=op is Operation.POWER)
    right = _format_operand(rhs, parenthesize_negative=True)
    return f"{left}{op.symbol}{right}"


_DEFAULT_EVALUATOR = ExprEvaluator()


def interpret(text: str, context: Any = None) -> float:
    """Parses and evaluates `text` against `context` with the default configuration."""
    return _DEFAULT_EVALUATOR.evaluate_string(text, context)


def interpret_tree(tree: Expression, context: Any = None) -> float:
    """Evaluates a pre-built tree against `context`."""
    return _DEFAULT_EVALUATOR.evaluate_tree(tree, context)
