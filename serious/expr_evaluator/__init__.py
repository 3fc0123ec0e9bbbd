"""Evaluator: Expression trees and Contexts to values."""

from .expr_context import Context, create_context
from .expr_evaluator import ExprEvaluator, interpret, interpret_tree

__all__ = ["Context", "create_context", "ExprEvaluator", "interpret", "interpret_tree"]
