"""Parser: tokens to an Expression tree."""

from .expr_parser import ExprParser, parse

__all__ = ["ExprParser", "parse"]
