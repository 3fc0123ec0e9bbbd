"""Tokenizer: expression text to position-annotated tokens."""

from .expr_lexer import ExprLexer, lex

__all__ = ["ExprLexer", "lex"]
