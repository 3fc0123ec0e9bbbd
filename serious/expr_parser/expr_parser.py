"""
Precedence-climbing recursive descent parser for arithmetic expressions.
Turns lexer tokens into an Expression tree with exact source spans.

Grammar, lowest binding first:

    additive       := multiplicative (("+" | "-") multiplicative)*
    multiplicative := unary (("*" | "/") unary | <implicit "*"> power)*
    unary          := "-" unary | power
    power          := atom ("^" exponent)*
    exponent       := "-" exponent | atom
    atom           := NUMBER | IDENTIFIER | "(" additive ")"

Every binary operation, "^" included, is left-associative.
"""

import logging
from typing import List, Optional

from serious.expr_lexer.expr_lexer import ExprLexer
from serious.system.errors import ErrorType, ExpressionError
from serious.system.models import (
    BinaryOperation, EngineConfig, Expression, Identifier, Negation,
    NumberLiteral, Operation, Token, TokenType,
)

logger = logging.getLogger(__name__)


class ExprParser:
    """
    Parses expression strings into Expression trees.

    Stateless between calls; one instance can be shared freely.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Args:
            config: Parser limits. Defaults to EngineConfig().
        """
        self.config = config if config is not None else EngineConfig()
        self.lexer = ExprLexer()

    def parse_string(self, text: str) -> Expression:
        """
        Tokenizes and parses a complete expression.

        Args:
            text: The expression source.

        Returns:
            The root node; its span covers all consumed tokens.

        Raises:
            ExpressionError: BadParse on the first structural problem, or
                whatever the lexer raises for the text.
            TypeError: If the input is not a string.
        """
        tokens = self.lexer.tokenize(text)
        if not tokens:
            raise ExpressionError(ErrorType.BAD_PARSE, "expected expression", 0, len(text))

        tree = _TokenCursor(tokens, self.config.max_nesting_depth).parse()
        logger.debug(f"Parsed {text!r} into a {tree.kind} node spanning {tree.start}..{tree.end}")
        return tree


class _TokenCursor:
    """Position and nesting state for a single parse."""

    def __init__(self, tokens: List[Token], max_depth: int):
        self.tokens = tokens
        self.position = 0
        self.depth = 0
        self.max_depth = max_depth

    def parse(self) -> Expression:
        tree = self._parse_additive(None)
        leftover = self._peek()
        if leftover is not None:
            if leftover.type is TokenType.CLOSE_PAREN:
                raise _bad_parse("unmatched ')'", leftover)
            raise _bad_parse(f"unexpected '{leftover.text}'", leftover)
        return tree

    # --- Token access ---

    def _peek(self) -> Optional[Token]:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def _advance(self) -> Token:
        token = self.tokens[self.position]
        self.position += 1
        return token

    def _enter(self, token: Token) -> None:
        self.depth += 1
        if self.depth > self.max_depth:
            raise _bad_parse(f"expression is nested too deeply (limit {self.max_depth})", token)

    def _leave(self) -> None:
        self.depth -= 1

    # --- Precedence tiers ---

    def _parse_additive(self, after: Optional[Token]) -> Expression:
        lhs = self._parse_multiplicative(after)
        while True:
            token = self._peek()
            if token is None or not token.is_operator(Operation.ADD, Operation.SUBTRACT):
                return lhs
            self._advance()
            rhs = self._parse_multiplicative(token)
            lhs = _binary(token.operation, lhs, rhs)

    def _parse_multiplicative(self, after: Optional[Token]) -> Expression:
        lhs = self._parse_unary(after)
        while True:
            token = self._peek()
            if token is None:
                return lhs
            if token.is_operator(Operation.MULTIPLY, Operation.DIVIDE):
                self._advance()
                rhs = self._parse_unary(token)
                lhs = _binary(token.operation, lhs, rhs)
            elif token.starts_operand:
                # Implicit multiplication: "2x", "3(4+5)", "(a+1)(a-1)"
                rhs = self._parse_power(None)
                lhs = _binary(Operation.MULTIPLY, lhs, rhs)
            else:
                return lhs

    def _parse_unary(self, after: Optional[Token]) -> Expression:
        token = self._peek()
        if token is None or not token.is_operator(Operation.SUBTRACT):
            return self._parse_power(after)
        self._advance()
        self._enter(token)
        try:
            operand = self._parse_unary(token)
        finally:
            self._leave()
        return Negation(operand=operand, start=token.start, end=operand.end)

    def _parse_power(self, after: Optional[Token]) -> Expression:
        base = self._parse_atom(after)
        while True:
            token = self._peek()
            if token is None or not token.is_operator(Operation.POWER):
                return base
            self._advance()
            exponent = self._parse_exponent(token)
            base = _binary(Operation.POWER, base, exponent)

    def _parse_exponent(self, after: Token) -> Expression:
        token = self._peek()
        if token is None or not token.is_operator(Operation.SUBTRACT):
            return self._parse_atom(after)
        self._advance()
        self._enter(token)
        try:
            operand = self._parse_exponent(token)
        finally:
            self._leave()
        return Negation(operand=operand, start=token.start, end=operand.end)

    def _parse_atom(self, after: Optional[Token]) -> Expression:
        token = self._peek()
        if token is None:
            # Only reachable after an operator; empty input is rejected earlier
            raise _bad_parse(f"expected expression after '{after.text}'", after)

        if token.type is TokenType.NUMBER:
            self._advance()
            return NumberLiteral(value=token.value, start=token.start, end=token.end)
        if token.type is TokenType.IDENTIFIER:
            self._advance()
            return Identifier(name=token.text, start=token.start, end=token.end)
        if token.type is TokenType.OPEN_PAREN:
            return self._parse_parenthesized()
        if token.type is TokenType.CLOSE_PAREN:
            raise _bad_parse("unexpected ')'", token)
        raise _bad_parse(f"unexpected operator '{token.text}'", token)

    def _parse_parenthesized(self) -> Expression:
        open_paren = self._advance()
        first = self._peek()
        if first is None:
            raise _bad_parse("unmatched '('", open_paren)
        if first.type is TokenType.CLOSE_PAREN:
            raise ExpressionError(ErrorType.BAD_PARSE, "empty parentheses", open_paren.start, first.end)

        self._enter(open_paren)
        try:
            inner = self._parse_additive(open_paren)
        finally:
            self._leave()

        close_paren = self._peek()
        if close_paren is None or close_paren.type is not TokenType.CLOSE_PAREN:
            raise _bad_parse("unmatched '('", open_paren)
        self._advance()
        # The node now stands for the whole parenthesized text
        return inner.model_copy(update={"start": open_paren.start, "end": close_paren.end})


def _binary(op: Operation, lhs: Expression, rhs: Expression) -> BinaryOperation:
    return BinaryOperation(op=op, lhs=lhs, rhs=rhs, start=lhs.start, end=rhs.end)


def _bad_parse(message: str, token: Token) -> ExpressionError:
    logger.debug(f"Parse failed at {token.start}..{token.end}: {message}")
    return ExpressionError(ErrorType.BAD_PARSE, message, token.start, token.end)


_DEFAULT_PARSER = ExprParser()


def parse(text: str) -> Expression:
    """Tokenizes and parses `text` with the default configuration."""
    return _DEFAULT_PARSER.parse_string(text)
