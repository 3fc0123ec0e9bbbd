"""
Splits expression text into position-annotated tokens for the parser.
"""

import logging
import math
from typing import List

from serious.system.errors import ErrorType, ExpressionError
from serious.system.models import Operation, Token, TokenType

logger = logging.getLogger(__name__)

_WHITESPACE = frozenset(" \t\n\r\f\v")
_NUMBER_CHARS = frozenset("0123456789.")
_LETTERS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz")
_OPERATOR_SYMBOLS = frozenset(op.symbol for op in Operation)
_PARENS = {"(": TokenType.OPEN_PAREN, ")": TokenType.CLOSE_PAREN}


class ExprLexer:
    """
    Converts expression text into an ordered list of Tokens.

    Numbers are maximal runs of digits and '.', identifiers are single ASCII
    letters, and operators and parentheses are single characters. ASCII
    whitespace separates tokens and is dropped.
    """

    def tokenize(self, text: str) -> List[Token]:
        """
        Tokenizes a complete expression string.

        Args:
            text: The expression source.

        Returns:
            Tokens in source order. Empty when `text` holds only whitespace.

        Raises:
            ExpressionError: BadParse for an unrecognized character or a
                malformed number, Overflow for a number too large for a float.
            TypeError: If the input is not a string.
        """
        if not isinstance(text, str):
            raise TypeError("Input must be a string.")

        tokens: List[Token] = []
        index = 0
        length = len(text)
        while index < length:
            char = text[index]
            if char in _WHITESPACE:
                index += 1
                continue

            if char in _NUMBER_CHARS:
                end = index
                while end < length and text[end] in _NUMBER_CHARS:
                    end += 1
                tokens.append(self._number_token(text[index:end], index, end))
                index = end
                continue

            if char in _LETTERS:
                token_type = TokenType.IDENTIFIER
            elif char in _OPERATOR_SYMBOLS:
                token_type = TokenType.OPERATOR
            elif char in _PARENS:
                token_type = _PARENS[char]
            else:
                logger.debug(f"Invalid character {char!r} at offset {index} in {text!r}")
                raise ExpressionError(ErrorType.BAD_PARSE, f"invalid character {char!r}", index, index + 1)

            tokens.append(Token(type=token_type, text=char, start=index, end=index + 1))
            index += 1

        logger.debug(f"Tokenized {text!r} into {len(tokens)} tokens")
        return tokens

    def _number_token(self, literal: str, start: int, end: int) -> Token:
        if literal == "." or literal.count(".") > 1:
            raise ExpressionError(ErrorType.BAD_PARSE, f"invalid number literal '{literal}'", start, end)
        value = float(literal)
        if math.isinf(value):
            raise ExpressionError(ErrorType.OVERFLOW, "number too large to fit in a 64-bit float", start, end)
        return Token(type=TokenType.NUMBER, text=literal, start=start, end=end, value=value)


_DEFAULT_LEXER = ExprLexer()


def lex(text: str) -> List[Token]:
    """Tokenizes `text` with a shared ExprLexer."""
    return _DEFAULT_LEXER.tokenize(text)
