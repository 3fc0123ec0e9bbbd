"""
Error types shared by the lexer, parser and evaluator.
"""

from enum import Enum
from typing import Tuple


class ErrorType(str, Enum):
    """The four kinds of expression failure. Closed set; match on it exhaustively."""
    BAD_PARSE = "BadParse"
    UNBOUND_IDENTIFIER = "UnboundIdentifier"
    UNDEFINED_OPERATION = "UndefinedOperation"
    OVERFLOW = "Overflow"


class ExpressionError(ValueError):
    """
    Raised when an expression cannot be tokenized, parsed or evaluated.
    Inherits from ValueError for general compatibility but carries the
    failure kind and the half-open span of the offending sub-expression.
    """
    def __init__(self, error_type: ErrorType, message: str, start: int, end: int):
        """
        Initializes the ExpressionError.

        Args:
            error_type: Which of the four failure kinds this is.
            message: Human-readable description of the specific failure.
            start: Offset of the first character of the offending span.
            end: Offset one past the last character of the offending span.
        """
        super().__init__(f"{error_type.value}: {message} (at {start}..{end})")
        self.error_type = error_type
        self.message = message
        self.start = start
        self.end = end

    @property
    def span(self) -> Tuple[int, int]:
        return (self.start, self.end)

    def highlight(self, text: str) -> str:
        """
        Renders the source line holding the error with a caret underline.

        Args:
            text: The expression text the error was raised for.

        Returns:
            Two lines: the source line and the underline beneath the span.
        """
        line_start = text.rfind("\n", 0, self.start) + 1
        line_end = text.find("\n", self.start)
        if line_end == -1:
            line_end = len(text)
        line = text[line_start:line_end]
        # Tabs are kept so the carets line up under tab-indented input
        padding = "".join("\t" if ch == "\t" else " " for ch in text[line_start:self.start])
        width = max(1, min(self.end, line_end) - self.start)
        return f"{line}\n{padding}{'^' * width}"

    def __reduce__(self):
        return (self.__class__, (self.error_type, self.message, self.start, self.end))

    def __repr__(self) -> str:
        return (
            f"ExpressionError(error_type={self.error_type.value}, "
            f"message={self.message!r}, start={self.start}, end={self.end})"
        )
