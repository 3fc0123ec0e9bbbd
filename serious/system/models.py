"""
Pydantic models shared across the expression pipeline: tokens, the
abstract syntax tree, and engine configuration.
"""

import logging
import os
from enum import Enum
from typing import Annotated, Dict, Mapping, Optional, Tuple, Union, Literal

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, conint, confloat, constr, model_validator

logger = logging.getLogger(__name__)

# --- Scalar Types ---

FiniteFloat = confloat(allow_inf_nan=False)
IdentifierName = constr(pattern=r"^[A-Za-z]$")

DEFAULT_MAX_NESTING_DEPTH = 100
# Each nesting level costs a handful of interpreter frames in the parser
MAX_SUPPORTED_NESTING_DEPTH = 120

MAX_NESTING_DEPTH_ENV_VAR = "SERIOUS_MAX_NESTING_DEPTH"


# --- Operations ---

class Operation(str, Enum):
    """
    Binary operations, keyed by their source symbol.
    All are left-associative; binding strength is given by `precedence`.
    """
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"

    @property
    def precedence(self) -> int:
        return _PRECEDENCE[self]

    @property
    def symbol(self) -> str:
        return self.value


_PRECEDENCE: Dict[Operation, int] = {
    Operation.ADD: 0,
    Operation.SUBTRACT: 0,
    Operation.MULTIPLY: 1,
    Operation.DIVIDE: 1,
    Operation.POWER: 2,
}


# --- Tokens ---

class TokenType(str, Enum):
    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    OPEN_PAREN = "open_paren"
    CLOSE_PAREN = "close_paren"


class Token(BaseModel):
    """
    A classified lexical unit and the half-open span of source text it covers.
    """
    model_config = ConfigDict(frozen=True)

    type: TokenType
    text: str
    start: NonNegativeInt
    end: NonNegativeInt
    value: Optional[float] = None  # Only set for NUMBER tokens

    @property
    def operation(self) -> Optional[Operation]:
        if self.type is TokenType.OPERATOR:
            return Operation(self.text)
        return None

    @property
    def starts_operand(self) -> bool:
        """True for tokens that begin an implicitly multiplied operand."""
        return self.type in (TokenType.NUMBER, TokenType.IDENTIFIER, TokenType.OPEN_PAREN)

    def is_operator(self, *operations: Operation) -> bool:
        return self.type is TokenType.OPERATOR and Operation(self.text) in operations


# --- Abstract Syntax Tree ---

class ExpressionNode(BaseModel):
    """
    Base for every AST node. `start` and `end` give the half-open range of
    source text the node was built from, parentheses included.
    """
    model_config = ConfigDict(frozen=True)

    start: NonNegativeInt
    end: NonNegativeInt

    @property
    def span(self) -> Tuple[int, int]:
        return (self.start, self.end)

    @model_validator(mode='after')
    def check_span_order(self) -> 'ExpressionNode':
        if self.start > self.end:
            raise ValueError(f"span start {self.start} is after span end {self.end}")
        return self

    def _check_contains(self, child: 'ExpressionNode', role: str) -> None:
        if child.start < self.start or child.end > self.end:
            raise ValueError(
                f"{role} span {child.start}..{child.end} lies outside node span {self.start}..{self.end}"
            )


class NumberLiteral(ExpressionNode):
    kind: Literal['number'] = 'number'
    value: FiniteFloat


class Identifier(ExpressionNode):
    kind: Literal['identifier'] = 'identifier'
    name: IdentifierName


class Negation(ExpressionNode):
    """Unary minus applied to `operand`."""
    kind: Literal['negation'] = 'negation'
    operand: 'Expression'

    @model_validator(mode='after')
    def check_operand_span(self) -> 'Negation':
        self._check_contains(self.operand, "operand")
        return self


class BinaryOperation(ExpressionNode):
    kind: Literal['binary'] = 'binary'
    op: Operation
    lhs: 'Expression'
    rhs: 'Expression'

    @model_validator(mode='after')
    def check_operand_spans(self) -> 'BinaryOperation':
        self._check_contains(self.lhs, "left operand")
        self._check_contains(self.rhs, "right operand")
        if self.lhs.end > self.rhs.start:
            raise ValueError("left operand must end before right operand starts")
        return self


Expression = Annotated[
    Union[NumberLiteral, Identifier, Negation, BinaryOperation],
    Field(discriminator='kind'),
]
"""
Any node of an expression tree, discriminated on `kind`.
"""

Negation.model_rebuild()
BinaryOperation.model_rebuild()


# --- Configuration ---

class EngineConfig(BaseModel):
    """
    Limits applied by the parser and evaluator.
    """
    model_config = ConfigDict(frozen=True)

    max_nesting_depth: conint(ge=1, le=MAX_SUPPORTED_NESTING_DEPTH) = Field(
        DEFAULT_MAX_NESTING_DEPTH,
        description="Deepest run of nested parentheses and unary minus signs the parser accepts.",
    )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'EngineConfig':
        """
        Builds a config from environment variables, falling back to defaults.

        Args:
            environ: Mapping to read instead of os.environ (mainly for tests).

        Raises:
            pydantic.ValidationError: If a variable is set to an invalid value.
        """
        env = os.environ if environ is None else environ
        overrides = {}
        raw_depth = env.get(MAX_NESTING_DEPTH_ENV_VAR)
        if raw_depth is not None and raw_depth.strip():
            overrides["max_nesting_depth"] = raw_depth.strip()
        logger.debug(f"EngineConfig.from_env overrides: {overrides}")
        return cls(**overrides)
