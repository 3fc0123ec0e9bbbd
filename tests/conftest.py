import pytest

from serious.expr_evaluator.expr_context import Context
from serious.expr_evaluator.expr_evaluator import ExprEvaluator
from serious.expr_lexer.expr_lexer import ExprLexer
from serious.expr_parser.expr_parser import ExprParser


@pytest.fixture
def lexer():
    """Provides an ExprLexer instance for tests."""
    return ExprLexer()


@pytest.fixture
def parser():
    """Provides an ExprParser with the default configuration."""
    return ExprParser()


@pytest.fixture
def evaluator():
    """Provides an ExprEvaluator with the default configuration."""
    return ExprEvaluator()


@pytest.fixture
def xy_context():
    """A context binding x=3 and y=4."""
    return Context(bindings={"x": 3.0, "y": 4.0})
