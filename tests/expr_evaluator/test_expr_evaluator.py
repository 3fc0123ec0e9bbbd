"""
Unit tests for the ExprEvaluator class and the interpret/interpret_tree helpers.
"""

import math

import pytest

from serious.expr_evaluator.expr_context import Context, create_context
from serious.expr_evaluator.expr_evaluator import ExprEvaluator, interpret, interpret_tree
from serious.expr_parser.expr_parser import parse
from serious.system.errors import ErrorType, ExpressionError
from serious.system.models import (
    BinaryOperation, EngineConfig, Identifier, Negation, NumberLiteral, Operation,
)


def expect_error(text, context=None):
    with pytest.raises(ExpressionError) as excinfo:
        interpret(text, context)
    return excinfo.value


# --- Literals ---

@pytest.mark.parametrize("text", ["0", "10.3", "0.5", ".25", "5.", "123456789", "0.1", "007"])
def test_literal_evaluates_to_its_float_value(text):
    assert interpret(text, {}) == float(text)


def test_largest_finite_literal():
    text = "179769313486231570" + "0" * 291
    assert interpret(text) == float(text)


# --- Arithmetic, precedence and associativity ---

@pytest.mark.parametrize("text, expected", [
    ("1 + 2 + 3 + 4.8", 10.8),
    ("8-4-2", 2.0),
    ("2^3^2", 64.0),
    ("2(3+4)", 14.0),
    ("2+3*4", 14.0),
    ("-2^2", -4.0),
    ("(-2)^2", 4.0),
    ("2^-1", 0.5),
    ("3*-2", -6.0),
    ("--3", 3.0),
    ("12/4/3", 1.0),
    ("2 3", 6.0),
    ("(1+2)(3+4)", 21.0),
    ("0^0", 1.0),
    ("4^0.5", 2.0),
    ("10^-400", 0.0),
])
def test_constant_expressions(text, expected):
    assert interpret(text, {}) == expected


def test_implicit_multiplication_with_identifier():
    assert interpret("2x", {"x": 5.0}) == 10.0


def test_pythagoras(xy_context):
    assert interpret("(x^2 + y^2)^0.5", xy_context) == 5.0


def test_quadratic():
    assert interpret("-2x^2 + 3x - 5", {"x": 4.0}) == -25.0


def test_mixed_example():
    x, y = 12.34, 9999.0
    context = create_context(x=x, y=y)
    result = interpret("34.2x + y^2(-2x^3 + 1)/5.2", context)
    assert result == 34.2 * x + y ** 2 * (-2 * x ** 3 + 1) / 5.2


def test_context_values_can_be_ints():
    assert interpret("ab", {"a": 2, "b": 3}) == 6.0


def test_long_left_nested_chain():
    text = "+".join(["1"] * 5000)
    assert interpret(text) == 5000.0


# --- Evaluation errors ---

def test_unbound_identifier():
    err = expect_error("x+1", {})
    assert err.error_type is ErrorType.UNBOUND_IDENTIFIER
    assert err.span == (0, 1)
    assert err.message == "identifier x is not bound"


def test_unbound_identifier_with_partial_context():
    err = expect_error("3 + xy", {"x": 3.0})
    assert err.error_type is ErrorType.UNBOUND_IDENTIFIER
    assert err.message == "identifier y is not bound"
    assert err.span == (5, 6)


def test_no_context_means_nothing_is_bound():
    err = expect_error("z")
    assert err.error_type is ErrorType.UNBOUND_IDENTIFIER


def test_division_by_zero():
    err = expect_error("4.3/0", {})
    assert err.error_type is ErrorType.UNDEFINED_OPERATION
    assert err.message == "4.3/0 is undefined"
    assert err.span == (0, 5)


def test_division_by_zero_integer_operands():
    err = expect_error("10/0")
    assert err.message == "10/0 is undefined"
    assert err.span == (0, 4)


def test_division_by_computed_zero_spans_parenthesized_node():
    err = expect_error("2^(56 / (2 - 2)) * 3")
    assert err.error_type is ErrorType.UNDEFINED_OPERATION
    assert err.message == "56/0 is undefined"
    assert err.span == (2, 16)


def test_division_by_negative_zero():
    err = expect_error("1/(-0)")
    assert err.error_type is ErrorType.UNDEFINED_OPERATION
    assert err.span == (0, 6)


def test_zero_divided_by_zero():
    err = expect_error("0/0")
    assert err.error_type is ErrorType.UNDEFINED_OPERATION
    assert err.message == "0/0 is undefined"


def test_nan_result_is_undefined():
    err = expect_error("(-8)^0.5")
    assert err.error_type is ErrorType.UNDEFINED_OPERATION
    assert err.message == "(-8)^0.5 is undefined"
    assert err.span == (0, 8)


def test_negative_base_with_integer_exponent_is_fine():
    assert interpret("(-2)^3") == -8.0


def test_power_overflow():
    err = expect_error("10^400")
    assert err.error_type is ErrorType.OVERFLOW
    assert err.message == "10^400 overflows a 64-bit float"
    assert err.span == (0, 6)


def test_multiplication_overflow():
    err = expect_error("1 + xx", {"x": 1e200})
    assert err.error_type is ErrorType.OVERFLOW
    assert err.message == "1e+200*1e+200 overflows a 64-bit float"
    assert err.span == (4, 6)


def test_addition_overflow():
    err = expect_error("x + x", {"x": 1.7e308})
    assert err.error_type is ErrorType.OVERFLOW
    assert err.span == (0, 5)


def test_zero_to_negative_power_overflows():
    err = expect_error("0^-1")
    assert err.error_type is ErrorType.OVERFLOW
    assert err.message == "0^(-1) overflows a 64-bit float"


def test_parse_errors_propagate():
    err = expect_error("(1+2", {})
    assert err.error_type is ErrorType.BAD_PARSE
    assert err.span == (0, 1)


def test_literal_overflow_propagates():
    err = expect_error("2 * " + "9" * 400)
    assert err.error_type is ErrorType.OVERFLOW
    assert err.span == (4, 404)


# --- First error wins ---

def test_left_operand_error_wins():
    err = expect_error("y/0 + x", {})
    assert err.error_type is ErrorType.UNBOUND_IDENTIFIER
    assert err.span == (0, 1)


def test_division_error_before_unbound_right_operand():
    err = expect_error("(1/0) + y", {})
    assert err.error_type is ErrorType.UNDEFINED_OPERATION
    assert err.span == (0, 5)


def test_right_operand_error_after_left_succeeds():
    err = expect_error("1 + y")
    assert err.error_type is ErrorType.UNBOUND_IDENTIFIER
    assert err.span == (4, 5)


# --- Tree entry point ---

ROUND_TRIP_TEXTS = [
    "34.2x + y^2(-2x^3 + 1)/5.2",
    "(x^2 + y^2)^0.5",
    "-2x^2 + 3x - 5",
    "x/y - y/x",
    "2^3^2",
    "x/(y - 4)",
    "z + 1",
    "(-x)^0.5",
]
ROUND_TRIP_CONTEXTS = [
    {},
    {"x": 3.0, "y": 4.0},
    {"x": -1.5, "y": 0.25, "z": 7.0},
]


@pytest.mark.parametrize("text", ROUND_TRIP_TEXTS)
@pytest.mark.parametrize("context", ROUND_TRIP_CONTEXTS)
def test_tree_and_text_entry_points_agree(text, context):
    tree = parse(text)
    try:
        expected = interpret(text, context)
    except ExpressionError as text_error:
        with pytest.raises(ExpressionError) as excinfo:
            interpret_tree(tree, context)
        assert excinfo.value.error_type is text_error.error_type
        assert excinfo.value.message == text_error.message
        assert excinfo.value.span == text_error.span
    else:
        assert interpret_tree(tree, context) == expected


def test_tree_evaluation_is_repeatable(xy_context):
    tree = parse("34.2x + y^2(-2x^3 + 1)/5.2")
    first = interpret_tree(tree, xy_context)
    second = interpret_tree(tree, xy_context)
    assert first.hex() == second.hex()


def test_tree_reused_across_contexts():
    tree = parse("2x + 1")
    assert [interpret_tree(tree, {"x": v}) for v in (0.0, 1.0, 2.5)] == [1.0, 3.0, 6.0]


def test_hand_built_tree():
    # 6 / -(x - 4)
    tree = BinaryOperation(
        op=Operation.DIVIDE,
        lhs=NumberLiteral(value=6.0, start=0, end=1),
        rhs=Negation(
            operand=BinaryOperation(
                op=Operation.SUBTRACT,
                lhs=Identifier(name="x", start=6, end=7),
                rhs=NumberLiteral(value=4.0, start=10, end=11),
                start=5, end=12,
            ),
            start=4, end=12,
        ),
        start=0, end=12,
    )
    assert interpret_tree(tree, {"x": 1.0}) == 2.0
    with pytest.raises(ExpressionError) as excinfo:
        interpret_tree(tree, {"x": 4.0})
    assert excinfo.value.error_type is ErrorType.UNDEFINED_OPERATION
    assert excinfo.value.span == (0, 12)


def test_interpret_tree_rejects_non_tree():
    with pytest.raises(TypeError):
        interpret_tree("1+2", {})


def test_invalid_context_type():
    with pytest.raises(TypeError):
        interpret("1", [("x", 1.0)])


# --- Evaluator instances ---

def test_evaluator_methods_match_module_functions(evaluator, xy_context):
    assert evaluator.evaluate_string("x^y", xy_context) == interpret("x^y", xy_context)
    tree = parse("x^y")
    assert evaluator.evaluate_tree(tree, xy_context) == interpret_tree(tree, xy_context)


def test_evaluator_accepts_context_instance_and_dict(evaluator):
    assert evaluator.evaluate_string("ab", Context(bindings={"a": 2.0, "b": 5.0})) == 10.0
    assert evaluator.evaluate_string("ab", {"a": 2.0, "b": 5.0}) == 10.0


def test_evaluator_uses_its_config():
    evaluator = ExprEvaluator(EngineConfig(max_nesting_depth=2))
    assert evaluator.evaluate_string("((1))") == 1.0
    with pytest.raises(ExpressionError) as excinfo:
        evaluator.evaluate_string("(((1)))")
    assert excinfo.value.error_type is ErrorType.BAD_PARSE
    assert excinfo.value.span == (2, 3)


def test_result_is_always_finite():
    for text in ["1e", "x^x", "2^1023 * 2"]:
        try:
            value = interpret(text, {"e": 2.0, "x": 3.0})
        except ExpressionError:
            continue
        assert math.isfinite(value)
