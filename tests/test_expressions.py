"""Tests for sampling, expression compile/evaluate and value cleanup."""

import math

import numpy as np
import pytest

from scaled_plots.plot_engine.expressions import (
    ExpressionCompileError,
    ExpressionEvaluateError,
    clean_up_values,
    closed_range,
    compile_expression,
    compile_expressions,
    create_ranges,
    evaluate_expressions,
    parse_formula,
)
from scaled_plots.plot_engine.models import MathFunction
from scaled_plots.plot_engine.plot_common import PlotGenerateErrorCode


class TestClosedRange:
    """Tests for closed_range."""

    def test_dense_samples_include_both_ends(self):
        """Dense sampling starts at min and ends exactly at max."""
        values = closed_range(-5, 5, 0.1)
        assert values[0] == -5
        assert values[-1] == 5
        assert len(values) == 101

    def test_uneven_span_ends_at_max(self):
        """The last sample equals max even when the span is not a multiple of the step."""
        values = closed_range(-2.3, 1.7, 0.1)
        assert values[0] == -2.3
        assert values[-1] == 1.7
        assert np.all(np.diff(values) > 0)

    def test_tick_range_contains_endpoints_once(self):
        """Step-1 ticks contain each endpoint exactly once."""
        values = closed_range(-5, 5, 1).tolist()
        assert values == [-5, -4, -3, -2, -1, 0, 1, 2, 3, 4, 5]

    def test_partial_last_step(self):
        """A partial last step appends max."""
        assert closed_range(0, 2.5, 1).tolist() == [0, 1, 2, 2.5]

    def test_zero_is_exact(self):
        """Accumulated float error does not hide the origin."""
        assert 0 in closed_range(-3, 3, 0.1).tolist()

    def test_reversed_bounds(self):
        """start > stop is treated as the same closed interval."""
        assert closed_range(3, 1, 1).tolist() == [1, 2, 3]


class TestCreateRanges:
    """Tests for create_ranges."""

    def test_bounds(self, make_plot):
        """Min/max follow the configured range."""
        ranges = create_ranges(make_plot(x=(-4, 6), y=(-1, 2)))
        assert ranges.x_min == -4
        assert ranges.x_max == 6
        assert ranges.y_min == -1
        assert ranges.y_max == 2
        assert ranges.x_numbers[0] == -4
        assert ranges.y_numbers[-1] == 2


class TestCompile:
    """Tests for expression compilation."""

    def test_valid_expressions(self):
        """Each function compiles to one expression."""
        compiled = compile_expressions([MathFunction("x^2"), MathFunction("sin(x) + 2x")])
        assert len(compiled) == 2

    def test_syntax_error_aborts_batch(self):
        """A single bad expression fails the whole batch."""
        result = compile_expressions([MathFunction("x^2"), MathFunction("2*(x+")])
        assert result is PlotGenerateErrorCode.COMPILE

    def test_empty_expression(self):
        """Empty text is a compile error."""
        assert compile_expressions([MathFunction("")]) is PlotGenerateErrorCode.COMPILE

    def test_blocked_pattern(self):
        """Python internals are rejected before parsing."""
        with pytest.raises(ExpressionCompileError):
            compile_expression("__import__")

    def test_unicode_operators(self):
        """Typographic operators are accepted."""
        compiled = compile_expression("2·x − 1")
        assert compiled.evaluate({"x": 3.0}) == pytest.approx(5.0)


class TestEvaluate:
    """Tests for expression evaluation."""

    def test_scalar_and_array(self):
        """evaluate keeps the shape of x."""
        compiled = compile_expression("x^2 + 1")
        assert compiled.evaluate({"x": 2.0}) == pytest.approx(5.0)
        np.testing.assert_allclose(compiled.evaluate({"x": np.array([0.0, 1.0, 2.0])}), [1.0, 2.0, 5.0])

    def test_constant_is_broadcast(self):
        """A constant expression yields one value per sample."""
        values = compile_expression("3").evaluate({"x": np.array([0.0, 1.0, 2.0])})
        np.testing.assert_allclose(values, [3.0, 3.0, 3.0])

    def test_math_names(self):
        """pi, e, ln and abs resolve to their math meaning."""
        assert compile_expression("pi").evaluate({"x": 0.0}) == pytest.approx(math.pi)
        assert compile_expression("ln(e)").evaluate({"x": 0.0}) == pytest.approx(1.0)
        assert compile_expression("abs(x)").evaluate({"x": -2.0}) == pytest.approx(2.0)

    def test_division_by_zero_gives_inf(self):
        """Poles come back as non-finite samples, not errors."""
        values = compile_expression("1/x").evaluate({"x": np.array([-1.0, 0.0, 1.0])})
        assert values[0] == pytest.approx(-1.0)
        assert not math.isfinite(values[1])
        assert values[2] == pytest.approx(1.0)

    def test_out_of_domain_gives_nan(self):
        """sqrt of a negative number is NaN."""
        values = compile_expression("sqrt(x)").evaluate({"x": np.array([-4.0, 4.0])})
        assert math.isnan(values[0])
        assert values[1] == pytest.approx(2.0)

    def test_unknown_symbol_fails_on_evaluate(self):
        """Unknown names compile but cannot be evaluated."""
        compiled = compile_expression("a*x")
        with pytest.raises(ExpressionEvaluateError):
            compiled.evaluate({"x": 1.0})

    def test_unknown_symbol_aborts_batch(self, make_plot):
        """An evaluation failure is reported as EVALUATE."""
        ranges = create_ranges(make_plot())
        compiled = compile_expressions([MathFunction("x"), MathFunction("a*x")])
        assert evaluate_expressions(compiled, ranges) is PlotGenerateErrorCode.EVALUATE

    def test_no_functions_returns_y_samples(self, make_plot):
        """Without functions the dense y-range is the single result."""
        ranges = create_ranges(make_plot(y=(-2, 2)))
        result = evaluate_expressions([], ranges)
        assert len(result) == 1
        np.testing.assert_allclose(result[0], ranges.y)

    def test_one_row_per_function(self, make_plot):
        """Each function is evaluated at every x sample."""
        ranges = create_ranges(make_plot())
        compiled = compile_expressions([MathFunction("x"), MathFunction("2*x")])
        result = evaluate_expressions(compiled, ranges)
        assert len(result) == 2
        assert len(result[1]) == len(ranges.x)
        assert result[1][-1] == pytest.approx(10.0)


class TestParseFormula:
    """Tests for parse_formula (legend text)."""

    def test_constant(self):
        """A bare number is constant."""
        assert parse_formula("3").is_constant()
        assert parse_formula(" 2.5 ").is_constant()

    def test_signed_number_is_not_constant(self):
        """A signed or bracketed number is an expression and keeps its label."""
        assert not parse_formula("-2.5").is_constant()
        assert not parse_formula("(3)").is_constant()
        assert not parse_formula("2*pi").is_constant()

    def test_not_constant(self):
        """Anything involving x is not constant."""
        assert not parse_formula("x^2").is_constant()

    def test_tex(self):
        """The formula renders to LaTeX."""
        assert parse_formula("x^2").to_formula("tex") == "x^{2}"


class TestCleanUpValues:
    """Tests for clean_up_values."""

    def test_filters_to_y_range(self, make_plot):
        """Only samples inside the configured y-range are kept."""
        plot = make_plot(y=(-1, 1), functions=[MathFunction("x")])
        ranges = create_ranges(plot)
        y_values = evaluate_expressions(compile_expressions(plot.functions), ranges)

        cleaned = clean_up_values(y_values, ranges, plot)

        assert min(cleaned.clean_x_values) == pytest.approx(-1.0)
        assert max(cleaned.clean_x_values) == pytest.approx(1.0)
        assert all(-1 <= y <= 1 for y in cleaned.clean_y_values[0])
        assert len(cleaned.x_values_array) == len(ranges.x)
        assert len(cleaned.y_values_array[0]) == len(ranges.x)

    def test_non_finite_samples_dropped(self, make_plot):
        """NaN and inf never survive cleanup."""
        plot = make_plot(functions=[MathFunction("1/x")])
        ranges = create_ranges(plot)
        y_values = evaluate_expressions(compile_expressions(plot.functions), ranges)

        cleaned = clean_up_values(y_values, ranges, plot)

        assert all(math.isfinite(y) for y in cleaned.clean_y_values[0])

    def test_no_functions_pass_through(self, make_plot):
        """Without functions the samples are not filtered."""
        plot = make_plot(y=(-2, 2))
        ranges = create_ranges(plot)
        cleaned = clean_up_values(evaluate_expressions([], ranges), ranges, plot)
        assert cleaned.clean_x_values == ranges.x_numbers
        assert cleaned.clean_y_values[0] == ranges.y_numbers
