"""
expressions.py — Sampling, expression compile/evaluate and value cleanup

This file contains ONLY:
- closed_range / create_ranges (dense x/y samples)
- the sympy-backed expression capability (compile, evaluate, parse_formula)
- compile_expressions / evaluate_expressions (all-or-nothing stage wrappers)
- clean_up_values (samples inside the configured y-range, for auto-fit)

Stage wrappers return PlotGenerateErrorCode values instead of raising,
so the orchestrator can short-circuit on the first failed stage.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Sequence, Union

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from .. import utils
from .models import MathFunction, Plot
from .plot_common import (
    SAMPLE_STEP,
    CleanedValues,
    PlotGenerateErrorCode,
    ValueRanges,
)

logger = utils.setup_logger(__name__)

X = sp.Symbol("x")

_TRANSFORMATIONS = standard_transformations + (implicit_multiplication_application, convert_xor)

# math.js names that differ from sympy's
_LOCAL_NAMES: Dict[str, Any] = {
    "x": X,
    "e": sp.E,
    "E": sp.E,
    "pi": sp.pi,
    "PI": sp.pi,
    "abs": sp.Abs,
    "ln": sp.log,
    "log10": lambda arg: sp.log(arg, 10),
    "log2": lambda arg: sp.log(arg, 2),
}

MATH_EXPR_REGEX = re.compile(r"^[a-zA-Z0-9_+\-*/^().,\s]+$")
_NUMBER_LITERAL = re.compile(r"(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

_BLOCKED_PATTERNS = ("__", "import", "lambda", "exec", "eval")


class ExpressionCompileError(ValueError):
    """Raised when an expression string cannot be parsed."""


class ExpressionEvaluateError(ValueError):
    """Raised when a compiled expression cannot be evaluated numerically."""


# ============================================================================
# RANGES
# ============================================================================

def closed_range(start: float, stop: float, step: float) -> np.ndarray:
    """
    Samples from start to stop (both included) spaced by step.

    The last sample is always exactly `stop`, even when the span is not a
    whole number of steps. Values are rounded to 10 decimals so that
    integer positions like 0 come out exact.
    """
    start = float(start)
    stop = float(stop)
    if start > stop:
        start, stop = stop, start

    count = int(math.floor((stop - start) / step + 1e-9))
    values = np.round(start + np.arange(count + 1) * step, 10)

    if stop - values[-1] > 1e-9:
        values = np.append(values, stop)
    else:
        values[-1] = stop
    return values


def create_ranges(plot: Plot) -> ValueRanges:
    x = closed_range(plot.range.x.min, plot.range.x.max, SAMPLE_STEP)
    y = closed_range(plot.range.y.min, plot.range.y.max, SAMPLE_STEP)

    return ValueRanges(
        x=x,
        x_min=float(np.min(x)),
        x_max=float(np.max(x)),
        y=y,
        y_min=float(np.min(y)),
        y_max=float(np.max(y)),
    )


# ============================================================================
# EXPRESSION CAPABILITY
# ============================================================================

def _normalize_unicode_ops(s: str) -> str:
    """Normalize common unicode math glyphs to ASCII equivalents."""
    if not s:
        return s
    rep = {
        "−": "-",  # minus
        "–": "-",  # en dash
        "—": "-",  # em dash
        "×": "*",
        "∙": "*",
        "·": "*",
        "÷": "/",
        "√": "sqrt",
        "π": "pi",
        "²": "^2",
        "³": "^3",
    }
    for k, v in rep.items():
        s = s.replace(k, v)
    return s


def _prepare_source(text: str) -> str:
    s = _normalize_unicode_ops(str(text or "").strip())
    if not s:
        raise ExpressionCompileError("Expression cannot be empty.")
    if not MATH_EXPR_REGEX.match(s):
        raise ExpressionCompileError("Expression contains unsupported characters.")
    lowered = s.lower()
    for pattern in _BLOCKED_PATTERNS:
        if pattern in lowered:
            raise ExpressionCompileError(f"Expression contains blocked pattern '{pattern}'.")
    return s


def _parse(text: str, evaluate: bool = True) -> sp.Expr:
    source = _prepare_source(text)
    try:
        expr = parse_expr(
            source,
            local_dict=dict(_LOCAL_NAMES),
            transformations=_TRANSFORMATIONS,
            evaluate=evaluate,
        )
    except Exception as e:
        raise ExpressionCompileError(f"Could not parse '{utils.truncate(source, 80)}': {e}") from e

    if not isinstance(expr, sp.Expr):
        raise ExpressionCompileError(f"'{utils.truncate(source, 80)}' is not an algebraic expression.")
    return expr


class CompiledExpression:
    """
    A parsed expression in the free variable x, evaluated with numpy.

    evaluate({"x": value}) accepts a scalar or an array and returns the
    same shape. Division by zero and out-of-domain results come back as
    inf / nan samples rather than errors.
    """

    def __init__(self, source: str, expr: sp.Expr):
        self.source = source
        self.expr = expr
        self._unknown = sorted(str(s) for s in expr.free_symbols if s != X)
        self._func = None

    def evaluate(self, scope: Dict[str, Any]) -> Union[float, np.ndarray]:
        if self._unknown:
            raise ExpressionEvaluateError(f"Undefined symbol(s): {', '.join(self._unknown)}")
        if "x" not in scope:
            raise ExpressionEvaluateError("No value given for x")

        x_vals = np.asarray(scope["x"], dtype=float)
        try:
            if self._func is None:
                self._func = sp.lambdify(X, self.expr, modules="numpy")
            with np.errstate(all="ignore"):
                y_vals = self._func(x_vals)
        except Exception as e:
            raise ExpressionEvaluateError(f"Evaluation of '{utils.truncate(self.source, 80)}' failed: {e}") from e

        try:
            y_arr = np.asarray(y_vals)
            if np.iscomplexobj(y_arr):
                y_arr = np.where(np.abs(y_arr.imag) > 1e-12, np.nan, y_arr.real)
            y_arr = y_arr.astype(float)
            if y_arr.shape != x_vals.shape:
                # constants lambdify to a scalar
                y_arr = np.array(np.broadcast_to(y_arr, x_vals.shape), dtype=float)
        except (TypeError, ValueError) as e:
            raise ExpressionEvaluateError(f"'{utils.truncate(self.source, 80)}' did not evaluate to a number: {e}") from e

        if y_arr.ndim == 0:
            return float(y_arr)
        return y_arr

    def __repr__(self) -> str:
        return f"CompiledExpression({self.source!r})"


def compile_expression(text: str) -> CompiledExpression:
    return CompiledExpression(str(text), _parse(text))


class FormulaNode:
    """Unevaluated parse tree of an expression, used for label text."""

    def __init__(self, expr: sp.Expr, source: str = ""):
        self.expr = expr
        self.source = source

    def is_constant(self) -> bool:
        # a bare numeric literal like "3" or "2.5"; "-2.5", "(3)" and "2*pi" still get a label
        return isinstance(self.expr, sp.Number) and bool(_NUMBER_LITERAL.fullmatch(self.source.strip()))

    def to_formula(self, style: str = "tex") -> str:
        if style == "tex":
            return sp.latex(self.expr)
        return sp.sstr(self.expr)


def parse_formula(text: str) -> FormulaNode:
    return FormulaNode(_parse(text, evaluate=False), str(text))


# ============================================================================
# STAGES
# ============================================================================

def compile_expressions(
    functions: Sequence[MathFunction],
) -> Union[List[CompiledExpression], PlotGenerateErrorCode]:
    compiled: List[CompiledExpression] = []
    for f in functions:
        try:
            compiled.append(compile_expression(f.expression))
        except ExpressionCompileError as e:
            logger.warning("Compile failed for '%s' — %s", utils.truncate(f.expression, 80), e)
            return PlotGenerateErrorCode.COMPILE
    return compiled


def evaluate_expressions(
    compiled: Sequence[CompiledExpression],
    value_ranges: ValueRanges,
) -> Union[List[np.ndarray], PlotGenerateErrorCode]:
    if not compiled:
        return [np.array(value_ranges.y, dtype=float)]

    y_values: List[np.ndarray] = []
    for expression in compiled:
        try:
            y = expression.evaluate({"x": value_ranges.x})
        except ExpressionEvaluateError as e:
            logger.warning("Evaluate failed for '%s' — %s", utils.truncate(expression.source, 80), e)
            return PlotGenerateErrorCode.EVALUATE
        y_values.append(np.asarray(y, dtype=float))
    return y_values


def clean_up_values(
    y_values: Sequence[np.ndarray],
    value_ranges: ValueRanges,
    plot: Plot,
) -> CleanedValues:
    x_values_array = value_ranges.x_numbers
    y_values_array = [np.asarray(y, dtype=float).tolist() for y in y_values]

    if not plot.functions:
        return CleanedValues(
            clean_x_values=list(x_values_array),
            clean_y_values=[list(y_values_array[0])] if y_values_array else [],
            x_values_array=x_values_array,
            y_values_array=y_values_array,
        )

    y_min = plot.range.y.min
    y_max = plot.range.y.max
    clean_x_values: List[float] = []
    clean_y_values: List[List[float]] = [[] for _ in y_values_array]

    for i, ys in enumerate(y_values_array):
        for x, y in zip(x_values_array, ys):
            # NaN fails both comparisons
            if y_min <= y <= y_max:
                clean_x_values.append(x)
                clean_y_values[i].append(y)

    return CleanedValues(
        clean_x_values=clean_x_values,
        clean_y_values=clean_y_values,
        x_values_array=x_values_array,
        y_values_array=y_values_array,
    )
