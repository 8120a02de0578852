"""
sizing.py — Physical plot size and margins

This file contains ONLY:
- calculate_plot_size    (full sizing after evaluation, honours auto-fit)
- calculate_plot_size_mm (cheap estimate from the configured range, with A4 flags)
- calculate_effective_margin (legend-aware margins)

Every grid square (dtick) is printed MM_PER_TICK millimetres wide, so a
plot's physical size follows directly from its value range.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .. import utils
from ..constants import LegendPosition
from .models import Plot
from .plot_common import (
    A4_USABLE_HEIGHT_MM,
    A4_USABLE_WIDTH_MM,
    BASE_MARGIN_MM,
    DEFAULT_ENVIRONMENT,
    DTICK,
    MM_PER_TICK,
    MM_TO_INCHES,
    MM_TO_POINTS,
    PPI_BASE,
    CleanedValues,
    PixelSize,
    PlotMarginMm,
    PlotSizeCalculation,
    PlotSizeMm,
    RenderingEnvironment,
    ValueRanges,
)

logger = utils.setup_logger(__name__)

# Legend width estimate: ~6 px per character at the 10 px label font, plus the label gap
PX_PER_CHAR = 6
LABEL_XSHIFT_PX = 5


# ============================================================================
# HELPERS
# ============================================================================

def _tick_squares(x_range: float, y_range: float, square_plots: bool) -> Tuple[float, float]:
    if square_plots:
        longest = max(x_range, y_range) / DTICK
        return longest, longest
    return x_range / DTICK, y_range / DTICK


def _bounds(values: Sequence[float], fallback: Sequence[float]) -> Tuple[float, float]:
    if len(values) == 0:
        return float(min(fallback)), float(max(fallback))
    return float(min(values)), float(max(values))


# ============================================================================
# PUBLIC
# ============================================================================

def calculate_plot_size(
    plot: Plot,
    cleaned_values: CleanedValues,
    value_ranges: ValueRanges,
    margin: PlotMarginMm,
    environment: Optional[RenderingEnvironment] = None,
) -> PlotSizeCalculation:
    environment = environment or DEFAULT_ENVIRONMENT
    auto_fit = plot.automatically_adjust_limits_to_value_range

    if auto_fit:
        flat_y: List[float] = [y for ys in cleaned_values.clean_y_values for y in ys]
        if not cleaned_values.clean_x_values or not flat_y:
            logger.info("Auto-fit found no visible samples; using the configured range.")
        x_value_min, x_value_max = _bounds(cleaned_values.clean_x_values, value_ranges.x_numbers)
        y_value_min, y_value_max = _bounds(flat_y, value_ranges.y_numbers)
    else:
        x_value_min, x_value_max = value_ranges.x_min, value_ranges.x_max
        y_value_min, y_value_max = value_ranges.y_min, value_ranges.y_max

    ticks_x, ticks_y = _tick_squares(
        x_value_max - x_value_min,
        y_value_max - y_value_min,
        plot.square_plots,
    )

    width_mm = ticks_x * MM_PER_TICK + margin.l + margin.r
    height_mm = ticks_y * MM_PER_TICK + margin.t + margin.b

    logger.debug(
        "Plot size %.2f x %.2f mm (x %.2f..%.2f, y %.2f..%.2f, auto_fit=%s, square=%s)",
        width_mm, height_mm, x_value_min, x_value_max, y_value_min, y_value_max,
        auto_fit, plot.square_plots,
    )

    return PlotSizeCalculation(
        x_value_min=x_value_min,
        x_value_max=x_value_max,
        y_value_min=y_value_min,
        y_value_max=y_value_max,
        plot_size_px=PixelSize(
            width=width_mm * MM_TO_INCHES * environment.base_dpi,
            height=height_mm * MM_TO_INCHES * environment.base_dpi,
        ),
        plot_size_points=PixelSize(
            width=width_mm * MM_TO_POINTS,
            height=height_mm * MM_TO_POINTS,
        ),
    )


def calculate_effective_margin(plot: Plot) -> PlotMarginMm:
    """
    Base margins, widened on the side a function legend is drawn on.

    The label width is a rough estimate that is linear in the expression
    length; it is not measured against the rendered glyphs.
    """
    px_to_mm = 25.4 / PPI_BASE
    extra_left = 0.0
    extra_right = 0.0

    for fn in plot.functions:
        if fn.legend_position == LegendPosition.NONE:
            continue

        text_width_mm = (len(fn.expression) * PX_PER_CHAR + LABEL_XSHIFT_PX) * px_to_mm
        extra_needed = max(0.0, text_width_mm - BASE_MARGIN_MM)

        if fn.legend_position == LegendPosition.START:
            extra_left = max(extra_left, extra_needed)
        else:
            extra_right = max(extra_right, extra_needed)

    return PlotMarginMm(
        t=BASE_MARGIN_MM,
        b=BASE_MARGIN_MM,
        l=BASE_MARGIN_MM + extra_left,
        r=BASE_MARGIN_MM + extra_right,
    )


def calculate_plot_size_mm(plot: Plot) -> PlotSizeMm:
    margin = calculate_effective_margin(plot)
    ticks_x, ticks_y = _tick_squares(
        plot.range.x.max - plot.range.x.min,
        plot.range.y.max - plot.range.y.min,
        plot.square_plots,
    )

    width = ticks_x * MM_PER_TICK + margin.l + margin.r
    height = ticks_y * MM_PER_TICK + margin.t + margin.b

    exceeds_width = width > A4_USABLE_WIDTH_MM
    exceeds_height = height > A4_USABLE_HEIGHT_MM

    return PlotSizeMm(
        width=width,
        height=height,
        exceeds_a4=exceeds_width or exceeds_height,
        exceeds_width=exceeds_width,
        exceeds_height=exceeds_height,
    )
