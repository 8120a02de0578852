"""
labels.py — Function legend placement

This file contains ONLY:
- find_label_position: where a curve enters/leaves the visible y-band
- calculate_label_image_coordinates: data point + label pixel size -> paper coords

It intentionally does NOT rasterize labels (see label_images.py).
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

from .plot_common import (
    DEFAULT_ENVIRONMENT,
    LabelImageCoordinates,
    PlotMarginMm,
    PlotSizeCalculation,
    RenderingEnvironment,
    margin_to_px,
)

# Space between the curve's boundary point and the label image
LABEL_GAP_PX = 5


def find_label_position(
    x_values: Sequence[float],
    y_values: Sequence[float],
    y_min: float,
    y_max: float,
    from_start: bool,
) -> Optional[Tuple[float, float]]:
    """
    First (from_start) or last visible sample of a curve, as (x, y).

    When the neighbouring sample outside the visible part is finite and
    out of the band, the point is moved onto the y_min / y_max boundary
    by linear interpolation. Returns None if no sample is visible.
    """

    def is_visible(i: int) -> bool:
        y = y_values[i]
        return math.isfinite(y) and y_min <= y <= y_max

    indices = range(len(y_values)) if from_start else range(len(y_values) - 1, -1, -1)
    edge_idx = next((i for i in indices if is_visible(i)), None)
    if edge_idx is None:
        return None

    outer_idx = edge_idx - 1 if from_start else edge_idx + 1
    if 0 <= outer_idx < len(y_values) and math.isfinite(y_values[outer_idx]) and not is_visible(outer_idx):
        y_edge = y_values[edge_idx]
        y_outer = y_values[outer_idx]
        y_boundary = y_max if y_outer > y_max else y_min
        dy = y_outer - y_edge
        if dy != 0:
            t = (y_boundary - y_edge) / dy
            x = x_values[edge_idx] + t * (x_values[outer_idx] - x_values[edge_idx])
            return float(x), float(y_boundary)

    return float(x_values[edge_idx]), float(y_values[edge_idx])


def calculate_label_image_coordinates(
    pos: Tuple[float, float],
    width_px: float,
    height_px: float,
    size_calc: PlotSizeCalculation,
    margin: PlotMarginMm,
    from_start: bool,
    environment: Optional[RenderingEnvironment] = None,
) -> Optional[LabelImageCoordinates]:
    """
    Paper-space box for a legend image next to `pos`.

    Returns None when the fitted plot collapses to a line or a point
    (zero plot area or zero data range); there is nowhere to put a label.
    """
    environment = environment or DEFAULT_ENVIRONMENT
    margin_t, margin_b, margin_l, margin_r = margin_to_px(margin, environment)

    plot_area_w = size_calc.plot_size_px.width - margin_l - margin_r
    plot_area_h = size_calc.plot_size_px.height - margin_t - margin_b
    data_range_x = size_calc.x_value_max - size_calc.x_value_min
    data_range_y = size_calc.y_value_max - size_calc.y_value_min
    if min(plot_area_w, plot_area_h, data_range_x, data_range_y) <= 0:
        return None

    # paper units are fractions of the plot area, so px/area is enough
    paper_gap_x = LABEL_GAP_PX / plot_area_w
    paper_gap_y = LABEL_GAP_PX / plot_area_h

    paper_x = (pos[0] - size_calc.x_value_min) / data_range_x
    paper_y = (pos[1] - size_calc.y_value_min) / data_range_y

    return LabelImageCoordinates(
        x=paper_x - paper_gap_x if from_start else paper_x + paper_gap_x,
        y=paper_y + paper_gap_y,
        sizex=width_px / plot_area_w,
        sizey=height_px / plot_area_h,
        xanchor="right" if from_start else "left",
    )
