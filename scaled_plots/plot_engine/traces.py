"""
traces.py — Plot series for the plot_engine package

This file contains ONLY:
- Plotly-style trace dicts for functions, markers, lines and areas
- the compass classifier used for "auto" area-point labels

Order of build_plot_data output is stable: functions, markers, lines,
area fills, then area-point label groups (first-seen direction order).
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence

from ..constants import LabelPosition
from .models import AreaPoint, Plot, PlotSettings
from .plot_common import AREA_FILL_ALPHA, hex_to_rgba

Trace = Dict[str, Any]

MARKER_STYLE: Dict[str, Any] = {
    "symbol": "x-thin",
    "color": "#000000",
    "size": 10,
    "line": {"width": 1.5},
}
MARKER_TEXTFONT: Dict[str, Any] = {"size": 12}


def _marker_trace(xs: List[float], ys: List[float], texts: List[str], textposition: str) -> Trace:
    return {
        "type": "scatter",
        "mode": "text+markers",
        "showlegend": False,
        "x": xs,
        "y": ys,
        "text": texts,
        "marker": {**MARKER_STYLE, "line": dict(MARKER_STYLE["line"])},
        "textfont": dict(MARKER_TEXTFONT),
        "textposition": textposition,
    }


def build_plot_data(
    plot: Plot,
    plot_settings: PlotSettings,
    x_values: Sequence[float],
    y_values: Sequence[Sequence[float]],
) -> List[Trace]:
    return [
        *build_function_traces(plot, plot_settings, x_values, y_values),
        *build_marker_traces(plot),
        *build_line_traces(plot, plot_settings),
        *build_area_traces(plot, plot_settings),
    ]


def build_function_traces(
    plot: Plot,
    plot_settings: PlotSettings,
    x_values: Sequence[float],
    y_values: Sequence[Sequence[float]],
) -> List[Trace]:
    if not plot.functions:
        return []

    return [
        {
            "type": "scatter",
            "mode": "lines",
            "x": list(x_values),
            "y": list(ys),
            "line": {"color": fn.color, "width": plot_settings.plot_line_width},
        }
        for fn, ys in zip(plot.functions, y_values)
    ]


def build_marker_traces(plot: Plot) -> List[Trace]:
    if not plot.markers:
        return []

    return [
        _marker_trace(
            [m.x for m in plot.markers],
            [m.y for m in plot.markers],
            [m.text for m in plot.markers],
            LabelPosition.BOTTOM_LEFT,
        )
    ]


def build_line_traces(plot: Plot, plot_settings: PlotSettings) -> List[Trace]:
    return [
        {
            "type": "scatter",
            "mode": "lines",
            "showlegend": False,
            "fill": "none",
            "x": [line.x1, line.x2],
            "y": [line.y1, line.y2],
            "line": {"color": line.color, "width": plot_settings.plot_line_width},
        }
        for line in plot.lines
    ]


def build_area_traces(plot: Plot, plot_settings: PlotSettings) -> List[Trace]:
    fills: List[Trace] = []
    for area in plot.areas:
        if not area.points:
            continue
        closed = [*area.points, area.points[0]]
        fills.append({
            "type": "scatter",
            "mode": "lines",
            "showlegend": False,
            "fillcolor": hex_to_rgba(area.color, AREA_FILL_ALPHA),
            "fill": "toself",
            "x": [p.x for p in closed],
            "y": [p.y for p in closed],
            "line": {"width": plot_settings.zero_line_width, "color": plot_settings.zero_line_color},
        })

    return [*fills, *build_area_point_traces(plot)]


# ============================================================================
# AREA POINT LABELS
# ============================================================================

def calculate_label_position(point: AreaPoint, polygon_points: Sequence[AreaPoint]) -> str:
    """Compass direction pointing from the polygon's vertex mean to `point`."""
    cx = sum(p.x for p in polygon_points) / len(polygon_points)
    cy = sum(p.y for p in polygon_points) / len(polygon_points)
    angle = math.degrees(math.atan2(point.y - cy, point.x - cx))

    if -22.5 <= angle < 22.5:
        return LabelPosition.MIDDLE_RIGHT
    if 22.5 <= angle < 67.5:
        return LabelPosition.TOP_RIGHT
    if 67.5 <= angle < 112.5:
        return LabelPosition.TOP_CENTER
    if 112.5 <= angle < 157.5:
        return LabelPosition.TOP_LEFT
    if angle >= 157.5 or angle < -157.5:
        return LabelPosition.MIDDLE_LEFT
    if -157.5 <= angle < -112.5:
        return LabelPosition.BOTTOM_LEFT
    if -112.5 <= angle < -67.5:
        return LabelPosition.BOTTOM_CENTER
    return LabelPosition.BOTTOM_RIGHT


def resolve_label_position(point: AreaPoint, polygon_points: Sequence[AreaPoint]) -> str:
    if point.label_position != LabelPosition.AUTO:
        return point.label_position
    return calculate_label_position(point, polygon_points)


def build_area_point_traces(plot: Plot) -> List[Trace]:
    # dicts keep insertion order, which gives the first-seen group order
    groups: Dict[str, List[AreaPoint]] = {}
    for area in plot.areas:
        if not area.show_points:
            continue
        for point in area.points:
            direction = resolve_label_position(point, area.points)
            groups.setdefault(direction, []).append(point)

    return [
        _marker_trace(
            [p.x for p in points],
            [p.y for p in points],
            [p.label_text for p in points],
            direction,
        )
        for direction, points in groups.items()
    ]
