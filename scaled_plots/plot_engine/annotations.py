"""
annotations.py — Axis annotations for the plot_engine package

This file contains ONLY:
- axis tick labels and tick marks drawn on the zero lines
- the two axis arrows and the optional axis captions

Annotations are Plotly-style dicts; renderer.py knows how to draw them.
Pixel offsets (ax / ay / xshift / yshift) are CSS pixels with y pointing down.
"""

from typing import Any, Dict, List

from .expressions import closed_range
from .models import Plot, PlotSettings
from .plot_common import ANNOTATION_STEP

Annotation = Dict[str, Any]

# Length of the axis arrow shafts in px
ARROW_LENGTH_PX = 20
LABEL_FONT = {"size": 10}


def format_tick(value: float) -> str:
    """2.0 -> '2', -0.5 -> '-0.5' (no trailing '.0', no '-0')."""
    value = float(value) + 0.0
    if value.is_integer():
        return str(int(value))
    return f"{value:g}"


# ============================================================================
# TICKS
# ============================================================================

def build_annotations(plot: Plot, plot_settings: PlotSettings) -> List[Annotation]:
    x_annotation_range = closed_range(plot.range.x.min, plot.range.x.max, ANNOTATION_STEP).tolist()
    y_annotation_range = closed_range(plot.range.y.min, plot.range.y.max, ANNOTATION_STEP).tolist()

    # the x axis already labels the origin
    if 0 in x_annotation_range and 0 in y_annotation_range:
        y_annotation_range = [y for y in y_annotation_range if y != 0]

    return [
        *build_x_labels(x_annotation_range),
        *build_x_tick_lines(x_annotation_range, plot_settings),
        *build_y_labels(y_annotation_range),
        *build_y_tick_lines(y_annotation_range, plot_settings),
    ]


def build_x_labels(x_range: List[float]) -> List[Annotation]:
    labels: List[Annotation] = []
    for x in x_range[1:-1]:
        label: Annotation = {
            "x": x,
            "y": 0,
            "text": format_tick(x),
            "xref": "x",
            "yref": "y",
            "showarrow": False,
            "xanchor": "center",
            "yanchor": "top",
            "yshift": -2,
            "font": dict(LABEL_FONT),
        }
        if x == 0:
            # clear the y axis line
            label["xshift"] = 6
        labels.append(label)
    return labels


def build_x_tick_lines(x_range: List[float], plot_settings: PlotSettings) -> List[Annotation]:
    width = plot_settings.zero_line_width
    return [
        {
            "x": x,
            "y": 0,
            "xref": "x",
            "yref": "y",
            "showarrow": True,
            "xanchor": "center",
            "yanchor": "top",
            "ax": 0,
            "ay": 4 * width,
            "yshift": 2 * width,
            "arrowhead": 0,
            "arrowwidth": width,
        }
        # the arrowhead sits on the last tick
        for x in x_range[:-1]
        if x != 0
    ]


def build_y_labels(y_range: List[float]) -> List[Annotation]:
    return [
        {
            "x": 0,
            "y": y,
            "text": format_tick(y),
            "xref": "x",
            "yref": "y",
            "xshift": -4,
            "showarrow": False,
            "xanchor": "right",
            "yanchor": "middle",
            "font": dict(LABEL_FONT),
        }
        for y in y_range[1:-1]
    ]


def build_y_tick_lines(y_range: List[float], plot_settings: PlotSettings) -> List[Annotation]:
    width = plot_settings.zero_line_width
    return [
        {
            "x": 0,
            "y": y,
            "xref": "x",
            "yref": "y",
            "showarrow": True,
            "xanchor": "left",
            "yanchor": "middle",
            "ax": 4 * width,
            "xshift": -2 * width,
            "ay": 0,
            "arrowhead": 0,
            "arrowwidth": width,
        }
        for y in y_range[:-1]
        if y != 0
    ]


# ============================================================================
# ARROWS / CAPTIONS
# ============================================================================

def build_arrows(
    plot: Plot,
    plot_settings: PlotSettings,
    x_value_max: float,
    y_value_max: float,
) -> List[Annotation]:
    arrows: List[Annotation] = [
        {
            "x": x_value_max,
            "y": 0,
            "showarrow": True,
            "xref": "x",
            "yref": "y",
            "ax": -ARROW_LENGTH_PX,
            "ay": 0,
            "arrowwidth": plot_settings.zero_line_width,
            "arrowhead": 2,
            "arrowcolor": plot_settings.zero_line_color,
        },
        {
            "x": 0,
            "y": y_value_max,
            "showarrow": True,
            "xref": "x",
            "yref": "y",
            "ax": 0,
            "ay": ARROW_LENGTH_PX,
            "arrowwidth": plot_settings.zero_line_width,
            "arrowhead": 2,
            "arrowcolor": plot_settings.zero_line_color,
        },
    ]

    if plot.show_axis_labels:
        arrows.append({
            "x": 0.1,
            "y": 1.01,
            "text": plot.axis_label_y or "y",
            "showarrow": False,
            "yanchor": "top",
            "xanchor": "left",
            "xref": "x",
            "yref": "paper",
        })
        arrows.append({
            "x": 1,
            "y": 0.55,
            "text": plot.axis_label_x or "x",
            "showarrow": False,
            "yanchor": "top",
            "xanchor": "right",
            "xref": "paper",
            "yref": "y",
        })

    return arrows
