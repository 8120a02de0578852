"""
models.py — Declarative plot model for the plot_engine package

This file contains ONLY:
- the Plot / PlotSettings dataclasses (owned by the caller, never mutated here)
- plot_from_dict / plot_settings_from_dict (JSON config -> dataclasses)

Both snake_case keys and the add-in's camelCase keys are accepted, e.g.

{
  "name": "Parabola",
  "range": {"x": {"min": -5, "max": 5}, "y": {"min": -5, "max": 5}},
  "fnx": [{"fnx": "x^2", "color": "#1f77b4", "legendPosition": "end"}],
  "markers": [{"x": 1, "y": 1, "text": "A"}],
  "areas": [{"points": [{"x": 0, "y": 0}, {"x": 2, "y": 0}, {"x": 1, "y": 2}],
             "color": "#ff0000", "showPoints": true}],
  "lines": [{"x1": -1, "y1": 0, "x2": 1, "y2": 2, "color": "#00ff00"}],
  "squarePlots": false
}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..constants import LabelPosition, LegendPosition, MarkerNamingScheme
from .marker_naming import generate_marker_name
from .plot_common import safe_float


# ============================================================================
# MODEL
# ============================================================================

@dataclass(frozen=True)
class AxisRange:
    min: float
    max: float


@dataclass(frozen=True)
class PlotRange:
    x: AxisRange
    y: AxisRange


@dataclass(frozen=True)
class MathFunction:
    expression: str
    color: str = "#000000"
    legend_position: str = LegendPosition.NONE


@dataclass(frozen=True)
class Marker:
    x: float
    y: float
    text: str = ""


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = "#000000"


@dataclass(frozen=True)
class AreaPoint:
    x: float
    y: float
    label_position: str = LabelPosition.AUTO
    label_text: str = ""


@dataclass(frozen=True)
class Area:
    points: List[AreaPoint]
    color: str = "#000000"
    show_points: bool = False


@dataclass(frozen=True)
class PlotSettings:
    zero_line_width: float = 1.5
    zero_line_color: str = "#444444"
    grid_line_width: float = 1.5
    grid_line_color: str = "#a6a6a6"
    plot_line_width: float = 2.5
    marker_naming_scheme: str = MarkerNamingScheme.ALPHABETIC


@dataclass(frozen=True)
class Plot:
    range: PlotRange
    name: str = ""
    functions: List[MathFunction] = field(default_factory=list)
    markers: List[Marker] = field(default_factory=list)
    areas: List[Area] = field(default_factory=list)
    lines: List[Line] = field(default_factory=list)
    show_axis_labels: bool = True
    show_axis: bool = True
    place_axis_labels_inside: bool = False
    square_plots: bool = False
    automatically_adjust_limits_to_value_range: bool = False
    axis_label_x: str = "x"
    axis_label_y: str = "y"


DEFAULT_PLOT_SETTINGS = PlotSettings()


# ============================================================================
# DICT LOADING
# ============================================================================

def _get(d: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key wins (snake_case first, then camelCase aliases)."""
    for k in keys:
        if k in d and d[k] is not None:
            return d[k]
    return default


def _num(d: Dict[str, Any], *keys: str, default: Optional[float] = None) -> float:
    raw = _get(d, *keys)
    val = safe_float(raw) if raw is not None else None
    if val is None:
        if default is None:
            raise ValueError(f"Missing or non-numeric value for '{keys[0]}': {raw!r}")
        return float(default)
    return val


_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def _flag(d: Dict[str, Any], *keys: str, default: bool) -> bool:
    raw = _get(d, *keys, default=default)
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        v = raw.strip().lower()
        if v in _TRUE_STRINGS:
            return True
        if v in _FALSE_STRINGS:
            return False
    elif isinstance(raw, (int, float)) and raw in (0, 1):
        return bool(raw)
    raise ValueError(f"'{keys[0]}' must be a boolean: {raw!r}")


def _list(d: Dict[str, Any], *keys: str) -> List[Dict[str, Any]]:
    raw = _get(d, *keys, default=[])
    if not isinstance(raw, list):
        raise ValueError(f"'{keys[0]}' must be a list")
    return [item for item in raw if isinstance(item, dict)]


def _axis_range(d: Any, name: str) -> AxisRange:
    if not isinstance(d, dict):
        raise ValueError(f"range.{name} must be an object with min/max")
    return AxisRange(min=_num(d, "min"), max=_num(d, "max"))


def _function_from_dict(d: Dict[str, Any]) -> MathFunction:
    legend = str(_get(d, "legend_position", "legendPosition", default=LegendPosition.NONE)).strip().lower()
    if legend not in LegendPosition.ALL:
        raise ValueError(f"Unknown legend position: {legend!r}")
    return MathFunction(
        expression=str(_get(d, "expression", "fnx", default="")),
        color=str(_get(d, "color", default="#000000")),
        legend_position=legend,
    )


def _area_point_from_dict(d: Dict[str, Any]) -> AreaPoint:
    position = str(_get(d, "label_position", "labelPosition", default=LabelPosition.AUTO)).strip().lower()
    if position not in LabelPosition.ALL:
        raise ValueError(f"Unknown label position: {position!r}")
    return AreaPoint(
        x=_num(d, "x"),
        y=_num(d, "y"),
        label_position=position,
        label_text=str(_get(d, "label_text", "labelText", default="")),
    )


def plot_settings_from_dict(d: Optional[Dict[str, Any]]) -> PlotSettings:
    """Stored settings are merged over the defaults."""
    d = d or {}
    base = DEFAULT_PLOT_SETTINGS
    scheme = str(_get(d, "marker_naming_scheme", "markerNamingScheme", default=base.marker_naming_scheme))
    if scheme not in MarkerNamingScheme.ALL:
        raise ValueError(f"Unknown marker naming scheme: {scheme!r}")
    return PlotSettings(
        zero_line_width=_num(d, "zero_line_width", "zeroLineWidth", default=base.zero_line_width),
        zero_line_color=str(_get(d, "zero_line_color", "zeroLineColor", default=base.zero_line_color)),
        grid_line_width=_num(d, "grid_line_width", "gridLineWidth", default=base.grid_line_width),
        grid_line_color=str(_get(d, "grid_line_color", "gridLineColor", default=base.grid_line_color)),
        plot_line_width=_num(d, "plot_line_width", "plotLineWidth", default=base.plot_line_width),
        marker_naming_scheme=scheme,
    )


def plot_from_dict(d: Dict[str, Any], plot_settings: Optional[PlotSettings] = None) -> Plot:
    """
    Build a Plot from a JSON-style dict.

    Raises ValueError for a missing range, non-numeric coordinates or
    unknown enum values. Markers without text are named with the
    settings' marker naming scheme.
    """
    if not isinstance(d, dict):
        raise ValueError("Plot config must be a dictionary")

    plot_settings = plot_settings or DEFAULT_PLOT_SETTINGS

    raw_range = d.get("range")
    if not isinstance(raw_range, dict):
        raise ValueError("Plot config is missing 'range'")
    plot_range = PlotRange(x=_axis_range(raw_range.get("x"), "x"), y=_axis_range(raw_range.get("y"), "y"))

    markers: List[Marker] = []
    for i, m in enumerate(_list(d, "markers")):
        text = str(_get(m, "text", default="") or "")
        if not text:
            text = generate_marker_name(i, plot_settings.marker_naming_scheme)
        markers.append(Marker(x=_num(m, "x"), y=_num(m, "y"), text=text))

    areas = [
        Area(
            points=[_area_point_from_dict(p) for p in _list(a, "points")],
            color=str(_get(a, "color", default="#000000")),
            show_points=_flag(a, "show_points", "showPoints", default=False),
        )
        for a in _list(d, "areas")
    ]

    lines = [
        Line(
            x1=_num(ln, "x1"),
            y1=_num(ln, "y1"),
            x2=_num(ln, "x2"),
            y2=_num(ln, "y2"),
            color=str(_get(ln, "color", default="#000000")),
        )
        for ln in _list(d, "lines")
    ]

    return Plot(
        range=plot_range,
        name=str(_get(d, "name", default="")),
        functions=[_function_from_dict(f) for f in _list(d, "functions", "fnx")],
        markers=markers,
        areas=areas,
        lines=lines,
        show_axis_labels=_flag(d, "show_axis_labels", "showAxisLabels", default=True),
        show_axis=_flag(d, "show_axis", "showAxis", default=True),
        place_axis_labels_inside=_flag(d, "place_axis_labels_inside", "placeAxisLabelsInside", default=False),
        square_plots=_flag(d, "square_plots", "squarePlots", default=False),
        automatically_adjust_limits_to_value_range=_flag(
            d, "automatically_adjust_limits_to_value_range", "automaticallyAdjustLimitsToValueRange", default=False
        ),
        axis_label_x=str(_get(d, "axis_label_x", "axisLabelX", default="x")),
        axis_label_y=str(_get(d, "axis_label_y", "axisLabelY", default="y")),
    )
