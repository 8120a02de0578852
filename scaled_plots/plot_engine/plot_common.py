"""
plot_common.py — Shared types and constants for the plot_engine package

This file contains ONLY:
- physical unit constants (mm / inch / point / dtick / margins)
- the stage error codes and the result dataclasses passed between stages
- the rendering environment (DPI + device scale)
- tiny dependency-light helpers (safe_float, hex_to_rgba, parse_plot_color)

Keep this file free of imports from other plot_engine modules to avoid cycles.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple

import numpy as np

from ..config import settings


# ============================================================================
# UNITS
# ============================================================================

MM_TO_INCHES = 1 / 25.4
MM_TO_POINTS = 72 / 25.4
PPI_BASE = 96

# Grid spacing in domain units and its printed size
DTICK = 0.5
MM_PER_TICK = 5

# Dense sampling step for curves, coarse step for axis labels
SAMPLE_STEP = 0.1
ANNOTATION_STEP = 1.0

BASE_MARGIN_MM = 7.5

A4_USABLE_WIDTH_MM = 180
A4_USABLE_HEIGHT_MM = 267

# Fill opacity of polygon areas
AREA_FILL_ALPHA = 0.7


# ============================================================================
# ERROR CODES
# ============================================================================

class PlotGenerateErrorCode(Enum):
    # the math expressions could not be compiled
    COMPILE = "compile"
    # a compiled expression failed while being evaluated over the x samples
    EVALUATE = "evaluate"
    # the renderer failed to produce an image
    PLOT = "plot"


def plot_has_error_code(value: Any) -> bool:
    return isinstance(value, PlotGenerateErrorCode)


# ============================================================================
# STAGE RESULTS
# ============================================================================

@dataclass
class ValueRanges:
    x: np.ndarray
    x_min: float
    x_max: float
    y: np.ndarray
    y_min: float
    y_max: float

    @property
    def x_numbers(self) -> List[float]:
        return self.x.tolist()

    @property
    def y_numbers(self) -> List[float]:
        return self.y.tolist()


@dataclass
class CleanedValues:
    clean_x_values: List[float]
    clean_y_values: List[List[float]]
    x_values_array: List[float]
    y_values_array: List[List[float]]


@dataclass(frozen=True)
class PlotMarginMm:
    t: float = BASE_MARGIN_MM
    b: float = BASE_MARGIN_MM
    l: float = BASE_MARGIN_MM
    r: float = BASE_MARGIN_MM


@dataclass(frozen=True)
class PixelSize:
    width: float
    height: float


@dataclass(frozen=True)
class PlotSizeCalculation:
    x_value_min: float
    x_value_max: float
    y_value_min: float
    y_value_max: float
    plot_size_px: PixelSize
    plot_size_points: PixelSize


@dataclass(frozen=True)
class PlotSizeMm:
    width: float
    height: float
    exceeds_a4: bool
    exceeds_width: bool
    exceeds_height: bool


@dataclass(frozen=True)
class LabelImageCoordinates:
    x: float
    y: float
    sizex: float
    sizey: float
    xanchor: str  # "left" | "right"


@dataclass(frozen=True)
class PlotImage:
    base64: str
    width_in_px: float
    height_in_px: float
    width_in_points: float
    height_in_points: float


# ============================================================================
# RENDERING ENVIRONMENT
# ============================================================================

@dataclass(frozen=True)
class RenderingEnvironment:
    """
    DPI context for pixel sizing and for the optional device scale.

    base_dpi is the CSS pixel grid every px value is expressed in;
    scale_factor upsamples the raster to reference_dpi on the device.
    """
    base_dpi: float = PPI_BASE
    device_pixel_ratio: float = 1.0
    reference_dpi: float = 254.0

    @property
    def scale_factor(self) -> float:
        return self.reference_dpi * self.device_pixel_ratio / self.base_dpi

    def mm_to_px(self, mm: float) -> float:
        return mm * MM_TO_INCHES * self.base_dpi

    @classmethod
    def from_settings(cls) -> "RenderingEnvironment":
        return cls(
            base_dpi=settings.PLOT_BASE_DPI,
            device_pixel_ratio=settings.PLOT_DEVICE_PIXEL_RATIO,
            reference_dpi=settings.PLOT_REFERENCE_DPI,
        )


DEFAULT_ENVIRONMENT = RenderingEnvironment()


# ============================================================================
# COERCION / COLOR
# ============================================================================

def safe_float(x: Any) -> Optional[float]:
    try:
        return float(x)
    except Exception:
        return None


_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)
_RGBA_RE = re.compile(
    r"^rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)$",
    re.IGNORECASE,
)


def hex_to_rgba(hex_color: str, alpha: float) -> str:
    """'#ff0000', 0.5 -> 'rgba(255, 0, 0, 0.5)'. Anything else is returned unchanged."""
    m = _HEX_RE.match(str(hex_color))
    if not m:
        return hex_color
    r, g, b = (int(part, 16) for part in m.groups())
    return f"rgba({r}, {g}, {b}, {alpha})"


def parse_plot_color(color: Any, default: str = "#000000") -> Any:
    """
    Translate a Plotly color string into something matplotlib accepts.

    'rgba(255, 0, 0, 0.7)' -> (1.0, 0.0, 0.0, 0.7); hex and named colors
    pass through unchanged.
    """
    if color is None or color == "":
        return default
    s = str(color).strip()
    m = _RGBA_RE.match(s)
    if not m:
        return s
    r, g, b = (float(v) / 255.0 for v in m.groups()[:3])
    a = float(m.group(4)) if m.group(4) is not None else 1.0
    return (r, g, b, a)


def margin_to_px(margin: PlotMarginMm, environment: RenderingEnvironment) -> Tuple[float, float, float, float]:
    """(t, b, l, r) in CSS pixels."""
    return (
        environment.mm_to_px(margin.t),
        environment.mm_to_px(margin.b),
        environment.mm_to_px(margin.l),
        environment.mm_to_px(margin.r),
    )
