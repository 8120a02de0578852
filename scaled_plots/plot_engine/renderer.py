"""
renderer.py — Raster rendering for the plot_engine package

This file contains ONLY:
- PlotRenderer (the rendering capability the orchestrator depends on)
- MatplotlibRenderer (draws Plotly-style traces / layout with matplotlib)

It intentionally does NOT contain:
- any geometry decisions (sizes, margins, tick positions, label placement)
- expression handling

Everything it draws is described by the dicts built in traces.py,
annotations.py and plotter.py. All lengths in those dicts are CSS pixels
at `environment.base_dpi`; matplotlib wants points, so px are converted
with 72 / base_dpi.
"""

from __future__ import annotations

import io
import math
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

# Headless backend unless the caller picked one
os.environ.setdefault("MPLBACKEND", "Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.ticker import FuncFormatter, MultipleLocator, NullFormatter  # noqa: E402
from matplotlib.transforms import blended_transform_factory, offset_copy  # noqa: E402
from PIL import Image  # noqa: E402

from .. import utils  # noqa: E402
from .annotations import format_tick  # noqa: E402
from .plot_common import DEFAULT_ENVIRONMENT, RenderingEnvironment, parse_plot_color  # noqa: E402

logger = utils.setup_logger(__name__)

# Plotly's default font color and size
DEFAULT_FONT_COLOR = "#444444"
DEFAULT_FONT_SIZE_PX = 12

_MARKER_SYMBOLS = {
    "x-thin": "x",
    "x": "X",
    "cross-thin": "+",
    "cross": "P",
    "circle": "o",
    "square": "s",
    "diamond": "D",
    "triangle-up": "^",
    "triangle-down": "v",
}

_HA = {"left": "left", "center": "center", "right": "right", "auto": "center"}
_VA = {"top": "top", "middle": "center", "bottom": "bottom", "auto": "center"}


class PlotRenderer:
    """
    Rendering capability: declarative traces + layout -> PNG data URL.

    width / height are CSS pixels; `scale` multiplies the raster
    resolution without changing the layout.
    """

    def render(
        self,
        data: List[Dict[str, Any]],
        layout: Dict[str, Any],
        width: float,
        height: float,
        scale: Optional[float] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> str:
        raise NotImplementedError


class MatplotlibRenderer(PlotRenderer):
    def __init__(self, environment: Optional[RenderingEnvironment] = None):
        self.environment = environment or DEFAULT_ENVIRONMENT

    # ------------------------------------------------------------------
    # units
    # ------------------------------------------------------------------

    def _pt(self, px: Any) -> float:
        return float(px) * 72.0 / self.environment.base_dpi

    # ------------------------------------------------------------------
    # entry point
    # ------------------------------------------------------------------

    def render(
        self,
        data: List[Dict[str, Any]],
        layout: Dict[str, Any],
        width: float,
        height: float,
        scale: Optional[float] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> str:
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid plot size {width} x {height} px")

        base_dpi = self.environment.base_dpi
        dpi = base_dpi * (scale or 1.0)
        logger.debug(
            "Rendering %d trace(s) at %.1f x %.1f px, dpi=%.1f, config=%s",
            len(data), width, height, dpi, config,
        )

        fig = plt.figure(figsize=(width / base_dpi, height / base_dpi), dpi=dpi, facecolor="white")
        try:
            margin = layout.get("margin") or {}
            m_t = float(margin.get("t", 0))
            m_b = float(margin.get("b", 0))
            m_l = float(margin.get("l", 0))
            m_r = float(margin.get("r", 0))
            area_w = width - m_l - m_r
            area_h = height - m_t - m_b
            if area_w <= 0 or area_h <= 0:
                raise ValueError("Margins leave no room for the plot area")

            ax = fig.add_axes([m_l / width, m_b / height, area_w / width, area_h / height])
            ax.set_facecolor("white")
            ax.set_axisbelow(True)

            xaxis = layout.get("xaxis") or {}
            yaxis = layout.get("yaxis") or {}
            x_range, y_range = self._axis_ranges(xaxis, yaxis, area_w, area_h)
            ax.set_xlim(*x_range)
            ax.set_ylim(*y_range)

            self._apply_axis(ax, xaxis, "x")
            self._apply_axis(ax, yaxis, "y")

            for trace in data:
                self._draw_trace(ax, trace)

            for annotation in layout.get("annotations") or []:
                self._draw_annotation(fig, ax, annotation)

            for image in layout.get("images") or []:
                self._draw_image(fig, ax, image, area_w, area_h)

            buf = io.BytesIO()
            fig.savefig(buf, format="png", dpi=dpi, facecolor=fig.get_facecolor())
            return utils.png_to_data_url(buf.getvalue())
        finally:
            plt.close(fig)

    # ------------------------------------------------------------------
    # axes
    # ------------------------------------------------------------------

    @staticmethod
    def _axis_ranges(
        xaxis: Dict[str, Any],
        yaxis: Dict[str, Any],
        area_w: float,
        area_h: float,
    ) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        x0, x1 = (float(v) for v in xaxis.get("range", (-1, 1)))
        y0, y1 = (float(v) for v in yaxis.get("range", (-1, 1)))

        if xaxis.get("scaleanchor") == "y" or yaxis.get("scaleanchor") == "x":
            # one data unit gets the same pixel length on both axes;
            # the axis with fewer units per pixel is widened around its centre
            ux = (x1 - x0) / area_w
            uy = (y1 - y0) / area_h
            if ux > uy:
                half = ux * area_h / 2
                cy = (y0 + y1) / 2
                y0, y1 = cy - half, cy + half
            elif uy > ux:
                half = uy * area_w / 2
                cx = (x0 + x1) / 2
                x0, x1 = cx - half, cx + half

        return (x0, x1), (y0, y1)

    def _apply_axis(self, ax: plt.Axes, axis_layout: Dict[str, Any], which: str) -> None:
        axis = ax.xaxis if which == "x" else ax.yaxis

        dtick = axis_layout.get("dtick")
        if dtick:
            axis.set_major_locator(MultipleLocator(float(dtick)))
            step = int(axis_layout.get("ticklabelstep", 1) or 1)
            axis.set_major_formatter(FuncFormatter(_tick_formatter(float(dtick), step)))

        if not axis_layout.get("showticklabels", True):
            axis.set_major_formatter(NullFormatter())

        font = axis_layout.get("tickfont") or {}
        ax.tick_params(
            axis=which,
            length=0,
            labelsize=self._pt(font.get("size", DEFAULT_FONT_SIZE_PX)),
            labelcolor=parse_plot_color(font.get("color"), DEFAULT_FONT_COLOR),
        )

        if axis_layout.get("showgrid", True):
            ax.grid(
                True,
                axis=which,
                color=parse_plot_color(axis_layout.get("gridcolor"), "#eeeeee"),
                linewidth=self._pt(axis_layout.get("gridwidth", 1)),
            )
        else:
            ax.grid(False, axis=which)

        if axis_layout.get("zeroline"):
            draw = ax.axvline if which == "x" else ax.axhline
            draw(
                0,
                color=parse_plot_color(axis_layout.get("zerolinecolor"), DEFAULT_FONT_COLOR),
                linewidth=self._pt(axis_layout.get("zerolinewidth", 1)),
                zorder=1,
            )

        # axis lines are only drawn when showline is set, as in Plotly
        near, far = ("bottom", "top") if which == "x" else ("left", "right")
        show_line = bool(axis_layout.get("showline", False))
        mirror = bool(axis_layout.get("mirror", False))
        line_color = parse_plot_color(axis_layout.get("linecolor"), DEFAULT_FONT_COLOR)
        line_width = self._pt(axis_layout.get("linewidth", 1))
        for side, visible in ((near, show_line), (far, show_line and mirror)):
            spine = ax.spines[side]
            spine.set_visible(visible)
            spine.set_color(line_color)
            spine.set_linewidth(line_width)

    # ------------------------------------------------------------------
    # traces
    # ------------------------------------------------------------------

    def _draw_trace(self, ax: plt.Axes, trace: Dict[str, Any]) -> None:
        mode = str(trace.get("mode") or "lines")
        xs = _finite_or_nan(trace.get("x", []))
        ys = _finite_or_nan(trace.get("y", []))
        line = trace.get("line") or {}

        if trace.get("fill") == "toself" and len(xs) >= 3:
            ax.fill(
                xs, ys,
                color=parse_plot_color(trace.get("fillcolor")),
                linewidth=0,
                zorder=2,
            )

        line_width = float(line.get("width", 2))
        if "lines" in mode and line_width > 0:
            ax.plot(
                xs, ys,
                color=parse_plot_color(line.get("color")),
                linewidth=self._pt(line_width),
                solid_capstyle="butt",
                zorder=2,
            )

        if "markers" in mode:
            marker = trace.get("marker") or {}
            ax.plot(
                xs, ys,
                linestyle="none",
                marker=_MARKER_SYMBOLS.get(str(marker.get("symbol", "circle")), "o"),
                markersize=self._pt(marker.get("size", 6)),
                markeredgewidth=self._pt((marker.get("line") or {}).get("width", 1)),
                color=parse_plot_color(marker.get("color")),
                zorder=3,
            )

        if "text" in mode:
            self._draw_trace_text(ax, trace, xs, ys)

    def _draw_trace_text(self, ax: plt.Axes, trace: Dict[str, Any], xs: np.ndarray, ys: np.ndarray) -> None:
        font = trace.get("textfont") or {}
        size_px = float(font.get("size", DEFAULT_FONT_SIZE_PX))
        marker_px = float((trace.get("marker") or {}).get("size", 0))
        ha, va, dx, dy = _text_placement(str(trace.get("textposition", "middle center")))
        # keep text clear of the marker glyph
        gap = self._pt(marker_px / 2 + 1)

        for x, y, text in zip(xs, ys, trace.get("text") or []):
            if not text or not (math.isfinite(x) and math.isfinite(y)):
                continue
            ax.annotate(
                str(text),
                xy=(x, y),
                xytext=(dx * gap, dy * gap),
                textcoords="offset points",
                ha=ha,
                va=va,
                fontsize=self._pt(size_px),
                color=parse_plot_color(font.get("color"), DEFAULT_FONT_COLOR),
                zorder=4,
            )

    # ------------------------------------------------------------------
    # annotations
    # ------------------------------------------------------------------

    def _draw_annotation(self, fig: plt.Figure, ax: plt.Axes, ann: Dict[str, Any]) -> None:
        base = _ref_transform(ax, str(ann.get("xref", "x")), str(ann.get("yref", "y")))
        transform = offset_copy(
            base,
            fig=fig,
            x=self._pt(ann.get("xshift", 0)),
            y=self._pt(ann.get("yshift", 0)),
            units="points",
        )
        font = ann.get("font") or {}
        text = str(ann.get("text") or "")
        text_kwargs = dict(
            ha=_HA.get(str(ann.get("xanchor", "auto")), "center"),
            va=_VA.get(str(ann.get("yanchor", "auto")), "center"),
            fontsize=self._pt(font.get("size", DEFAULT_FONT_SIZE_PX)),
            color=parse_plot_color(font.get("color"), DEFAULT_FONT_COLOR),
            annotation_clip=False,
            zorder=5,
        )

        if not ann.get("showarrow"):
            ax.annotate(text, xy=(ann["x"], ann["y"]), xycoords=transform, **text_kwargs)
            return

        head = int(ann.get("arrowhead", 1) or 0)
        arrow_width = self._pt(ann.get("arrowwidth", 1))
        ax.annotate(
            text,
            xy=(ann["x"], ann["y"]),
            xycoords=transform,
            # screen y grows downwards for Plotly offsets
            xytext=(self._pt(ann.get("ax", -10)), -self._pt(ann.get("ay", -30))),
            textcoords="offset points",
            arrowprops=dict(
                arrowstyle="-" if head == 0 else "-|>",
                color=parse_plot_color(ann.get("arrowcolor"), DEFAULT_FONT_COLOR),
                linewidth=arrow_width,
                mutation_scale=max(6.0, arrow_width * 5),
                shrinkA=0,
                shrinkB=0,
            ),
            **text_kwargs,
        )

    # ------------------------------------------------------------------
    # images
    # ------------------------------------------------------------------

    def _draw_image(self, fig: plt.Figure, ax: plt.Axes, image: Dict[str, Any], area_w: float, area_h: float) -> None:
        if image.get("xref", "paper") != "paper" or image.get("yref", "paper") != "paper":
            raise ValueError("Only paper-referenced layout images are supported")

        with Image.open(io.BytesIO(utils.data_url_to_bytes(str(image["source"])))) as img:
            pixels = np.asarray(img.convert("RGBA"))

        img_h, img_w = pixels.shape[:2]
        box_w = float(image.get("sizex", 0))
        box_h = float(image.get("sizey", 0))
        if image.get("sizing", "contain") == "contain" and img_w and img_h:
            # fit inside the box keeping the image's aspect ratio
            fit = min(box_w * area_w / img_w, box_h * area_h / img_h)
            w = img_w * fit / area_w
            h = img_h * fit / area_h
        else:
            w, h = box_w, box_h

        x0 = float(image["x"]) - {"left": 0.0, "center": 0.5, "right": 1.0}.get(image.get("xanchor", "left"), 0.0) * w
        y0 = float(image["y"]) - {"bottom": 0.0, "middle": 0.5, "top": 1.0}.get(image.get("yanchor", "top"), 1.0) * h

        left, bottom, ax_w, ax_h = ax.get_position().bounds
        img_ax = fig.add_axes([left + x0 * ax_w, bottom + y0 * ax_h, w * ax_w, h * ax_h])
        img_ax.imshow(pixels, aspect="auto", interpolation="antialiased")
        img_ax.set_axis_off()


# ============================================================================
# HELPERS
# ============================================================================

def _finite_or_nan(values: Sequence[Any]) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    return np.where(np.isfinite(arr), arr, np.nan)


def _tick_formatter(dtick: float, step: int):
    def _format(value: float, _pos: Any) -> str:
        if int(round(float(value) / dtick)) % step:
            return ""
        return format_tick(round(value, 10))

    return _format


def _ref_transform(ax: plt.Axes, xref: str, yref: str):
    x_transform = ax.transAxes if xref == "paper" else ax.transData
    y_transform = ax.transAxes if yref == "paper" else ax.transData
    return blended_transform_factory(x_transform, y_transform)


def _text_placement(position: str) -> Tuple[str, str, int, int]:
    """Plotly textposition -> (ha, va, x direction, y direction)."""
    parts = position.split()
    vertical = parts[0] if parts else "middle"
    horizontal = parts[1] if len(parts) > 1 else "center"

    va, dy = {"top": ("bottom", 1), "bottom": ("top", -1)}.get(vertical, ("center", 0))
    ha, dx = {"left": ("right", -1), "right": ("left", 1)}.get(horizontal, ("center", 0))
    return ha, va, dx, dy
