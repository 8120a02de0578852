"""
plotter.py — Plot orchestrator (entry point of the plot_engine package)

This file contains ONLY:
- PlotGenerator (compile -> evaluate -> size -> annotate -> render)
- generate_plot (module-level convenience wrapper)
- calculate_plot_size_mm / extract_raw_picture_data

All geometry lives in the stage modules:
- expressions.py (ranges, compile/evaluate, cleanup)
- sizing.py      (plot size + margins)
- annotations.py (ticks, arrows, captions)
- labels.py      (function legend placement)
- traces.py      (series)
- renderer.py    (raster output)

Pipeline failures come back as PlotGenerateErrorCode values, never as
exceptions; check results with plot_has_error_code().
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

from .. import utils
from ..config import settings
from ..constants import LegendPosition
from .annotations import build_annotations, build_arrows
from .expressions import clean_up_values, compile_expressions, create_ranges, evaluate_expressions
from .label_images import MathLabelRenderer
from .labels import calculate_label_image_coordinates, find_label_position
from .models import DEFAULT_PLOT_SETTINGS, Plot, PlotSettings
from .plot_common import (
    DTICK,
    PlotGenerateErrorCode,
    PlotImage,
    PlotMarginMm,
    PlotSizeCalculation,
    PlotSizeMm,
    RenderingEnvironment,
    margin_to_px,
    plot_has_error_code,
)
from .renderer import MatplotlibRenderer, PlotRenderer
from .sizing import calculate_effective_margin, calculate_plot_size
from .sizing import calculate_plot_size_mm as _calculate_plot_size_mm
from .traces import build_plot_data

logger = utils.setup_logger(__name__)

_DEFAULT = object()

TICK_FONT = {"size": 10}


class PlotGenerator:
    """
    Turns a Plot + PlotSettings into a PNG with its physical size.

    `renderer` and `label_renderer` are the two external capabilities.
    Pass label_renderer=None to skip function legends entirely; by default
    one is created when PLOT_RENDER_LABELS is on.
    """

    def __init__(
        self,
        environment: Optional[RenderingEnvironment] = None,
        renderer: Optional[PlotRenderer] = None,
        label_renderer: Any = _DEFAULT,
    ):
        self.environment = environment or RenderingEnvironment.from_settings()
        self.renderer = renderer or MatplotlibRenderer(self.environment)
        if label_renderer is _DEFAULT:
            label_renderer = MathLabelRenderer() if settings.PLOT_RENDER_LABELS else None
        self.label_renderer = label_renderer

    # ------------------------------------------------------------------
    # public
    # ------------------------------------------------------------------

    def generate(
        self,
        plot: Plot,
        plot_settings: Optional[PlotSettings] = None,
        apply_scale_factor: bool = False,
    ) -> Union[PlotImage, PlotGenerateErrorCode]:
        plot_settings = plot_settings or DEFAULT_PLOT_SETTINGS
        name = plot.name or "<unnamed>"

        logger.debug("[%s] compiling %d expression(s)", name, len(plot.functions))
        expressions = compile_expressions(plot.functions)
        if plot_has_error_code(expressions):
            logger.warning("[%s] generate failed: %s", name, expressions.value)
            return expressions

        logger.debug("[%s] evaluating", name)
        value_ranges = create_ranges(plot)
        y_values = evaluate_expressions(expressions, value_ranges)
        if plot_has_error_code(y_values):
            logger.warning("[%s] generate failed: %s", name, y_values.value)
            return y_values

        logger.debug("[%s] sizing", name)
        cleaned = clean_up_values(y_values, value_ranges, plot)
        margin = calculate_effective_margin(plot)
        size_calc = calculate_plot_size(plot, cleaned, value_ranges, margin, self.environment)

        annotations = build_annotations(plot, plot_settings)
        images = self._build_function_label_images(
            plot, cleaned.x_values_array, cleaned.y_values_array, size_calc, margin,
        )
        arrows = build_arrows(plot, plot_settings, size_calc.x_value_max, size_calc.y_value_max)
        data = build_plot_data(plot, plot_settings, cleaned.x_values_array, cleaned.y_values_array)

        logger.debug("[%s] rendering", name)
        return self._render(
            plot, plot_settings, size_calc, margin, annotations, arrows, data, images, apply_scale_factor,
        )

    def calculate_plot_size_mm(self, plot: Plot) -> PlotSizeMm:
        return _calculate_plot_size_mm(plot)

    # ------------------------------------------------------------------
    # function legends
    # ------------------------------------------------------------------

    def _build_function_label_images(
        self,
        plot: Plot,
        x_values: Sequence[float],
        y_values: Sequence[Sequence[float]],
        size_calc: PlotSizeCalculation,
        margin: PlotMarginMm,
    ) -> List[Dict[str, Any]]:
        if self.label_renderer is None:
            return []

        images: List[Dict[str, Any]] = []
        for fn, ys in zip(plot.functions, y_values):
            if fn.legend_position == LegendPosition.NONE:
                continue

            from_start = fn.legend_position == LegendPosition.START
            pos = find_label_position(x_values, ys, size_calc.y_value_min, size_calc.y_value_max, from_start)
            if pos is None:
                logger.debug("No visible part of '%s'; legend skipped", utils.truncate(fn.expression, 80))
                continue

            rendered = self.label_renderer.render(fn.expression, fn.color)
            if rendered is None:
                continue

            coords = calculate_label_image_coordinates(
                pos, rendered.width_px, rendered.height_px, size_calc, margin, from_start, self.environment,
            )
            if coords is None:
                logger.debug("Plot area of '%s' is empty; legend skipped", utils.truncate(fn.expression, 80))
                continue
            images.append({
                "source": rendered.data_url,
                "x": coords.x,
                "y": coords.y,
                "xref": "paper",
                "yref": "paper",
                "sizex": coords.sizex,
                "sizey": coords.sizey,
                "xanchor": coords.xanchor,
                "yanchor": "bottom",
                "sizing": "contain",
                "layer": "above",
            })

        return images

    # ------------------------------------------------------------------
    # render
    # ------------------------------------------------------------------

    def build_layout(
        self,
        plot: Plot,
        plot_settings: PlotSettings,
        size_calc: PlotSizeCalculation,
        margin: PlotMarginMm,
        annotations: List[Dict[str, Any]],
        arrows: List[Dict[str, Any]],
        images: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        if not plot.show_axis:
            layout_annotations = None
        elif plot.show_axis_labels and plot.place_axis_labels_inside:
            layout_annotations = [*annotations, *arrows]
        else:
            layout_annotations = arrows

        show_tick_labels = plot.show_axis_labels and not plot.place_axis_labels_inside
        margin_t, margin_b, margin_l, margin_r = margin_to_px(margin, self.environment)

        def axis(value_min: float, value_max: float) -> Dict[str, Any]:
            return {
                "range": [value_min, value_max],
                "autorange": False,
                "showticklabels": show_tick_labels,
                "tickmode": "linear",
                "dtick": DTICK,
                "ticklabelstep": 2,
                "gridcolor": plot_settings.grid_line_color,
                "gridwidth": plot_settings.grid_line_width,
                "tickfont": dict(TICK_FONT),
                "zeroline": plot.show_axis,
                "zerolinewidth": plot_settings.zero_line_width,
                "zerolinecolor": plot_settings.zero_line_color,
                "linewidth": plot_settings.grid_line_width,
                "linecolor": plot_settings.grid_line_color,
                "mirror": True,
            }

        xaxis = axis(size_calc.x_value_min, size_calc.x_value_max)
        xaxis["scaleanchor"] = "y"

        layout: Dict[str, Any] = {
            "autosize": False,
            "showlegend": False,
            "width": size_calc.plot_size_px.width,
            "height": size_calc.plot_size_px.height,
            "annotations": layout_annotations,
            "margin": {"t": margin_t, "b": margin_b, "l": margin_l, "r": margin_r},
            "xaxis": xaxis,
            "yaxis": axis(size_calc.y_value_min, size_calc.y_value_max),
        }
        if images:
            layout["images"] = images
        return layout

    def _render(
        self,
        plot: Plot,
        plot_settings: PlotSettings,
        size_calc: PlotSizeCalculation,
        margin: PlotMarginMm,
        annotations: List[Dict[str, Any]],
        arrows: List[Dict[str, Any]],
        data: List[Dict[str, Any]],
        images: List[Dict[str, Any]],
        apply_scale_factor: bool,
    ) -> Union[PlotImage, PlotGenerateErrorCode]:
        layout = self.build_layout(plot, plot_settings, size_calc, margin, annotations, arrows, images)
        size_px = size_calc.plot_size_px

        try:
            image = self.renderer.render(
                data,
                layout,
                size_px.width,
                size_px.height,
                scale=self.environment.scale_factor if apply_scale_factor else None,
                config={"staticPlot": True},
            )
        except Exception as e:
            logger.error("Rendering '%s' failed: %s", plot.name or "<unnamed>", e, exc_info=True)
            return PlotGenerateErrorCode.PLOT

        return PlotImage(
            base64=image,
            width_in_px=size_px.width,
            height_in_px=size_px.height,
            width_in_points=size_calc.plot_size_points.width,
            height_in_points=size_calc.plot_size_points.height,
        )


# ============================================================================
# MODULE-LEVEL HELPERS
# ============================================================================

def generate_plot(
    plot: Plot,
    plot_settings: Optional[PlotSettings] = None,
    apply_scale_factor: bool = False,
    environment: Optional[RenderingEnvironment] = None,
) -> Union[PlotImage, PlotGenerateErrorCode]:
    return PlotGenerator(environment=environment).generate(plot, plot_settings, apply_scale_factor)


def calculate_plot_size_mm(plot: Plot) -> PlotSizeMm:
    return _calculate_plot_size_mm(plot)


def extract_raw_picture_data(data_url: str) -> str:
    """'data:image/png;base64,AAAA' -> 'AAAA' (what Word's insertInlinePictureFromBase64 expects)."""
    if data_url.startswith(utils.PNG_DATA_URL_PREFIX):
        return data_url[len(utils.PNG_DATA_URL_PREFIX):]
    return data_url
