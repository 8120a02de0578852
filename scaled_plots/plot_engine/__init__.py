"""
plot_engine — geometry, layout and rendering of print-scaled function plots.

Typical use:

    from scaled_plots.plot_engine import PlotGenerator, plot_from_dict, plot_has_error_code

    result = PlotGenerator().generate(plot_from_dict(config))
    if plot_has_error_code(result):
        ...
"""

from .models import (
    Area,
    AreaPoint,
    AxisRange,
    Line,
    Marker,
    MathFunction,
    Plot,
    PlotRange,
    PlotSettings,
    plot_from_dict,
    plot_settings_from_dict,
)
from .plot_common import (
    PlotGenerateErrorCode,
    PlotImage,
    PlotSizeMm,
    RenderingEnvironment,
    hex_to_rgba,
    plot_has_error_code,
)
from .plotter import PlotGenerator, calculate_plot_size_mm, extract_raw_picture_data, generate_plot
