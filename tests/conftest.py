"""Shared pytest fixtures for the plot_engine tests.

Forces the headless Agg backend before anything imports pyplot, and
provides small builders for plots, settings and fake rendering
capabilities so individual tests stay short.
"""

import io
import os

os.environ.setdefault("MPLBACKEND", "Agg")

import pytest  # noqa: E402
from PIL import Image  # noqa: E402

from scaled_plots import utils  # noqa: E402
from scaled_plots.plot_engine.label_images import RenderedLabel  # noqa: E402
from scaled_plots.plot_engine.models import (  # noqa: E402
    AxisRange,
    MathFunction,
    Plot,
    PlotRange,
    PlotSettings,
)


def build_plot(x=(-5, 5), y=(-5, 5), **kwargs):
    """Plot over the given ranges; extra keyword arguments go to Plot."""
    return Plot(range=PlotRange(x=AxisRange(*x), y=AxisRange(*y)), **kwargs)


def tiny_png_data_url(width=8, height=4, color=(255, 0, 0, 255)):
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, format="PNG")
    return utils.png_to_data_url(buf.getvalue())


class RecordingRenderer:
    """Renderer double that keeps the last call and returns a fixed image."""

    def __init__(self):
        self.calls = []

    def render(self, data, layout, width, height, scale=None, config=None):
        self.calls.append(
            {"data": data, "layout": layout, "width": width, "height": height, "scale": scale, "config": config}
        )
        return tiny_png_data_url()


class FailingRenderer:
    """Renderer double that always raises."""

    def render(self, data, layout, width, height, scale=None, config=None):
        raise RuntimeError("renderer exploded")


class FakeLabelRenderer:
    """Label renderer double returning a 20x10 px label for every expression."""

    def __init__(self):
        self.expressions = []

    def render(self, expression, color):
        self.expressions.append(expression)
        return RenderedLabel(data_url=tiny_png_data_url(80, 40), width_px=20.0, height_px=10.0)


@pytest.fixture
def make_plot():
    return build_plot


@pytest.fixture
def plot_settings():
    return PlotSettings()


@pytest.fixture
def parabola_plot():
    return build_plot(functions=[MathFunction("x^2", "#1f77b4")], name="parabola")


@pytest.fixture
def recording_renderer():
    return RecordingRenderer()


@pytest.fixture
def fake_label_renderer():
    return FakeLabelRenderer()
