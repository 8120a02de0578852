"""Tests for loading plots and settings from dicts, and marker naming."""

import pytest

from scaled_plots.constants import MarkerNamingScheme
from scaled_plots.plot_engine.marker_naming import generate_marker_name
from scaled_plots.plot_engine.models import (
    PlotSettings,
    plot_from_dict,
    plot_settings_from_dict,
)

CONFIG = {
    "name": "Parabola",
    "range": {"x": {"min": -5, "max": 5}, "y": {"min": -2, "max": 8}},
    "fnx": [{"fnx": "x^2", "color": "#1f77b4", "legendPosition": "end"}],
    "markers": [{"x": 1, "y": 1}, {"x": 2, "y": 4, "text": "Top"}],
    "areas": [
        {
            "points": [{"x": 0, "y": 0, "labelText": "O"}, {"x": 2, "y": 0, "labelPosition": "bottom right"}],
            "color": "#ff0000",
            "showPoints": True,
        }
    ],
    "lines": [{"x1": -1, "y1": 0, "x2": 1, "y2": 2, "color": "#00ff00"}],
    "squarePlots": True,
    "showAxisLabels": False,
    "axisLabelX": "t",
}


class TestPlotFromDict:
    """Tests for plot_from_dict."""

    def test_camel_case_config(self):
        """The add-in's camelCase keys load into the dataclasses."""
        plot = plot_from_dict(CONFIG)
        assert plot.name == "Parabola"
        assert (plot.range.y.min, plot.range.y.max) == (-2, 8)
        assert plot.functions[0].expression == "x^2"
        assert plot.functions[0].legend_position == "end"
        assert plot.areas[0].show_points is True
        assert plot.areas[0].points[0].label_text == "O"
        assert plot.areas[0].points[0].label_position == "auto"
        assert plot.areas[0].points[1].label_position == "bottom right"
        assert plot.lines[0].x2 == 1
        assert plot.square_plots is True
        assert plot.show_axis_labels is False
        assert plot.show_axis is True
        assert plot.axis_label_x == "t"
        assert plot.axis_label_y == "y"

    def test_unnamed_markers_get_names(self):
        """Markers without text are named by the naming scheme."""
        plot = plot_from_dict(CONFIG)
        assert [m.text for m in plot.markers] == ["A", "Top"]

        numeric = plot_from_dict(CONFIG, PlotSettings(marker_naming_scheme=MarkerNamingScheme.NUMERIC))
        assert numeric.markers[0].text == "P1"

    def test_snake_case_functions(self):
        """snake_case keys work too."""
        plot = plot_from_dict({
            "range": {"x": {"min": 0, "max": 1}, "y": {"min": 0, "max": 1}},
            "functions": [{"expression": "sin(x)", "legend_position": "start"}],
        })
        assert plot.functions[0].expression == "sin(x)"
        assert plot.functions[0].color == "#000000"

    def test_missing_range(self):
        """A plot without range is rejected."""
        with pytest.raises(ValueError):
            plot_from_dict({"name": "x"})

    def test_non_numeric_bound(self):
        """Range bounds must be numbers."""
        with pytest.raises(ValueError):
            plot_from_dict({"range": {"x": {"min": "a", "max": 1}, "y": {"min": 0, "max": 1}}})

    def test_string_flags(self):
        """Flags written as strings are parsed, so "false" stays false."""
        plot = plot_from_dict(dict(CONFIG, squarePlots="false", showAxis="0", showAxisLabels="Yes"))
        assert plot.square_plots is False
        assert plot.show_axis is False
        assert plot.show_axis_labels is True

    @pytest.mark.parametrize("value", ["maybe", 2, [True]])
    def test_invalid_flag(self, value):
        """Values that are not booleans are rejected."""
        with pytest.raises(ValueError):
            plot_from_dict(dict(CONFIG, showAxis=value))

    def test_unknown_legend_position(self):
        """Legend positions are validated."""
        with pytest.raises(ValueError):
            plot_from_dict({
                "range": {"x": {"min": 0, "max": 1}, "y": {"min": 0, "max": 1}},
                "fnx": [{"fnx": "x", "legendPosition": "middle"}],
            })


class TestPlotSettingsFromDict:
    """Tests for plot_settings_from_dict."""

    def test_defaults(self):
        """No stored settings gives the defaults."""
        assert plot_settings_from_dict(None) == PlotSettings()

    def test_merge(self):
        """Stored values override the defaults key by key."""
        settings = plot_settings_from_dict({"zeroLineWidth": 2, "grid_line_color": "#cccccc"})
        assert settings.zero_line_width == 2
        assert settings.grid_line_color == "#cccccc"
        assert settings.plot_line_width == PlotSettings().plot_line_width

    def test_unknown_scheme(self):
        """Marker naming schemes are validated."""
        with pytest.raises(ValueError):
            plot_settings_from_dict({"markerNamingScheme": "roman"})


class TestGenerateMarkerName:
    """Tests for generate_marker_name."""

    @pytest.mark.parametrize(
        "index, expected",
        [(0, "A"), (1, "B"), (25, "Z"), (26, "AA"), (27, "AB"), (701, "ZZ"), (702, "AAA")],
    )
    def test_alphabetic(self, index, expected):
        """Alphabetic names count like spreadsheet columns."""
        assert generate_marker_name(index) == expected

    def test_numeric(self):
        """Numeric names are 1-based."""
        assert generate_marker_name(0, MarkerNamingScheme.NUMERIC) == "P1"
        assert generate_marker_name(9, MarkerNamingScheme.NUMERIC) == "P10"
