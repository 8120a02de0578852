"""Tests for series building and area-point label directions."""

import pytest

from scaled_plots.constants import LabelPosition
from scaled_plots.plot_engine.models import Area, AreaPoint, Line, Marker, MathFunction
from scaled_plots.plot_engine.traces import (
    build_area_traces,
    build_function_traces,
    build_line_traces,
    build_marker_traces,
    build_plot_data,
    calculate_label_position,
    resolve_label_position,
)

SQUARE = [AreaPoint(-1, -1), AreaPoint(1, -1), AreaPoint(1, 1), AreaPoint(-1, 1)]


class TestCalculateLabelPosition:
    """Tests for the compass classifier."""

    @pytest.mark.parametrize(
        "x, y, expected",
        [
            (1, 0, "middle right"),
            (1, 1, "top right"),
            (0, 1, "top center"),
            (-1, 1, "top left"),
            (-1, 0, "middle left"),
            (-1, -1, "bottom left"),
            (0, -1, "bottom center"),
            (1, -1, "bottom right"),
        ],
    )
    def test_eight_directions_around_square(self, x, y, expected):
        """Each principal offset from the centre maps to its own direction."""
        assert calculate_label_position(AreaPoint(x, y), SQUARE) == expected

    def test_both_signs_of_180_degrees(self):
        """+180 and -180 degrees are both middle left."""
        origin = [AreaPoint(0, 0)]
        assert calculate_label_position(AreaPoint(-1, 0.0), origin) == "middle left"
        assert calculate_label_position(AreaPoint(-1, -0.0), origin) == "middle left"

    def test_point_on_centroid(self):
        """A point on the centroid has angle 0."""
        assert calculate_label_position(AreaPoint(0, 0), SQUARE) == "middle right"

    def test_resolve_keeps_explicit(self):
        """Explicit positions are not recomputed."""
        point = AreaPoint(1, 1, label_position=LabelPosition.BOTTOM_LEFT)
        assert resolve_label_position(point, SQUARE) == "bottom left"

    def test_resolve_auto(self):
        """auto is classified against the polygon."""
        assert resolve_label_position(AreaPoint(1, 1), SQUARE) == "top right"


class TestTraces:
    """Tests for the individual trace builders."""

    def test_function_traces(self, make_plot, plot_settings):
        """One trace per function with its color."""
        plot = make_plot(functions=[MathFunction("x", "#ff0000"), MathFunction("2*x", "#00ff00")])
        traces = build_function_traces(plot, plot_settings, [0, 1], [[0, 1], [0, 2]])
        assert [t["line"]["color"] for t in traces] == ["#ff0000", "#00ff00"]
        assert traces[1]["y"] == [0, 2]
        assert traces[0]["line"]["width"] == plot_settings.plot_line_width

    def test_no_functions(self, make_plot, plot_settings):
        """No functions means no function traces, even with y samples."""
        assert build_function_traces(make_plot(), plot_settings, [0, 1], [[0, 1]]) == []

    def test_single_marker_trace(self, make_plot):
        """All markers share one trace."""
        plot = make_plot(markers=[Marker(1, 2, "A"), Marker(3, 4, "B")])
        traces = build_marker_traces(plot)
        assert len(traces) == 1
        trace = traces[0]
        assert trace["x"] == [1, 3]
        assert trace["text"] == ["A", "B"]
        assert trace["mode"] == "text+markers"
        assert trace["marker"]["symbol"] == "x-thin"
        assert trace["textposition"] == "bottom left"

    def test_line_traces(self, make_plot, plot_settings):
        """Each segment is its own two-point trace."""
        plot = make_plot(lines=[Line(0, 0, 1, 1, "#123456"), Line(-1, 2, 3, 4)])
        traces = build_line_traces(plot, plot_settings)
        assert len(traces) == 2
        assert traces[0]["x"] == [0, 1]
        assert traces[1]["y"] == [2, 4]
        assert traces[0]["line"]["color"] == "#123456"
        assert traces[0]["fill"] == "none"

    def test_area_fill_is_closed(self, make_plot, plot_settings):
        """The fill polygon repeats its first vertex."""
        plot = make_plot(areas=[Area(points=SQUARE, color="#ff0000")])
        traces = build_area_traces(plot, plot_settings)
        assert len(traces) == 1
        fill = traces[0]
        assert fill["x"] == [-1, 1, 1, -1, -1]
        assert fill["y"] == [-1, -1, 1, 1, -1]
        assert fill["fill"] == "toself"
        assert fill["fillcolor"] == "rgba(255, 0, 0, 0.7)"
        assert fill["line"] == {"width": plot_settings.zero_line_width, "color": plot_settings.zero_line_color}

    def test_area_points_grouped_by_direction(self, make_plot, plot_settings):
        """Vertex labels are grouped per direction in first-seen order."""
        points = [
            AreaPoint(-1, -1, label_text="A"),
            AreaPoint(1, -1, label_text="B", label_position=LabelPosition.BOTTOM_LEFT),
            AreaPoint(1, 1, label_text="C"),
            AreaPoint(-1, 1, label_text="D"),
        ]
        plot = make_plot(areas=[Area(points=points, color="#00ff00", show_points=True)])
        traces = build_area_traces(plot, plot_settings)

        groups = traces[1:]
        assert [t["textposition"] for t in groups] == ["bottom left", "top right", "top left"]
        assert groups[0]["text"] == ["A", "B"]
        assert groups[0]["x"] == [-1, 1]

    def test_hidden_area_points(self, make_plot, plot_settings):
        """show_points=False draws only the fill."""
        plot = make_plot(areas=[Area(points=SQUARE, show_points=False)])
        assert len(build_area_traces(plot, plot_settings)) == 1


class TestBuildPlotData:
    """Tests for build_plot_data."""

    def test_order(self, make_plot, plot_settings):
        """Functions, markers, lines, fills, then area-point groups."""
        plot = make_plot(
            functions=[MathFunction("x")],
            markers=[Marker(0, 0, "A")],
            lines=[Line(0, 0, 1, 1)],
            areas=[Area(points=SQUARE, show_points=True)],
        )
        data = build_plot_data(plot, plot_settings, [0, 1], [[0, 1]])
        assert [t.get("fill", t["mode"]) for t in data[:4]] == ["lines", "text+markers", "none", "toself"]
        assert len(data) == 4 + 4
