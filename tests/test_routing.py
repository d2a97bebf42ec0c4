"""Tests for edge routing, curve controls and SVG path data."""

import logging

import pytest

from jsonscape import Point, layout, normalize, path_data, route
from jsonscape.geometry import EdgeConnectionValidator, format_issues
from jsonscape.routing import curve_control_points
from jsonscape.settings import Direction, LayoutSettings, LinkStyle
from tests.conftest import B, C, D, ROOT, make_graph, make_settings


def routed(doc, settings):
    return route(layout(normalize(doc), settings), settings)


class TestAnchors:
    def test_line_forward(self, sample_doc):
        settings = make_settings(align="center", link_style="line")
        edges = routed(sample_doc, settings).edge_by_id()

        assert edges[f"{ROOT}__{B}"].points == (Point(256, 120.0), Point(320, 72.0))
        assert edges[f"{C}__{D}"].points == (Point(576, 168.0), Point(640, 168.0))

    def test_orthogonal_forward(self, sample_doc):
        settings = make_settings(align="center", link_style="orthogonal")
        edge = routed(sample_doc, settings).edge_by_id()[f"{ROOT}__{B}"]

        assert edge.points == (Point(256, 120.0), Point(288.0, 120.0), Point(288.0, 72.0), Point(320, 72.0))

    def test_orthogonal_downward(self, sample_doc):
        settings = make_settings(direction="downward", link_style="orthogonal")
        edge = routed(sample_doc, settings).edge_by_id()[f"{ROOT}__{C}"]

        assert edge.points == (Point(168.0, 64), Point(168.0, 80.0), Point(488.0, 80.0), Point(488.0, 96))

    def test_curve_keeps_two_anchors(self, sample_doc):
        edge = routed(sample_doc, make_settings()).edges[0]
        assert len(edge.points) == 2

    def test_dangling_edge_gets_no_points(self, caplog):
        graph = layout(make_graph(["a", "b"], [("a", "b"), ("a", "ghost")]))
        with caplog.at_level(logging.DEBUG, logger="jsonscape.routing"):
            edges = route(graph).edge_by_id()

        assert edges["a__ghost"].points == ()
        assert len(edges["a__b"].points) == 2
        assert any("missing endpoint" in r.getMessage() for r in caplog.records)

    def test_route_does_not_move_nodes(self, sample_doc):
        positioned = layout(normalize(sample_doc))
        assert route(positioned).nodes == positioned.nodes


class TestEndpointCorrectness:
    @pytest.mark.parametrize("direction", list(Direction))
    @pytest.mark.parametrize("style", [LinkStyle.LINE, LinkStyle.ORTHOGONAL])
    def test_endpoints_on_node_sides(self, catalog_doc, direction, style):
        settings = make_settings(direction=direction, link_style=style)
        graph = routed(catalog_doc, settings)

        issues = EdgeConnectionValidator.from_graph(graph, settings).validate_all()
        assert issues == {}, format_issues(issues)

    def test_measured_sizes(self, sample_doc):
        settings = make_settings(link_style="line")
        full = normalize(sample_doc)
        sized = full.with_nodes(n.resized(100 + 10 * i, 40 + 7 * i) for i, n in enumerate(full.nodes))
        graph = route(layout(sized, settings), settings)

        issues = EdgeConnectionValidator.from_graph(graph, settings).validate_all()
        assert issues == {}, format_issues(issues)

    def test_validator_reports_wrong_start(self, sample_doc):
        settings = make_settings(link_style="line")
        graph = routed(sample_doc, settings)
        edge = graph.edges[0]
        moved = graph.with_edges([edge.with_points((Point(0, 0), edge.points[-1])), *graph.edges[1:]])

        issues = EdgeConnectionValidator.from_graph(moved, settings).validate_all()
        assert list(issues) == [edge.id]
        assert "start off" in issues[edge.id][0]


class TestCurveControls:
    def test_level_anchors_get_a_bow(self):
        controls = curve_control_points(Point(0, 0), Point(100, 0), LayoutSettings())
        assert controls == (Point(30, -15.0), Point(70, 15.0))

    def test_no_bow_when_offset(self):
        controls = curve_control_points(Point(0, 0), Point(100, 40), LayoutSettings())
        assert controls == (Point(30, 0), Point(70, 40))

    def test_below_threshold_is_straight(self):
        assert curve_control_points(Point(0, 0), Point(40, 50), LayoutSettings()) is None

    def test_tension_is_clamped(self):
        high = curve_control_points(Point(0, 0), Point(300, 100), LayoutSettings(curve_tension=500))
        assert high == (Point(200, 0), Point(100, 100))
        low = curve_control_points(Point(0, 0), Point(300, 100), LayoutSettings(curve_tension=1))
        assert low == (Point(20, 0), Point(280, 100))

    def test_bow_is_clamped(self):
        controls = curve_control_points(Point(0, 0), Point(400, 0), LayoutSettings(curve_tension=200))
        assert controls == (Point(200, -96.0), Point(200, 96.0))

    def test_downward(self):
        settings = LayoutSettings(direction=Direction.DOWNWARD)
        assert curve_control_points(Point(0, 0), Point(0, 100), settings) == (Point(-15.0, 30), Point(15.0, 70))

    def test_backwards_edge_points_controls_inwards(self):
        controls = curve_control_points(Point(100, 0), Point(0, 50), LayoutSettings())
        assert controls == (Point(70, 0), Point(30, 50))


class TestPathData:
    def test_empty(self):
        assert path_data(()) == ""

    def test_line(self):
        settings = LayoutSettings(link_style=LinkStyle.LINE)
        assert path_data((Point(0, 0), Point(10.5, 5)), settings) == "M 0,0 L 10.5,5"

    def test_curve(self):
        assert path_data((Point(0, 0), Point(100, 0))) == "M 0,0 C 30,-15 70,15 100,0"

    def test_short_curve_is_straight(self):
        assert path_data((Point(0, 0), Point(20, 20))) == "M 0,0 L 20,20"

    def test_orthogonal(self, sample_doc):
        settings = make_settings(align="center", link_style="orthogonal")
        edge = routed(sample_doc, settings).edge_by_id()[f"{ROOT}__{B}"]
        assert path_data(edge.points, settings) == "M 256,120 L 288,120 L 288,72 L 320,72"
