"""Tests for points, viewports and fit helpers."""

import math

import pytest

from jsonscape.coordinates import (
    MIN_FIT_SCALE,
    Bounds,
    Point,
    Size,
    Viewport,
    centered_viewport,
    fit_viewport,
    is_positive_finite,
    round_px,
)


class TestViewport:
    def test_screen_world_inverse(self):
        viewport = Viewport(scale=2.5, tx=-30, ty=12)
        world = Point(17, -4)
        back = viewport.to_world(viewport.to_screen(world))
        assert (back.x, back.y) == pytest.approx((17, -4))

    def test_anchored_keeps_scale(self):
        viewport = Viewport(scale=0.5, tx=3, ty=4).anchored(Point(100, 100), Point(10, 20))
        assert viewport.scale == 0.5
        assert viewport.to_screen(Point(100, 100)) == Point(10, 20)


class TestFit:
    def test_small_graph_is_not_enlarged(self):
        assert fit_viewport(Bounds(0, 0, 100, 50), Size(224, 124)) == Viewport(scale=1.0, tx=62.0, ty=37.0)

    def test_large_graph_shrinks_to_fit(self):
        viewport = fit_viewport(Bounds(0, 0, 2000, 100), Size(1024, 768))
        assert viewport.scale == pytest.approx(1000 / 2000)
        assert viewport.to_screen(Point(1000, 50)) == Point(512, 384)

    def test_scale_floor(self):
        viewport = fit_viewport(Bounds(0, 0, 1_000_000, 10), Size(100, 100))
        assert viewport.scale == MIN_FIT_SCALE

    def test_centered_viewport(self):
        viewport = centered_viewport(Point(40, 40), Size(200, 100), scale=2)
        assert viewport.to_screen(Point(40, 40)) == Point(100, 50)


class TestHelpers:
    def test_bounds(self):
        bounds = Bounds(10, 20, 110, 60)
        assert (bounds.width, bounds.height) == (100, 40)
        assert bounds.center == Point(60, 40)

    @pytest.mark.parametrize("value, expected", [(2.5, 3), (-0.5, 0), (1.49, 1), (-1.5, -1)])
    def test_round_px(self, value, expected):
        assert round_px(value) == expected

    @pytest.mark.parametrize("value", [0, -1, math.nan, math.inf, None, True, "5"])
    def test_not_positive_finite(self, value):
        assert not is_positive_finite(value)

    def test_size_validity(self):
        assert Size(1, 2).is_valid
        assert not Size(0, 2).is_valid
