"""
Tests for the canvas and initial placements.
"""

import numpy as np
import pytest

from socnetkit.common.exceptions import ConfigurationError
from socnetkit.layout.placement import Canvas, circular_placement, random_placement


class TestCanvas:
    """Test canvas geometry."""

    def setup_method(self):
        self.canvas = Canvas(200, 100, 10)

    def test_bounds(self):
        assert (self.canvas.left, self.canvas.right) == (10, 190)
        assert (self.canvas.top, self.canvas.bottom) == (10, 90)
        assert self.canvas.center == (100.0, 50.0)
        assert self.canvas.scale == 80
        assert self.canvas.area == 180 * 80

    def test_clamp(self):
        assert self.canvas.clamp(-5, 500) == (10.0, 90.0)
        assert self.canvas.clamp(50, 50) == (50.0, 50.0)

    def test_clamp_array_in_place(self):
        coords = np.array([[0.0, 0.0], [300.0, 40.0]])
        result = self.canvas.clamp_array(coords)
        assert result is coords
        np.testing.assert_array_equal(coords, [[10.0, 10.0], [190.0, 40.0]])

    def test_contains(self):
        assert self.canvas.contains(10, 90)
        assert not self.canvas.contains(5, 50)

    def test_margin_too_large(self):
        with pytest.raises(ConfigurationError, match="no room"):
            Canvas(100, 100, 50)

    def test_random_point(self):
        rng = np.random.default_rng(0)
        for _ in range(20):
            assert self.canvas.contains(*self.canvas.random_point(rng))


class TestPlacement:
    """Test random and circular placements."""

    def setup_method(self):
        self.canvas = Canvas()
        self.names = [3, 1, 4, 5, 9]

    def test_random_placement_is_reproducible(self):
        first = random_placement(self.names, self.canvas, seed=11)
        second = random_placement(self.names, self.canvas, seed=11)
        assert first == second
        assert set(first) == set(self.names)
        assert all(self.canvas.contains(x, y) for x, y in first.values())

    def test_circular_placement_starts_at_top(self):
        positions = circular_placement(self.names, self.canvas)
        x, y = positions[3]
        assert x == pytest.approx(self.canvas.center[0])
        assert y == pytest.approx(self.canvas.top)

    def test_circular_placement_is_evenly_spaced(self):
        positions = circular_placement(self.names, self.canvas, radius=100)
        cx, cy = self.canvas.center
        radii = [np.hypot(x - cx, y - cy) for x, y in positions.values()]
        np.testing.assert_allclose(radii, 100.0)
        assert len(set(positions.values())) == len(self.names)

    def test_empty_placement(self):
        assert circular_placement([], self.canvas) == {}
        assert random_placement([], self.canvas) == {}
