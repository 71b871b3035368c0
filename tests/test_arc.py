"""
Tests for the quadratic curve approximation of the sight arc.
"""

import math

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from fov2d.arc import needs_arc, quad_bezier_ctrl_point, sample_quadratic_bezier
from fov2d.geometry import Segment


def pt(x: float, y: float) -> np.ndarray:
    return np.array([x, y], dtype=np.float64)


class TestQuadBezierCtrlPoint:
    """Tests for quad_bezier_ctrl_point()."""

    def test_quarter_circle(self):
        ctrl = quad_bezier_ctrl_point(pt(1, 0), pt(0, 1), pt(0, 0), 1.0)
        expected = (2.0 - math.sqrt(0.5)) * math.sqrt(0.5)
        assert_allclose(ctrl, [expected, expected])

    def test_midpoint_on_circle(self):
        """The curve at t = 1/2 lies on the circle."""
        centre = pt(10, -4)
        radius = 50.0
        for angle in (0.1, 0.5, 1.0, 1.9):
            a = pt(1, 0)
            b = pt(math.cos(angle), math.sin(angle))
            ctrl = quad_bezier_ctrl_point(b, a, centre, radius)
            start = centre + a * radius
            end = centre + b * radius
            mid = 0.25 * start + 0.5 * ctrl + 0.25 * end
            assert np.hypot(*(mid - centre)) == pytest.approx(radius)

    def test_symmetric_in_rays(self):
        a = pt(0.8, 0.6)
        b = pt(0.6, -0.8)
        assert_allclose(
            quad_bezier_ctrl_point(a, b, pt(0, 0), 3.0),
            quad_bezier_ctrl_point(b, a, pt(0, 0), 3.0),
        )


class TestNeedsArc:
    """Tests for needs_arc()."""

    def test_no_blocker(self):
        assert needs_arc(pt(0, 10), pt(10, 0), None)

    def test_blocker_along_chord(self):
        blocker = Segment(pt(0, 20), pt(20, 0))
        assert not needs_arc(pt(0, 10), pt(10, 0), blocker)

    def test_blocker_across_chord(self):
        blocker = Segment(pt(10, -5), pt(10, 5))
        assert needs_arc(pt(0, 10), pt(10, 0), blocker)


class TestSampleQuadraticBezier:
    """Tests for sample_quadratic_bezier()."""

    def test_shape_and_end(self):
        samples = sample_quadratic_bezier(pt(0, 0), pt(1, 2), pt(2, 0), samples=4)
        assert samples.shape == (4, 2)
        assert_allclose(samples[-1], [2.0, 0.0])

    def test_start_excluded(self):
        samples = sample_quadratic_bezier(pt(0, 0), pt(1, 2), pt(2, 0), samples=2)
        assert_allclose(samples[0], [1.0, 1.0])

    def test_straight_control(self):
        """A control point on the chord yields points on the chord."""
        samples = sample_quadratic_bezier(pt(0, 0), pt(5, 0), pt(10, 0), samples=5)
        assert_array_equal(samples[:, 1], np.zeros(5))

    def test_invalid_samples(self):
        with pytest.raises(ValueError, match="samples"):
            sample_quadratic_bezier(pt(0, 0), pt(1, 1), pt(2, 0), samples=0)
