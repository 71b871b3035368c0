"""
Integration tests for the field-of-vision API.

These tests check properties the visible region must have for any scene:
symmetry under rotation, repeatability, occlusion by blocking edges, and
the behaviour at polygon corners.
"""

import math

import numpy as np
import pytest
from numpy.typing import NDArray

from fov2d import FovConfig, compute_fov
from fov2d.geometry import HALF_AUX_RAY_TILT


# =============================================================================
# Helper functions for creating test fixtures
# =============================================================================


def rotate_about(
    points: NDArray[np.float64], pivot: NDArray[np.float64], angle: float
) -> NDArray[np.float64]:
    """Rotate (N, 2) or (2,) points about pivot by angle (radians)."""
    c, s = math.cos(angle), math.sin(angle)
    rot = np.array([[c, -s], [s, c]])
    return (np.asarray(points, dtype=np.float64) - pivot) @ rot.T + pivot


def make_square(center: tuple[float, float], half_size: float = 15.0) -> NDArray[np.float64]:
    """Create a square centered at given point."""
    cx, cy = center
    return np.array(
        [
            [cx - half_size, cy - half_size],
            [cx + half_size, cy - half_size],
            [cx + half_size, cy + half_size],
            [cx - half_size, cy + half_size],
        ],
        dtype=np.float64,
    )


def ray_angles(result) -> NDArray[np.float64]:
    return np.arctan2(result.rays[:, 1], result.rays[:, 0])


# A triangle in front of a wall, both inside the cone
TRIANGLE = np.array([[40.0, -10.0], [60.0, 5.0], [45.0, 15.0]])
WALL = np.array([[70.0, 20.0], [80.0, 40.0]])
GENERIC_CONFIG = FovConfig(half_angle=0.6, radius=100.0)
ORIGIN = np.zeros(2)


class TestBareCone:
    """Without obstacles the region is the bare cone."""

    @pytest.mark.parametrize("direction_angle", [0.0, 1.0, 2.5, -2.0])
    def test_two_radii_one_arc(self, direction_angle: float) -> None:
        direction = (math.cos(direction_angle), math.sin(direction_angle))
        result = compute_fov([], (10, 20), direction, GENERIC_CONFIG)
        assert len(result) == 2
        assert result.on_arc == [True, True]
        assert result.ctrl_points[0] is None
        assert result.ctrl_points[1] is not None
        np.testing.assert_allclose(result.hit_points, np.array(result.sector.arc_ends))

    def test_obstacles_out_of_reach(self) -> None:
        scene = [make_square((300, 0)), make_square((-50, 0)), make_square((0, 80))]
        result = compute_fov(scene, (0, 0), (1, 0), GENERIC_CONFIG)
        assert len(result) == 2
        assert result.blocking_edges == []


class TestRepeatability:
    """Identical input yields identical output."""

    def test_idempotent(self) -> None:
        scene = [TRIANGLE, WALL]
        first = compute_fov(scene, (0, 0), (1, 0), GENERIC_CONFIG)
        second = compute_fov(scene, (0, 0), (1, 0), GENERIC_CONFIG)
        np.testing.assert_array_equal(first.hit_points, second.hit_points)
        assert first.on_arc == second.on_arc
        for a, b in zip(first.ctrl_points, second.ctrl_points):
            if a is None:
                assert b is None
            else:
                np.testing.assert_array_equal(a, b)


class TestSymmetry:
    """Rotating scene and observer together rotates the region."""

    @pytest.mark.parametrize("angle_deg", [37.0, 90.0, 200.0, -115.0])
    def test_rotation(self, angle_deg: float) -> None:
        angle = math.radians(angle_deg)
        observer = np.array([0.0, 0.0])
        base = compute_fov([TRIANGLE, WALL], observer, (1, 0), GENERIC_CONFIG)

        scene = [rotate_about(TRIANGLE, observer, angle), rotate_about(WALL, observer, angle)]
        direction = (math.cos(angle), math.sin(angle))
        turned = compute_fov(scene, observer, direction, GENERIC_CONFIG)

        assert len(turned) == len(base)
        assert turned.on_arc == base.on_arc
        np.testing.assert_allclose(
            turned.hit_points, rotate_about(base.hit_points, observer, angle), atol=1e-6
        )
        for a, b in zip(base.ctrl_points, turned.ctrl_points):
            if a is None:
                assert b is None
            else:
                np.testing.assert_allclose(b, rotate_about(a, observer, angle), atol=1e-6)

    def test_translation(self) -> None:
        offset = np.array([250.0, -75.0])
        base = compute_fov([TRIANGLE, WALL], (0, 0), (1, 0), GENERIC_CONFIG)
        moved = compute_fov([TRIANGLE + offset, WALL + offset], offset, (1, 0), GENERIC_CONFIG)
        assert moved.on_arc == base.on_arc
        np.testing.assert_allclose(moved.hit_points, base.hit_points + offset, atol=1e-6)


class TestBoundaryShape:
    """Every result is a well-formed boundary inside the sector."""

    def test_generic_scene(self) -> None:
        result = compute_fov([TRIANGLE, WALL], (0, 0), (1, 0), GENERIC_CONFIG)
        centre = result.centre
        offsets = result.hit_points - centre
        # within the radius
        assert np.all(np.hypot(offsets[:, 0], offsets[:, 1]) <= 100.0 + 1e-9)
        # ordered from the first cone edge to the second
        cross = offsets[:-1, 0] * offsets[1:, 1] - offsets[:-1, 1] * offsets[1:, 0]
        assert np.all(cross < 0)
        # straight segments never carry a control point
        for on_arc, ctrl in zip(result.on_arc, result.ctrl_points):
            if not on_arc:
                assert ctrl is None
        assert result.ctrl_points[0] is None

    def test_random_scenes(self) -> None:
        rng = np.random.default_rng(11)
        for _ in range(20):
            scene = []
            for _ in range(4):
                centre = rng.uniform([-150, -150], [150, 150])
                angles = np.sort(rng.uniform(0, 2 * np.pi, 5))
                radii = rng.uniform(8, 25, 5)
                scene.append(np.column_stack([
                    centre[0] + radii * np.cos(angles),
                    centre[1] + radii * np.sin(angles),
                ]))
            facing = rng.uniform(-np.pi, np.pi)
            result = compute_fov(scene, (0, 0), (math.cos(facing), math.sin(facing)), FovConfig(radius=120))
            offsets = result.hit_points
            assert np.all(np.hypot(offsets[:, 0], offsets[:, 1]) <= 120.0 + 1e-9)
            cross = offsets[:-1, 0] * offsets[1:, 1] - offsets[:-1, 1] * offsets[1:, 0]
            assert np.all(cross < 0)


class TestPointVisibility:
    """Points inside the region are visible; points behind blocking edges are not."""

    def test_points_short_of_every_hit_are_visible(self) -> None:
        result = compute_fov([TRIANGLE, WALL], (0, 0), (1, 0), GENERIC_CONFIG)
        # the outer rays run along the cone edges; skip them
        for hit in result.hit_points[1:-1]:
            target = result.centre + 0.5 * (hit - result.centre)
            assert result.is_point_visible(target), f"{target} should be visible"

    @pytest.mark.parametrize("target", [(65.0, 0.0), (85.0, 30.0), (55.0, 10.0)])
    def test_points_behind_edges_are_hidden(self, target) -> None:
        result = compute_fov([TRIANGLE, WALL], (0, 0), (1, 0), GENERIC_CONFIG)
        assert result.is_point_visible(target) is False

    def test_visible_points_in_open_space(self) -> None:
        result = compute_fov([TRIANGLE, WALL], (0, 0), (1, 0), GENERIC_CONFIG)
        assert result.is_point_visible((80.0, -30.0)) is True
        assert result.is_point_visible((20.0, 0.0)) is True

    @pytest.mark.parametrize("wall", [[[50, 0], [80, 0]], [[80, 0], [50, 0]]])
    def test_wall_along_sightline_hides_points_past_its_near_end(self, wall) -> None:
        result = compute_fov([wall], (0, 0), (1, 0), FovConfig(half_angle=0.5, radius=100))
        # the ray running along the wall stops at the wall's near end
        along = np.flatnonzero(np.abs(ray_angles(result)) < 1e-12)
        assert len(along) == 1
        np.testing.assert_allclose(result.hit_points[along[0]], [50.0, 0.0])
        assert result.on_arc[along[0]] is False

        assert result.is_point_visible((95.0, 0.0)) is False
        assert result.is_point_visible((65.0, 0.0)) is False
        assert result.is_point_visible((50.0, 0.0)) is True
        assert result.is_point_visible((30.0, 0.0)) is True


class TestVertexPenetration:
    """A sightline through a wall end continues past it on one side only."""

    @pytest.mark.parametrize("end", [(50.0, 0.0), (50.0, 20.0)])
    def test_one_grazing_ray_per_wall_end(self, end) -> None:
        result = compute_fov([[[50, 0], [50, 20]]], (0, 0), (1, 0), FovConfig(half_angle=0.5, radius=100))
        angles = ray_angles(result)
        end_angle = math.atan2(end[1], end[0])
        delta = np.abs(angles - end_angle)

        exact = np.flatnonzero(delta < 1e-12)
        assert len(exact) == 1
        np.testing.assert_allclose(result.hit_points[exact[0]], end)

        grazing = np.flatnonzero((delta > 1e-12) & (delta < 2 * HALF_AUX_RAY_TILT))
        assert len(grazing) == 1
        assert result.on_arc[grazing[0]] is True

    def test_grazing_side_is_away_from_wall(self) -> None:
        result = compute_fov([[[50, 0], [50, 20]]], (0, 0), (1, 0), FovConfig(half_angle=0.5, radius=100))
        angles = ray_angles(result)
        top = math.atan2(20, 50)
        near_top = angles[np.abs(angles - top) < 2 * HALF_AUX_RAY_TILT]
        near_bottom = angles[np.abs(angles) < 2 * HALF_AUX_RAY_TILT]
        # past the top end the ray turns counter-clockwise, past the bottom clockwise
        assert near_top.max() > top
        assert near_bottom.min() < 0


class TestRectangleScene:
    """Observer right of a square, facing up-left on a y-down screen."""

    @pytest.fixture
    def result(self):
        scene = [[100, 100, 200, 100, 200, 200, 100, 200]]
        direction = (-1 / math.sqrt(2.0), 1 / math.sqrt(2.0))
        return compute_fov(scene, (374, 203), direction, FovConfig(radius=240))

    def test_no_hit_inside_rectangle(self, result) -> None:
        for x, y in result.hit_points:
            assert not (100.0 + 1e-9 < x < 200.0 - 1e-9 and 100.0 + 1e-9 < y < 200.0 - 1e-9)

    def test_arc_truncated_by_rectangle(self, result) -> None:
        """The arc starts where the bottom edge leaves the sight circle."""
        arc_start = result.hit_points[2]
        assert arc_start[1] == pytest.approx(200.0)
        assert np.hypot(*(arc_start - result.centre)) == pytest.approx(240.0)

    def test_silhouette(self, result) -> None:
        assert result.is_point_visible((250, 180))
        # below the square's bottom edge on screen
        assert result.is_point_visible((150, 210))
        # behind its right edge
        assert not result.is_point_visible((180, 180))


class TestObserverOnVertex:
    """An observer standing on a corner is not blinded by its own polygon."""

    @pytest.mark.parametrize("direction", [(1.0, 0.0), (0.0, -1.0), (0.6, 0.8)])
    def test_no_zero_distance_hit(self, direction) -> None:
        square = [[100, 100], [200, 100], [200, 200], [100, 200]]
        config = FovConfig(half_angle=1.0, radius=200)
        result = compute_fov([square], (100, 100), direction, config)
        assert len(result) >= 2
        distances = np.hypot(*(result.hit_points - result.centre).T)
        assert np.all(distances > math.sqrt(config.epsilon))

    def test_observer_on_wall(self) -> None:
        config = FovConfig(half_angle=0.5, radius=100)
        result = compute_fov([[[0, -20], [0, 20]]], (0, 0), (1, 0), config)
        assert result.on_arc == [True, True]
