"""
Public API for computing an observer's field of vision among polygonal
obstacles.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from fov2d.arc import sample_quadratic_bezier
from fov2d.collector import AnglePointSet, collect_angle_points
from fov2d.config import FovConfig, ValidationError
from fov2d.debug import log_result, log_sector
from fov2d.geometry import Segment, as_point, squared_distance, validate_direction
from fov2d.intersection import SegmentConfig, segment_segment_intersection
from fov2d.scene import Scene
from fov2d.sector import Observer, PointInSector, Sector, build_sector, classify_point
from fov2d.sweep import make_rays, shoot_rays, sort_angle_points

logger = logging.getLogger(__name__)


@dataclass
class FovResult:
    """
    Boundary of the visible region for one observer state.

    The boundary starts at the end of the sector's first bounding edge and
    finishes at the end of the second one. Draw it by moving to the centre,
    then to each hit point in turn, using a quadratic curve through the
    point's control point when it has one and a straight line otherwise,
    and closing back to the centre.

    Attributes:
        sector: The vision cone the result was computed for
        hit_points: Terminal point of each ray, shape (N, 2)
        ctrl_points: Per hit point, the control point of the curve arriving
            at it, or None for a straight segment
        on_arc: Per hit point, True if it lies on the sight radius
        rays: Ray vectors from the centre, shape (N, 2)
        angle_points: Sorted angle points the rays were made from,
            including both bounding edge ends
        blocking_edges: Edges that could block vision
    """
    sector: Sector
    hit_points: NDArray[np.float64]
    ctrl_points: List[Optional[NDArray[np.float64]]]
    on_arc: List[bool]
    rays: NDArray[np.float64]
    angle_points: NDArray[np.float64]
    blocking_edges: List[Segment]

    def __len__(self) -> int:
        return len(self.hit_points)

    def __iter__(self) -> Iterator[Tuple[NDArray[np.float64], Optional[NDArray[np.float64]]]]:
        """Iterate over (hit point, control point or None) pairs."""
        return iter(zip(self.hit_points, self.ctrl_points))

    @property
    def centre(self) -> NDArray[np.float64]:
        return self.sector.centre

    @property
    def num_curves(self) -> int:
        """Number of boundary pieces drawn as curves."""
        return sum(1 for cp in self.ctrl_points if cp is not None)

    def outline(self, samples_per_curve: int = 8) -> NDArray[np.float64]:
        """
        The visible region as a plain polygon.

        Parameters:
            samples_per_curve: Points generated for each curved piece

        Returns:
            Vertices (M, 2) starting at the centre, curves flattened
        """
        points: List[NDArray[np.float64]] = [self.centre]
        for i, (hit, ctrl) in enumerate(self):
            if ctrl is not None and i > 0:
                points.extend(
                    sample_quadratic_bezier(self.hit_points[i - 1], ctrl, hit, samples_per_curve)
                )
            else:
                points.append(hit)
        return np.array(points, dtype=np.float64)

    def area(self, samples_per_curve: int = 32) -> float:
        """Area of the flattened visible region (shoelace formula)."""
        outline = self.outline(samples_per_curve)
        x = outline[:, 0]
        y = outline[:, 1]
        return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)

    def is_point_visible(self, target: ArrayLike) -> bool:
        """True if target is inside the cone and no blocking edge hides it."""
        return is_point_visible(target, self.sector, self.blocking_edges)


def is_point_visible(
    target: ArrayLike,
    sector: Sector,
    blocking_edges: Sequence[Segment]
) -> bool:
    """
    Check whether a point can be seen from the sector centre.

    The point must classify as WITHIN the sector, and the sightline from
    the centre to it must not cross any blocking edge strictly between the
    two: crossings within epsilon (squared distance) of either end are
    ignored. An edge running along the sightline hides the point when its
    nearest end lies between the centre and the point, matching where the
    ray cast along that edge stops.

    Parameters:
        target: Point (2,) to test
        sector: Vision cone
        blocking_edges: Edges that can occlude vision

    Returns:
        True if the point is visible
    """
    target = as_point(target)
    if classify_point(target, sector) != PointInSector.WITHIN:
        return False

    epsilon = sector.epsilon
    sightline = Segment(sector.centre, target)
    # same direction as the sightline, so the target sits at t = 1
    sight_ray = Segment.ray(sector.centre, target - sector.centre)
    for edge in blocking_edges:
        res = segment_segment_intersection(sightline, edge, compute_point=True, epsilon=epsilon)
        if res.config == SegmentConfig.PARALLEL:
            res = segment_segment_intersection(sight_ray, edge, compute_point=True, epsilon=epsilon)
            if res.point is None or res.t is None or res.t >= 1.0:
                continue
        elif res.config != SegmentConfig.INTERSECT or res.point is None:
            continue
        if (squared_distance(res.point, sector.centre) > epsilon and
                squared_distance(res.point, target) > epsilon):
            return False
    return True


def _compute(
    scene: Scene,
    sector: Sector,
    angle_points: Optional[AnglePointSet] = None,
    blocking_edges: Optional[List[Segment]] = None
) -> FovResult:
    if logger.isEnabledFor(logging.DEBUG):
        log_sector(sector, logger=logger)

    angle_points, blocking_edges = collect_angle_points(
        scene, sector, angle_points, blocking_edges
    )

    # the bounding edge ends are angle points too; make_rays drops any that
    # are colinear with a collected one
    first, last = sector.arc_ends
    sorted_points = sort_angle_points([first, *angle_points, last], sector)
    rays = make_rays(sorted_points, sector)
    cast = shoot_rays(rays, blocking_edges, sector)

    result = FovResult(
        sector=sector,
        hit_points=cast.hit_points,
        ctrl_points=cast.ctrl_points,
        on_arc=cast.on_arc,
        rays=rays,
        angle_points=sorted_points,
        blocking_edges=list(blocking_edges),
    )
    if logger.isEnabledFor(logging.DEBUG):
        log_result(result, logger=logger)
    return result


def _as_scene(scene: Union[Scene, Sequence[Any]]) -> Scene:
    if isinstance(scene, Scene):
        return scene
    return Scene.from_coords(scene)


def compute_fov(
    scene: Union[Scene, Sequence[Any]],
    viewer_point: ArrayLike,
    view_direction: ArrayLike,
    config: Optional[FovConfig] = None
) -> FovResult:
    """
    Compute the visible region of a single observer state.

    Parameters:
        scene: Scene, or a list of polygons each given as an (N, 2)
            array-like or a flat [x0, y0, x1, y1, ...] list (N >= 2)
        viewer_point: (x, y) position of the observer
        view_direction: (x, y) unit vector the observer faces
        config: Aperture, radius and tolerances; defaults to FovConfig()

    Returns:
        FovResult describing the region boundary

    Raises:
        ValidationError: If any input is malformed

    Example:
        >>> scene = [[100, 100, 200, 100, 200, 200, 100, 200]]
        >>> result = compute_fov(scene, (374, 203), (-0.7071068, 0.7071068))
        >>> for hit, ctrl in result:
        ...     pass  # line or curve to hit
    """
    scene = _as_scene(scene)
    if config is None:
        config = FovConfig()
    elif not isinstance(config, FovConfig):
        raise ValidationError(f"config must be a FovConfig, got {type(config).__name__}")

    try:
        location = as_point(viewer_point)
    except ValueError as e:
        raise ValidationError(f"viewer_point: {e}") from e
    try:
        direction = validate_direction(view_direction)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    return _compute(scene, build_sector(location, direction, config))


class FieldOfVision:
    """
    Visibility state of one observer in a scene.

    Constructed once per scene load and updated once per frame. Each
    update rebuilds the sector and all working collections from scratch;
    only the scene's cached edges carry over. Scenes are read-only and may
    be shared, but each observer needs its own FieldOfVision.

    Attributes:
        scene: Obstacles
        observer: Position and facing direction, updated by the host
        config: Aperture, radius and tolerances
        result: Result of the last update, or None before the first one
    """

    def __init__(
        self,
        scene: Union[Scene, Sequence[Any]],
        observer: Observer,
        config: Optional[FovConfig] = None,
    ) -> None:
        if config is None:
            config = FovConfig()
        elif not isinstance(config, FovConfig):
            raise ValidationError(f"config must be a FovConfig, got {type(config).__name__}")
        self.scene = _as_scene(scene)
        self.observer = observer
        self.config = config
        self.result: Optional[FovResult] = None
        self._angle_points = AnglePointSet()
        self._blocking_edges: List[Segment] = []

    @property
    def sector(self) -> Optional[Sector]:
        return self.result.sector if self.result is not None else None

    def set_scene(self, scene: Union[Scene, Sequence[Any]]) -> None:
        self.scene = _as_scene(scene)
        self.result = None

    def update(self) -> FovResult:
        """Recompute visibility for the observer's current state."""
        sector = build_sector(self.observer.location, self.observer.direction, self.config)
        self.result = _compute(self.scene, sector, self._angle_points, self._blocking_edges)
        return self.result

    def is_point_visible(self, target: ArrayLike) -> bool:
        """Point visibility against the last update (computing one if needed)."""
        result = self.result if self.result is not None else self.update()
        return result.is_point_visible(target)
