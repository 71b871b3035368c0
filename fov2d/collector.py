r"""
Angle point collection: the directions a sweep must cast rays along, and the
edges that can block those rays.

Vision extends past a building's corner, so a point taken from a polygon
vertex also gets auxiliary points tilted slightly to either side of it
where a sightline can graze past the corner. Points taken from an
edge/arc intersection need none: nothing is visible past the arc.

      ALLOW PENETRATION             DISALLOW PENETRATION

     ----------X                        \  polygon  /
     polygon  / \  <- ray                X---------X
             /   \                                  \  <- ray
                                                     \
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from fov2d.debug import log_angle_points, log_blocking_edges
from fov2d.geometry import Segment, dot2d, perp2d, rotate_dir
from fov2d.intersection import (
    SegmentConfig,
    segment_arc_intersection,
    segment_intersects_circle,
    segment_segment_intersection,
)
from fov2d.scene import Polygon, Scene
from fov2d.sector import PointInSector, Sector, classify_point, is_direction_in_cone

logger = logging.getLogger(__name__)

PointKey = Tuple[float, float]


class AnglePointSet:
    """
    Insertion-ordered set of points, deduplicated by coordinate value.

    Adjacent edges of a polygon share their corner with identical
    coordinates, so a corner reached from both edges is stored once.
    """

    def __init__(self) -> None:
        self._points: Dict[PointKey, NDArray[np.float64]] = {}

    @staticmethod
    def key(point: NDArray[np.float64]) -> PointKey:
        return (float(point[0]), float(point[1]))

    def add(self, point: NDArray[np.float64]) -> bool:
        """Add point; return False if an equal point was already present."""
        key = self.key(point)
        if key in self._points:
            return False
        self._points[key] = np.array(point, dtype=np.float64)
        return True

    def clear(self) -> None:
        self._points.clear()

    def __contains__(self, point: object) -> bool:
        return self.key(point) in self._points  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[NDArray[np.float64]]:
        return iter(self._points.values())

    def to_array(self) -> NDArray[np.float64]:
        """All points as an (N, 2) array in insertion order."""
        if not self._points:
            return np.empty((0, 2), dtype=np.float64)
        return np.array(list(self._points.values()), dtype=np.float64)


def add_angle_point_with_aux(
    point: NDArray[np.float64],
    prev_edge: Segment,
    next_edge: Segment,
    sector: Sector,
    angle_points: AnglePointSet
) -> bool:
    """
    Add a vertex angle point and the auxiliary points it needs.

    The centre-to-vertex ray is tilted by the configured angle both ways.
    The neighbouring edges' vectors are projected onto the axis
    perpendicular to the untilted ray: when both neighbours lie on one side
    of the ray, vision continues past the corner on the other side and the
    auxiliary point on that side is added. When the edges straddle the ray
    no auxiliary point is needed.

    A standalone wall passes the same edge as ``prev_edge`` and
    ``next_edge``; its own vector, taken from the added end towards the
    other end, decides the side, and a wall parallel to the ray gets both.

    Auxiliary points whose direction leaves the cone are dropped.

    Parameters:
        point: Vertex (2,) to add
        prev_edge: Edge arriving at the vertex
        next_edge: Edge leaving the vertex
        sector: Vision cone
        angle_points: Set to add to

    Returns:
        True if the vertex was new; auxiliary points are only added then
    """
    if not angle_points.add(point):
        return False

    config = sector.config
    ray = point - sector.centre
    ccw, cw = rotate_dir(ray, config.aux_tilt_cos, config.aux_tilt_sin)
    proj_axis = perp2d(ray)

    wanted: List[NDArray[np.float64]] = []
    if next_edge is prev_edge:
        # edge vector must start at the added end
        line_vec = prev_edge.vec if np.array_equal(point, prev_edge.start) else -prev_edge.vec
        p = dot2d(line_vec, proj_axis)
        # wall on the clockwise side: vision passes counter-clockwise, and
        # vice versa; both when the wall runs along the ray
        if p <= 0:
            wanted.append(ccw)
        if p >= 0:
            wanted.append(cw)
    else:
        p1 = dot2d(prev_edge.vec, proj_axis)
        p2 = dot2d(next_edge.vec, proj_axis)
        if p1 >= 0 and p2 <= 0:
            wanted.append(ccw)
        elif p1 <= 0 and p2 >= 0:
            wanted.append(cw)

    for aux in wanted:
        if is_direction_in_cone(aux, sector):
            angle_points.add(sector.centre + aux)
    return True


def check_polygon(
    polygon: Polygon,
    sector: Sector,
    angle_points: AnglePointSet,
    blocking_edges: List[Segment]
) -> None:
    """
    Collect angle points and blocking edges contributed by one polygon.

    Parameters:
        polygon: Obstacle to examine
        sector: Vision cone
        angle_points: Set receiving angle points
        blocking_edges: List receiving edges that can occlude vision
    """
    edges = polygon.edges
    n = len(edges)
    epsilon = sector.epsilon

    for i, edge in enumerate(edges):
        # neighbours wrap around the ring; a lone wall is its own neighbour
        prev_edge = edges[i - 1]
        next_edge = edges[(i + 1) % n]

        if not segment_intersects_circle(edge, sector.centre, sector.radius_sq):
            continue

        start_in = classify_point(edge.start, sector)
        end_in = classify_point(edge.end, sector)
        if start_in == PointInSector.BEHIND and end_in == PointInSector.BEHIND:
            continue

        # an edge inside the cone cannot reach the arc; its ends are all it adds
        if start_in == PointInSector.WITHIN and end_in == PointInSector.WITHIN:
            add_angle_point_with_aux(edge.start, prev_edge, edge, sector, angle_points)
            add_angle_point_with_aux(edge.end, edge, next_edge, sector, angle_points)
            blocking_edges.append(edge)
            continue

        blocking = False
        if start_in == PointInSector.WITHIN:
            add_angle_point_with_aux(edge.start, prev_edge, edge, sector, angle_points)
            blocking = True
        if end_in == PointInSector.WITHIN:
            add_angle_point_with_aux(edge.end, edge, next_edge, sector, angle_points)
            blocking = True

        # only an edge with an end past the radius can cross the arc
        test_cone_edges = True
        if start_in == PointInSector.OUTSIDE or end_in == PointInSector.OUTSIDE:
            arc_result = segment_arc_intersection(edge, sector)
            if arc_result is not None:
                if arc_result.config == PointInSector.WITHIN:
                    for point in arc_result.points:
                        angle_points.add(point)
                    blocking = True
                # crossings behind the observer rule out the cone edges too
                test_cone_edges = arc_result.config != PointInSector.BEHIND

        if blocking:
            blocking_edges.append(edge)
        elif test_cone_edges and any(
            segment_segment_intersection(edge, fov_edge, epsilon=epsilon).config
            == SegmentConfig.INTERSECT
            for fov_edge in sector.fov_edges
        ):
            # no angle point, but the edge still cuts across the cone
            blocking_edges.append(edge)


def collect_angle_points(
    scene: Scene,
    sector: Sector,
    angle_points: Optional[AnglePointSet] = None,
    blocking_edges: Optional[List[Segment]] = None
) -> Tuple[AnglePointSet, List[Segment]]:
    """
    Gather angle points and blocking edges for every polygon of a scene.

    Containers passed in are cleared first, so no state survives from a
    previous computation.

    Parameters:
        scene: Obstacles
        sector: Vision cone
        angle_points: Optional set to reuse
        blocking_edges: Optional list to reuse

    Returns:
        Tuple of (angle_points, blocking_edges)
    """
    if angle_points is None:
        angle_points = AnglePointSet()
    else:
        angle_points.clear()
    if blocking_edges is None:
        blocking_edges = []
    else:
        blocking_edges.clear()

    for polygon in scene:
        check_polygon(polygon, sector, angle_points, blocking_edges)

    if logger.isEnabledFor(logging.DEBUG):
        log_angle_points(angle_points.to_array(), logger=logger)
        log_blocking_edges(blocking_edges, logger=logger)

    return angle_points, blocking_edges
