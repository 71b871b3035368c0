"""
Intersection tests between segments, rays, the sight circle and its arc.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

import numpy as np
from numpy.typing import NDArray

from fov2d.geometry import (
    EPSILON,
    Segment,
    dot2d,
    inv_lerp,
    is_point_on_line,
    perp2d,
    point_on_line,
)
from fov2d.sector import PointInSector, Sector, classify_point


class SegmentConfig(IntEnum):
    """Relationship between two segments."""

    DISJOINT = 0
    PARALLEL = 1
    INTERSECT = 2


@dataclass
class SegmentIntersection:
    """
    Outcome of a segment/segment or ray/segment test.

    Attributes:
        config: How the two lines relate
        t: Parameter along the first line of the hit, if one was computed
        point: The hit point (2,), if one was computed
    """
    config: SegmentConfig
    t: Optional[float] = None
    point: Optional[NDArray[np.float64]] = None


@dataclass
class ArcIntersection:
    """
    Outcome of a segment/arc test that found something worth reporting.

    Attributes:
        config: WITHIN when points on the sector's arc were found, BEHIND
            when both circle crossings lie behind the observer
        points: Crossings lying on the arc (empty for BEHIND)
    """
    config: PointInSector
    points: List[NDArray[np.float64]] = field(default_factory=list)


def point_segment_distance_sq(line: Segment, point: NDArray[np.float64]) -> float:
    """
    Squared distance from point to the closest point of the segment.

    Projects the point onto the segment and clamps the projection
    parameter to [0, 1] before measuring.
    """
    start_to_pt = point - line.start
    s = dot2d(start_to_pt, line.vec) / line.length_sq
    s = 0.0 if s <= 0 else (1.0 if s >= 1 else s)
    perp = start_to_pt - s * line.vec
    return dot2d(perp, perp)


def segment_intersects_circle(
    line: Segment,
    centre: NDArray[np.float64],
    radius_sq: float
) -> bool:
    """
    True if the segment enters the open disc.

    A tangent segment does not count: it cannot hide anything inside.
    """
    return point_segment_distance_sq(line, centre) < radius_sq


def segment_arc_intersection(line: Segment, sector: Sector) -> Optional[ArcIntersection]:
    """
    Intersect a segment with the sector's arc.

    Solves |start + t*vec - centre|^2 = r^2 for t using the numerically
    stable root pair (the larger-magnitude root first, the other one from
    the product of roots) to avoid cancellation.

    Parameters:
        line: Segment to test
        sector: Vision cone whose arc is tested

    Returns:
        ArcIntersection with config WITHIN and the crossings lying on the
        arc; ArcIntersection with config BEHIND if both crossings are behind
        the observer; None if the segment does not cross the circle inside
        [0, 1] or none of its crossings is on the arc
    """
    delta = line.start - sector.centre
    b = dot2d(line.vec, delta)
    d_sq = line.length_sq
    c = dot2d(delta, delta) - sector.radius_sq
    det = b * b - d_sq * c
    # only a segment cutting the circle at two distinct points counts
    if det <= 0:
        return None

    det_sqrt = float(np.sqrt(det))
    if b >= 0:
        q = b + det_sqrt
        t1 = -q / d_sq
        t2 = -c / q
    else:
        q = det_sqrt - b
        t1 = c / q
        t2 = q / d_sq

    points: List[NDArray[np.float64]] = []
    classes: List[PointInSector] = []
    for t in (t1, t2):
        if 0.0 <= t <= 1.0:
            point = point_on_line(line, t)
            in_sector = classify_point(point, sector)
            classes.append(in_sector)
            if in_sector == PointInSector.WITHIN:
                points.append(point)

    # segment lies inside the circle; it may still cut the cone but not the arc
    if not classes:
        return None

    if len(classes) == 2 and all(cls == PointInSector.BEHIND for cls in classes):
        return ArcIntersection(PointInSector.BEHIND)

    if points:
        return ArcIntersection(PointInSector.WITHIN, points)

    return None


def segment_segment_intersection(
    line1: Segment,
    line2: Segment,
    compute_point: bool = False,
    epsilon: float = EPSILON
) -> SegmentIntersection:
    """
    Intersect line1 (a segment or a ray) with the segment line2.

    Closed-form cross product solution with Antonio's early rejection: the
    side of line1 each end of line2 lies on is compared by sign before any
    division happens. Each side is measured from its own end, so a ray cast
    from line1's start through either end of line2 sees exactly zero there
    and always hits. When line1 is a ray only its start is clipped.

    Parallel lines come back as PARALLEL. For a ray asked to compute a
    point, a colinear segment is resolved further instead of being dropped:
    if the ray starts on the segment the hit is the ray origin (t = 0),
    otherwise it is the segment end nearest in front of the ray; a segment
    entirely behind the ray yields no point.

    Parameters:
        line1: First segment, or a ray when ``line1.is_ray`` is set
        line2: Second segment
        compute_point: If True, fill in ``t`` and ``point`` for hits
        epsilon: Tolerance for the parallel test

    Returns:
        SegmentIntersection describing the outcome
    """
    result = SegmentIntersection(SegmentConfig.DISJOINT)
    l1p = perp2d(line1.vec)
    f = dot2d(line2.vec, l1p)

    if abs(f) <= epsilon:
        result.config = SegmentConfig.PARALLEL
        if line1.is_ray and compute_point and is_point_on_line(line2.start, line1, epsilon):
            _resolve_colinear_ray(line1, line2, result)
        return result

    # line2 must have an end on each side of line1 (or on it)
    side_start = dot2d(line2.start - line1.start, l1p)
    side_end = dot2d(line2.end - line1.start, l1p)
    if not ((side_start <= 0 <= side_end) or (side_end <= 0 <= side_start)):
        return result

    c = line1.start - line2.start
    d = dot2d(c, perp2d(line2.vec))
    # s = d / f is line1's parameter; a ray only needs s >= 0
    if line1.is_ray:
        hit = (f > 0 and d >= 0) or (f < 0 and d <= 0)
    else:
        hit = (f > 0 and 0 <= d <= f) or (f < 0 and f <= d <= 0)

    if hit:
        result.config = SegmentConfig.INTERSECT
        if compute_point:
            s = d / f
            result.t = s
            result.point = point_on_line(line1, s)
    return result


def _resolve_colinear_ray(ray: Segment, line: Segment, result: SegmentIntersection) -> None:
    """Locate the ray origin relative to a colinear segment and fill the hit."""
    alpha = inv_lerp(line, ray.start)
    if 0.0 <= alpha <= 1.0:
        # ray starts on the segment
        result.t = 0.0
        result.point = ray.start.copy()
        return

    ahead = [
        (t, end) for t, end in ((inv_lerp(ray, end), end) for end in line.ends)
        if t >= 0
    ]
    if ahead:
        t, end = min(ahead, key=lambda pair: pair[0])
        result.t = t
        result.point = end.copy()
