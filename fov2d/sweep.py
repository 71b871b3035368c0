"""
Radial sweep: order the angle points around the observer, turn them into
rays and cast each ray against the blocking edges.
"""

import functools
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from fov2d.arc import needs_arc, quad_bezier_ctrl_point
from fov2d.debug import log_rays
from fov2d.geometry import Segment, are_parallel, cross2d, normalize, squared_distance
from fov2d.intersection import segment_segment_intersection
from fov2d.sector import Sector

logger = logging.getLogger(__name__)


@dataclass
class RayHit:
    """
    Nearest blocking hit of a single ray.

    Attributes:
        t: Parameter along the ray (in units of the ray vector)
        point: Hit point (2,)
        blocker: Edge that was hit
        dist_sq: Squared distance from the sector centre to the hit
    """
    t: float
    point: NDArray[np.float64]
    blocker: Segment
    dist_sq: float


@dataclass
class RayCastResult:
    """
    Terminal points of a sweep, one per ray, in sweep order.

    Attributes:
        hit_points: Terminal points, shape (N, 2)
        ctrl_points: Per point, the control point of the curve arriving at
            it from the previous point, or None for a straight segment
        on_arc: Per point, True if it lies on the sight radius
        blockers: Per point, the edge that stopped the ray, if any
    """
    hit_points: NDArray[np.float64]
    ctrl_points: List[Optional[NDArray[np.float64]]] = field(default_factory=list)
    on_arc: List[bool] = field(default_factory=list)
    blockers: List[Optional[Segment]] = field(default_factory=list)


def sort_angle_points(
    points: Sequence[NDArray[np.float64]],
    sector: Sector
) -> NDArray[np.float64]:
    """
    Sort points by direction around the sector centre.

    Uses the cross product as comparator so no angle is ever computed; the
    order runs from the first bounding edge of the sector towards the
    second one (clockwise in the mathematical sense, counter-clockwise on a
    y-down screen). Directions must span less than half a turn.

    Parameters:
        points: Points to sort
        sector: Vision cone whose centre is the pivot

    Returns:
        Sorted (N, 2) array
    """
    centre = sector.centre

    def compare(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
        # negative (a before b) when b is clockwise of a
        return cross2d(a - centre, b - centre)

    ordered = sorted(points, key=functools.cmp_to_key(compare))
    if not ordered:
        return np.empty((0, 2), dtype=np.float64)
    return np.array(ordered, dtype=np.float64)


def make_rays(
    sorted_points: NDArray[np.float64],
    sector: Sector
) -> NDArray[np.float64]:
    """
    One ray per distinct direction among sorted angle points.

    A point whose direction from the centre is parallel, within epsilon,
    to the last kept ray is skipped.

    Parameters:
        sorted_points: Angle points already in sweep order
        sector: Vision cone

    Returns:
        Ray vectors (M, 2), each from the centre to its angle point
    """
    rays: List[NDArray[np.float64]] = []
    for point in sorted_points:
        ray = point - sector.centre
        if rays and are_parallel(ray, rays[-1], sector.epsilon):
            continue
        rays.append(ray)

    if not rays:
        return np.empty((0, 2), dtype=np.float64)
    return np.array(rays, dtype=np.float64)


def cast_ray(
    ray_vec: NDArray[np.float64],
    blocking_edges: Sequence[Segment],
    sector: Sector
) -> Optional[RayHit]:
    """
    Find the nearest blocking edge hit along a ray.

    Colinear edges count as hits. A hit within epsilon (squared distance)
    of the centre is discarded: an observer standing on a wall or on a
    corner where two walls meet must not be blinded by them.

    Parameters:
        ray_vec: Ray direction from the sector centre
        blocking_edges: Candidate occluders
        sector: Vision cone

    Returns:
        RayHit for the nearest hit, or None if nothing was hit
    """
    ray = Segment.ray(sector.centre, ray_vec)
    epsilon = sector.epsilon
    best: Optional[RayHit] = None
    for edge in blocking_edges:
        res = segment_segment_intersection(ray, edge, compute_point=True, epsilon=epsilon)
        if res.t is None or res.point is None:
            continue
        if best is not None and res.t >= best.t:
            continue
        dist_sq = squared_distance(res.point, sector.centre)
        if dist_sq > epsilon:
            best = RayHit(t=res.t, point=res.point, blocker=edge, dist_sq=dist_sq)
    return best


def shoot_rays(
    rays: NDArray[np.float64],
    blocking_edges: Sequence[Segment],
    sector: Sector
) -> RayCastResult:
    """
    Cast every ray and build the visible region's boundary.

    A ray that hits nothing, or whose nearest hit is at or past the sight
    radius, ends on the arc at exactly the radius. Two consecutive arc
    points are joined by a quadratic curve unless the edge that stopped
    the later ray runs along the chord between them.

    Parameters:
        rays: Ray vectors (N, 2) in sweep order
        blocking_edges: Candidate occluders
        sector: Vision cone

    Returns:
        RayCastResult with one terminal point per ray
    """
    n = len(rays)
    hit_points = np.empty((n, 2), dtype=np.float64)
    ctrl_points: List[Optional[NDArray[np.float64]]] = [None] * n
    on_arc: List[bool] = [False] * n
    blockers: List[Optional[Segment]] = [None] * n

    centre = sector.centre
    epsilon = sector.epsilon
    prev_unit_ray: Optional[NDArray[np.float64]] = None

    for i, ray_vec in enumerate(rays):
        hit = cast_ray(ray_vec, blocking_edges, sector)
        blocker = hit.blocker if hit is not None else None
        blockers[i] = blocker

        point_on_arc = hit is None or (hit.dist_sq + epsilon - sector.radius_sq) >= 0
        if not point_on_arc:
            hit_points[i] = hit.point
            prev_unit_ray = None
            continue

        unit_ray = normalize(ray_vec)
        hit_points[i] = centre + unit_ray * sector.radius
        on_arc[i] = True
        if prev_unit_ray is not None and needs_arc(hit_points[i - 1], hit_points[i], blocker, epsilon):
            ctrl_points[i] = quad_bezier_ctrl_point(unit_ray, prev_unit_ray, centre, sector.radius)
        prev_unit_ray = unit_ray

    if logger.isEnabledFor(logging.DEBUG):
        log_rays(rays, logger=logger)

    return RayCastResult(
        hit_points=hit_points,
        ctrl_points=ctrl_points,
        on_arc=on_arc,
        blockers=blockers,
    )
