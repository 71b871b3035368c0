"""
Observer state, the vision sector built from it, and point classification
against that sector.

Sign convention: the sector's first bounding edge is the facing direction
turned counter-clockwise by the half aperture, the second one turned
clockwise. A direction V lies inside the cone when it is clockwise of the
first edge and counter-clockwise of the second one, i.e.
``cross(first, V) <= 0`` and ``cross(V, second) <= 0``. With y pointing
down the screen the same test reads the other way round visually; the
arithmetic does not change.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from fov2d.config import FovConfig, ValidationError
from fov2d.geometry import (
    EPSILON,
    Segment,
    as_point,
    cross2d,
    dot2d,
    is_zero,
    normalize,
    rotate_dir,
)


class PointInSector(IntEnum):
    """Where a point lies relative to a sector."""

    FRONT_SEMICIRCLE = 0  # in front, inside the circle, outside the cone
    BEHIND = 1
    OUTSIDE = 2  # in front but past the sight radius
    WITHIN = 4


@dataclass
class Observer:
    """
    A viewer in the scene: where it stands and where it looks.

    Attributes:
        location: Position (2,)
        direction: Unit facing vector (2,)

    Raises:
        ValidationError: If location or direction is malformed, or the
            direction is a zero vector
    """
    location: NDArray[np.float64]
    direction: NDArray[np.float64]

    def __post_init__(self) -> None:
        try:
            self.location = as_point(self.location)
        except ValueError as e:
            raise ValidationError(f"observer location: {e}") from e
        try:
            direction = as_point(self.direction)
        except ValueError as e:
            raise ValidationError(f"observer direction: {e}") from e
        if not np.any(direction):
            raise ValidationError("observer direction must not be a zero vector")
        self.direction = normalize(direction)

    def move_to(self, point: ArrayLike) -> None:
        self.location = as_point(point)

    def look_at(self, target: ArrayLike, epsilon: float = EPSILON) -> bool:
        """
        Face towards target.

        Leaves the direction untouched when target coincides with the
        observer's location, so a degenerate request never produces a
        NaN direction.

        Returns:
            True if the direction changed
        """
        new_dir = as_point(target) - self.location
        if is_zero(new_dir, epsilon):
            return False
        self.direction = normalize(new_dir)
        return True


@dataclass(frozen=True, eq=False)
class Sector:
    """
    The observer's vision cone for one computation.

    Attributes:
        centre: Observer location (2,)
        mid_dir: Unit facing direction (2,)
        config: Settings the sector was built from
        fov_edges: The two bounding edges, from centre out to the radius;
            the first is turned counter-clockwise from mid_dir
    """
    centre: NDArray[np.float64]
    mid_dir: NDArray[np.float64]
    config: FovConfig
    fov_edges: Tuple[Segment, Segment] = field(repr=False)

    @property
    def radius(self) -> float:
        return self.config.radius

    @property
    def radius_sq(self) -> float:
        return self.config.radius_sq

    @property
    def epsilon(self) -> float:
        return self.config.epsilon

    @property
    def arc_ends(self) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Far endpoints of the two bounding edges."""
        return self.fov_edges[0].end, self.fov_edges[1].end


def build_sector(
    location: ArrayLike,
    direction: ArrayLike,
    config: FovConfig
) -> Sector:
    """
    Build the vision cone for an observer position and facing direction.

    Parameters:
        location: Observer position (2,)
        direction: Unit facing vector (2,)
        config: Aperture, radius and tolerance settings

    Returns:
        Sector with both bounding edges precomputed
    """
    centre = as_point(location)
    mid_dir = as_point(direction)
    centre.setflags(write=False)
    mid_dir.setflags(write=False)

    ccw, cw = rotate_dir(mid_dir, config.half_angle_cos, config.half_angle_sin)
    edges = []
    for fov_dir in (ccw, cw):
        vec = fov_dir * config.radius
        edges.append(Segment(centre, centre + vec, vec=vec))

    return Sector(
        centre=centre,
        mid_dir=mid_dir,
        config=config,
        fov_edges=(edges[0], edges[1]),
    )


def is_direction_in_cone(v: NDArray[np.float64], sector: Sector) -> bool:
    """True if the direction v (relative to the centre) points into the cone."""
    if dot2d(v, sector.mid_dir) <= 0:
        return False
    return (cross2d(sector.fov_edges[0].vec, v) <= 0 and
            cross2d(v, sector.fov_edges[1].vec) <= 0)


def classify_point(point: NDArray[np.float64], sector: Sector) -> PointInSector:
    """
    Classify a point against a sector.

    A point lying on the bounding circle (within epsilon) is not outside:
    it is WITHIN when on the sector's arc and FRONT_SEMICIRCLE elsewhere.

    Parameters:
        point: Point (2,) to classify
        sector: Vision cone

    Returns:
        The PointInSector class of the point
    """
    v = point - sector.centre
    if dot2d(v, sector.mid_dir) <= 0:
        return PointInSector.BEHIND

    if dot2d(v, v) - sector.radius_sq > sector.epsilon:
        return PointInSector.OUTSIDE

    if (cross2d(sector.fov_edges[0].vec, v) <= 0 and
            cross2d(v, sector.fov_edges[1].vec) <= 0):
        return PointInSector.WITHIN

    return PointInSector.FRONT_SEMICIRCLE
