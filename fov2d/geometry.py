"""
Vector primitives and the segment type shared by every part of the kernel.

Coordinates are plain 2D float64 numpy arrays. Angles and rotations are
expressed in the usual mathematical sense (counter-clockwise turns from +x
towards +y). On a y-down screen the same numbers read clockwise.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

# Tolerance applied to squared distances and cross products alike. Tuned for
# pixel-scale coordinates; smaller values let an arc intersection point test
# as slightly inside the sight circle once it is hit again by its own ray.
EPSILON = 0.075

# Auxiliary rays are tilted half a degree either side of a vertex ray.
HALF_AUX_RAY_TILT = 8.72664625995e-3


def as_point(xy: ArrayLike) -> NDArray[np.float64]:
    """
    Convert a 2-sequence into a fresh float64 point.

    Raises:
        ValueError: If the input does not hold exactly two finite values
    """
    point = np.array(xy, dtype=np.float64).reshape(-1)
    if point.shape != (2,):
        raise ValueError(f"point must have exactly 2 components, got shape {point.shape}")
    if not np.all(np.isfinite(point)):
        raise ValueError(f"point must be finite, got {point.tolist()}")
    return point


def dot2d(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    """Planar dot product, evaluated term by term so cancellations stay exact."""
    return float(a[0]) * float(b[0]) + float(a[1]) * float(b[1])


def cross2d(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    """Z component of the 3D cross product of two planar vectors."""
    return float(a[0]) * float(b[1]) - float(a[1]) * float(b[0])


def perp2d(v: NDArray[np.float64], clockwise: bool = False) -> NDArray[np.float64]:
    """Vector perpendicular to v, turned counter-clockwise unless asked otherwise."""
    if clockwise:
        return np.array([v[1], -v[0]], dtype=np.float64)
    return np.array([-v[1], v[0]], dtype=np.float64)


def is_zero(v: NDArray[np.float64], epsilon: float = EPSILON) -> bool:
    """Manhattan-length test for a vanishing vector."""
    return (abs(float(v[0])) + abs(float(v[1]))) <= epsilon


def are_parallel(
    a: NDArray[np.float64],
    b: NDArray[np.float64],
    epsilon: float = EPSILON
) -> bool:
    """Parallel (or anti-parallel) within epsilon on the raw cross product."""
    return abs(cross2d(a, b)) <= epsilon


def rotate_dir(
    direction: NDArray[np.float64],
    cos_a: float,
    sin_a: float
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Rotate a vector by +A and by -A in one go.

    Parameters:
        direction: Vector to rotate
        cos_a: Cosine of the rotation angle
        sin_a: Sine of the rotation angle

    Returns:
        Tuple of (counter-clockwise rotation, clockwise rotation)
    """
    xc = direction[0] * cos_a
    yc = direction[1] * cos_a
    xs = direction[0] * sin_a
    ys = direction[1] * sin_a
    return (
        np.array([xc - ys, xs + yc], dtype=np.float64),
        np.array([xc + ys, -xs + yc], dtype=np.float64),
    )


def normalize(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Unit vector along v; v must not be zero."""
    return v / np.hypot(v[0], v[1])


def validate_direction(
    view_direction: ArrayLike,
    tolerance: float = 1e-3
) -> NDArray[np.float64]:
    """
    Validate that a view direction is normalized.

    Parameters:
        view_direction: Vector (2,) representing the view direction
        tolerance: Tolerance for normalization check (|length - 1| < tolerance)

    Returns:
        The direction as a float64 unit vector (renormalized to remove drift)

    Raises:
        ValueError: If view_direction is not approximately unit length
    """
    direction = as_point(view_direction)
    length = float(np.hypot(direction[0], direction[1]))
    if abs(length - 1.0) >= tolerance:
        raise ValueError(
            f"view_direction must be a unit vector, got length {length:.6f}"
        )
    return direction / length


@dataclass(frozen=True, eq=False)
class Segment:
    """
    A directed line segment, or a ray when ``is_ray`` is set.

    The direction vector and squared length are derived once at
    construction and the arrays are frozen, so they always agree with the
    endpoints. For a ray, ``end`` only fixes the direction and the
    parameter scale: the ray is unbounded beyond it but never extends
    behind ``start``.

    Attributes:
        start: First endpoint (2,)
        end: Second endpoint (2,)
        is_ray: True if the segment is unbounded past ``end``
        vec: ``end - start``; given explicitly for rays so the direction is
            kept bit-exact instead of being recovered from ``end``
        length_sq: Squared length of ``vec``
    """
    start: NDArray[np.float64]
    end: NDArray[np.float64]
    is_ray: bool = False
    vec: Optional[NDArray[np.float64]] = field(default=None, repr=False)
    length_sq: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        start = np.array(self.start, dtype=np.float64)
        end = np.array(self.end, dtype=np.float64)
        if self.vec is None:
            vec = end - start
        else:
            vec = np.array(self.vec, dtype=np.float64)
        for arr in (start, end, vec):
            arr.setflags(write=False)
        # Use object.__setattr__ because the dataclass is frozen
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)
        object.__setattr__(self, "vec", vec)
        object.__setattr__(self, "length_sq", dot2d(vec, vec))

    @classmethod
    def ray(cls, origin: NDArray[np.float64], direction: NDArray[np.float64]) -> "Segment":
        """Ray from origin along direction; the parameter unit is |direction|."""
        origin = np.asarray(origin, dtype=np.float64)
        direction = np.asarray(direction, dtype=np.float64)
        return cls(origin, origin + direction, is_ray=True, vec=direction)

    @property
    def ends(self) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        return self.start, self.end


def inv_lerp(line: Segment, point: NDArray[np.float64]) -> float:
    """Parameter of the projection of point onto line (0 at start, 1 at end)."""
    return dot2d(point - line.start, line.vec) / line.length_sq


def point_on_line(line: Segment, t: float) -> NDArray[np.float64]:
    return line.start + t * line.vec


def is_point_on_line(
    point: NDArray[np.float64],
    line: Segment,
    epsilon: float = EPSILON
) -> bool:
    """True if point lies on the infinite line through the segment."""
    return are_parallel(point - line.start, line.vec, epsilon)


def squared_distance(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    d = a - b
    return dot2d(d, d)
