"""
Quadratic Bézier approximation of the sight circle's arc between two rays.
"""

from typing import Optional

import numpy as np
from numpy.typing import NDArray

from fov2d.geometry import EPSILON, Segment, are_parallel, dot2d, normalize


def quad_bezier_ctrl_point(
    unit_ray: NDArray[np.float64],
    other_unit_ray: NDArray[np.float64],
    centre: NDArray[np.float64],
    radius: float
) -> NDArray[np.float64]:
    """
    Control point of a quadratic curve approximating an arc.

    The control point sits on the bisector of the two rays at distance
    ``radius * (2 - cos(θ/2))`` from the centre, which puts the curve's
    midpoint on the circle. ``cos(θ/2)`` is the dot product of a unit ray
    with the unit bisector, so no trigonometry is needed.

    Parameters:
        unit_ray: Unit direction of one arc end
        other_unit_ray: Unit direction of the other arc end
        centre: Circle centre (2,)
        radius: Circle radius

    Returns:
        Control point (2,)
    """
    bisector = normalize(unit_ray + other_unit_ray)
    return centre + bisector * (radius * (2.0 - dot2d(unit_ray, bisector)))


def needs_arc(
    prev_hit: NDArray[np.float64],
    hit: NDArray[np.float64],
    blocker: Optional[Segment],
    epsilon: float = EPSILON
) -> bool:
    r"""
    Decide whether two consecutive arc points are joined by a curve.

    When the later ray was stopped by an edge running along the chord
    between the two points, the region's boundary is that edge: straight.

                         /---  +----------+
                     /---    \-|          |
                 /---          X          |
              /--              |\         |
          /---                 | \        |
         o                     |  |       |
          ---\                 | /        |
              --\              |/         |
                 ---\          X          |
                     ---\    /-|          |
                         ----  +----------+
    """
    if blocker is None:
        return True
    return not are_parallel(blocker.vec, prev_hit - hit, epsilon)


def sample_quadratic_bezier(
    start: NDArray[np.float64],
    ctrl: NDArray[np.float64],
    end: NDArray[np.float64],
    samples: int = 8
) -> NDArray[np.float64]:
    """
    Points along a quadratic Bézier curve, excluding ``start``.

    Parameters:
        start: Curve start (2,)
        ctrl: Control point (2,)
        end: Curve end (2,)
        samples: Number of points to return; the last one is ``end``

    Returns:
        Array of shape (samples, 2)
    """
    if samples < 1:
        raise ValueError(f"samples must be at least 1, got {samples}")
    t = np.linspace(0.0, 1.0, samples + 1)[1:, np.newaxis]
    u = 1.0 - t
    return (u * u) * start + (2.0 * u * t) * ctrl + (t * t) * end
