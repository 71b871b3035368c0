"""
Vision Configuration
====================

Immutable settings shared by every field-of-vision computation of one
observer: aperture, sight radius, tolerance and auxiliary ray tilt.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any

from fov2d.geometry import EPSILON, HALF_AUX_RAY_TILT


class ValidationError(ValueError):
    """Raised when input validation fails."""

    pass


# Aperture of the demo scene: 1.98968 rad in total
DEFAULT_HALF_ANGLE = 0.99484
DEFAULT_RADIUS = 240.0


def _require_real(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"{name} must be a real number, got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite, got {value}")
    return value


@dataclass(frozen=True)
class FovConfig:
    """Vision cone settings for an observer.

    The cone must stay inside the observer's front half-plane: points with
    a non-positive projection on the facing direction count as behind, and
    the angular sort compares directions by cross product, which only
    orders directions spanning less than a half turn. Wider cones
    (half_angle in [π/2, π)) are rejected rather than computed wrongly.

    Attributes:
        half_angle: Half of the aperture in radians, in (0, π/2)
        radius: Sight radius, positive
        epsilon: Tolerance for squared distances and cross products
        aux_ray_tilt: Tilt of auxiliary rays in radians, in (0, half_angle)

    Raises:
        ValidationError: If any field is out of range
    """

    half_angle: float = DEFAULT_HALF_ANGLE
    radius: float = DEFAULT_RADIUS
    epsilon: float = EPSILON
    aux_ray_tilt: float = HALF_AUX_RAY_TILT

    def __post_init__(self) -> None:
        """Validate and normalize numeric fields to plain floats."""
        half_angle = _require_real("half_angle", self.half_angle)
        radius = _require_real("radius", self.radius)
        epsilon = _require_real("epsilon", self.epsilon)
        aux_ray_tilt = _require_real("aux_ray_tilt", self.aux_ray_tilt)

        if not 0.0 < half_angle < math.pi / 2:
            raise ValidationError(f"half_angle must be in (0, π/2), got {half_angle}")
        if radius <= 0:
            raise ValidationError(f"radius must be positive, got {radius}")
        if epsilon <= 0:
            raise ValidationError(f"epsilon must be positive, got {epsilon}")
        if not 0.0 < aux_ray_tilt < half_angle:
            raise ValidationError(
                f"aux_ray_tilt must be in (0, half_angle={half_angle}), got {aux_ray_tilt}"
            )

        # Use object.__setattr__ because the dataclass is frozen
        object.__setattr__(self, "half_angle", half_angle)
        object.__setattr__(self, "radius", radius)
        object.__setattr__(self, "epsilon", epsilon)
        object.__setattr__(self, "aux_ray_tilt", aux_ray_tilt)

    @classmethod
    def from_degrees(
        cls,
        field_of_view_deg: float,
        radius: float = DEFAULT_RADIUS,
        **kwargs: Any,
    ) -> FovConfig:
        """Build a config from a total aperture in degrees."""
        field_of_view_deg = _require_real("field_of_view_deg", field_of_view_deg)
        return cls(half_angle=math.radians(field_of_view_deg) / 2.0, radius=radius, **kwargs)

    @property
    def radius_sq(self) -> float:
        return self.radius * self.radius

    @property
    def half_angle_cos(self) -> float:
        return math.cos(self.half_angle)

    @property
    def half_angle_sin(self) -> float:
        return math.sin(self.half_angle)

    @property
    def aux_tilt_cos(self) -> float:
        return math.cos(self.aux_ray_tilt)

    @property
    def aux_tilt_sin(self) -> float:
        return math.sin(self.aux_ray_tilt)

    @property
    def field_of_view_deg(self) -> float:
        """Total aperture in degrees."""
        return math.degrees(2.0 * self.half_angle)
