"""
Scene geometry: obstacle polygons with their edges derived once and cached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from fov2d.config import ValidationError
from fov2d.geometry import Segment


def _coords_to_vertices(coords: ArrayLike) -> NDArray[np.float64]:
    """Accept an (N, 2) array-like or a flat [x0, y0, x1, y1, ...] list.

    Raises:
        ValidationError: If the coordinates are malformed
    """
    try:
        arr = np.array(coords, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Polygon coordinates must be numeric: {e}") from e

    if arr.ndim == 1:
        if arr.shape[0] % 2 != 0:
            raise ValidationError(
                f"Flat coordinate list must have an even length, got {arr.shape[0]}"
            )
        arr = arr.reshape(-1, 2)

    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValidationError(f"Polygon must have shape (N, 2), got shape {arr.shape}")

    if arr.shape[0] < 2:
        raise ValidationError(
            f"Polygon must have at least 2 vertices, got {arr.shape[0]}"
        )

    if not np.all(np.isfinite(arr)):
        raise ValidationError("Polygon coordinates must be finite")

    return arr


def build_edges(vertices: NDArray[np.float64]) -> tuple[Segment, ...]:
    """Edges of a closed ring, or the single edge of a two-point wall.

    Consecutive edges share the exact same vertex values, so a corner
    reached from either edge maps to one angle point.
    """
    n = vertices.shape[0]
    edge_count = n if n > 2 else n - 1
    return tuple(
        Segment(vertices[i], vertices[(i + 1) % n])
        for i in range(edge_count)
    )


@dataclass(frozen=True, eq=False)
class Polygon:
    """An obstacle: a closed ring of vertices, or a standalone wall.

    Attributes:
        vertices: Read-only vertex array of shape (N, 2), N >= 2
        edges: Cached edges; edge i runs from vertex i to vertex (i+1) mod N.
            A two-vertex polygon has exactly one edge.
    """

    vertices: NDArray[np.float64]
    edges: tuple[Segment, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        vertices = _coords_to_vertices(self.vertices)
        vertices.setflags(write=False)
        # Use object.__setattr__ because the dataclass is frozen
        object.__setattr__(self, "vertices", vertices)
        object.__setattr__(self, "edges", build_edges(vertices))

    @property
    def num_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def is_wall(self) -> bool:
        """True for a standalone single-edge obstacle."""
        return len(self.edges) == 1


@dataclass(frozen=True, eq=False)
class Scene:
    """Read-only scene geometry; safe to share between observers.

    Attributes:
        polygons: Obstacles in authoring order
    """

    polygons: tuple[Polygon, ...] = ()

    def __post_init__(self) -> None:
        polygons = tuple(
            p if isinstance(p, Polygon) else Polygon(p) for p in self.polygons
        )
        object.__setattr__(self, "polygons", polygons)

    @classmethod
    def from_coords(cls, polygons: Sequence[Any]) -> Scene:
        """Build a scene from raw coordinate lists or arrays, one per polygon."""
        if isinstance(polygons, np.ndarray) or not isinstance(polygons, Sequence):
            raise ValidationError(
                f"polygons must be a list of coordinate sequences, got {type(polygons).__name__}"
            )
        return cls(tuple(Polygon(coords) for coords in polygons))

    def __len__(self) -> int:
        return len(self.polygons)

    def __iter__(self) -> Iterator[Polygon]:
        return iter(self.polygons)

    @property
    def num_edges(self) -> int:
        return sum(len(p.edges) for p in self.polygons)
