"""
Visualization utilities for debugging and validation.

Draws scenes, observers and field-of-vision results onto BGR images with
OpenCV. Coordinates are image pixels, y pointing down.
"""

from typing import Iterable, Optional

import numpy as np
from numpy.typing import NDArray

from fov2d.api import FovResult
from fov2d.scene import Polygon, Scene
from fov2d.sector import Observer

# Try to import cv2, set flag if not available
try:
    import cv2

    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False

BLACK = (0, 0, 0)
GREY = (160, 160, 160)
RED = (0, 0, 255)
BLUE = (255, 0, 0)


def _ensure_cv2() -> None:
    """Raise an error if cv2 is not available."""
    if not HAS_CV2:
        raise ImportError(
            "OpenCV (cv2) is required for visualization functions. "
            "Install with: pip install opencv-python"
        )


def _to_pixels(points: NDArray[np.float64]) -> NDArray[np.int32]:
    return np.round(points).astype(np.int32).reshape((-1, 1, 2))


def _pixel(point: NDArray[np.float64]) -> tuple[int, int]:
    return (int(round(float(point[0]))), int(round(float(point[1]))))


def draw_scene(
    image: NDArray[np.uint8],
    scene: Scene | Iterable[Polygon],
    color: tuple[int, int, int] = (90, 90, 90),
    thickness: int = 2,
) -> NDArray[np.uint8]:
    """Draw obstacle outlines; a two-vertex wall is drawn as an open line.

    Args:
        image: Input image (H, W, 3) BGR format
        scene: Obstacles to draw
        color: BGR outline color
        thickness: Line thickness

    Returns:
        Image with obstacles drawn (modified copy)
    """
    _ensure_cv2()

    output = image.copy()
    for polygon in scene:
        pts = _to_pixels(polygon.vertices)
        cv2.polylines(
            output, [pts], isClosed=not polygon.is_wall, color=color, thickness=thickness
        )
    return output


def draw_observer(
    image: NDArray[np.uint8],
    observer: Observer,
    color: tuple[int, int, int] = (0, 160, 0),
    radius: int = 4,
    direction_length: float = 20.0,
) -> NDArray[np.uint8]:
    """Draw the observer as a dot with a short line towards its facing direction."""
    _ensure_cv2()

    output = image.copy()
    tip = observer.location + observer.direction * direction_length
    cv2.circle(output, _pixel(observer.location), radius, color, -1)
    cv2.line(output, _pixel(observer.location), _pixel(tip), color, 1, cv2.LINE_AA)
    return output


def draw_fov(
    image: NDArray[np.uint8],
    result: FovResult,
    color: tuple[int, int, int] = (0, 200, 255),
    fill_alpha: float = 0.4,
    samples_per_curve: int = 8,
    draw_outline: bool = True,
) -> NDArray[np.uint8]:
    """Fill the visible region of a result.

    Curved pieces of the boundary are flattened with
    ``samples_per_curve`` points each before filling.

    Args:
        image: Input image (H, W, 3) BGR format
        result: FovResult to draw
        color: BGR fill color
        fill_alpha: Alpha transparency for the fill (0.0 = transparent, 1.0 = opaque)
        samples_per_curve: Points used to flatten each curve
        draw_outline: If True, also stroke the region's boundary

    Returns:
        Image with the region overlay (modified copy)

    Example:
        >>> result = compute_fov(scene, (374, 203), (-0.7071068, 0.7071068))
        >>> img = draw_fov(np.full((480, 640, 3), 255, np.uint8), result)
        >>> cv2.imwrite('fov.png', img)
    """
    _ensure_cv2()

    output = image.copy()
    if len(result) == 0:
        return output

    pts = _to_pixels(result.outline(samples_per_curve))
    overlay = output.copy()
    cv2.fillPoly(overlay, [pts], color)
    cv2.addWeighted(overlay, fill_alpha, output, 1 - fill_alpha, 0, output)

    if draw_outline:
        cv2.polylines(output, [pts], isClosed=True, color=color, thickness=1)
    return output


def draw_fov_debug(
    image: NDArray[np.uint8],
    result: FovResult,
    point_radius: int = 3,
    ray_color: Optional[tuple[int, int, int]] = GREY,
) -> NDArray[np.uint8]:
    """Overlay the working state of a computation.

    Angle points and blocking edges are drawn in black, rays in grey, hit
    points in red and curve control points in blue.

    Args:
        image: Input image (H, W, 3) BGR format
        result: FovResult to inspect
        point_radius: Radius of point markers
        ray_color: BGR color of the rays; None skips them

    Returns:
        Image with the debug overlay (modified copy)
    """
    _ensure_cv2()

    output = image.copy()
    centre = _pixel(result.centre)

    for edge in result.blocking_edges:
        cv2.line(output, _pixel(edge.start), _pixel(edge.end), BLACK, 2)

    if ray_color is not None:
        for hit in result.hit_points:
            cv2.line(output, centre, _pixel(hit), ray_color, 1, cv2.LINE_AA)

    for point in result.angle_points:
        cv2.circle(output, _pixel(point), point_radius, BLACK, -1)
    for hit in result.hit_points:
        cv2.circle(output, _pixel(hit), point_radius, RED, -1)
    for ctrl in result.ctrl_points:
        if ctrl is not None:
            cv2.circle(output, _pixel(ctrl), point_radius, BLUE, -1)
    return output


def render_frame(
    scene: Scene,
    observer: Observer,
    result: FovResult,
    size: tuple[int, int] = (480, 640),
    background: tuple[int, int, int] = (255, 255, 255),
    debug: bool = False,
) -> NDArray[np.uint8]:
    """Render a whole frame: region, obstacles, observer and optional debug overlay.

    Args:
        scene: Obstacles
        observer: Observer the result was computed for
        result: FovResult to draw
        size: Image (height, width)
        background: BGR background color
        debug: If True, add the draw_fov_debug overlay

    Returns:
        New (H, W, 3) BGR image
    """
    _ensure_cv2()

    height, width = size
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[:] = background
    image = draw_fov(image, result)
    image = draw_scene(image, scene)
    if debug:
        image = draw_fov_debug(image, result)
    return draw_observer(image, observer)
