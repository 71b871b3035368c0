"""
Debug logging helpers.

The kernel logs through loggers under the ``fov2d`` namespace and only at
DEBUG level. Call :func:`setup_debug_logging` to see those records and
:func:`disable_debug_logging` to silence them again.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Sequence

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from fov2d.geometry import Segment
    from fov2d.sector import Sector

PACKAGE_LOGGER = "fov2d"

_DEBUG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"
_installed_handler: logging.Handler | None = None


def setup_debug_logging(
    level: int = logging.DEBUG,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """Route ``fov2d`` log records to a handler (stderr by default).

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Logging level for the package logger
        handler: Handler to install; a StreamHandler when omitted

    Returns:
        The package logger
    """
    global _installed_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _installed_handler is not None:
        logger.removeHandler(_installed_handler)

    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_DEBUG_FORMAT))
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    _installed_handler = handler
    return logger


def disable_debug_logging() -> None:
    """Remove the handler installed by setup_debug_logging and reset the level."""
    global _installed_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _installed_handler is not None:
        logger.removeHandler(_installed_handler)
        _installed_handler = None
    logger.setLevel(logging.NOTSET)


def format_angle(angle: float) -> str:
    """Format an angle in radians with its value in degrees."""
    return f"{angle:.4f} rad ({math.degrees(angle):.2f}°)"


def format_point(point: NDArray[np.floating[Any]] | Sequence[float], precision: int = 2) -> str:
    """Format a 2D point as ``(x, y)``."""
    return f"({float(point[0]):.{precision}f}, {float(point[1]):.{precision}f})"


def format_polygon(
    points: NDArray[np.floating[Any]],
    precision: int = 2,
    max_points: int = 8,
) -> str:
    """Format a list of points, eliding the middle of long lists."""
    n = len(points)
    if n <= max_points:
        body = ", ".join(format_point(p, precision) for p in points)
    else:
        head = max_points // 2
        tail = max_points - head
        body = ", ".join(
            [format_point(p, precision) for p in points[:head]]
            + [f"... {n - max_points} more ..."]
            + [format_point(p, precision) for p in points[n - tail:]]
        )
    return f"[{body}]"


def _get_logger(logger: logging.Logger | None) -> logging.Logger:
    return logger if logger is not None else logging.getLogger(PACKAGE_LOGGER)


def log_sector(sector: Sector, logger: logging.Logger | None = None) -> None:
    log = _get_logger(logger)
    facing = math.atan2(float(sector.mid_dir[1]), float(sector.mid_dir[0]))
    log.debug(
        "sector centre=%s facing=%s half_angle=%s radius=%.2f",
        format_point(sector.centre),
        format_angle(facing),
        format_angle(sector.config.half_angle),
        sector.radius,
    )


def log_angle_points(points: NDArray[np.float64], logger: logging.Logger | None = None) -> None:
    _get_logger(logger).debug("%d angle points: %s", len(points), format_polygon(points))


def log_blocking_edges(edges: Sequence[Segment], logger: logging.Logger | None = None) -> None:
    log = _get_logger(logger)
    log.debug("%d blocking edges", len(edges))
    for edge in edges:
        log.debug("  blocking %s -> %s", format_point(edge.start), format_point(edge.end))


def log_rays(rays: NDArray[np.float64], logger: logging.Logger | None = None) -> None:
    _get_logger(logger).debug("%d rays: %s", len(rays), format_polygon(rays))


def log_result(result: Any, logger: logging.Logger | None = None) -> None:
    """Summarize a FovResult: hit count, arc points and curves."""
    log = _get_logger(logger)
    log.debug(
        "fov result: %d hit points (%d on arc, %d curves): %s",
        len(result.hit_points),
        sum(result.on_arc),
        result.num_curves,
        format_polygon(result.hit_points),
    )
