"""
2D Field of Vision
==================

Public API for computing the region an observer can see: a vision cone of
limited aperture and sight radius, occluded by polygonal obstacles.
"""

from fov2d.api import compute_fov, is_point_visible, FieldOfVision, FovResult
from fov2d.config import FovConfig, ValidationError, DEFAULT_HALF_ANGLE, DEFAULT_RADIUS
from fov2d.debug import (
    log_sector,
    log_angle_points,
    log_blocking_edges,
    log_rays,
    log_result,
    format_angle,
    format_point,
    format_polygon,
    setup_debug_logging,
    disable_debug_logging,
)
from fov2d.geometry import EPSILON, HALF_AUX_RAY_TILT, Segment
from fov2d.scene import Polygon, Scene
from fov2d.sector import Observer, PointInSector, Sector, build_sector, classify_point

__all__ = [
    # Main API
    'compute_fov',
    'is_point_visible',
    'FieldOfVision',
    'FovResult',
    'FovConfig',
    'ValidationError',
    'DEFAULT_HALF_ANGLE',
    'DEFAULT_RADIUS',
    # Geometry
    'Observer',
    'Polygon',
    'Scene',
    'Sector',
    'Segment',
    'PointInSector',
    'build_sector',
    'classify_point',
    'EPSILON',
    'HALF_AUX_RAY_TILT',
    # Debug utilities
    'log_sector',
    'log_angle_points',
    'log_blocking_edges',
    'log_rays',
    'log_result',
    'format_angle',
    'format_point',
    'format_polygon',
    'setup_debug_logging',
    'disable_debug_logging',
]
__version__ = '0.1.0'
