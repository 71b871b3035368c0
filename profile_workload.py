#!/usr/bin/env python3
"""
Profile script for the fov2d kernel to identify performance bottlenecks.
"""

import cProfile
import pstats
import io
import math
import numpy as np
from numpy.typing import NDArray
import time
from typing import List
from fov2d import FieldOfVision, FovConfig, Observer, Scene


def generate_random_polygon(
    center: NDArray[np.float64],
    radius: float,
    n_vertices: int = 5
) -> NDArray[np.float64]:
    """Generate a random star-shaped polygon roughly centered at center."""
    angles = np.sort(np.random.uniform(0, 2 * np.pi, n_vertices))
    radii = np.random.uniform(0.5 * radius, 1.5 * radius, n_vertices)
    x = center[0] + radii * np.cos(angles)
    y = center[1] + radii * np.sin(angles)
    return np.column_stack([x, y])


def generate_scene(
    n_obstacles: int = 5,
    vertices_per_obstacle: int = 5,
    extent: float = 500.0
) -> Scene:
    """Scatter obstacles around an observer at (500, 500)."""
    polygons: List[NDArray[np.float64]] = []
    for _ in range(n_obstacles):
        center = np.array([500.0, 500.0]) + np.random.uniform(-extent, extent, 2)
        polygons.append(generate_random_polygon(center, 25.0, vertices_per_obstacle))
    return Scene.from_coords(polygons)


def run_turning_workload(scene: Scene, n_frames: int) -> None:
    """One observer turning in place, one update per frame."""
    observer = Observer((500.0, 500.0), (1.0, 0.0))
    fov = FieldOfVision(scene, observer, FovConfig(radius=300.0))
    for frame in range(n_frames):
        heading = 2.0 * math.pi * frame / n_frames
        observer.look_at(observer.location + np.array([math.cos(heading), math.sin(heading)]))
        fov.update()


def run_walking_workload(scene: Scene, n_frames: int) -> None:
    """One observer walking across the scene looking ahead."""
    observer = Observer((0.0, 500.0), (1.0, 0.0))
    fov = FieldOfVision(scene, observer, FovConfig(radius=300.0))
    for frame in range(n_frames):
        observer.move_to((1000.0 * frame / n_frames, 500.0 + 100.0 * math.sin(frame / 10.0)))
        fov.update()


def profile_function(func, description: str) -> None:
    """Profile a function and print statistics."""
    print(f"\n{'=' * 60}")
    print(f"Profiling: {description}")
    print('=' * 60)

    # Time the execution
    start = time.perf_counter()

    profiler = cProfile.Profile()
    profiler.enable()
    func()
    profiler.disable()

    elapsed = time.perf_counter() - start

    # Get stats
    s = io.StringIO()
    ps = pstats.Stats(profiler, stream=s).sort_stats('cumulative')
    ps.print_stats(30)
    print(s.getvalue())

    print(f"\nTotal time: {elapsed:.3f}s")


if __name__ == "__main__":
    print("fov2d Performance Profiling")
    print("=" * 60)
    np.random.seed(42)  # For reproducibility

    small = generate_scene(n_obstacles=5, vertices_per_obstacle=5, extent=250.0)
    profile_function(
        lambda: run_turning_workload(small, 360),
        "Turning in place (5 obstacles x 5 vertices, 360 frames)"
    )

    large = generate_scene(n_obstacles=50, vertices_per_obstacle=8)
    profile_function(
        lambda: run_walking_workload(large, 200),
        "Walking (50 obstacles x 8 vertices, 200 frames)"
    )
