"""
Demo Scene - Observer Turning Through a Full Circle

Builds a small scene of four obstacles (a square, a concave quadrilateral,
a large block and a triangle), places the observer between them and turns
it through a full circle in fixed steps. For every heading it reports the
size of the visible region and, when OpenCV is installed, writes a frame.

Key features demonstrated:
1. FieldOfVision as a per-observer context updated once per frame
2. Observer.look_at / Observer.move_to driving the observer
3. Point visibility queries against the last result
4. Optional rendering with fov2d.visualize

Run with: uv run python examples/demo_scene.py --steps 36 --output frames/
"""

import argparse
import logging
import math
from pathlib import Path

import numpy as np

from fov2d import FieldOfVision, FovConfig, Observer, Scene, setup_debug_logging
from fov2d import visualize

logger = logging.getLogger("demo_scene")

SCENE_POLYGONS = [
    [100, 100, 200, 100, 200, 200, 100, 200],
    [230, 50, 350, 70, 330, 140, 305, 90],
    [475, 56, 475, 360, 616, 360, 616, 56],
    [374, 300, 374, 450, 400, 400],
]
OBSERVER_LOCATION = (374.0, 203.0)
OBSERVER_DIRECTION = (-0.707106781186, 0.707106781186)
TARGET = (150.0, 260.0)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--steps", type=int, default=36, help="headings per full turn")
    parser.add_argument("--radius", type=float, default=240.0, help="sight radius")
    parser.add_argument("--fov", type=float, default=None,
                        help="total aperture in degrees (default: the demo's 114°)")
    parser.add_argument("--output", type=Path, default=None,
                        help="directory for rendered frames (needs opencv-python)")
    parser.add_argument("--debug", action="store_true",
                        help="log kernel stages and draw the debug overlay")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if args.debug:
        setup_debug_logging()

    if args.fov is None:
        config = FovConfig(radius=args.radius)
    else:
        config = FovConfig.from_degrees(args.fov, radius=args.radius)

    scene = Scene.from_coords(SCENE_POLYGONS)
    observer = Observer(OBSERVER_LOCATION, OBSERVER_DIRECTION)
    fov = FieldOfVision(scene, observer, config)
    logger.info(
        "scene: %d polygons, %d edges; aperture %.1f°, radius %.0f",
        len(scene), scene.num_edges, config.field_of_view_deg, config.radius,
    )

    render = args.output is not None
    if render:
        if not visualize.HAS_CV2:
            logger.warning("opencv-python not installed; frames will not be written")
            render = False
        else:
            args.output.mkdir(parents=True, exist_ok=True)

    centre = np.asarray(OBSERVER_LOCATION)
    for step in range(args.steps):
        heading = 2.0 * math.pi * step / args.steps
        observer.look_at(centre + np.array([math.cos(heading), math.sin(heading)]) * 10.0)
        result = fov.update()
        logger.info(
            "heading %6.1f°: %2d rays, %d curves, area %9.1f, target %s",
            math.degrees(heading), len(result), result.num_curves, result.area(),
            "visible" if fov.is_point_visible(TARGET) else "hidden",
        )
        if render:
            frame = visualize.render_frame(scene, observer, result, debug=args.debug)
            path = args.output / f"frame_{step:03d}.png"
            visualize.cv2.imwrite(str(path), frame)

    # stand somewhere else and look at the target
    observer.move_to((260.0, 300.0))
    observer.look_at(TARGET)
    result = fov.update()
    logger.info(
        "from (260, 300) facing the target: %d rays, target %s",
        len(result), "visible" if result.is_point_visible(TARGET) else "hidden",
    )


if __name__ == "__main__":
    main()
