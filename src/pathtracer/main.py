# main.py
import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from pathtracer.camera.camera import Camera
from pathtracer.config import SHADING_MODES, SceneConfig, load_config
from pathtracer.errors import ConfigError, PathTracerError
from pathtracer.logging_config import setup_logging
from pathtracer.renderer.image_io import save_image
from pathtracer.renderer.raytracer import BACKENDS, render
from pathtracer.scenes import BUILTIN_SCENES, load_builtin

logger = logging.getLogger("pathtracer.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pathtracer", description="Monte Carlo path tracer.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--config", help="A TOML scene configuration.")
    source.add_argument("--scene", choices=sorted(BUILTIN_SCENES), help="A builtin scene.")

    parser.add_argument("-o", "--output", default="image.png", help="Output image path (default: %(default)s).")
    parser.add_argument("--width", type=int, help="Override image width.")
    parser.add_argument("--height", type=int, help="Override image height.")
    parser.add_argument("--samples", type=int, help="Override samples per pixel.")
    parser.add_argument("--depth", type=int, help="Override maximum ray depth.")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible render.")
    parser.add_argument("--shading", choices=SHADING_MODES, help="Override shading mode.")
    parser.add_argument("--backend", choices=BACKENDS,
                        help="Tracing backend (default: python, or numba with --interactive).")
    parser.add_argument("--workers", type=int, help="Worker processes for the python backend.")
    parser.add_argument("--interactive", action="store_true", help="Open the preview window instead of writing a file.")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    return parser


def apply_overrides(config: SceneConfig, args: argparse.Namespace) -> SceneConfig:
    overrides = {
        "width": args.width,
        "height": args.height,
        "samples_per_pixel": args.samples,
        "max_ray_depth": args.depth,
        "shading": args.shading,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        # replace() re-runs the validation in ImageConfig
        config.image = dataclasses.replace(config.image, **overrides)
    if args.seed is not None:
        if args.seed < 0:
            raise ConfigError(f"seed must be a non-negative integer, got {args.seed}")
        config.seed = args.seed
    return config


def load_scene(args: argparse.Namespace) -> SceneConfig:
    if args.config:
        return load_config(args.config)
    return load_builtin(args.scene, args.seed)


def backend_for(args: argparse.Namespace) -> str:
    if args.backend is not None:
        return args.backend
    return "numba" if args.interactive else "python"


def run(args: argparse.Namespace) -> int:
    config = apply_overrides(load_scene(args), args)
    logger.debug("Seed: %s", config.seed)

    if args.interactive:
        # pygame is only needed for the preview window
        from pathtracer.viewer import Viewer

        Viewer(config, backend=backend_for(args), workers=args.workers).run()
        return 0

    camera = Camera.from_config(config.camera, config.image.aspect_ratio)
    buffer = render(config.world, camera, config.image, seed=config.seed,
                    workers=args.workers, backend=backend_for(args))
    save_image(buffer, args.output)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    logger.debug("Debug logging enabled.")
    try:
        return run(args)
    except PathTracerError as e:
        logger.error("%s", e)
        return 2
    except OSError as e:
        logger.error("I/O error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
