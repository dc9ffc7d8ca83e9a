# renderer/raytracer.py
import logging
import math
import os
import random
import time
from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Sequence, Tuple

import numpy as np

from pathtracer.camera.camera import Camera
from pathtracer.config import ImageConfig
from pathtracer.core.ray import Ray
from pathtracer.core.vector import Color
from pathtracer.errors import ConfigError
from pathtracer.geometry.world import HittableList
from pathtracer.renderer.tone_mapping import tone_map

logger = logging.getLogger(__name__)

# Offset that keeps a bounced ray from hitting the surface it left.
T_MIN = 0.001
INFINITY = math.inf

WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)

BACKENDS = ("python", "numba")

# Row chunks handed to each worker process.
CHUNKS_PER_WORKER = 4


def sky_color(ray: Ray) -> Color:
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return WHITE * (1.0 - t) + SKY_BLUE * t


def ray_color(ray: Ray, world: HittableList, max_depth: int, rng) -> Color:
    """
    Radiance carried back along ray, following at most max_depth bounces.
    Paths that run out of bounces contribute only what they gathered so far.
    """
    color = Color(0.0, 0.0, 0.0)
    attenuation = Color(1.0, 1.0, 1.0)
    for _ in range(max_depth):
        rec = world.hit(ray, T_MIN, INFINITY)
        if rec is None:
            return color + attenuation * sky_color(ray)
        scattered = rec.material.scatter(ray, rec, rng)
        if scattered is None:
            return color
        attenuation = attenuation * scattered.attenuation
        ray = scattered.ray
    return color


def normal_color(ray: Ray, world: HittableList) -> Color:
    """Debug shading: map the first hit's normal into [0, 1], sky on a miss."""
    rec = world.hit(ray, T_MIN, INFINITY)
    if rec is None:
        return sky_color(ray)
    return (rec.normal + WHITE) * 0.5


def row_seeds(seed: Optional[int], height: int) -> np.ndarray:
    """
    One 32-bit seed per image row, all derived from ``seed``. Without a seed
    the sequence pulls fresh OS entropy.
    """
    sequence = np.random.SeedSequence(seed)
    if seed is None:
        logger.debug("No seed given, using entropy %d", sequence.entropy)
    return sequence.generate_state(height, dtype=np.uint32)


def render_row(world: HittableList, camera: Camera, config: ImageConfig,
               j: int, seed: int) -> np.ndarray:
    """Summed (not yet averaged) radiance of image row j, shape (width, 3)."""
    rng = random.Random(int(seed))
    width, height = config.width, config.height
    # A single-pixel dimension has no (n - 1) span to divide by.
    width_span = max(width - 1, 1)
    height_span = max(height - 1, 1)
    normals_only = config.shading == "normals"

    row = np.zeros((width, 3), dtype=np.float64)
    for i in range(width):
        r = g = b = 0.0
        for _ in range(config.samples_per_pixel):
            s = (i + rng.random()) / width_span
            t = (j + rng.random()) / height_span
            ray = camera.sample_ray(s, t, rng)
            if normals_only:
                c = normal_color(ray, world)
            else:
                c = ray_color(ray, world, config.max_ray_depth, rng)
            r += c.x
            g += c.y
            b += c.z
        row[i] = (r, g, b)
    return row


def render_rows(world: HittableList, camera: Camera, config: ImageConfig,
                rows: Sequence[int], seeds: Sequence[int]) -> List[Tuple[int, np.ndarray]]:
    return [(j, render_row(world, camera, config, j, seed)) for j, seed in zip(rows, seeds)]


def _render_rows_task(args):
    return render_rows(*args)


def _accumulate_python(world: HittableList, camera: Camera, config: ImageConfig,
                       seeds: np.ndarray, workers: int,
                       executor: Optional[ProcessPoolExecutor] = None) -> np.ndarray:
    height = config.height
    accumulated = np.zeros((height, config.width, 3), dtype=np.float64)
    rows = np.arange(height)

    if workers <= 1 or height == 1:
        results = [render_rows(world, camera, config, rows.tolist(), seeds.tolist())]
    else:
        n_chunks = min(height, workers * CHUNKS_PER_WORKER)
        tasks = [
            (world, camera, config, chunk_rows.tolist(), chunk_seeds.tolist())
            for chunk_rows, chunk_seeds in zip(np.array_split(rows, n_chunks),
                                               np.array_split(seeds, n_chunks))
        ]
        logger.debug("Dispatching %d row chunks to %d workers", len(tasks), workers)
        if executor is not None:
            results = list(executor.map(_render_rows_task, tasks))
        else:
            with ProcessPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(_render_rows_task, tasks))

    for chunk in results:
        for j, row in chunk:
            # Image y grows upward, buffer rows grow downward.
            accumulated[height - 1 - j] = row
    return accumulated


def _accumulate_numba(world: HittableList, camera: Camera, config: ImageConfig,
                      seeds: np.ndarray) -> np.ndarray:
    # Imported lazily: compiling the kernels is only paid when this backend is used.
    from pathtracer.renderer.kernels import accumulate, flatten_scene

    return accumulate(flatten_scene(world), camera, config, seeds)


def render(world: HittableList, camera: Camera, image_config: ImageConfig, *,
           seed: Optional[int] = None, workers: Optional[int] = None,
           backend: str = "python",
           executor: Optional[ProcessPoolExecutor] = None) -> np.ndarray:
    """
    Path trace ``world`` through ``camera``.

    Returns a (height, width, 3) uint8 buffer, row 0 at the top of the image.
    The same seed, scene, camera and configuration always give the same
    bytes, whatever the worker count. Nothing is kept between calls.

    ``executor`` lends the python backend a pool that is already running;
    without one, a pool is started and shut down inside this call.
    """
    if not isinstance(image_config, ImageConfig):
        raise ConfigError(f"expected an ImageConfig, got {type(image_config).__name__}")
    if backend not in BACKENDS:
        raise ConfigError(f"backend must be one of {BACKENDS}, got {backend!r}")
    if workers is None:
        workers = os.cpu_count() or 1
    if workers < 1:
        raise ConfigError(f"workers must be at least 1, got {workers}")

    logger.info("Rendering %dx%d, %d spp, depth %d, %s backend, %d workers",
                image_config.width, image_config.height, image_config.samples_per_pixel,
                image_config.max_ray_depth, backend, workers)
    start = time.perf_counter()

    seeds = row_seeds(seed, image_config.height)
    if backend == "numba":
        accumulated = _accumulate_numba(world, camera, image_config, seeds)
    else:
        accumulated = _accumulate_python(world, camera, image_config, seeds, workers, executor)
    image = tone_map(accumulated, image_config.samples_per_pixel)

    logger.info("Rendered in %.2fs", time.perf_counter() - start)
    return image


class Renderer:
    """
    Renders successive frames with a fixed image configuration, as the
    interactive viewer does. Each frame is an independent ``render`` call;
    when a seed is given, frame ``n`` uses ``seed + n``.

    With the python backend and more than one worker, the process pool is
    started on the first frame and reused until ``close``.
    """
    def __init__(self, image_config: ImageConfig, seed: Optional[int] = None,
                 workers: Optional[int] = None, backend: str = "python"):
        if backend not in BACKENDS:
            raise ConfigError(f"backend must be one of {BACKENDS}, got {backend!r}")
        self.image_config = image_config
        self.seed = seed
        self.workers = workers
        self.backend = backend
        self.frame_number = 0
        self._executor: Optional[ProcessPoolExecutor] = None

    @property
    def width(self) -> int:
        return self.image_config.width

    @property
    def height(self) -> int:
        return self.image_config.height

    def camera_for(self, camera_config) -> Camera:
        return Camera.from_config(camera_config, self.image_config.aspect_ratio)

    def render_frame(self, camera: Camera, world: HittableList) -> np.ndarray:
        seed = None if self.seed is None else self.seed + self.frame_number
        frame = render(world, camera, self.image_config, seed=seed,
                       workers=self.workers, backend=self.backend,
                       executor=self._pool())
        self.frame_number += 1
        return frame

    def _pool(self) -> Optional[ProcessPoolExecutor]:
        if self.backend != "python":
            return None
        workers = self.workers if self.workers is not None else (os.cpu_count() or 1)
        if workers <= 1:
            return None
        if self._executor is None:
            logger.debug("Starting a pool of %d workers", workers)
            self._executor = ProcessPoolExecutor(max_workers=workers)
        return self._executor

    def close(self):
        if self._executor is not None:
            self._executor.shutdown()
            self._executor = None

    def __enter__(self) -> "Renderer":
        return self

    def __exit__(self, *exc_info):
        self.close()

