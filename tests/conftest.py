"""Shared pytest fixtures."""
import random

import pytest

from pathtracer.config import CameraConfig, ImageConfig
from pathtracer.core.vector import Color, Point3
from pathtracer.geometry.sphere import Sphere
from pathtracer.geometry.world import HittableList
from pathtracer.materials.lambertian import Lambertian


class FixedRandom:
    """Stand-in random source returning the same value every time."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.value


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def diffuse_sphere():
    return Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.9, 0.9, 0.9)))


@pytest.fixture
def single_sphere_world(diffuse_sphere):
    return HittableList([diffuse_sphere])


@pytest.fixture
def small_image():
    """Odd dimensions so the image has a center pixel."""
    return ImageConfig(width=21, height=11, samples_per_pixel=1, max_ray_depth=1)


@pytest.fixture
def origin_camera_config():
    return CameraConfig(look_from=Point3(0, 0, 0), look_to=Point3(0, 0, -1), vertical_fov=90.0)
