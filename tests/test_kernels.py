"""Compiled backend. The first test in a session pays the compile time."""
import numpy as np
import pytest

from pathtracer.camera.camera import Camera
from pathtracer.config import ImageConfig
from pathtracer.core.ray import Ray
from pathtracer.core.vector import Color, Point3, Vector3
from pathtracer.errors import ConfigError
from pathtracer.geometry.hittable import Hittable
from pathtracer.geometry.sphere import Sphere
from pathtracer.geometry.world import HittableList
from pathtracer.materials.dielectric import DIELECTRIC, Dielectric
from pathtracer.materials.lambertian import LAMBERTIAN, Lambertian
from pathtracer.materials.material import Material
from pathtracer.materials.metal import METAL, Metal
from pathtracer.renderer import kernels
from pathtracer.renderer.raytracer import render, sky_color
from pathtracer.scenes import load_builtin


@pytest.fixture
def mixed_world():
    return HittableList([
        Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.8, 0.8, 0.0))),
        Sphere(Point3(1, 0, -1), 0.5, Metal(Color(0.8, 0.6, 0.2), 0.3)),
        Sphere(Point3(-1, 0, -1), -0.45, Dielectric(1.5)),
    ])


def origin_camera(config):
    return Camera(Point3(0, 0, 0), Point3(0, 0, -1), vfov=90.0, aspect_ratio=config.aspect_ratio)


def test_flatten_scene(mixed_world):
    scene = kernels.flatten_scene(mixed_world)
    assert scene.centers.shape == (3, 3)
    assert list(scene.radii) == [100.0, 0.5, -0.45]
    assert list(scene.material_types) == [LAMBERTIAN, METAL, DIELECTRIC]
    assert tuple(scene.albedos[1]) == (0.8, 0.6, 0.2)
    assert scene.fuzzes[1] == 0.3
    assert scene.refractive_indices[2] == 1.5
    assert scene.refractive_indices[0] == 1.0


def test_flatten_empty_world():
    scene = kernels.flatten_scene(HittableList())
    assert scene.centers.shape == (0, 3)


def test_flatten_rejects_unknown_material():
    class Emissive(Material):
        pass

    with pytest.raises(ConfigError):
        kernels.flatten_scene(HittableList([Sphere(Point3(0, 0, 0), 1, Emissive())]))


def test_flatten_rejects_unknown_shape():
    class Plane(Hittable):
        pass

    with pytest.raises(ConfigError):
        kernels.flatten_scene(HittableList([Plane()]))


def test_intersect_matches_sphere_hit():
    sphere = Sphere(Point3(0, 0, -5), 1.0, None)
    ray = Ray(Point3(0, 0, 0), Vector3(0.1, 0.05, -1))
    rec = sphere.hit(ray, 0.001, np.inf)
    t = kernels.ray_sphere_intersect(ray.origin.to_tuple(), ray.direction.to_tuple(),
                                     sphere.center.to_tuple(), 1.0, 0.001, np.inf)
    assert t == pytest.approx(rec.t)
    assert kernels.ray_sphere_intersect((0.0, 0.0, 0.0), (0.0, 1.0, 0.0),
                                        (0.0, 0.0, -5.0), 1.0, 0.001, np.inf) == -1.0
    assert kernels.ray_sphere_intersect((0.0, 0.0, 0.0), (0.0, 0.0, 0.0),
                                        (0.0, 0.0, 0.0), 1.0, 0.001, np.inf) == -1.0


def test_hit_world_picks_nearest(mixed_world):
    scene = kernels.flatten_scene(mixed_world)
    idx, t = kernels.hit_world((1.0, 2.0, -1.0), (0.0, -1.0, 0.0), scene.centers, scene.radii)
    assert idx == 1
    assert t == pytest.approx(1.5)


def test_sky_matches_python():
    direction = Vector3(0.3, -0.4, -1.0)
    expected = sky_color(Ray(Point3(0, 0, 0), direction)).to_tuple()
    assert kernels.sky_color(direction.to_tuple()) == pytest.approx(expected)


def test_render_is_deterministic(mixed_world):
    config = ImageConfig(width=16, height=9, samples_per_pixel=4, max_ray_depth=10)
    camera = origin_camera(config)
    a = render(mixed_world, camera, config, seed=11, backend="numba")
    b = render(mixed_world, camera, config, seed=11, backend="numba")
    c = render(mixed_world, camera, config, seed=12, backend="numba")
    assert a.shape == (9, 16, 3)
    assert a.dtype == np.uint8
    assert np.array_equal(a, b)
    assert not np.array_equal(a, c)


def test_render_with_open_lens():
    scene = load_builtin("three_spheres")
    config = ImageConfig(width=12, height=8, samples_per_pixel=2, max_ray_depth=5)
    camera = Camera.from_config(scene.camera, config.aspect_ratio)
    a = render(scene.world, camera, config, seed=2, backend="numba")
    b = render(scene.world, camera, config, seed=2, backend="numba")
    assert np.array_equal(a, b)


def test_output_is_flipped_vertically():
    config = ImageConfig(width=4, height=8, samples_per_pixel=2, max_ray_depth=2)
    image = render(HittableList(), origin_camera(config), config, seed=3, backend="numba")
    red = image[:, :, 0].astype(int).mean(axis=1)
    assert red[0] < red[-1]


def test_normals_shading_center(single_sphere_world):
    config = ImageConfig(width=21, height=11, samples_per_pixel=4, shading="normals")
    image = render(single_sphere_world, origin_camera(config), config, seed=1, backend="numba")
    r, g, b = image[5, 10].astype(int)
    assert abs(r - 181) <= 25
    assert abs(g - 181) <= 25
    assert b >= 245


def test_backends_agree_on_average():
    config = ImageConfig(width=16, height=8, samples_per_pixel=8, max_ray_depth=2)
    camera = origin_camera(config)
    python = render(HittableList(), camera, config, seed=4, workers=1, backend="python")
    compiled = render(HittableList(), camera, config, seed=4, backend="numba")
    assert abs(python.astype(float).mean() - compiled.astype(float).mean()) < 2.0


def test_backends_agree_on_every_material():
    # diffuse ground and ball, hollow glass, fuzzy metal
    world = HittableList([
        Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.8, 0.8, 0.0))),
        Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.1, 0.2, 0.5))),
        Sphere(Point3(-1, 0, -1), 0.5, Dielectric(1.5)),
        Sphere(Point3(-1, 0, -1), -0.45, Dielectric(1.5)),
        Sphere(Point3(1, 0, -1), 0.5, Metal(Color(0.8, 0.6, 0.2), 0.4)),
    ])
    scene = load_builtin("three_spheres")
    config = ImageConfig(width=40, height=24, samples_per_pixel=64, max_ray_depth=10)
    camera = Camera.from_config(scene.camera, config.aspect_ratio)

    python = render(world, camera, config, seed=17, workers=2, backend="python")
    compiled = render(world, camera, config, seed=17, backend="numba")
    python_means = python.astype(float).mean(axis=(0, 1))
    compiled_means = compiled.astype(float).mean(axis=(0, 1))
    assert np.abs(python_means - compiled_means).max() < 2.0

    # The glass and metal balls sit in different vertical strips
    for columns in np.array_split(np.arange(config.width), 4):
        a = python[:, columns].astype(float).mean(axis=(0, 1))
        b = compiled[:, columns].astype(float).mean(axis=(0, 1))
        assert np.abs(a - b).max() < 4.0
