import math
import random

import pytest

from pathtracer.camera.camera import Camera
from pathtracer.config import CameraConfig
from pathtracer.core.vector import Point3, Vector3


def approx_vec(v: Vector3, expected, abs_tol=1e-9):
    return (v.x == pytest.approx(expected[0], abs=abs_tol) and
            v.y == pytest.approx(expected[1], abs=abs_tol) and
            v.z == pytest.approx(expected[2], abs=abs_tol))


@pytest.fixture
def camera():
    return Camera(Point3(0, 0, 0), Point3(0, 0, -1), vfov=90.0, aspect_ratio=2.0)


def test_basis_is_orthonormal(camera):
    for axis in (camera.u, camera.v, camera.w):
        assert axis.length() == pytest.approx(1.0)
    assert camera.u.dot(camera.v) == pytest.approx(0.0)
    assert camera.u.dot(camera.w) == pytest.approx(0.0)
    assert camera.v.dot(camera.w) == pytest.approx(0.0)
    assert approx_vec(camera.w, (0, 0, 1))
    assert approx_vec(camera.u, (1, 0, 0))
    assert approx_vec(camera.direction, (0, 0, -1))


def test_viewport_from_field_of_view(camera):
    assert camera.viewport_height == pytest.approx(2.0)
    assert camera.viewport_width == pytest.approx(4.0)


def test_center_ray_points_at_target(camera):
    ray = camera.get_ray(0.5, 0.5)
    assert ray.origin == Point3(0, 0, 0)
    assert approx_vec(ray.direction.normalize(), (0, 0, -1))


def test_corner_rays(camera):
    lower_left = camera.get_ray(0.0, 0.0).direction
    upper_right = camera.get_ray(1.0, 1.0).direction
    assert approx_vec(lower_left, (-2, -1, -1))
    assert approx_vec(upper_right, (2, 1, -1))


def test_focus_distance_defaults_to_target_distance():
    camera = Camera(Point3(13, 2, 3), Point3(0, 0, 0))
    assert camera.focus_dist == pytest.approx(math.sqrt(13 * 13 + 4 + 9))


def test_lens_offset_stays_inside_aperture():
    camera = Camera(Point3(0, 0, 0), Point3(0, 0, -10), vfov=40.0,
                    aspect_ratio=1.5, aperture=0.5, focus_dist=10.0)
    rng = random.Random(3)
    for _ in range(200):
        ray = camera.sample_ray(rng.random(), rng.random(), rng)
        offset = ray.origin - camera.origin
        assert offset.length() <= camera.lens_radius + 1e-12
        # The offset lies in the lens plane
        assert offset.dot(camera.w) == pytest.approx(0.0, abs=1e-12)


def test_rays_through_same_pixel_converge_on_focus_plane():
    camera = Camera(Point3(0, 0, 0), Point3(0, 0, -10), vfov=40.0,
                    aspect_ratio=1.0, aperture=1.0, focus_dist=10.0)
    rng = random.Random(11)
    points = []
    for _ in range(10):
        ray = camera.sample_ray(0.3, 0.6, rng)
        t = -10.0 / ray.direction.z
        points.append(ray.at(t))
    for p in points[1:]:
        assert approx_vec(p, points[0].to_tuple(), abs_tol=1e-9)


def test_pinhole_draws_no_random_numbers(camera):
    rng = random.Random(1)
    state = rng.getstate()
    camera.sample_ray(0.2, 0.8, rng)
    assert rng.getstate() == state


def test_from_config():
    config = CameraConfig(look_from=[0, 0, 5], look_to=[0, 0, 0], vertical_fov=60, aperture=0.2)
    camera = Camera.from_config(config, 16 / 9)
    assert camera.vfov == 60
    assert camera.lens_radius == pytest.approx(0.1)
    assert camera.focus_dist == pytest.approx(5.0)
    assert camera.aspect_ratio == pytest.approx(16 / 9)


def test_move_translates_origin_and_target(camera):
    camera.move(forward=2.0, right=1.0, up=0.5)
    assert approx_vec(camera.origin, (1.0, 0.5, -2.0))
    assert approx_vec(camera.look_to, (1.0, 0.5, -3.0))
    assert approx_vec(camera.direction, (0, 0, -1))


def test_yaw_turns_right(camera):
    camera.rotate(0.1, 0.0)
    d = camera.direction
    assert d.x > 0
    assert d.y == pytest.approx(0.0, abs=1e-12)
    assert (camera.look_to - camera.origin).length() == pytest.approx(1.0)


def test_pitch_looks_up(camera):
    camera.rotate(0.0, 0.2)
    assert camera.direction.y == pytest.approx(math.sin(0.2))


def test_pitch_stops_short_of_vertical(camera):
    for _ in range(100):
        camera.rotate(0.0, 0.1)
    d = camera.direction
    assert d.dot(Vector3(0, 1, 0)) == pytest.approx(math.sin(math.radians(89.0)))
    # Still facing forward, not flipped over the top
    assert d.z < 0
    assert camera.u.length() == pytest.approx(1.0)
