# camera/camera.py
import math
from typing import Optional

from pathtracer.core.quaternion import Quaternion
from pathtracer.core.ray import Ray
from pathtracer.core.utils import degrees_to_radians, random_in_unit_disk
from pathtracer.core.vector import Vector3

# Highest elevation above (or below) the horizon the view may pitch to.
MAX_PITCH = math.radians(89.0)


class Camera:
    """
    Thin-lens camera looking from ``look_from`` towards ``look_to``.

    The basis is u (right), v (up) and w (pointing backwards, away from the
    scene). ``vfov`` is the vertical field of view in degrees. When
    ``focus_dist`` is not given the camera focuses on ``look_to``.
    """
    def __init__(self, look_from: Vector3, look_to: Vector3, vup: Vector3 = Vector3(0, 1, 0),
                 vfov: float = 90.0, aspect_ratio: float = 16.0 / 9.0,
                 aperture: float = 0.0, focus_dist: Optional[float] = None):
        self.origin = look_from
        self.look_to = look_to
        self.vup = vup
        self.vfov = vfov
        self.aspect_ratio = aspect_ratio
        self.aperture = aperture
        self.focus_dist = focus_dist if focus_dist is not None else (look_from - look_to).length()
        self.update_camera()

    @classmethod
    def from_config(cls, config, aspect_ratio: float) -> "Camera":
        return cls(
            look_from=config.look_from,
            look_to=config.look_to,
            vup=config.up,
            vfov=config.vertical_fov,
            aspect_ratio=aspect_ratio,
            aperture=config.aperture,
            focus_dist=config.focus_dist,
        )

    def update_camera(self):
        """Updates the camera's basis vectors and viewport."""
        theta = degrees_to_radians(self.vfov)
        self.viewport_height = 2.0 * math.tan(theta / 2)
        self.viewport_width = self.aspect_ratio * self.viewport_height
        self.lens_radius = self.aperture / 2.0

        self.w = (self.origin - self.look_to).normalize()
        self.u = self.vup.cross(self.w).normalize()
        self.v = self.w.cross(self.u)

        # Scale by focus distance
        self.horizontal = self.u * self.viewport_width * self.focus_dist
        self.vertical = self.v * self.viewport_height * self.focus_dist

        self.lower_left_corner = (self.origin -
                                  self.horizontal * 0.5 -
                                  self.vertical * 0.5 -
                                  self.w * self.focus_dist)

    @property
    def direction(self) -> Vector3:
        return -self.w

    def get_ray(self, s: float, t: float, lens_sample: Optional[Vector3] = None) -> Ray:
        """
        Ray through viewport coordinates (s, t), where (0, 0) is the lower-left
        corner. ``lens_sample`` is a point in the unit disk; it is scaled by
        the lens radius here. The direction is not normalized.
        """
        if lens_sample is None or self.lens_radius <= 0:
            offset = Vector3(0, 0, 0)
        else:
            rd = lens_sample * self.lens_radius
            offset = self.u * rd.x + self.v * rd.y

        ray_origin = self.origin + offset
        ray_direction = (self.lower_left_corner +
                         self.horizontal * s +
                         self.vertical * t -
                         ray_origin)
        return Ray(ray_origin, ray_direction)

    def sample_ray(self, s: float, t: float, rng) -> Ray:
        """Like get_ray, drawing the lens sample from rng when the lens is open."""
        if self.lens_radius <= 0:
            return self.get_ray(s, t)
        return self.get_ray(s, t, random_in_unit_disk(rng))

    def move(self, forward: float = 0.0, right: float = 0.0, up: float = 0.0):
        """Translate the camera and its target along the view, right and up axes."""
        delta = self.direction * forward + self.u * right + self.vup.normalize() * up
        self.origin = self.origin + delta
        self.look_to = self.look_to + delta
        self.update_camera()

    def rotate(self, yaw: float, pitch: float):
        """
        Turn the view direction by yaw (about vup) and pitch (about the right
        axis), both in radians. The elevation is clamped to 89 degrees
        so the view never passes over vup.
        """
        direction = self.look_to - self.origin
        distance = direction.length()
        forward = direction.normalize()

        elevation = math.asin(max(-1.0, min(1.0, forward.dot(self.vup.normalize()))))
        pitch = max(-MAX_PITCH, min(MAX_PITCH, elevation + pitch)) - elevation

        q_yaw = Quaternion.from_axis_angle(self.vup, -yaw)
        q_pitch = Quaternion.from_axis_angle(self.u, pitch)
        forward = q_yaw.rotate(q_pitch.rotate(forward)).normalize()

        self.look_to = self.origin + forward * distance
        self.update_camera()

    def __repr__(self) -> str:
        return (f"Camera(look_from={self.origin!r}, look_to={self.look_to!r}, "
                f"vfov={self.vfov}, aperture={self.aperture}, focus_dist={self.focus_dist})")
