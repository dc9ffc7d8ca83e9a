# geometry/sphere.py
import math
from typing import Optional

from pathtracer.core.ray import Ray
from pathtracer.core.vector import Vector3
from pathtracer.geometry.hittable import HitRecord, Hittable


class Sphere(Hittable):
    """
    Sphere with a center, a radius and a material.

    A negative radius keeps the same surface but turns the outward normal
    inwards. Nested inside a dielectric sphere of the opposite radius it
    makes a hollow glass shell.
    """
    def __init__(self, center: Vector3, radius: float, material):
        self.center = center
        self.radius = radius
        self.material = material

    def nearest_root(self, ray: Ray, t_min: float, t_max: float) -> Optional[float]:
        """Smallest t in [t_min, t_max] where ray meets the surface."""
        a = ray.direction.length_squared()
        if a == 0:
            return None  # zero-length direction, the quadratic has no solution
        oc = ray.origin - self.center
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius
        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None

        sqrt_disc = math.sqrt(discriminant)
        for root in ((-half_b - sqrt_disc) / a, (-half_b + sqrt_disc) / a):
            if t_min <= root <= t_max:
                return root
        return None

    def outward_normal(self, point: Vector3) -> Vector3:
        return (point - self.center) / self.radius

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        t = self.nearest_root(ray, t_min, t_max)
        if t is None:
            return None
        point = ray.at(t)
        rec = HitRecord(p=point, t=t, material=self.material)
        rec.set_face_normal(ray, self.outward_normal(point))
        return rec

    def __repr__(self) -> str:
        return f"Sphere({self.center!r}, {self.radius}, {self.material!r})"
