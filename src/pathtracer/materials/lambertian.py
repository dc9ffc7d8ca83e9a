# materials/lambertian.py
from pathtracer.core.ray import Ray
from pathtracer.core.utils import random_unit_vector
from pathtracer.core.vector import Vector3
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.material import Material, ScatterResult

LAMBERTIAN = 0


class Lambertian(Material):
    """
    Lambertian diffuse material.
    """
    type_code = LAMBERTIAN

    def __init__(self, albedo: Vector3):
        self.albedo = albedo

    def scatter(self, ray_in: Ray, rec: HitRecord, rng) -> ScatterResult:
        """
        Scatter a ray according to a Lambertian reflection model.
        Never absorbs.
        """
        # Pick a random scatter direction by adding a random vector to the normal.
        scatter_direction = rec.normal + random_unit_vector(rng)

        # The random vector can cancel the normal exactly.
        if scatter_direction.near_zero():
            scatter_direction = rec.normal

        return ScatterResult(Ray(rec.p, scatter_direction), self.albedo)

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo!r})"
