# materials/material.py
from typing import NamedTuple, Optional

from pathtracer.core.ray import Ray
from pathtracer.core.vector import Vector3
from pathtracer.geometry.hittable import HitRecord


class ScatterResult(NamedTuple):
    ray: Ray
    attenuation: Vector3


class Material:
    """
    Abstract material class. Subclasses must implement scatter().

    The set of materials is closed: Lambertian, Metal and Dielectric. The
    compiled backend maps each one to a type code, see ``type_code``.
    """
    type_code = -1

    def scatter(self, ray_in: Ray, rec: HitRecord, rng) -> Optional[ScatterResult]:
        """
        Computes the scattered ray and attenuation using the random source rng.
        Returns None if the ray is absorbed.
        """
        raise NotImplementedError("scatter() must be implemented by subclasses.")
