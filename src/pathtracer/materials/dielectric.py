# materials/dielectric.py
import math

from pathtracer.core.ray import Ray
from pathtracer.core.utils import reflect, refract
from pathtracer.core.vector import Vector3
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.material import Material, ScatterResult

DIELECTRIC = 2


def schlick(cosine: float, ref_idx: float) -> float:
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * math.pow((1.0 - cosine), 5)


class Dielectric(Material):
    """Clear dielectric (glass, water). Always scatters, never tints."""
    type_code = DIELECTRIC

    def __init__(self, ref_idx: float):
        self.ref_idx = ref_idx

    @property
    def refractive_index(self) -> float:
        return self.ref_idx

    def scatter(self, ray_in: Ray, rec: HitRecord, rng) -> ScatterResult:
        attenuation = Vector3(1.0, 1.0, 1.0)  # Glass doesn't absorb light

        # Determine if we're entering or exiting the material
        refraction_ratio = 1.0 / self.ref_idx if rec.front_face else self.ref_idx

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(rec.normal), 1.0)
        sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)

        cannot_refract = refraction_ratio * sin_theta > 1.0
        # Drawn every time so the stream does not depend on the branch.
        should_reflect = schlick(cos_theta, refraction_ratio) > rng.random()

        if cannot_refract or should_reflect:
            direction = reflect(unit_direction, rec.normal)
        else:
            direction = refract(unit_direction, rec.normal, refraction_ratio)

        return ScatterResult(Ray(rec.p, direction), attenuation)

    def __repr__(self) -> str:
        return f"Dielectric(ref_idx={self.ref_idx})"
