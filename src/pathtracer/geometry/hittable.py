# geometry/hittable.py
from typing import Optional

from pathtracer.core.ray import Ray
from pathtracer.core.vector import Vector3


class HitRecord:
    """
    Where a ray met a surface: point ``p`` at ray parameter ``t``, the unit
    normal turned to face the incoming ray, and the material to scatter with.
    ``front_face`` is False when the ray arrived from inside the object.
    """
    __slots__ = ("p", "normal", "t", "front_face", "material")

    def __init__(self, p: Optional[Vector3] = None, normal: Optional[Vector3] = None,
                 t: float = 0.0, front_face: bool = True, material=None):
        self.p = p
        self.normal = normal
        self.t = t
        self.front_face = front_face
        self.material = material

    @property
    def point(self) -> Optional[Vector3]:
        return self.p

    def set_face_normal(self, ray: Ray, outward_normal: Vector3):
        # stored normal is never on the same side as the ray direction
        self.front_face = ray.direction.dot(outward_normal) < 0
        self.normal = outward_normal if self.front_face else -outward_normal

    def __repr__(self) -> str:
        return (f"HitRecord(t={self.t}, p={self.p!r}, normal={self.normal!r}, "
                f"front_face={self.front_face})")


class Hittable:
    """Anything a ray can be intersected with."""

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Nearest intersection with t in [t_min, t_max], or None."""
        raise NotImplementedError("hit() must be implemented by subclasses.")
