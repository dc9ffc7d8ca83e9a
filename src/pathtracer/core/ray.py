# core/ray.py
from pathtracer.core.vector import Point3, Vector3


class Ray:
    """
    Half-line ``origin + t * direction``. The direction keeps whatever
    length it was built with, so ``t`` is measured in units of it.
    """
    __slots__ = ("origin", "direction")

    def __init__(self, origin: Point3, direction: Vector3):
        self.origin = origin
        self.direction = direction

    def at(self, t: float) -> Point3:
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray({self.origin!r}, {self.direction!r})"
