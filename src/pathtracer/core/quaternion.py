# core/quaternion.py
import math

from pathtracer.core.vector import Vector3


class Quaternion:
    """Unit quaternion used for incremental camera rotations."""
    __slots__ = ("w", "x", "y", "z")

    def __init__(self, w: float, x: float, y: float, z: float):
        self.w = w
        self.x = x
        self.y = y
        self.z = z

    @classmethod
    def from_axis_angle(cls, axis: Vector3, angle: float) -> "Quaternion":
        axis = axis.normalize()
        s = math.sin(angle * 0.5)
        return cls(math.cos(angle * 0.5), axis.x * s, axis.y * s, axis.z * s)

    def __mul__(self, other: "Quaternion") -> "Quaternion":
        return Quaternion(
            self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
            self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
            self.w * other.y - self.x * other.z + self.y * other.w + self.z * other.x,
            self.w * other.z + self.x * other.y - self.y * other.x + self.z * other.w,
        )

    def rotate(self, v: Vector3) -> Vector3:
        # v' = v + 2w(q x v) + 2 q x (q x v)
        q = Vector3(self.x, self.y, self.z)
        uv = q.cross(v)
        uuv = q.cross(uv)
        return v + uv * (2.0 * self.w) + uuv * 2.0

    def __repr__(self) -> str:
        return f"Quaternion({self.w}, {self.x}, {self.y}, {self.z})"
