# materials/presets.py
"""
Named colors and materials.

Built-in scenes use them directly; scene files refer to a material by name
with ``material = { preset = "gold" }``. Every lookup builds a fresh
material.
"""
from typing import Callable, Dict

from pathtracer.core.vector import Color
from pathtracer.errors import SceneError
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.material import Material
from pathtracer.materials.metal import Metal

RED = Color(0.9, 0.2, 0.2)
BLUE = Color(0.1, 0.2, 0.5)
GROUND = Color(0.8, 0.8, 0.0)
BROWN = Color(0.4, 0.2, 0.1)
WHITE = Color(0.9, 0.9, 0.9)
GRAY = Color(0.5, 0.5, 0.5)


def matte(color: Color) -> Lambertian:
    return Lambertian(color)


MATERIALS: Dict[str, Callable[[], Material]] = {
    # metals, polished unless noted
    "gold": lambda: Metal(Color(0.8, 0.6, 0.2), fuzz=0.0),
    "bronze": lambda: Metal(Color(0.7, 0.6, 0.5), fuzz=0.0),
    "copper": lambda: Metal(Color(0.95, 0.64, 0.54), fuzz=0.1),
    "silver": lambda: Metal(Color(0.95, 0.93, 0.88), fuzz=0.05),
    "brushed_steel": lambda: Metal(Color(0.8, 0.8, 0.8), fuzz=0.3),
    # refractive indices
    "glass": lambda: Dielectric(1.5),
    "water": lambda: Dielectric(1.33),
    "diamond": lambda: Dielectric(2.42),
    # diffuse
    "matte_red": lambda: matte(RED),
    "matte_blue": lambda: matte(BLUE),
    "matte_white": lambda: matte(WHITE),
    "matte_gray": lambda: matte(GRAY),
    "ground": lambda: matte(GROUND),
}


def preset(name: str) -> Material:
    """Build the material registered under ``name``."""
    try:
        factory = MATERIALS[name]
    except KeyError:
        raise SceneError(f"unknown material preset {name!r}, choose from {sorted(MATERIALS)}") from None
    return factory()
