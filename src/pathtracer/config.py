# config.py
"""
Render configuration and scene files.

A scene file is TOML with a top-level ``seed``, an ``[image]`` table, a
``[camera]`` table and a ``[[world]]`` array of objects. Every value is
validated here so that a bad configuration fails before any pixel is traced.
"""
import logging
import math
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional

from pathtracer.core.vector import Vector3
from pathtracer.errors import ConfigError, SceneError
from pathtracer.geometry.hittable import Hittable
from pathtracer.geometry.sphere import Sphere
from pathtracer.geometry.world import HittableList
from pathtracer.materials import presets
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.material import Material
from pathtracer.materials.metal import Metal

logger = logging.getLogger(__name__)

SHADING_MODES = ("radiance", "normals")


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be finite, got {value}")
    return value


def _vector(name: str, value: Any) -> Vector3:
    if isinstance(value, Vector3):
        return value
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ConfigError(f"{name} must be a list of three numbers, got {value!r}")
    return Vector3.from_iterable(_number(f"{name}[{i}]", v) for i, v in enumerate(value))


@dataclass(frozen=True)
class ImageConfig:
    width: int
    height: int
    samples_per_pixel: int = 10
    max_ray_depth: int = 50
    shading: str = "radiance"

    def __post_init__(self):
        _positive_int("image.width", self.width)
        _positive_int("image.height", self.height)
        _positive_int("image.samples_per_pixel", self.samples_per_pixel)
        _positive_int("image.max_ray_depth", self.max_ray_depth)
        if self.shading not in SHADING_MODES:
            raise ConfigError(f"image.shading must be one of {SHADING_MODES}, got {self.shading!r}")

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class CameraConfig:
    look_from: Vector3
    look_to: Vector3
    up: Vector3 = Vector3(0, 1, 0)
    vertical_fov: float = 90.0
    aperture: float = 0.0
    focus_dist: Optional[float] = None

    def __post_init__(self):
        # frozen: normalize list input through object.__setattr__
        object.__setattr__(self, "look_from", _vector("camera.look_from", self.look_from))
        object.__setattr__(self, "look_to", _vector("camera.look_to", self.look_to))
        object.__setattr__(self, "up", _vector("camera.up", self.up))
        fov = _number("camera.vertical_fov", self.vertical_fov)
        if not 0 < fov < 180:
            raise ConfigError(f"camera.vertical_fov must be in (0, 180) degrees, got {fov}")
        aperture = _number("camera.aperture", self.aperture)
        if aperture < 0:
            raise ConfigError(f"camera.aperture must not be negative, got {aperture}")
        object.__setattr__(self, "vertical_fov", fov)
        object.__setattr__(self, "aperture", aperture)
        if self.focus_dist is not None:
            focus_dist = _number("camera.focus_dist", self.focus_dist)
            if focus_dist <= 0:
                raise ConfigError(f"camera.focus_dist must be positive, got {focus_dist}")
            object.__setattr__(self, "focus_dist", focus_dist)


@dataclass
class SceneConfig:
    image: ImageConfig
    camera: CameraConfig
    world: HittableList = field(default_factory=HittableList)
    seed: Optional[int] = None


def parse_material(data: Mapping[str, Any], where: str = "material") -> Material:
    if not isinstance(data, Mapping):
        raise SceneError(f"{where} must be a table, got {data!r}")
    if "preset" in data:
        if "type" in data:
            raise SceneError(f"{where} sets both preset and type")
        name = data["preset"]
        if not isinstance(name, str):
            raise SceneError(f"{where}.preset must be a name, got {name!r}")
        return presets.preset(name)
    kind = data.get("type")
    if kind == "lambertian":
        return Lambertian(_vector(f"{where}.albedo", _require(data, "albedo", where)))
    if kind == "metal":
        albedo = _vector(f"{where}.albedo", _require(data, "albedo", where))
        fuzz = _number(f"{where}.fuzz", data.get("fuzz", 0.0))
        if not 0.0 <= fuzz <= 1.0:
            raise SceneError(f"{where}.fuzz must be in [0, 1], got {fuzz}")
        return Metal(albedo, fuzz)
    if kind == "dielectric":
        ior = _number(f"{where}.refractive_index", _require(data, "refractive_index", where))
        if ior <= 0:
            raise SceneError(f"{where}.refractive_index must be positive, got {ior}")
        return Dielectric(ior)
    raise SceneError(f"{where}.type must be lambertian, metal or dielectric (or give a preset), got {kind!r}")


def parse_object(data: Mapping[str, Any], where: str = "world") -> Hittable:
    if not isinstance(data, Mapping):
        raise SceneError(f"{where} must be a table, got {data!r}")
    kind = data.get("type", "sphere")
    if kind != "sphere":
        raise SceneError(f"{where}.type must be sphere, got {kind!r}")
    center = _vector(f"{where}.center", _require(data, "center", where))
    radius = _number(f"{where}.radius", _require(data, "radius", where))
    if radius == 0:
        raise SceneError(f"{where}.radius must not be zero")
    material = parse_material(_require(data, "material", where), f"{where}.material")
    return Sphere(center, radius, material)


def parse_config(data: Mapping[str, Any]) -> SceneConfig:
    """Build a validated SceneConfig from already-decoded TOML data."""
    image_data = _table(data, "image")
    camera_data = _table(data, "camera")
    try:
        image = ImageConfig(**image_data)
        camera = CameraConfig(**camera_data)
    except TypeError as e:
        raise ConfigError(f"unexpected or missing configuration key: {e}") from e

    world = HittableList()
    objects = data.get("world", [])
    if not isinstance(objects, list):
        raise SceneError("world must be an array of tables")
    for i, obj in enumerate(objects):
        world.add(parse_object(obj, f"world[{i}]"))

    seed = data.get("seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int) or seed < 0):
        raise ConfigError(f"seed must be a non-negative integer, got {seed!r}")

    logger.debug("Parsed scene with %d objects", len(world))
    return SceneConfig(image=image, camera=camera, world=world, seed=seed)


def load_config(path) -> SceneConfig:
    """Read and validate a TOML scene file."""
    path = Path(path)
    with path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"{path}: {e}") from e
    config = parse_config(data)
    logger.info("Loaded %s: %d objects, %dx%d", path, len(config.world),
                config.image.width, config.image.height)
    return config


def _table(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if not isinstance(value, Mapping):
        raise ConfigError(f"missing [{key}] table")
    return value


def _require(data: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise SceneError(f"{where} is missing {key!r}")
    return data[key]
