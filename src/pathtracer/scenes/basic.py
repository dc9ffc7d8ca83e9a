# scenes/basic.py
from typing import Optional

from pathtracer.config import CameraConfig, ImageConfig, SceneConfig
from pathtracer.core.vector import Color, Point3
from pathtracer.geometry.sphere import Sphere
from pathtracer.geometry.world import HittableList
from pathtracer.materials import presets
from pathtracer.materials.lambertian import Lambertian


def single_sphere(seed: Optional[int] = None) -> SceneConfig:
    """One diffuse sphere in front of a camera at the origin looking down -z."""
    world = HittableList([Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.9, 0.9, 0.9)))])
    return SceneConfig(
        image=ImageConfig(width=400, height=225, samples_per_pixel=10, max_ray_depth=10),
        camera=CameraConfig(look_from=Point3(0, 0, 0), look_to=Point3(0, 0, -1), vertical_fov=90.0),
        world=world,
        seed=seed,
    )


def three_spheres(seed: Optional[int] = None) -> SceneConfig:
    """Matte, glass (with a hollow core) and gold spheres on a yellow ground."""
    glass = presets.preset("glass")
    world = HittableList([
        Sphere(Point3(0, -100.5, -1), 100, presets.matte(presets.GROUND)),
        Sphere(Point3(0, 0, -1), 0.5, presets.matte(presets.BLUE)),
        Sphere(Point3(-1, 0, -1), 0.5, glass),
        Sphere(Point3(-1, 0, -1), -0.45, glass),
        Sphere(Point3(1, 0, -1), 0.5, presets.preset("gold")),
    ])
    return SceneConfig(
        image=ImageConfig(width=400, height=225, samples_per_pixel=20, max_ray_depth=50),
        camera=CameraConfig(
            look_from=Point3(-2, 2, 1),
            look_to=Point3(0, 0, -1),
            vertical_fov=30.0,
            aperture=0.05,
        ),
        world=world,
        seed=seed,
    )
