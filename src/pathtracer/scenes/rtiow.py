# scenes/rtiow.py
import random
from typing import Optional

from pathtracer.config import CameraConfig, ImageConfig, SceneConfig
from pathtracer.core.vector import Color, Point3
from pathtracer.geometry.sphere import Sphere
from pathtracer.geometry.world import HittableList
from pathtracer.materials import presets
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal


def random_spheres(rng: random.Random) -> HittableList:
    """Ground, a 22x22 grid of small random spheres, and three large ones."""
    world = HittableList()
    world.add(Sphere(Point3(0, -1000, 0), 1000, presets.matte(presets.GRAY)))

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())

            if (center - Point3(4, 0.2, 0)).length() <= 0.9:
                continue
            if choose_mat < 0.8:
                # Diffuse
                albedo = Color.random(rng) * Color.random(rng)
                world.add(Sphere(center, 0.2, Lambertian(albedo)))
            elif choose_mat < 0.95:
                # Metal
                albedo = Color.random(rng, 0.5, 1.0)
                world.add(Sphere(center, 0.2, Metal(albedo, rng.uniform(0, 0.5))))
            else:
                # Glass
                world.add(Sphere(center, 0.2, Dielectric(1.5)))

    world.add(Sphere(Point3(0, 1, 0), 1.0, presets.preset("glass")))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, presets.matte(presets.BROWN)))
    world.add(Sphere(Point3(4, 1, 0), 1.0, presets.preset("bronze")))
    return world


def final_scene(seed: Optional[int] = None) -> SceneConfig:
    """The cover scene: many small spheres around three large ones, with depth of field."""
    rng = random.Random(seed)
    return SceneConfig(
        image=ImageConfig(width=1200, height=800, samples_per_pixel=10, max_ray_depth=50),
        camera=CameraConfig(
            look_from=Point3(13.0, 2.0, 3.0),
            look_to=Point3(0.0, 0.0, 0.0),
            vertical_fov=20.0,
            aperture=0.1,
            focus_dist=10.0,
        ),
        world=random_spheres(rng),
        seed=seed,
    )
