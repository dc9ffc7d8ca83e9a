"""Monte Carlo path tracer for sphere scenes."""
from pathtracer.camera.camera import Camera
from pathtracer.config import CameraConfig, ImageConfig, SceneConfig, load_config
from pathtracer.core.ray import Ray
from pathtracer.core.vector import Color, Point3, Vector3
from pathtracer.errors import ConfigError, PathTracerError, SceneError
from pathtracer.geometry.sphere import Sphere
from pathtracer.geometry.world import HittableList
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.renderer.raytracer import Renderer, render

__version__ = "0.1.0"
