# renderer/kernels.py
"""
Compiled CPU backend.

The scene is flattened into plain arrays (one row per sphere) and traced by
numba-compiled functions working on 3-tuples of floats. Rows are spread over
threads with ``prange``; every row reseeds the thread's generator with its own
seed, so the output depends only on the seeds and not on scheduling.
"""
import math
from typing import NamedTuple

import numpy as np
from numba import njit, prange

from pathtracer.errors import ConfigError
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials.dielectric import DIELECTRIC, Dielectric
from pathtracer.materials.lambertian import LAMBERTIAN, Lambertian
from pathtracer.materials.metal import METAL, Metal

T_MIN = 0.001
NEAR_ZERO = 1e-8

JIT_OPTIONS = dict(cache=True, error_model="numpy")


class FlatScene(NamedTuple):
    centers: np.ndarray         # (n, 3) float64
    radii: np.ndarray           # (n,) float64
    material_types: np.ndarray  # (n,) int64
    albedos: np.ndarray         # (n, 3) float64
    fuzzes: np.ndarray          # (n,) float64
    refractive_indices: np.ndarray  # (n,) float64


def flatten_scene(world) -> FlatScene:
    """Pack the spheres of world and their materials into arrays."""
    objects = list(world.objects)
    n = len(objects)
    centers = np.zeros((n, 3), dtype=np.float64)
    radii = np.zeros(n, dtype=np.float64)
    material_types = np.zeros(n, dtype=np.int64)
    albedos = np.zeros((n, 3), dtype=np.float64)
    fuzzes = np.zeros(n, dtype=np.float64)
    refractive_indices = np.ones(n, dtype=np.float64)

    for idx, obj in enumerate(objects):
        if not isinstance(obj, Sphere):
            raise ConfigError(f"compiled backend only renders spheres, got {type(obj).__name__}")
        centers[idx] = obj.center.to_tuple()
        radii[idx] = obj.radius

        mat = obj.material
        if isinstance(mat, Lambertian):
            albedos[idx] = mat.albedo.to_tuple()
        elif isinstance(mat, Metal):
            albedos[idx] = mat.albedo.to_tuple()
            fuzzes[idx] = mat.fuzz
        elif isinstance(mat, Dielectric):
            refractive_indices[idx] = mat.ref_idx
        else:
            raise ConfigError(f"compiled backend has no kernel for {type(mat).__name__}")
        material_types[idx] = mat.type_code

    return FlatScene(centers, radii, material_types, albedos, fuzzes, refractive_indices)


@njit(**JIT_OPTIONS)
def dot(a, b):
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


@njit(**JIT_OPTIONS)
def add(a, b):
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


@njit(**JIT_OPTIONS)
def sub(a, b):
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


@njit(**JIT_OPTIONS)
def scale(a, s):
    return (a[0] * s, a[1] * s, a[2] * s)


@njit(**JIT_OPTIONS)
def normalize(a):
    length = math.sqrt(dot(a, a))
    if length == 0.0:
        return (0.0, 0.0, 0.0)
    return (a[0] / length, a[1] / length, a[2] / length)


@njit(**JIT_OPTIONS)
def near_zero(a):
    return abs(a[0]) < NEAR_ZERO and abs(a[1]) < NEAR_ZERO and abs(a[2]) < NEAR_ZERO


@njit(**JIT_OPTIONS)
def random_in_unit_sphere():
    while True:
        x = 2.0 * np.random.random() - 1.0
        y = 2.0 * np.random.random() - 1.0
        z = 2.0 * np.random.random() - 1.0
        if x * x + y * y + z * z < 1.0:
            return (x, y, z)


@njit(**JIT_OPTIONS)
def random_in_unit_disk():
    while True:
        x = 2.0 * np.random.random() - 1.0
        y = 2.0 * np.random.random() - 1.0
        if x * x + y * y < 1.0:
            return (x, y, 0.0)


@njit(**JIT_OPTIONS)
def reflect(v, n):
    return sub(v, scale(n, 2.0 * dot(v, n)))


@njit(**JIT_OPTIONS)
def refract(uv, n, etai_over_etat):
    cos_theta = min(-dot(uv, n), 1.0)
    r_out_perp = scale(add(uv, scale(n, cos_theta)), etai_over_etat)
    r_out_parallel = scale(n, -math.sqrt(abs(1.0 - dot(r_out_perp, r_out_perp))))
    return add(r_out_perp, r_out_parallel)


@njit(**JIT_OPTIONS)
def schlick(cosine, ref_idx):
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * (1.0 - cosine) ** 5


@njit(**JIT_OPTIONS)
def sky_color(direction):
    unit = normalize(direction)
    t = 0.5 * (unit[1] + 1.0)
    return ((1.0 - t) + 0.5 * t, (1.0 - t) + 0.7 * t, (1.0 - t) + 1.0 * t)


@njit(**JIT_OPTIONS)
def ray_sphere_intersect(origin, direction, center, radius, t_min, t_max):
    """Nearest root in [t_min, t_max], or -1.0 on a miss."""
    oc = sub(origin, center)
    a = dot(direction, direction)
    if a == 0.0:
        return -1.0
    half_b = dot(oc, direction)
    c = dot(oc, oc) - radius * radius
    discriminant = half_b * half_b - a * c
    if discriminant < 0.0:
        return -1.0

    sqrtd = math.sqrt(discriminant)
    root = (-half_b - sqrtd) / a
    if root < t_min or root > t_max:
        root = (-half_b + sqrtd) / a
        if root < t_min or root > t_max:
            return -1.0
    return root


@njit(**JIT_OPTIONS)
def hit_world(origin, direction, centers, radii):
    """Linear scan; returns (sphere index, t), index -1 when nothing is hit."""
    closest = np.inf
    hit_idx = -1
    for k in range(radii.shape[0]):
        center = (centers[k, 0], centers[k, 1], centers[k, 2])
        t = ray_sphere_intersect(origin, direction, center, radii[k], T_MIN, closest)
        if t >= 0.0:
            closest = t
            hit_idx = k
    return hit_idx, closest


@njit(**JIT_OPTIONS)
def surface_normal(point, direction, centers, radii, idx):
    """Unit normal facing against direction, and whether the hit is a front face."""
    center = (centers[idx, 0], centers[idx, 1], centers[idx, 2])
    radius = radii[idx]
    outward = ((point[0] - center[0]) / radius,
               (point[1] - center[1]) / radius,
               (point[2] - center[2]) / radius)
    front_face = dot(direction, outward) < 0.0
    if front_face:
        return outward, True
    return scale(outward, -1.0), False


@njit(**JIT_OPTIONS)
def trace(origin, direction, centers, radii, material_types, albedos, fuzzes,
          refractive_indices, max_depth):
    r = 0.0
    g = 0.0
    b = 0.0
    att_r = 1.0
    att_g = 1.0
    att_b = 1.0
    for _ in range(max_depth):
        idx, t = hit_world(origin, direction, centers, radii)
        if idx < 0:
            sky = sky_color(direction)
            r += att_r * sky[0]
            g += att_g * sky[1]
            b += att_b * sky[2]
            break

        point = add(origin, scale(direction, t))
        normal, front_face = surface_normal(point, direction, centers, radii, idx)
        material = material_types[idx]
        scattered = normal
        attenuation = (1.0, 1.0, 1.0)

        if material == LAMBERTIAN:
            scattered = add(normal, normalize(random_in_unit_sphere()))
            if near_zero(scattered):
                scattered = normal
            attenuation = (albedos[idx, 0], albedos[idx, 1], albedos[idx, 2])
        elif material == METAL:
            scattered = reflect(normalize(direction), normal)
            fuzz = fuzzes[idx]
            if fuzz > 0.0:
                scattered = add(scattered, scale(random_in_unit_sphere(), fuzz))
            if dot(scattered, normal) <= 0.0:
                break
            attenuation = (albedos[idx, 0], albedos[idx, 1], albedos[idx, 2])
        else:
            ior = refractive_indices[idx]
            ratio = 1.0 / ior if front_face else ior
            unit_direction = normalize(direction)
            cos_theta = min(-dot(unit_direction, normal), 1.0)
            sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)
            cannot_refract = ratio * sin_theta > 1.0
            should_reflect = schlick(cos_theta, ratio) > np.random.random()
            if cannot_refract or should_reflect:
                scattered = reflect(unit_direction, normal)
            else:
                scattered = refract(unit_direction, normal, ratio)

        att_r *= attenuation[0]
        att_g *= attenuation[1]
        att_b *= attenuation[2]
        origin = point
        direction = scattered
    return (r, g, b)


@njit(**JIT_OPTIONS)
def shade_normal(origin, direction, centers, radii):
    idx, t = hit_world(origin, direction, centers, radii)
    if idx < 0:
        return sky_color(direction)
    point = add(origin, scale(direction, t))
    normal, _ = surface_normal(point, direction, centers, radii, idx)
    return (0.5 * (normal[0] + 1.0), 0.5 * (normal[1] + 1.0), 0.5 * (normal[2] + 1.0))


@njit(parallel=True, **JIT_OPTIONS)
def render_kernel(out, centers, radii, material_types, albedos, fuzzes, refractive_indices,
                  cam_origin, lower_left, horizontal, vertical, cam_u, cam_v, lens_radius,
                  samples, max_depth, seeds, normals_only):
    """Fill out (height, width, 3) with summed radiance, image row j at out[height-1-j]."""
    height = out.shape[0]
    width = out.shape[1]
    width_span = float(max(width - 1, 1))
    height_span = float(max(height - 1, 1))

    for j in prange(height):
        np.random.seed(seeds[j])
        row = height - 1 - j
        for i in range(width):
            r = 0.0
            g = 0.0
            b = 0.0
            for _ in range(samples):
                s = (i + np.random.random()) / width_span
                t = (j + np.random.random()) / height_span
                origin = cam_origin
                if lens_radius > 0.0:
                    p = random_in_unit_disk()
                    offset = add(scale(cam_u, p[0] * lens_radius), scale(cam_v, p[1] * lens_radius))
                    origin = add(cam_origin, offset)
                direction = sub(add(add(lower_left, scale(horizontal, s)), scale(vertical, t)), origin)

                if normals_only:
                    c = shade_normal(origin, direction, centers, radii)
                else:
                    c = trace(origin, direction, centers, radii, material_types, albedos,
                              fuzzes, refractive_indices, max_depth)
                r += c[0]
                g += c[1]
                b += c[2]
            out[row, i, 0] = r
            out[row, i, 1] = g
            out[row, i, 2] = b


def accumulate(scene: FlatScene, camera, config, seeds: np.ndarray) -> np.ndarray:
    """Summed radiance buffer for the whole image, already vertically flipped."""
    out = np.zeros((config.height, config.width, 3), dtype=np.float64)
    render_kernel(
        out,
        scene.centers, scene.radii, scene.material_types,
        scene.albedos, scene.fuzzes, scene.refractive_indices,
        camera.origin.to_tuple(), camera.lower_left_corner.to_tuple(),
        camera.horizontal.to_tuple(), camera.vertical.to_tuple(),
        camera.u.to_tuple(), camera.v.to_tuple(), float(camera.lens_radius),
        config.samples_per_pixel, config.max_ray_depth,
        np.ascontiguousarray(seeds, dtype=np.uint32),
        config.shading == "normals",
    )
    return out
