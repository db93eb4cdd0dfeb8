import jax
import jax.numpy as jnp
import numpy as np
from functools import partial
from typing import Tuple

from tqdm import tqdm

from .types import MAX_DEPTH
from .geometry import scene_intersect
from .utils import dot, norm, normalize, reflect, refract
from .scene import SceneData
from .camera import Camera


def local_illumination(scene: SceneData, point, normal, direction, specular_exponent) -> Tuple[jnp.ndarray, jnp.ndarray]:
    """Sum diffuse and specular intensity from every unoccluded light.

    A light is occluded when the shadow ray from `point` towards it hits a
    surface closer than the light itself. Every light has unit intensity.
    """
    def light_contribution(light_position):
        to_light = light_position - point
        light_dir = normalize(to_light)

        shadow_hit = scene_intersect(scene, point, light_dir)
        occluded = shadow_hit.hit & (norm(shadow_hit.position - point) < norm(to_light))

        diffuse = jnp.maximum(0.0, dot(light_dir, normal))
        specular = jnp.power(
            jnp.maximum(0.0, dot(-reflect(-light_dir, normal), direction)),
            specular_exponent
        )
        return jnp.where(occluded, 0.0, diffuse), jnp.where(occluded, 0.0, specular)

    diffuse, specular = jax.vmap(light_contribution)(scene.light_positions)
    return jnp.sum(diffuse), jnp.sum(specular)


def cast_ray(scene: SceneData, origin, direction, depth: int = 0, max_depth: int = MAX_DEPTH):
    """Color seen along a single ray (`direction` must be unit length).

    `depth` and `max_depth` are static Python ints, so tracing unrolls the
    whole reflection/refraction tree. Past `max_depth`, or on a miss, the
    result is the scene background.
    """
    background = scene.background_color
    if depth > max_depth:
        return background

    hit_rec = scene_intersect(scene, origin, direction)
    point, normal, material = hit_rec.position, hit_rec.normal, hit_rec.material

    reflect_dir = normalize(reflect(direction, normal))
    refract_dir = normalize(refract(direction, normal, material.refractive_index, 1.0))
    reflect_color = cast_ray(scene, point, reflect_dir, depth + 1, max_depth)
    refract_color = cast_ray(scene, point, refract_dir, depth + 1, max_depth)

    diffuse_intensity, specular_intensity = local_illumination(
        scene, point, normal, direction, material.specular_exponent)

    albedo = material.albedo
    color = (material.diffuse_color * diffuse_intensity * albedo[0]
             + jnp.ones(3) * specular_intensity * albedo[1]
             + reflect_color * albedo[2]
             + refract_color * albedo[3])
    return jnp.where(hit_rec.hit, color, background)


@partial(jax.jit, static_argnames=('max_depth',))
def render_pixels(scene: SceneData, origins, directions, max_depth: int = MAX_DEPTH):
    """Shade a flat batch of primary rays, shape (N, 3) -> (N, 3)."""
    return jax.vmap(lambda o, d: cast_ray(scene, o, d, 0, max_depth))(origins, directions)


def render_image(
    scene: SceneData,
    width: int = 1024,
    height: int = 768,
    fov: float = 1.05,
    max_depth: int = MAX_DEPTH,
    tile_rows: int = 64,
    progress: bool = True,
) -> np.ndarray:
    """Render the whole frame into a (height, width, 3) float32 framebuffer.

    Rows are shaded in tiles of `tile_rows` so device memory stays bounded;
    every pixel is independent, so tiling never changes the result.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    if tile_rows <= 0:
        raise ValueError(f"tile_rows must be positive, got {tile_rows}")

    camera = Camera(fov=fov)
    rays = camera.generate_rays(width, height)

    framebuffer = np.empty((height, width, 3), dtype=np.float32)
    row_starts = range(0, height, tile_rows)
    for row in tqdm(row_starts, desc="Rendering", unit="tile", disable=not progress):
        end = min(row + tile_rows, height)
        origins = rays.origin[row:end].reshape(-1, 3)
        directions = rays.direction[row:end].reshape(-1, 3)
        colors = render_pixels(scene, origins, directions, max_depth=max_depth)
        framebuffer[row:end] = np.asarray(colors).reshape(end - row, width, 3)
    return framebuffer
