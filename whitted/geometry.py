import jax
import jax.numpy as jnp

from .types import HitRecord, BASE_MATERIAL, RAY_EPSILON, MISS_DISTANCE, MAX_HIT_DISTANCE
from .utils import dot, normalize
from .scene import SceneData


def ray_sphere_intersect(origin, direction, center, radius):
    """Ray-sphere intersection for a unit-length `direction`.

    Returns (hit, t). `t` is the near root when it lies beyond RAY_EPSILON,
    otherwise the far root (a ray starting inside the sphere hits the far
    wall), otherwise there is no hit and `t` is 0.
    """
    L = center - origin
    tca = dot(L, direction)
    d2 = dot(L, L) - tca * tca
    r2 = radius * radius
    misses = d2 > r2

    thc = jnp.sqrt(jnp.maximum(r2 - d2, 0.0))
    t0 = tca - thc
    t1 = tca + thc
    t = jnp.where(t0 > RAY_EPSILON, t0, jnp.where(t1 > RAY_EPSILON, t1, 0.0))
    hit = ~misses & ((t0 > RAY_EPSILON) | (t1 > RAY_EPSILON))
    return hit, jnp.where(hit, t, 0.0)


def checker_color(scene: SceneData, position):
    """Color of the floor cell containing `position`.

    Cells are 2x2 units. The x coordinate is offset by 1000 before the integer
    conversion so truncation behaves like floor over the whole floor.
    """
    cell = jnp.trunc(0.5 * position[..., 0] + 1000.0) + jnp.trunc(0.5 * position[..., 2])
    odd = jnp.mod(cell.astype(jnp.int32), 2) == 1
    return jnp.where(odd[..., None], scene.checker_color_a, scene.checker_color_b)


def intersect_checkerboard(scene: SceneData, origin, direction):
    """Intersect a single ray with the bounded floor plane y = checker_height.

    Returns (hit, t, position).
    """
    # Avoid division by (near) zero for rays parallel to the floor
    not_parallel = jnp.abs(direction[1]) > RAY_EPSILON
    safe_dy = jnp.where(not_parallel, direction[1], 1.0)
    d = -(origin[1] - scene.checker_height) / safe_dy
    p = origin + direction * d

    z_min, z_max = scene.checker_z_range
    hit = (not_parallel
           & (d > RAY_EPSILON)
           & (jnp.abs(p[0]) < scene.checker_x_extent)
           & (p[2] < z_max) & (p[2] > z_min))
    return hit, d, p


def scene_intersect(scene: SceneData, origin, direction) -> HitRecord:
    """Find the nearest surface hit along a single ray.

    The floor is tested first, then every sphere in scene order; a sphere
    only replaces the current hit when it is strictly closer.
    """
    init_hit = HitRecord(
        t=jnp.asarray(MISS_DISTANCE, dtype=jnp.float32),
        position=jnp.zeros(3, dtype=jnp.float32),
        normal=jnp.zeros(3, dtype=jnp.float32),
        material=BASE_MATERIAL,
        hit=jnp.asarray(False),
    )

    # --- Checkerboard ---
    floor_hit, floor_t, floor_p = intersect_checkerboard(scene, origin, direction)
    floor_hit = floor_hit & (floor_t < init_hit.t)
    floor_material = BASE_MATERIAL.replace(diffuse_color=checker_color(scene, floor_p))
    floor_record = HitRecord(
        t=floor_t,
        position=floor_p,
        normal=jnp.array([0.0, 1.0, 0.0], dtype=jnp.float32),
        material=floor_material,
        hit=jnp.asarray(True),
    )
    closest = jax.tree.map(lambda c, h: jnp.where(floor_hit, h, c), init_hit, floor_record)

    # --- Spheres ---
    def scan_body(carry_hit, sphere_params):
        center, radius, material = sphere_params
        hit, t = ray_sphere_intersect(origin, direction, center, radius)
        is_closer = hit & (t < carry_hit.t)

        position = origin + direction * t
        current_hit = HitRecord(
            t=t,
            position=position,
            normal=normalize(position - center),
            material=material,
            hit=jnp.asarray(True),
        )
        next_hit = jax.tree.map(
            lambda c, h: jnp.where(is_closer, h, c),
            carry_hit, current_hit
        )
        return next_hit, None

    closest, _ = jax.lax.scan(
        scan_body,
        closest,
        (scene.sphere_centers, scene.sphere_radii, scene.sphere_materials)
    )

    return closest.replace(hit=closest.t < MAX_HIT_DISTANCE)
