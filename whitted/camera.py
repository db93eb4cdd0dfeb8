import math
from dataclasses import field

import jax.numpy as jnp
from flax import struct

from .types import Ray
from .utils import normalize

@struct.dataclass
class Camera:
    # Vertical field of view in radians (1.05 is roughly 60 degrees)
    fov: float = struct.field(pytree_node=False, default=1.05)
    # Pinhole position; the camera always looks down -z with +y up
    eye: jnp.ndarray = field(default_factory=lambda: jnp.zeros(3, dtype=jnp.float32))

    def __post_init__(self):
        if not 0.0 < self.fov < math.pi:
            raise ValueError(f"fov must be in (0, pi) radians, got {self.fov}")

    def focal_distance(self, height: int) -> float:
        """Distance from the eye to an image plane `height` pixels tall."""
        return height / (2.0 * math.tan(self.fov / 2.0))

    def generate_rays(self, width: int, height: int) -> Ray:
        """One ray through the center of every pixel, row 0 at the top."""
        x, y = jnp.meshgrid(jnp.arange(width, dtype=jnp.float32),
                            jnp.arange(height, dtype=jnp.float32))

        dir_x = (x + 0.5) - width / 2.0
        dir_y = -(y + 0.5) + height / 2.0
        dir_z = jnp.full_like(dir_x, -self.focal_distance(height))
        ray_dir = normalize(jnp.stack([dir_x, dir_y, dir_z], axis=-1))

        ray_origin = jnp.broadcast_to(self.eye, (height, width, 3))
        return Ray(origin=ray_origin, direction=ray_dir)
