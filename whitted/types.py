import jax.numpy as jnp
from flax import struct

# --- Shading Configuration (Centralized) ---
RAY_EPSILON = 1e-3       # Minimum hit distance, keeps rays off the surface they leave
MISS_DISTANCE = 1e10     # Initial "nearest" distance before any hit
MAX_HIT_DISTANCE = 1000.0 # Anything farther than this counts as a miss
MAX_DEPTH = 4
BACKGROUND_COLOR = (0.2, 0.7, 0.8)

# --- Type Aliases for Clarity ---
Vec3 = jnp.ndarray  # Shape (..., 3), used for points, directions and colors
Color = jnp.ndarray # Shape (..., 3), unclamped linear color


@struct.dataclass
class Ray:
    origin: jnp.ndarray     # Shape (..., 3)
    direction: jnp.ndarray  # Shape (..., 3), must be unit length


@struct.dataclass
class Material:
    refractive_index: jnp.ndarray # Scalar (or (N,) when stacked)
    albedo: jnp.ndarray           # Shape (4,): [diffuse, specular, reflect, refract] weights
    diffuse_color: jnp.ndarray    # Shape (3,)
    specular_exponent: jnp.ndarray # Scalar

    @classmethod
    def create(cls, refractive_index, albedo, diffuse_color, specular_exponent):
        """Build a material from plain Python numbers."""
        return cls(
            refractive_index=jnp.asarray(refractive_index, dtype=jnp.float32),
            albedo=jnp.asarray(albedo, dtype=jnp.float32),
            diffuse_color=jnp.asarray(diffuse_color, dtype=jnp.float32),
            specular_exponent=jnp.asarray(specular_exponent, dtype=jnp.float32),
        )


@struct.dataclass
class HitRecord:
    t: jnp.ndarray         # Distance along the ray, MISS_DISTANCE if nothing was hit
    position: jnp.ndarray  # Shape (3,)
    normal: jnp.ndarray    # Shape (3,), outward unit normal
    material: Material
    hit: jnp.ndarray       # bool


# --- Material Presets ---
# Returned by scene_intersect on a miss; never shaded.
BASE_MATERIAL = Material.create(1.0, (2.0, 0.0, 0.0, 0.0), (0.0, 0.0, 0.0), 0.0)

IVORY = Material.create(1.0, (0.9, 0.5, 0.1, 0.0), (0.4, 0.4, 0.3), 50.0)
GLASS = Material.create(1.5, (0.0, 0.9, 0.1, 0.8), (0.6, 0.7, 0.8), 125.0)
RED_RUBBER = Material.create(1.0, (1.4, 0.3, 0.0, 0.0), (0.3, 0.1, 0.1), 10.0)
MIRROR = Material.create(1.0, (0.0, 16.0, 0.8, 0.0), (1.0, 1.0, 1.0), 1425.0)

MATERIAL_PRESETS = {
    "ivory": IVORY,
    "glass": GLASS,
    "red_rubber": RED_RUBBER,
    "mirror": MIRROR,
}
