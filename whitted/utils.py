import jax.numpy as jnp

# --- Vector Utilities ---
# Every function accepts arrays with a trailing axis of size 3 and broadcasts
# over any leading (batch) axes.

def dot(v1, v2):
    return jnp.sum(v1 * v2, axis=-1)

def norm(v):
    return jnp.sqrt(dot(v, v))

def normalize(v):
    """Normalize a vector.

    Zero-length input is a caller bug: the result is NaN, not a fallback
    direction.
    """
    return v / norm(v)[..., None]

def cross(v1, v2):
    return jnp.cross(v1, v2)

def reflect(v, n):
    """Reflect vector v around normal n."""
    return v - 2.0 * dot(v, n)[..., None] * n

def refract(incident, normal, eta_t, eta_i=1.0):
    """Bend `incident` through a surface using Snell's law.

    `eta_t` is the refractive index on the far side of the surface and
    `eta_i` the index the ray travels in. When the ray arrives from the side
    the normal does not face (leaving the medium) the two indices are swapped
    and the normal flipped, once.

    Total internal reflection returns the fixed direction (1, 0, 0); it has
    no physical meaning but keeps renders identical to the reference images.
    The result is NOT normalized.
    """
    eta_t = jnp.asarray(eta_t, dtype=incident.dtype)
    eta_i = jnp.asarray(eta_i, dtype=incident.dtype)

    cosi = -jnp.clip(dot(incident, normal), -1.0, 1.0)
    inside = cosi < 0.0
    # Exiting the object: swap air and medium
    cosi = jnp.where(inside, -cosi, cosi)
    normal = jnp.where(inside[..., None], -normal, normal)
    eta_t, eta_i = jnp.where(inside, eta_i, eta_t), jnp.where(inside, eta_t, eta_i)

    eta = eta_i / eta_t
    k = 1.0 - eta * eta * (1.0 - cosi * cosi)
    refracted = eta[..., None] * incident + (eta * cosi - jnp.sqrt(jnp.maximum(k, 0.0)))[..., None] * normal
    total_reflection = jnp.broadcast_to(jnp.array([1.0, 0.0, 0.0], dtype=incident.dtype), refracted.shape)
    return jnp.where((k < 0.0)[..., None], total_reflection, refracted)
