import jax.numpy as jnp
import pytest

from whitted.utils import dot, norm, normalize, cross, reflect, refract

# --- Tests for basic vector helpers ---

def test_dot_and_norm():
    v = jnp.array([3.0, 4.0, 0.0])
    assert jnp.allclose(dot(v, jnp.array([1.0, 1.0, 1.0])), 7.0)
    assert jnp.allclose(norm(v), 5.0)

def test_normalize_unit_length_batched():
    v = jnp.array([[3.0, 4.0, 0.0], [0.0, 0.0, -2.0], [1.0, 1.0, 1.0]])
    n = normalize(v)
    assert jnp.allclose(norm(n), 1.0, atol=1e-6)
    assert jnp.allclose(n[0], jnp.array([0.6, 0.8, 0.0]), atol=1e-6)

def test_cross_right_handed():
    x = jnp.array([1.0, 0.0, 0.0])
    y = jnp.array([0.0, 1.0, 0.0])
    assert jnp.allclose(cross(x, y), jnp.array([0.0, 0.0, 1.0]))

def test_reflect_flips_normal_component():
    """Reflection about +y keeps x/z and flips y."""
    v = jnp.array([1.0, -1.0, 0.5])
    n = jnp.array([0.0, 1.0, 0.0])
    assert jnp.allclose(reflect(v, n), jnp.array([1.0, 1.0, 0.5]))


# --- Tests for refract ---

def test_refract_head_on_is_undeflected():
    incident = jnp.array([0.0, 0.0, -1.0])
    normal = jnp.array([0.0, 0.0, 1.0])
    assert jnp.allclose(refract(incident, normal, 1.5, 1.0), incident, atol=1e-6)

def test_refract_follows_snells_law():
    """sin(theta_t) = sin(theta_i) * eta_i / eta_t when entering glass."""
    incident = normalize(jnp.array([1.0, -1.0, 0.0]))
    normal = jnp.array([0.0, 1.0, 0.0])
    t = normalize(refract(incident, normal, 1.5, 1.0))
    sin_i = jnp.sqrt(0.5)
    sin_t = jnp.abs(t[0])
    assert jnp.allclose(sin_t, sin_i / 1.5, atol=1e-5)
    assert t[1] < 0.0  # continues through the surface

def test_refract_round_trip_recovers_incident():
    """Refracting back out with swapped indices recovers the original direction."""
    incident = normalize(jnp.array([0.3, -1.0, 0.2]))
    normal = jnp.array([0.0, 1.0, 0.0])
    inside = normalize(refract(incident, normal, 1.5, 1.0))
    back = normalize(refract(inside, normal, 1.0, 1.5))
    assert jnp.allclose(back, incident, atol=1e-5)

def test_refract_exiting_swaps_media():
    """A ray leaving the medium behaves like entering with flipped normal and indices."""
    direction = normalize(jnp.array([0.2, 1.0, 0.0]))
    normal = jnp.array([0.0, 1.0, 0.0])  # outward normal, ray travels along it
    exiting = refract(direction, normal, 1.5, 1.0)
    expected = refract(direction, -normal, 1.0, 1.5)
    assert jnp.allclose(exiting, expected, atol=1e-6)
    # Leaving glass bends away from the normal
    assert jnp.abs(normalize(exiting)[0]) > jnp.abs(direction[0])

def test_refract_total_internal_reflection_sentinel():
    direction = normalize(jnp.array([1.0, 0.0, 0.1]))  # grazing, from inside
    normal = jnp.array([0.0, 0.0, 1.0])
    assert jnp.array_equal(refract(direction, normal, 1.5, 1.0), jnp.array([1.0, 0.0, 0.0]))

@pytest.mark.parametrize("eta_t", [1.0, 1.33, 1.5, 2.4])
def test_refract_batched_matches_single(eta_t):
    incidents = normalize(jnp.array([[0.1, -1.0, 0.0], [0.5, -0.5, 0.2], [0.0, -1.0, 0.9]]))
    normal = jnp.array([0.0, 1.0, 0.0])
    batched = refract(incidents, normal, eta_t, 1.0)
    for i in range(incidents.shape[0]):
        assert jnp.allclose(batched[i], refract(incidents[i], normal, eta_t, 1.0), atol=1e-6)
