"""Whitted-style recursive ray tracer written with JAX."""
