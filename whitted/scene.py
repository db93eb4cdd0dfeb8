import json
from typing import List, Tuple

import jax
import jax.numpy as jnp
from flax import struct

from .types import Material, MATERIAL_PRESETS, BACKGROUND_COLOR

# Scene is a container for static data; the core shading logic operates on
# the stacked arrays directly.

@struct.dataclass
class SceneData:
    # Geometry represented as arrays
    sphere_centers: jnp.ndarray     # Shape (num_spheres, 3)
    sphere_radii: jnp.ndarray       # Shape (num_spheres,)
    sphere_materials: Material      # Every field stacked along axis 0

    # Point lights, unit intensity each
    light_positions: jnp.ndarray    # Shape (num_lights, 3)

    # Other scene properties
    background_color: jnp.ndarray = struct.field(
        default_factory=lambda: jnp.array(BACKGROUND_COLOR, dtype=jnp.float32))
    checker_height: float = struct.field(pytree_node=False, default=-4.0)
    checker_x_extent: float = struct.field(pytree_node=False, default=10.0)
    checker_z_range: Tuple[float, float] = struct.field(pytree_node=False, default=(-30.0, -10.0))
    checker_color_a: jnp.ndarray = struct.field(
        default_factory=lambda: jnp.array([0.3, 0.3, 0.3], dtype=jnp.float32))
    checker_color_b: jnp.ndarray = struct.field(
        default_factory=lambda: jnp.array([0.3, 0.2, 0.1], dtype=jnp.float32))

    @property
    def num_spheres(self) -> int:
        return self.sphere_radii.shape[0]

    @property
    def num_lights(self) -> int:
        return self.light_positions.shape[0]


def build_scene(spheres: List[Tuple[tuple, float, Material]], lights: List[tuple], **kwargs) -> SceneData:
    """Stack (center, radius, material) triples and light positions into a SceneData."""
    if not spheres:
        raise ValueError("A scene needs at least one sphere")
    for center, radius, material in spheres:
        if radius <= 0:
            raise ValueError(f"Sphere at {tuple(center)} has non-positive radius {radius}")
        if float(material.refractive_index) <= 0:
            raise ValueError(f"Refractive index must be positive, got {float(material.refractive_index)}")

    sphere_centers = jnp.array([center for center, _, _ in spheres], dtype=jnp.float32)
    sphere_radii = jnp.array([radius for _, radius, _ in spheres], dtype=jnp.float32)
    # Stack material structs along a new leading axis
    sphere_materials = jax.tree.map(lambda *leaves: jnp.stack(leaves), *[m for _, _, m in spheres])
    light_positions = jnp.array(lights, dtype=jnp.float32).reshape(-1, 3)

    return SceneData(
        sphere_centers=sphere_centers,
        sphere_radii=sphere_radii,
        sphere_materials=sphere_materials,
        light_positions=light_positions,
        **kwargs
    )


def default_scene() -> SceneData:
    """Four spheres over the checkerboard, lit by three point lights."""
    spheres = [
        ((-3.0, 0.0, -16.0), 2.0, MATERIAL_PRESETS["ivory"]),
        ((-1.0, -1.5, -12.0), 2.0, MATERIAL_PRESETS["glass"]),
        ((1.5, -0.5, -18.0), 3.0, MATERIAL_PRESETS["red_rubber"]),
        ((7.0, 5.0, -18.0), 4.0, MATERIAL_PRESETS["mirror"]),
    ]
    lights = [
        (-20.0, 20.0, 20.0),
        (30.0, 50.0, -25.0),
        (30.0, 20.0, 30.0),
    ]
    return build_scene(spheres, lights)


# --- Scene Files ---

def _material_from_dict(data: dict, name: str) -> Material:
    try:
        return Material.create(
            refractive_index=float(data.get("refractive_index", 1.0)),
            albedo=[float(a) for a in data["albedo"]],
            diffuse_color=[float(c) for c in data["diffuse_color"]],
            specular_exponent=float(data.get("specular_exponent", 0.0)),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Material '{name}' is missing or has a malformed field: {e}") from e


def _vec3(value, what: str) -> tuple:
    try:
        x, y, z = (float(c) for c in value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{what} must be a list of three numbers, got {value!r}") from e
    return (x, y, z)


def scene_from_dict(data: dict) -> SceneData:
    """Build a scene from its JSON form.

    Spheres reference materials by name, either a preset (ivory, glass,
    red_rubber, mirror) or an entry of the optional "materials" table.
    """
    materials = dict(MATERIAL_PRESETS)
    for name, mat_data in data.get("materials", {}).items():
        materials[name] = _material_from_dict(mat_data, name)

    spheres = []
    for i, sphere in enumerate(data.get("spheres", [])):
        mat = sphere.get("material")
        if isinstance(mat, dict):
            material = _material_from_dict(mat, f"spheres[{i}]")
        elif mat in materials:
            material = materials[mat]
        else:
            raise ValueError(f"spheres[{i}] references unknown material {mat!r}")
        center = _vec3(sphere.get("center"), f"spheres[{i}].center")
        try:
            radius = float(sphere["radius"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"spheres[{i}].radius is missing or not a number") from e
        spheres.append((center, radius, material))

    lights = [_vec3(light, f"lights[{i}]") for i, light in enumerate(data.get("lights", []))]

    kwargs = {}
    if "background_color" in data:
        kwargs["background_color"] = jnp.array(_vec3(data["background_color"], "background_color"), dtype=jnp.float32)
    return build_scene(spheres, lights, **kwargs)


def load_scene(path: str) -> SceneData:
    with open(path, "r") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Scene file '{path}' is not valid JSON: {e}") from e
    return scene_from_dict(data)


def scene_to_dict(scene: SceneData) -> dict:
    """Inverse of scene_from_dict; materials are written inline."""
    mats = scene.sphere_materials
    spheres = []
    for i in range(scene.num_spheres):
        spheres.append({
            "center": [float(c) for c in scene.sphere_centers[i]],
            "radius": float(scene.sphere_radii[i]),
            "material": {
                "refractive_index": float(mats.refractive_index[i]),
                "albedo": [float(a) for a in mats.albedo[i]],
                "diffuse_color": [float(c) for c in mats.diffuse_color[i]],
                "specular_exponent": float(mats.specular_exponent[i]),
            },
        })
    return {
        "spheres": spheres,
        "lights": [[float(c) for c in light] for light in scene.light_positions],
        "background_color": [float(c) for c in scene.background_color],
    }
