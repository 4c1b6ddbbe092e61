"""Point lights and direct lighting with shadow rays.

At every path vertex the integrator adds the direct contribution of each
point light. A shadow ray is cast from the hit position toward the light;
any sphere hit strictly before the light marks it occluded. An unoccluded
light contributes

    color * luminosity * max(0, dot(shadow_dir, normal)) / (4 * pi * dist^2)

The shadow ray starts at SHADOW_EPSILON to avoid re-hitting the surface the
ray originates from ("shadow acne").

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.lights import PointLight, add_point_light
    >>> add_point_light(PointLight(position=(1, 5, 0), luminosity=100.0))
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.materials.base import Color, to_vec3
from pathtracer.scene.intersection import intersect_scene_any

# Type alias for 3D vectors
vec3 = tm.vec3

# Shadow ray start offset
SHADOW_EPSILON = 0.005

# Maximum number of point lights in the scene
MAX_LIGHTS = 64


@dataclass(frozen=True)
class PointLight:
    """An isotropic point light.

    Attributes:
        position: Light position in world space (x, y, z).
        color: Linear RGB color of the light (non-negative components).
        luminosity: Emitted power scale, must be positive.

    Raises:
        ValueError: If luminosity is not positive or a color component is
            negative.
    """

    position: tuple[float, float, float]
    color: Color = (1.0, 1.0, 1.0)
    luminosity: float = 1.0

    def __post_init__(self) -> None:
        position = to_vec3(self.position, name="position")
        color = to_vec3(self.color, name="color")
        if any(component < 0.0 for component in color):
            raise ValueError(f"Light color {color} has a negative component")
        if not self.luminosity > 0.0:
            raise ValueError(f"Light luminosity must be positive, got {self.luminosity}")
        object.__setattr__(self, "position", position)
        object.__setattr__(self, "color", color)
        object.__setattr__(self, "luminosity", float(self.luminosity))

    def to_dict(self) -> dict[str, Any]:
        """Export the light to a JSON-friendly dictionary."""
        return {
            "type": "point",
            "position": list(self.position),
            "color": list(self.color),
            "luminosity": self.luminosity,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PointLight":
        """Build a light from a dictionary.

        Raises:
            ValueError: If the light type is not 'point' or a value is invalid.
        """
        light_type = str(data.get("type", "point")).lower()
        if light_type != "point":
            raise ValueError(f"Unknown light type: {light_type}")
        return cls(
            position=tuple(data.get("position", [0.0, 0.0, 0.0])),
            color=tuple(data.get("color", [1.0, 1.0, 1.0])),
            luminosity=data.get("luminosity", 1.0),
        )


# =============================================================================
# Light Field Storage
# =============================================================================

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_luminosities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def add_point_light(light: PointLight) -> int:
    """Add a point light to the scene.

    Args:
        light: The light description.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = light.position
    light_colors[idx] = light.color
    light_luminosities[idx] = light.luminosity
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


def point_light_contribution(
    light: PointLight,
    position: Sequence[float],
    normal: Sequence[float],
) -> Color:
    """Analytic unoccluded contribution of one light at a surface point.

    Host-side counterpart of the device computation, without the shadow
    test.

    Args:
        light: The light.
        position: The surface point.
        normal: The unit surface normal.

    Returns:
        The RGB contribution.
    """
    to_light = np.asarray(light.position, dtype=np.float64) - np.asarray(position, dtype=np.float64)
    dist = float(np.linalg.norm(to_light))
    cosine = max(0.0, float(np.dot(to_light / dist, np.asarray(normal, dtype=np.float64))))
    scale = light.luminosity * cosine / (4.0 * np.pi * dist * dist)
    r, g, b = np.asarray(light.color, dtype=np.float64) * scale
    return (float(r), float(g), float(b))


# =============================================================================
# Direct Lighting (Taichi-compatible)
# =============================================================================


@ti.func
def direct_light(position: vec3, normal: vec3) -> vec3:
    """Sum the direct contribution of every point light at a surface point.

    Args:
        position: The surface point (shadow ray origin).
        normal: The unit surface normal, facing the incoming ray.

    Returns:
        The summed RGB light contribution. Occluded lights contribute zero.
    """
    total = vec3(0.0, 0.0, 0.0)

    for k in range(num_lights[None]):
        to_light = light_positions[k] - position
        dist = tm.length(to_light)
        shadow_direction = to_light / dist

        if intersect_scene_any(position, shadow_direction, SHADOW_EPSILON, dist) == 0:
            cosine = tm.max(0.0, tm.dot(shadow_direction, normal))
            total += (
                light_colors[k]
                * light_luminosities[k]
                * cosine
                / (4.0 * tm.pi * dist * dist)
            )

    return total
