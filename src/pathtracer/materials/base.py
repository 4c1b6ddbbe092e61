"""Shared material types: the closed material variant and scatter results.

Materials form a closed set {Lambertian, Metal, Dielectric}. On the device a
material is a single tagged dataclass whose ``kind`` field selects the
scattering model; unused fields of a variant are left at zero.
"""

from collections.abc import Sequence
from enum import IntEnum

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]


class MaterialType(IntEnum):
    """Enumeration of supported material kinds.

    Used as the tag of the device-side Material dataclass.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


@ti.dataclass
class Material:
    """Device-side tagged material.

    Attributes:
        kind: The MaterialType of this material.
        albedo: Reflectance color (Lambertian, Metal).
        fuzz: Reflection perturbation radius in [0, 1] (Metal).
        refractive_index: Index of refraction, > 0 (Dielectric).
    """

    kind: ti.i32
    albedo: vec3
    fuzz: ti.f32
    refractive_index: ti.f32


@ti.dataclass
class ScatterEvent:
    """Result of scattering a ray at a surface.

    Attributes:
        scattered: 1 if the ray continues, 0 if it was absorbed.
        attenuation: Color multiplier applied to light along the new ray.
        origin: Origin of the continuation ray (the hit position).
        direction: Direction of the continuation ray (not normalized).
    """

    scattered: ti.i32
    attenuation: vec3
    origin: vec3
    direction: vec3


def to_vec3(value: Sequence[float], name: str = "albedo") -> tuple[float, float, float]:
    """Convert a color or position 3-sequence to a tuple of floats.

    Raises:
        ValueError: If the value does not have exactly three components.
    """
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    return (float(value[0]), float(value[1]), float(value[2]))


def validate_albedo(albedo: Color) -> None:
    """Check that every albedo component lies in [0, 1].

    Raises:
        ValueError: If any component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
