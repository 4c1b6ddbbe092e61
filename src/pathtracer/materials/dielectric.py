"""Dielectric (glass/water) material implementation.

This module implements the dielectric BSDF, which models transparent materials
like glass and water with refraction and Fresnel reflectance.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when ratio * sin(theta) > 1

The material randomly chooses between reflection and refraction based on
the Fresnel reflectance probability, which increases at grazing angles.
Dielectrics never absorb light.

Example:
    >>> from pathtracer.materials.dielectric import Dielectric
    >>> glass = Dielectric(refractive_index=1.5)
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     refractive_index, incident_dir, normal, front_face, stream
    >>> # )
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import normalize, reflect, refract, schlick_reflectance
from pathtracer.core.sampler import random_f32
from pathtracer.materials.base import MaterialType

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Dielectric:
    """Dielectric (glass/water) material properties.

    Attributes:
        refractive_index: Index of refraction, must be positive. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4

    Raises:
        ValueError: If refractive_index is not positive.
    """

    kind: ClassVar[MaterialType] = MaterialType.DIELECTRIC

    refractive_index: float = 1.5

    def __post_init__(self) -> None:
        if not self.refractive_index > 0.0:
            raise ValueError(
                f"Index of refraction = {self.refractive_index} is not positive."
            )
        object.__setattr__(self, "refractive_index", float(self.refractive_index))


@ti.func
def refraction_ratio(refractive_index: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of refractive indices across the surface.

    Entering the material (front face) the ratio is 1/ior, leaving it the
    ratio is ior.
    """
    ratio = refractive_index
    if front_face == 1:
        ratio = 1.0 / refractive_index
    return ratio


@ti.func
def cannot_refract(ratio: ti.f32, cos_theta: ti.f32) -> ti.i32:
    """Determine whether total internal reflection occurs.

    Args:
        ratio: Refraction ratio across the surface (see refraction_ratio).
        cos_theta: Cosine of the angle between the reversed unit incident
            direction and the normal.

    Returns:
        1 if the ray cannot refract, 0 otherwise.
    """
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    stream: ti.i32,
):
    """Compute the scattered ray direction for a dielectric surface.

    Reflects on total internal reflection or when a uniform draw falls below
    the Schlick reflectance; refracts otherwise.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit length, facing the incoming ray).
        front_face: 1 if the ray hits the outside of the surface,
            0 if it travels inside the material.
        stream: Random stream of the calling worker.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). The
        attenuation is white and did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    ratio = refraction_ratio(refractive_index, front_face)
    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    reflectance = schlick_reflectance(cos_theta, ratio)
    if cannot_refract(ratio, cos_theta) or random_f32(stream) < reflectance:
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, attenuation, 1
