"""Lambertian (ideal diffuse) material implementation.

Scattered directions are drawn as ``normal + random_unit_vector()``. The
endpoint of that sum is uniformly distributed on a unit sphere tangent to the
surface, which gives a cosine-weighted distribution of directions around the
normal. With that importance sampling the Lambertian BRDF and the cosine term
cancel against the pdf, so the attenuation is exactly the albedo.

Example:
    >>> from pathtracer.materials.lambertian import Lambertian
    >>> red = Lambertian(albedo=(0.8, 0.1, 0.1))
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, normal, stream)
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import near_zero
from pathtracer.core.sampler import random_unit_vector
from pathtracer.materials.base import Color, MaterialType, to_vec3, validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Lambertian:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).

    Raises:
        ValueError: If any albedo component is outside [0, 1].
    """

    kind: ClassVar[MaterialType] = MaterialType.LAMBERTIAN

    albedo: Color

    def __post_init__(self) -> None:
        albedo = to_vec3(self.albedo)
        validate_albedo(albedo)
        object.__setattr__(self, "albedo", albedo)


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, stream: ti.i32):
    """Sample a scattered ray direction for a Lambertian surface.

    If the random unit vector nearly cancels the normal, the scatter
    direction falls back to the normal itself.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The surface normal at the hit point (unit length).
        stream: Random stream of the calling worker.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Lambertian
        surfaces always scatter, so did_scatter is 1.
    """
    scattered_direction = normal + random_unit_vector(stream)

    if near_zero(scattered_direction):
        scattered_direction = normal

    return scattered_direction, albedo, 1
