"""Metal (specular reflective) material implementation.

Perfect metals (fuzz=0) produce mirror reflections. Rougher metals perturb
the mirror direction by a random offset inside a sphere of radius ``fuzz``.

The reflection formula is:
    R = I - 2(I . N)N

where I is the unit incident direction and N is the surface normal.

Example:
    >>> from pathtracer.materials.metal import Metal
    >>> gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, stream
    >>> # )
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import normalize, reflect
from pathtracer.core.sampler import random_in_unit_sphere
from pathtracer.materials.base import Color, MaterialType, to_vec3, validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Metal:
    """Metal (specular reflective) material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: Perturbation radius in [0, 1]. 0 = perfect mirror. Values above
            1 are clamped to 1.

    Raises:
        ValueError: If any albedo component is outside [0, 1] or fuzz is
            negative.
    """

    kind: ClassVar[MaterialType] = MaterialType.METAL

    albedo: Color
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        albedo = to_vec3(self.albedo)
        validate_albedo(albedo)
        if self.fuzz < 0.0:
            raise ValueError(f"Fuzz = {self.fuzz} is negative. Fuzz must be in [0, 1].")
        object.__setattr__(self, "albedo", albedo)
        object.__setattr__(self, "fuzz", min(float(self.fuzz), 1.0))


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Compute the scattered ray direction for a metal surface.

    Reflects the normalized incident direction about the normal and adds the
    fuzz perturbation. The ray is absorbed if the result points into the
    surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: Perturbation radius in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal (unit length, facing the incoming ray).
        stream: Random stream of the calling worker.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 0 when the ray was absorbed.
    """
    reflected = reflect(normalize(incident_direction), normal)
    scattered_direction = reflected + fuzz * random_in_unit_sphere(stream)

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0

    return scattered_direction, albedo, did_scatter
