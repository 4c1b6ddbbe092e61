"""Materials module for surface scattering models.

This module implements the closed set of material models:

Components:
    base: MaterialType tag, device Material and ScatterEvent dataclasses
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick Fresnel)
    material: Material table and scattering dispatch

Each material kind provides a frozen host-side dataclass (validated at
construction) and a Taichi scatter function returning
(scattered_direction, attenuation, did_scatter).
"""

from .base import Material, MaterialType, ScatterEvent
from .dielectric import Dielectric, cannot_refract, scatter_dielectric
from .lambertian import Lambertian, scatter_lambertian
from .material import (
    MAX_MATERIALS,
    MaterialSpec,
    add_material,
    clear_materials,
    get_material,
    get_material_count,
    material_from_dict,
    material_to_dict,
    scatter,
)
from .metal import Metal, scatter_metal

__all__ = [
    # Types
    "Material",
    "MaterialType",
    "MaterialSpec",
    "ScatterEvent",
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    # Metal
    "Metal",
    "scatter_metal",
    # Dielectric
    "Dielectric",
    "scatter_dielectric",
    "cannot_refract",
    # Table and dispatch
    "MAX_MATERIALS",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "material_from_dict",
    "material_to_dict",
    "scatter",
]
