"""Material table and scattering dispatch.

Materials are registered once while a scene is built and stored in
Structure-of-Arrays Taichi fields indexed by material id. Primitives refer to
their material by id; the id carried in a hit record is a read-only
reference into this table that stays valid while the scene is loaded.

``scatter`` dispatches on the material kind with an exhaustive branch over
the closed set of material types.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials import Lambertian, Metal, add_material
    >>> diffuse_id = add_material(Lambertian(albedo=(0.5, 0.5, 0.5)))
    >>> mirror_id = add_material(Metal(albedo=(0.9, 0.9, 0.9), fuzz=0.0))
"""

from typing import Any

import taichi as ti
import taichi.math as tm

from pathtracer.materials.base import Material, MaterialType, ScatterEvent
from pathtracer.materials.dielectric import Dielectric, scatter_dielectric
from pathtracer.materials.lambertian import Lambertian, scatter_lambertian
from pathtracer.materials.metal import Metal, scatter_metal

# Type alias for 3D vectors
vec3 = tm.vec3

# Any host-side material description
MaterialSpec = Lambertian | Metal | Dielectric

# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 1024

material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_fuzz = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_refractive_indices = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(material: MaterialSpec) -> int:
    """Add a material to the material table.

    Args:
        material: A Lambertian, Metal or Dielectric description.

    Returns:
        The material id of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        TypeError: If material is not one of the supported kinds.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    albedo = (0.0, 0.0, 0.0)
    fuzz = 0.0
    refractive_index = 0.0
    if isinstance(material, Lambertian):
        albedo = material.albedo
    elif isinstance(material, Metal):
        albedo = material.albedo
        fuzz = material.fuzz
    elif isinstance(material, Dielectric):
        refractive_index = material.refractive_index
    else:
        raise TypeError(f"Unsupported material: {material!r}")

    material_kinds[idx] = int(material.kind)
    material_albedos[idx] = albedo
    material_fuzz[idx] = fuzz
    material_refractive_indices[idx] = refractive_index
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the table."""
    return int(num_materials[None])


# =============================================================================
# Serialization
# =============================================================================


def material_to_dict(material: MaterialSpec) -> dict[str, Any]:
    """Export a material description to a JSON-friendly dictionary."""
    if isinstance(material, Lambertian):
        return {"type": "lambertian", "albedo": list(material.albedo)}
    if isinstance(material, Metal):
        return {"type": "metal", "albedo": list(material.albedo), "fuzz": material.fuzz}
    if isinstance(material, Dielectric):
        return {"type": "dielectric", "refractive_index": material.refractive_index}
    raise TypeError(f"Unsupported material: {material!r}")


def material_from_dict(data: dict[str, Any]) -> MaterialSpec:
    """Build a material description from a dictionary.

    Args:
        data: Dictionary with a 'type' key ('lambertian', 'metal' or
            'dielectric') and the material parameters.

    Returns:
        The material description.

    Raises:
        ValueError: If the type is unknown or a parameter is invalid.
    """
    mat_type = str(data.get("type", "")).lower()
    if mat_type == "lambertian":
        return Lambertian(albedo=tuple(data.get("albedo", [0.5, 0.5, 0.5])))
    if mat_type == "metal":
        return Metal(
            albedo=tuple(data.get("albedo", [0.8, 0.8, 0.8])),
            fuzz=data.get("fuzz", 0.0),
        )
    if mat_type == "dielectric":
        return Dielectric(refractive_index=data.get("refractive_index", 1.5))
    raise ValueError(f"Unknown material type: {mat_type}")


# =============================================================================
# Device-side Lookup and Dispatch
# =============================================================================


@ti.func
def get_material(material_id: ti.i32) -> Material:
    """Get the device-side material for a material id.

    Args:
        material_id: The id returned by add_material().

    Returns:
        The tagged Material.
    """
    return Material(
        kind=material_kinds[material_id],
        albedo=material_albedos[material_id],
        fuzz=material_fuzz[material_id],
        refractive_index=material_refractive_indices[material_id],
    )


@ti.func
def scatter(
    material: Material,
    incident_direction: vec3,
    position: vec3,
    normal: vec3,
    front_face: ti.i32,
    stream: ti.i32,
) -> ScatterEvent:
    """Scatter an incoming ray according to the material kind.

    Args:
        material: The material of the hit surface.
        incident_direction: The incoming ray direction (any length).
        position: The hit position; the continuation ray starts here.
        normal: The surface normal (unit length, facing the incoming ray).
        front_face: 1 if the ray hit the outside of the surface.
        stream: Random stream of the calling worker.

    Returns:
        A ScatterEvent. scattered == 0 means the ray was absorbed.
    """
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if material.kind == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian(
            material.albedo, normal, stream
        )

    elif material.kind == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal(
            material.albedo, material.fuzz, incident_direction, normal, stream
        )

    elif material.kind == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            material.refractive_index, incident_direction, normal, front_face, stream
        )

    return ScatterEvent(
        scattered=did_scatter,
        attenuation=attenuation,
        origin=position,
        direction=scattered_direction,
    )
