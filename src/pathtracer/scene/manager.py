"""Unified scene manager for coordinating spheres, materials and lights.

This module provides a high-level scene management API on top of the
device-side tables (material table, sphere aggregate, point lights). It keeps
a host-side mirror of everything it loads so a scene can be inspected and
serialized.

The SceneManager maintains:
- A single material_id space (ids handed out by the material table)
- Sphere records referencing materials by id
- Point lights
- Scene serialization/configuration support

The device tables are module-level Taichi fields, so only one scene is
loaded at a time; creating a SceneManager clears them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials import Lambertian
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
    0
    >>> scene.add_point_light(position=(1, 5, 0), luminosity=100.0)
    0
"""

from dataclasses import dataclass, field
from typing import Any

from pathtracer.materials.base import Color
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.material import (
    MAX_MATERIALS,
    MaterialSpec,
    add_material,
    clear_materials,
    get_material_count,
    material_from_dict,
    material_to_dict,
)
from pathtracer.materials.metal import Metal
from pathtracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)
from pathtracer.scene.lights import (
    MAX_LIGHTS,
    PointLight,
    add_point_light,
    clear_lights,
    get_light_count,
)


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        lights: List of light configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Unified scene manager coordinating spheres, materials and lights.

    Attributes:
        materials: Material descriptions, indexed by material id.
        spheres: List of SphereInfo for all spheres in the scene.
        lights: List of point lights in the scene.

    Example:
        >>> scene = SceneManager()
        >>> red_diffuse = scene.add_lambertian_material(albedo=(0.8, 0.1, 0.1))
        >>> gold_metal = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> glass = scene.add_dielectric_material(refractive_index=1.5)
        >>> scene.add_sphere((0, 0, -1), 0.5, red_diffuse)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold_metal)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialSpec] = []
        self.spheres: list[SphereInfo] = []
        self.lights: list[PointLight] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_materials()
        clear_lights()
        self.materials.clear()
        self.spheres.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres, materials and lights).

        Resets all Taichi fields and internal tracking structures.
        """
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, material: MaterialSpec) -> int:
        """Register a material description.

        Args:
            material: A Lambertian, Metal or Dielectric description.

        Returns:
            The material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            TypeError: If material is not a supported kind.
        """
        material_id = add_material(material)
        self.materials.append(material)
        return material_id

    def add_lambertian_material(self, albedo: Color) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B), each in [0, 1].

        Returns:
            The material ID for this material.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
        """
        return self.add_material(Lambertian(albedo=albedo))

    def add_metal_material(self, albedo: Color, fuzz: float = 0.0) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B), each in [0, 1].
            fuzz: Reflection perturbation in [0, 1]. 0 is a perfect mirror.

        Returns:
            The material ID for this material.

        Raises:
            ValueError: If any albedo component is outside [0, 1] or fuzz is
                negative.
        """
        return self.add_material(Metal(albedo=albedo, fuzz=fuzz))

    def add_dielectric_material(self, refractive_index: float = 1.5) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            refractive_index: Index of refraction. Common values: Air=1.0,
                Water=1.33, Glass=1.5, Diamond=2.4

        Returns:
            The material ID for this material.

        Raises:
            ValueError: If the refractive index is not positive.
        """
        return self.add_material(Dielectric(refractive_index=refractive_index))

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material(self, material_id: int) -> MaterialSpec | None:
        """Get the material description for an ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: The material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is not positive.
        """
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

        center = (float(center[0]), float(center[1]), float(center[2]))
        sphere_index = add_sphere(center, radius, material_id)

        info = SphereInfo(
            sphere_index=sphere_index,
            center=center,
            radius=float(radius),
            material_id=material_id,
        )
        self.spheres.append(info)

        return sphere_index

    def add_sphere_with_material(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: MaterialSpec,
    ) -> tuple[int, int]:
        """Add a sphere together with a new material.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere.
            material: The material description for the sphere.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_material(material)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    # =========================================================================
    # Light Management
    # =========================================================================

    def add_light(self, light: PointLight) -> int:
        """Add a point light to the scene.

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
        """
        light_index = add_point_light(light)
        self.lights.append(light)
        return light_index

    def add_point_light(
        self,
        position: tuple[float, float, float],
        color: Color = (1.0, 1.0, 1.0),
        luminosity: float = 1.0,
    ) -> int:
        """Add a point light from its parameters.

        Raises:
            ValueError: If luminosity is not positive or a color component is
                negative.
        """
        return self.add_light(PointLight(position=position, color=color, luminosity=luminosity))

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all materials, spheres and lights.
        """
        config = SceneConfig()

        for material in self.materials:
            config.materials.append(material_to_dict(material))

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for light in self.lights:
            config.lights.append(light.to_dict())

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first, spheres refer to them by id
        for mat_config in config.materials:
            self.add_material(material_from_dict(mat_config))

        for sphere_config in config.spheres:
            center_list = sphere_config.get("center", [0.0, 0.0, 0.0])
            center: tuple[float, float, float] = (
                center_list[0],
                center_list[1],
                center_list[2],
            )
            radius = sphere_config.get("radius", 1.0)
            material_id = sphere_config.get("material_id", 0)
            self.add_sphere(center, radius, material_id)

        for light_config in config.lights:
            self.add_light(PointLight.from_dict(light_config))

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary representation of the scene.
        """
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "lights": config.lights,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'spheres', 'lights' keys.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            lights=data.get("lights", []),
        )
        self.from_config(config)

    def load(self) -> None:
        """Upload this scene into the device tables.

        The sphere, material and light fields are shared by every manager,
        so building another scene replaces what the kernels see. Call this
        to make this scene the active one again.
        """
        self.from_config(self.to_config())

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS

    def __repr__(self) -> str:
        return (
            f"SceneManager(materials={len(self.materials)}, "
            f"spheres={len(self.spheres)}, lights={len(self.lights)})"
        )
