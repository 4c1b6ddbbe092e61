"""Scene module for scene management, lighting and configuration.

Components:
    intersection: Scene aggregate (sphere storage and ray queries)
    lights: Point lights and shadow-tested direct lighting
    manager: Scene manager coordinating spheres, materials and lights
    settings: Image and render settings
    scene: Render jobs and JSON scene files
    random_spheres: The random spheres scene

Scene data is stored in Taichi fields (Structure of Arrays) and is read-only
while rendering.
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    intersect_scene_any,
)
from .lights import (
    MAX_LIGHTS,
    SHADOW_EPSILON,
    PointLight,
    add_point_light,
    clear_lights,
    direct_light,
    get_light_count,
    point_light_contribution,
)
from .manager import SceneConfig, SceneManager, SphereInfo
from .random_spheres import (
    RandomSpheresParams,
    create_random_spheres_camera,
    create_random_spheres_scene,
)
from .scene import Scene, load_scene_file, save_scene_file, scene_from_dict
from .settings import ImageSettings, RenderSettings

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "intersect_scene_any",
    "MAX_SPHERES",
    # Lights module
    "PointLight",
    "add_point_light",
    "clear_lights",
    "direct_light",
    "get_light_count",
    "point_light_contribution",
    "MAX_LIGHTS",
    "SHADOW_EPSILON",
    # Manager module
    "SceneManager",
    "SphereInfo",
    "SceneConfig",
    # Settings and scene files
    "ImageSettings",
    "RenderSettings",
    "Scene",
    "scene_from_dict",
    "load_scene_file",
    "save_scene_file",
    # Random spheres scene
    "RandomSpheresParams",
    "create_random_spheres_camera",
    "create_random_spheres_scene",
]
