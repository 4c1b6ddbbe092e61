"""Random spheres scene configuration.

This module provides a factory for the "random spheres" scene: a large ground
sphere, a 22x22 grid of small spheres with randomly chosen materials, three
large feature spheres (diffuse, glass, mirror) and one point light.

Small sphere materials are drawn per grid cell:
- 80%: diffuse, albedo = random * random (per channel)
- 15%: metal, albedo and fuzz uniform in [0.5, 1)
- 5%: glass with refractive index 1.5

Cells whose sphere would sit within 0.9 of the metal feature sphere are
left empty.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.random_spheres import create_random_spheres_scene
    >>> from pathtracer.core.renderer import render_scene
    >>>
    >>> scene, camera = create_random_spheres_scene(seed=1)
    >>> image = render_scene(scene, camera, seed=1)
"""

from dataclasses import dataclass

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.scene.manager import SceneManager
from pathtracer.scene.scene import Scene
from pathtracer.scene.settings import ImageSettings, RenderSettings

# Grid of small spheres: a, b in [GRID_MIN, GRID_MAX)
GRID_MIN = -11
GRID_MAX = 11
SMALL_RADIUS = 0.2

# Material probabilities for the small spheres (cumulative)
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95

GLASS_INDEX = 1.5


@dataclass
class RandomSpheresParams:
    """Parameters for configuring the random spheres scene.

    All parameters have defaults matching the classic configuration.

    Attributes:
        aspect: Image aspect ratio (width / height).
        width: Image width in pixels.
        frame_count: Number of independent frames.
        samples_per_frame: Samples per pixel per frame.
        max_depth: Maximum bounces per path.
        light_position: Position of the point light.
        light_color: RGB color of the point light.
        light_luminosity: Luminosity of the point light.

    Example:
        >>> params = RandomSpheresParams()
        >>> params.width
        200
        >>> params.light_luminosity
        100.0
    """

    aspect: float = 3.0 / 2.0
    width: int = 200
    frame_count: int = 4
    samples_per_frame: int = 25
    max_depth: int = 50
    light_position: tuple[float, float, float] = (1.0, 5.0, 0.0)
    light_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    light_luminosity: float = 100.0


def create_random_spheres_camera(aspect: float = 3.0 / 2.0) -> ThinLensCamera:
    """Create the default camera for the random spheres scene.

    Looks from (13, 2, 3) at the origin with a 20 degree vertical field of
    view, a small aperture and the focal plane at distance 10.
    """
    return ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect,
        aperture=0.1,
        focus_dist=10.0,
    )


def populate_random_spheres(world: SceneManager, rng: np.random.Generator) -> None:
    """Add the ground, the random small spheres and the feature spheres.

    Args:
        world: The scene manager to fill (not cleared first).
        rng: Random generator used for placement and materials.
    """
    world.add_sphere_with_material(
        (0.0, -1000.0, 0.0), 1000.0, Lambertian(albedo=(0.5, 0.5, 0.5))
    )

    keep_out = np.array([4.0, SMALL_RADIUS, 0.0])

    for a in range(GRID_MIN, GRID_MAX):
        for b in range(GRID_MIN, GRID_MAX):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), SMALL_RADIUS, b + 0.9 * rng.random()])

            if np.linalg.norm(center - keep_out) <= 0.9:
                continue

            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                material = Lambertian(albedo=tuple(albedo.tolist()))
            elif choose_mat < METAL_PROBABILITY:
                albedo = rng.uniform(0.5, 1.0, size=3)
                fuzz = rng.uniform(0.5, 1.0)
                material = Metal(albedo=tuple(albedo.tolist()), fuzz=float(fuzz))
            else:
                material = Dielectric(refractive_index=GLASS_INDEX)

            world.add_sphere_with_material(tuple(center.tolist()), SMALL_RADIUS, material)

    world.add_sphere_with_material((-4.0, 1.0, 0.0), 1.0, Lambertian(albedo=(0.4, 0.2, 0.1)))
    world.add_sphere_with_material((0.0, 1.0, 0.0), 1.0, Dielectric(refractive_index=GLASS_INDEX))
    world.add_sphere_with_material((4.0, 1.0, 0.0), 1.0, Metal(albedo=(0.7, 0.6, 0.5), fuzz=0.0))


def create_random_spheres_scene(
    seed: int | None = None,
    params: RandomSpheresParams | None = None,
) -> tuple[Scene, ThinLensCamera]:
    """Create the random spheres scene and its camera.

    Loads the scene into the device tables, replacing any loaded scene.

    Args:
        seed: Seed for the placement and materials of the small spheres.
            None draws fresh entropy.
        params: Optional image, sampling and light parameters.

    Returns:
        Tuple of (scene, camera).
    """
    if params is None:
        params = RandomSpheresParams()

    image = ImageSettings.from_width(params.width, params.aspect)
    render = RenderSettings(
        frame_count=params.frame_count,
        samples_per_frame=params.samples_per_frame,
        max_depth=params.max_depth,
    )

    world = SceneManager()
    populate_random_spheres(world, np.random.default_rng(seed))
    world.add_point_light(
        position=params.light_position,
        color=params.light_color,
        luminosity=params.light_luminosity,
    )

    scene = Scene(image=image, render=render, world=world)
    return scene, create_random_spheres_camera(params.aspect)
