"""Render jobs and JSON scene files.

A Scene bundles the image geometry, the sampling settings and the loaded
world. Scene files are JSON documents:

    {
        "image": {"aspect": 1.5, "width": 200},
        "render": {"frame_count": 4, "samples_per_frame": 25, "max_depth": 50},
        "camera": {"lookfrom": [13, 2, 3], "lookat": [0, 0, 0], ...},
        "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}, ...],
        "spheres": [{"center": [0, -1000, 0], "radius": 1000, "material_id": 0}, ...],
        "lights": [{"type": "point", "position": [1, 5, 0], "luminosity": 100}]
    }

Example:
    >>> from pathtracer.scene.scene import load_scene_file
    >>> scene, camera = load_scene_file("scene.json")
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.scene.manager import SceneManager
from pathtracer.scene.settings import ImageSettings, RenderSettings


@dataclass
class Scene:
    """A render job.

    Attributes:
        image: Output image geometry.
        render: Sampling parameters.
        world: The loaded spheres, materials and lights.
    """

    image: ImageSettings
    render: RenderSettings
    world: SceneManager

    def to_dict(self, camera: ThinLensCamera | None = None) -> dict[str, Any]:
        """Export the render job (and optionally a camera) to a dictionary."""
        data: dict[str, Any] = {
            "image": self.image.to_dict(),
            "render": self.render.to_dict(),
        }
        if camera is not None:
            data["camera"] = camera.to_dict()
        data.update(self.world.to_dict())
        return data


def scene_from_dict(data: dict[str, Any]) -> tuple[Scene, ThinLensCamera]:
    """Build a render job and its camera from a dictionary.

    Loads the world into the device tables, replacing any loaded scene. When
    the camera has no aspect ratio it takes the image's.

    Raises:
        ValueError: If a section is missing or contains invalid data.
    """
    if "camera" not in data:
        raise ValueError("Scene description has no 'camera' section")

    image = ImageSettings.from_dict(data.get("image", {}))
    render = RenderSettings.from_dict(data.get("render", {}))

    camera_data = dict(data["camera"])
    camera_data.setdefault("aspect_ratio", image.aspect)
    camera = ThinLensCamera.from_dict(camera_data)
    camera.validate()

    world = SceneManager()
    world.from_dict(data)

    return Scene(image=image, render=render, world=world), camera


def load_scene_file(path: str | Path) -> tuple[Scene, ThinLensCamera]:
    """Load a render job from a JSON scene file.

    Args:
        path: Path to the JSON file.

    Returns:
        Tuple of (scene, camera).

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or has invalid content.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return scene_from_dict(data)


def save_scene_file(path: str | Path, scene: Scene, camera: ThinLensCamera) -> None:
    """Write a render job and its camera to a JSON scene file."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(scene.to_dict(camera), f, indent=2)
