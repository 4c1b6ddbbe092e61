"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear spheres, materials and lights around each test and reseed streams.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized first
    from pathtracer.core.sampler import seed_streams
    from pathtracer.materials.material import clear_materials
    from pathtracer.scene.intersection import clear_scene
    from pathtracer.scene.lights import clear_lights

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_lights()

    _clear_all()
    seed_streams(16, seed=1234)

    yield

    _clear_all()


@pytest.fixture
def simple_camera():
    """A pinhole camera at the origin looking down -z with a 90 degree FOV."""
    from pathtracer.camera.thin_lens import ThinLensCamera

    return ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=1.0,
        aperture=0.0,
        focus_dist=1.0,
    )
