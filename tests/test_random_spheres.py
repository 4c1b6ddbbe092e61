"""Tests for the random spheres scene factory.

Tests cover:
- Scene composition (ground, grid, feature spheres, light)
- Reproducibility for a fixed seed
- The keep-out region around the metal feature sphere
- A small end-to-end render
"""

import numpy as np
import pytest


class TestRandomSpheresScene:
    """Tests for create_random_spheres_scene."""

    def test_composition(self):
        from pathtracer.materials import Dielectric, Lambertian, Metal
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        scene, camera = create_random_spheres_scene(seed=1)
        world = scene.world

        # Ground + at most 22 * 22 small spheres + 3 feature spheres
        assert 4 < world.get_sphere_count() <= 1 + 22 * 22 + 3
        assert world.get_sphere_count() == world.get_material_count()
        assert world.get_light_count() == 1

        ground = world.spheres[0]
        assert ground.center == (0.0, -1000.0, 0.0)
        assert ground.radius == 1000.0

        features = world.spheres[-3:]
        assert [s.center for s in features] == [(-4.0, 1.0, 0.0), (0.0, 1.0, 0.0), (4.0, 1.0, 0.0)]
        kinds = [type(world.get_material(s.material_id)) for s in features]
        assert kinds == [Lambertian, Dielectric, Metal]

        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.aperture == 0.1
        assert camera.focus_dist == 10.0
        assert (scene.image.width, scene.image.height) == (200, 133)

    def test_small_spheres(self):
        from pathtracer.materials import Dielectric, Metal
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        scene, _ = create_random_spheres_scene(seed=7)
        small = scene.world.spheres[1:-3]

        for sphere in small:
            assert sphere.radius == 0.2
            assert sphere.center[1] == 0.2
            assert -11.0 <= sphere.center[0] < 11.0
            assert -11.0 <= sphere.center[2] < 11.0
            distance = np.linalg.norm(np.array(sphere.center) - np.array([4.0, 0.2, 0.0]))
            assert distance > 0.9

            material = scene.world.get_material(sphere.material_id)
            if isinstance(material, Metal):
                assert all(0.5 <= c < 1.0 for c in material.albedo)
                assert 0.5 <= material.fuzz < 1.0
            elif isinstance(material, Dielectric):
                assert material.refractive_index == 1.5

    def test_seed_reproducible(self):
        from pathtracer.scene.random_spheres import create_random_spheres_scene

        first = create_random_spheres_scene(seed=3)[0].world.to_dict()
        second = create_random_spheres_scene(seed=3)[0].world.to_dict()
        other = create_random_spheres_scene(seed=4)[0].world.to_dict()

        assert first == second
        assert first != other

    def test_params(self):
        from pathtracer.scene.random_spheres import RandomSpheresParams, create_random_spheres_scene

        params = RandomSpheresParams(
            aspect=2.0, width=64, frame_count=2, samples_per_frame=3, max_depth=5
        )
        scene, camera = create_random_spheres_scene(seed=1, params=params)

        assert (scene.image.width, scene.image.height) == (64, 32)
        assert scene.render.total_samples == 6
        assert scene.render.max_depth == 5
        assert camera.aspect_ratio == 2.0

    def test_invalid_light(self):
        from pathtracer.scene.random_spheres import RandomSpheresParams, create_random_spheres_scene

        with pytest.raises(ValueError, match="luminosity"):
            create_random_spheres_scene(seed=1, params=RandomSpheresParams(light_luminosity=0.0))


class TestRandomSpheresRender:
    """End-to-end render of the random spheres scene."""

    def test_tiny_render(self):
        from pathtracer.core.renderer import render_scene
        from pathtracer.scene.random_spheres import RandomSpheresParams, create_random_spheres_scene

        params = RandomSpheresParams(width=24, frame_count=2, samples_per_frame=1, max_depth=4)
        scene, camera = create_random_spheres_scene(seed=1, params=params)

        first = render_scene(scene, camera, seed=2)
        second = render_scene(scene, camera, seed=2)

        assert first.shape == (16, 24, 3)
        assert np.all(np.isfinite(first))
        assert first.max() > 0.0
        np.testing.assert_array_equal(first, second)
