"""Unit tests for the SceneManager.

Tests cover:
- Material registration (Lambertian, Metal, Dielectric)
- Sphere and light addition
- Scene serialization (to_config, from_config, to_dict, from_dict)
- Scene clearing
- Intersection sees the material ids assigned by the manager
"""

import pytest
import taichi as ti


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from pathtracer.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestMaterialRegistration:
    """Tests for material registration."""

    def test_material_ids_are_sequential(self, fresh_scene):
        from pathtracer.materials import Dielectric, Lambertian, Metal

        id0 = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        id1 = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        id2 = fresh_scene.add_dielectric_material(refractive_index=1.5)

        assert (id0, id1, id2) == (0, 1, 2)
        assert fresh_scene.get_material_count() == 3
        assert isinstance(fresh_scene.get_material(0), Lambertian)
        assert fresh_scene.get_material(1) == Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        assert isinstance(fresh_scene.get_material(2), Dielectric)
        assert fresh_scene.get_material(3) is None
        assert fresh_scene.get_material(-1) is None

    def test_material_validation(self, fresh_scene):
        with pytest.raises(ValueError, match="outside \\[0, 1\\]"):
            fresh_scene.add_lambertian_material(albedo=(1.5, 0.5, 0.5))
        with pytest.raises(ValueError, match="negative"):
            fresh_scene.add_metal_material(albedo=(0.5, 0.5, 0.5), fuzz=-1.0)
        with pytest.raises(ValueError, match="not positive"):
            fresh_scene.add_dielectric_material(refractive_index=0.0)
        assert fresh_scene.get_material_count() == 0


class TestSpheresAndLights:
    """Tests for primitive and light addition."""

    def test_add_sphere(self, fresh_scene):
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        idx = fresh_scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)

        assert idx == 0
        assert fresh_scene.get_sphere_count() == 1
        info = fresh_scene.spheres[0]
        assert info.center == (0.0, 0.0, -1.0)
        assert info.radius == 0.5
        assert info.material_id == mat_id

    @pytest.mark.parametrize("material_id", [-1, 1])
    def test_add_sphere_invalid_material(self, fresh_scene, material_id):
        fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.add_sphere(center=(0, 0, 0), radius=1.0, material_id=material_id)
        assert fresh_scene.get_sphere_count() == 0

    def test_add_sphere_with_material(self, fresh_scene):
        from pathtracer.materials import Metal

        sphere_idx, mat_id = fresh_scene.add_sphere_with_material(
            (1.0, 0.0, -1.0), 0.5, Metal(albedo=(0.9, 0.9, 0.9))
        )
        assert (sphere_idx, mat_id) == (0, 0)
        assert fresh_scene.get_material_count() == 1

    def test_add_point_light(self, fresh_scene):
        idx = fresh_scene.add_point_light((1.0, 5.0, 0.0), luminosity=100.0)
        assert idx == 0
        assert fresh_scene.get_light_count() == 1
        assert fresh_scene.lights[0].luminosity == 100.0

    def test_new_manager_replaces_loaded_scene(self, fresh_scene):
        from pathtracer.materials import Lambertian
        from pathtracer.scene.manager import SceneManager

        fresh_scene.add_sphere_with_material((0, 0, 0), 1.0, Lambertian(albedo=(0.5, 0.5, 0.5)))
        fresh_scene.add_point_light((0.0, 3.0, 0.0))

        other = SceneManager()
        assert other.get_sphere_count() == 0
        assert other.get_material_count() == 0
        assert other.get_light_count() == 0


class TestSceneClearing:
    """Tests for scene clearing."""

    def test_clear_scene(self, fresh_scene):
        mat_id = fresh_scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        fresh_scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=mat_id)
        fresh_scene.add_point_light((0.0, 2.0, 0.0))

        fresh_scene.clear()

        assert fresh_scene.get_material_count() == 0
        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_light_count() == 0
        assert repr(fresh_scene) == "SceneManager(materials=0, spheres=0, lights=0)"


class TestSceneSerialization:
    """Tests for scene serialization."""

    def _build(self, scene):
        mat0 = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        mat1 = scene.add_dielectric_material(refractive_index=1.5)
        scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=mat0)
        scene.add_sphere(center=(1.0, 0.0, -1.0), radius=0.5, material_id=mat1)
        scene.add_point_light((0.0, 4.0, 0.0), color=(1.0, 0.8, 0.6), luminosity=30.0)

    def test_to_config(self, fresh_scene):
        self._build(fresh_scene)
        config = fresh_scene.to_config()

        assert [m["type"] for m in config.materials] == ["lambertian", "dielectric"]
        assert config.spheres[1] == {"center": [1.0, 0.0, -1.0], "radius": 0.5, "material_id": 1}
        assert config.lights[0]["luminosity"] == 30.0

    def test_to_dict_from_dict(self, fresh_scene):
        from pathtracer.scene.manager import SceneManager

        self._build(fresh_scene)
        data = fresh_scene.to_dict()

        scene2 = SceneManager()
        scene2.from_dict(data)

        assert scene2.get_material_count() == 2
        assert scene2.get_sphere_count() == 2
        assert scene2.get_light_count() == 1
        assert scene2.to_dict() == data
        scene2.clear()

    def test_load_restores_device_tables(self, fresh_scene):
        from pathtracer.materials.material import get_material_count
        from pathtracer.scene.intersection import get_sphere_count
        from pathtracer.scene.lights import get_light_count
        from pathtracer.scene.manager import SceneManager

        self._build(fresh_scene)
        data = fresh_scene.to_dict()

        other = SceneManager()
        other.add_lambertian_material(albedo=(0.1, 0.1, 0.1))
        assert (get_material_count(), get_sphere_count(), get_light_count()) == (1, 0, 0)

        fresh_scene.load()
        assert (get_material_count(), get_sphere_count(), get_light_count()) == (2, 2, 1)
        assert fresh_scene.to_dict() == data

    def test_from_config_invalid_material_type(self, fresh_scene):
        from pathtracer.scene.manager import SceneConfig

        with pytest.raises(ValueError, match="Unknown material type"):
            fresh_scene.from_config(SceneConfig(materials=[{"type": "unknown_material"}]))

    def test_from_config_sphere_without_material(self, fresh_scene):
        from pathtracer.scene.manager import SceneConfig

        config = SceneConfig(spheres=[{"center": [0, 0, 0], "radius": 1.0, "material_id": 0}])
        with pytest.raises(ValueError, match="Invalid material_id"):
            fresh_scene.from_config(config)


class TestCapacityInfo:
    """Tests for capacity information methods."""

    def test_capacity_methods(self, fresh_scene):
        from pathtracer.materials import MAX_MATERIALS
        from pathtracer.scene.intersection import MAX_SPHERES
        from pathtracer.scene.lights import MAX_LIGHTS

        assert fresh_scene.get_max_spheres() == MAX_SPHERES
        assert fresh_scene.get_max_materials() == MAX_MATERIALS
        assert fresh_scene.get_max_lights() == MAX_LIGHTS


class TestIntegrationWithIntersection:
    """Tests that SceneManager works with the intersection system."""

    def test_intersection_returns_correct_material_id(self, fresh_scene):
        from pathtracer.scene.intersection import intersect_scene, vec3

        mat0 = fresh_scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
        mat1 = fresh_scene.add_metal_material(albedo=(0.8, 0.6, 0.2))
        fresh_scene.add_sphere(center=(0.0, 0.0, -2.0), radius=0.5, material_id=mat1)
        fresh_scene.add_sphere(center=(0.0, 2.0, 0.0), radius=0.5, material_id=mat0)

        forward = ti.field(dtype=ti.i32, shape=())
        up = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            origin = vec3(0.0, 0.0, 0.0)
            forward[None] = intersect_scene(origin, vec3(0.0, 0.0, -1.0), 0.001, 1e10).material_id
            up[None] = intersect_scene(origin, vec3(0.0, 1.0, 0.0), 0.001, 1e10).material_id

        test_kernel()
        assert forward[None] == mat1
        assert up[None] == mat0
