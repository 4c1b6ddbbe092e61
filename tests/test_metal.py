"""Unit tests for the metal material module.

Tests cover:
- Mirror reflection for fuzz = 0 (attenuation = albedo exactly)
- Fuzzy reflection stays within the fuzz sphere
- Absorption when the scattered ray points into the surface
- Host-side validation and fuzz clamping
"""

import math

import pytest
import taichi as ti


class TestMetalScatter:
    """Tests for scatter_metal."""

    def test_mirror_reflection_45_degrees(self):
        """Test fuzz 0 reflects about the normal with attenuation = albedo."""
        from pathtracer.materials.metal import scatter_metal

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.9, 0.6, 0.3)
            incident = ti.math.vec3(1.0, -1.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            d, att, did = scatter_metal(albedo, 0.0, incident, normal, 0)
            direction[None] = d
            attenuation[None] = att
            scattered[None] = did

        test_kernel()
        d = direction[None]
        expected = 1.0 / math.sqrt(2.0)
        assert abs(d[0] - expected) < 1e-5
        assert abs(d[1] - expected) < 1e-5
        assert abs(d[2]) < 1e-6
        a = attenuation[None]
        assert a[0] == pytest.approx(0.9, abs=1e-6)
        assert a[1] == pytest.approx(0.6, abs=1e-6)
        assert a[2] == pytest.approx(0.3, abs=1e-6)
        assert scattered[None] == 1

    def test_mirror_reflection_unnormalized_incident(self):
        """Test the incident direction is normalized before reflecting."""
        from pathtracer.materials.metal import scatter_metal

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            d, _att, _did = scatter_metal(
                ti.math.vec3(1.0),
                0.0,
                ti.math.vec3(0.0, 0.0, -10.0),
                ti.math.vec3(0.0, 0.0, 1.0),
                0,
            )
            direction[None] = d

        test_kernel()
        d = direction[None]
        assert abs(d[2] - 1.0) < 1e-6

    def test_fuzzy_reflection_bounded_by_fuzz(self):
        """Test fuzzy directions stay within fuzz of the mirror direction."""
        from pathtracer.materials.metal import scatter_metal

        fuzz = 0.3
        max_dev = ti.field(dtype=ti.f32, shape=())
        any_different = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.vec3(0.0, -1.0, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            mirror = ti.math.vec3(0.0, 1.0, 0.0)
            ti.loop_config(serialize=True)
            for _ in range(500):
                d, _att, _did = scatter_metal(ti.math.vec3(1.0), fuzz, incident, normal, 0)
                dev = ti.math.length(d - mirror)
                ti.atomic_max(max_dev[None], dev)
                if dev > 1e-4:
                    any_different[None] = 1

        test_kernel()
        assert max_dev[None] < fuzz + 1e-5
        assert any_different[None] == 1

    def test_absorbed_below_surface(self):
        """Test a scattered ray pointing into the surface is absorbed."""
        from pathtracer.materials.metal import scatter_metal

        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            # Incident direction leaving the surface reflects into it
            _d, _att, did = scatter_metal(
                ti.math.vec3(1.0),
                0.0,
                ti.math.vec3(0.0, 1.0, 0.0),
                ti.math.vec3(0.0, 1.0, 0.0),
                0,
            )
            scattered[None] = did

        test_kernel()
        assert scattered[None] == 0

    def test_grazing_fuzz_sometimes_absorbs(self):
        """Test full fuzz at grazing incidence absorbs some rays."""
        from pathtracer.materials.metal import scatter_metal

        absorbed = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.vec3(1.0, -0.01, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            ti.loop_config(serialize=True)
            for _ in range(500):
                _d, _att, did = scatter_metal(ti.math.vec3(1.0), 1.0, incident, normal, 0)
                if did == 0:
                    absorbed[None] += 1

        test_kernel()
        assert 0 < absorbed[None] < 500


class TestMetalValidation:
    """Tests for the host-side Metal description."""

    def test_defaults(self):
        from pathtracer.materials.metal import Metal

        metal = Metal(albedo=(0.7, 0.6, 0.5))
        assert metal.fuzz == 0.0

    def test_fuzz_clamped_to_one(self):
        """Test fuzz above 1 is clamped."""
        from pathtracer.materials.metal import Metal

        assert Metal(albedo=(0.5, 0.5, 0.5), fuzz=3.0).fuzz == 1.0

    def test_negative_fuzz_rejected(self):
        from pathtracer.materials.metal import Metal

        with pytest.raises(ValueError, match="negative"):
            Metal(albedo=(0.5, 0.5, 0.5), fuzz=-0.1)

    def test_albedo_out_of_range(self):
        from pathtracer.materials.metal import Metal

        with pytest.raises(ValueError, match="outside \\[0, 1\\]"):
            Metal(albedo=(1.5, 0.5, 0.5))
