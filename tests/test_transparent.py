"""Unit tests for the transparent (glass) material.

Tests cover:
- Attenuation is always white
- Head-on rays mostly refract straight through
- Total internal reflection when leaving at a steep angle
- The random stream advances exactly once per scatter
- Lookup of registered materials by index
"""

import numpy as np
import pytest
import taichi as ti


def _scatter_many(ior, incident, normal, front_face, n=256, seed=0):
    """Scatter n times with independent states; returns numpy directions."""
    from pinray.core.ray import vec3
    from pinray.core.rng import seed_sample
    from pinray.materials.transparent import scatter_transparent

    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
    attenuations = ti.Vector.field(3, dtype=ti.f32, shape=n)

    @ti.kernel
    def test_kernel(r: ti.f32, i: vec3, nrm: vec3, f: ti.i32, s: ti.u32):
        for k in range(n):
            d, att, _ = scatter_transparent(r, i, nrm, f, seed_sample(s, k, 0))
            directions[k] = d
            attenuations[k] = att

    test_kernel(ior, vec3(*incident), vec3(*normal), front_face, seed)
    return directions.to_numpy(), attenuations.to_numpy()


class TestTransparentScatter:
    """Tests for dielectric scattering."""

    def test_attenuation_is_white(self):
        """Test glass attenuates nothing."""
        _, att = _scatter_many(1.5, (0.3, -1.0, 0.0), (0.0, 1.0, 0.0), 1)
        assert (att == 1.0).all()

    def test_head_on_mostly_refracts(self):
        """Test head-on rays mostly pass straight through."""
        dirs, _ = _scatter_many(1.5, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 1, n=1000)
        going_down = dirs[:, 1] < 0.0
        # Normal-incidence reflectance is r0 = 0.04
        fraction_reflected = 1.0 - going_down.mean()
        assert fraction_reflected < 0.1
        # Refracted rays continue straight
        assert abs(dirs[going_down][:, 0]).max() < 1e-5

    def test_reflected_rays_are_mirror_directions(self):
        """Test reflected rays follow the mirror direction."""
        dirs, _ = _scatter_many(1.5, (1.0, -1.0, 0.0), (0.0, 1.0, 0.0), 1, n=1000)
        reflected = dirs[dirs[:, 1] > 0.0]
        assert len(reflected) > 0
        expected = 2.0**-0.5
        np.testing.assert_allclose(reflected[:, 0], expected, atol=1e-5)
        np.testing.assert_allclose(reflected[:, 1], expected, atol=1e-5)

    def test_total_internal_reflection(self):
        """Test steep exits always reflect."""
        # Leaving glass at 60 degrees: 1.5 * sin(60) > 1
        dirs, _ = _scatter_many(1.5, (0.866, -0.5, 0.0), (0.0, 1.0, 0.0), 0)
        assert (dirs[:, 1] > 0.0).all()

    def test_refraction_bends_toward_normal_on_entry(self):
        """Test entering rays bend toward the normal by Snell's law."""
        dirs, _ = _scatter_many(1.5, (1.0, -1.0, 0.0), (0.0, 1.0, 0.0), 1, n=1000)
        refracted = dirs[dirs[:, 1] < 0.0]
        assert len(refracted) > 0
        np.testing.assert_allclose(refracted[:, 0], (2.0**-0.5) / 1.5, atol=1e-4)

    def test_one_draw_per_scatter(self):
        """The state advances once whether the ray reflects or refracts."""
        from pinray.core.ray import vec3
        from pinray.core.rng import random_float, seed_sample
        from pinray.materials.transparent import scatter_transparent

        matches = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            start = seed_sample(ti.u32(3), 0, 0)
            _, expected = random_float(start)

            # Total internal reflection
            _, _, after_tir = scatter_transparent(
                1.5, vec3(0.866, -0.5, 0.0), vec3(0.0, 1.0, 0.0), 0, start
            )
            # Ordinary entry
            _, _, after_entry = scatter_transparent(
                1.5, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1, start
            )
            matches[0] = after_tir == expected
            matches[1] = after_entry == expected

        test_kernel()
        assert matches[0] == 1
        assert matches[1] == 1

    def test_scatter_by_id_uses_registered_ior(self):
        """Lookup by registry index refracts with that entry's index of refraction."""
        from pinray.core.ray import vec3
        from pinray.core.rng import seed_sample
        from pinray.materials.transparent import (
            add_transparent_material,
            scatter_transparent,
            scatter_transparent_by_id,
        )

        add_transparent_material(1.0)
        idx = add_transparent_material(2.4)
        matches = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(mat: ti.i32):
            incident = vec3(1.0, -1.0, 0.0)
            normal = vec3(0.0, 1.0, 0.0)
            start = seed_sample(ti.u32(9), 0, 0)
            d_id, att_id, s_id = scatter_transparent_by_id(mat, incident, normal, 1, start)
            d, att, s = scatter_transparent(2.4, incident, normal, 1, start)
            ok = 0
            if (d_id - d).norm() < 1e-6:
                if (att_id - att).norm() < 1e-6:
                    if s_id == s:
                        ok = 1
            matches[None] = ok

        test_kernel(idx)
        assert matches[None] == 1


class TestTransparentRegistry:
    """Tests for the transparent material registry."""

    def test_default_ior(self):
        """Test the default index of refraction is 1.5."""
        from pinray.materials.transparent import add_transparent_material, transparent_iors

        idx = add_transparent_material()
        assert transparent_iors[idx] == pytest.approx(1.5)

    @pytest.mark.parametrize("ior", [0.0, -1.3])
    def test_non_positive_ior_rejected(self, ior):
        """Test non-positive ior raises ValueError."""
        from pinray.materials.transparent import add_transparent_material

        with pytest.raises(ValueError, match="must be positive"):
            add_transparent_material(ior)

    def test_count_and_clear(self):
        from pinray.materials.transparent import (
            add_transparent_material,
            clear_transparent_materials,
            get_transparent_material_count,
        )

        add_transparent_material(1.33)
        add_transparent_material(2.4)
        assert get_transparent_material_count() == 2
        clear_transparent_materials()
        assert get_transparent_material_count() == 0
