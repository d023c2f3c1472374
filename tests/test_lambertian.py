"""Unit tests for the Lambertian material module.

Tests cover:
- Scattered directions lie in the hemisphere around the normal and are never
  degenerate
- Attenuation equals albedo and the material always scatters
- Material registry operations and albedo validation
"""

import pytest
import taichi as ti


class TestScatterLambertian:
    """Tests for scatter_lambertian."""

    N = 2000

    def test_scatter_direction_in_hemisphere(self):
        """normal + unit vector never points below the surface."""
        from pathtracer.core.ray import dot
        from pathtracer.materials.lambertian import scatter_lambertian, vec3

        dots = ti.field(dtype=ti.f32, shape=self.N)

        @ti.kernel
        def test_kernel():
            for i in range(dots.shape[0]):
                normal = vec3(0.0, 1.0, 0.0)
                direction, _, _ = scatter_lambertian(vec3(0.5, 0.5, 0.5), normal)
                dots[i] = dot(direction, normal)

        test_kernel()
        assert dots.to_numpy().min() >= -1e-3

    def test_scatter_direction_never_near_zero(self):
        from pathtracer.core.ray import near_zero
        from pathtracer.materials.lambertian import scatter_lambertian, vec3

        degenerate = ti.field(dtype=ti.i32, shape=self.N)

        @ti.kernel
        def test_kernel():
            for i in range(degenerate.shape[0]):
                direction, _, _ = scatter_lambertian(
                    vec3(0.5, 0.5, 0.5), vec3(0.0, 0.0, -1.0)
                )
                degenerate[i] = near_zero(direction)

        test_kernel()
        assert degenerate.to_numpy().sum() == 0

    def test_scatter_attenuation_equals_albedo_and_always_scatters(self):
        from pathtracer.materials.lambertian import scatter_lambertian, vec3

        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            _, att, did_scatter = scatter_lambertian(
                vec3(0.8, 0.3, 0.1), vec3(0.0, 1.0, 0.0)
            )
            attenuation[None] = att
            scattered[None] = did_scatter

        test_kernel()
        a = attenuation[None]
        assert a[0] == pytest.approx(0.8)
        assert a[1] == pytest.approx(0.3)
        assert a[2] == pytest.approx(0.1)
        assert scattered[None] == 1

    def test_scatter_directions_favor_normal(self):
        """Cosine weighting: the mean of normalized directions leans along the normal."""
        from pathtracer.core.ray import dot, unit_vector
        from pathtracer.materials.lambertian import scatter_lambertian, vec3

        cosines = ti.field(dtype=ti.f32, shape=self.N)

        @ti.kernel
        def test_kernel():
            for i in range(cosines.shape[0]):
                normal = vec3(1.0, 0.0, 0.0)
                direction, _, _ = scatter_lambertian(vec3(1.0, 1.0, 1.0), normal)
                cosines[i] = dot(unit_vector(direction), normal)

        test_kernel()
        # E[cos theta] is 2/3 for a cosine-weighted hemisphere
        assert cosines.to_numpy().mean() == pytest.approx(2.0 / 3.0, abs=0.05)


class TestMaterialRegistry:
    """Tests for Lambertian material registry."""

    def test_add_and_get_material(self):
        from pathtracer.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_albedo,
        )

        idx = add_lambertian_material((0.2, 0.4, 0.6))
        assert idx == 0

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_lambertian_albedo(mat_idx)

        test_kernel(idx)
        r = result[None]
        assert r[0] == pytest.approx(0.2)
        assert r[1] == pytest.approx(0.4)
        assert r[2] == pytest.approx(0.6)

    def test_material_count_and_clear(self):
        from pathtracer.materials.lambertian import (
            add_lambertian_material,
            clear_lambertian_materials,
            get_lambertian_material_count,
        )

        add_lambertian_material((0.1, 0.1, 0.1))
        add_lambertian_material((0.2, 0.2, 0.2))
        assert get_lambertian_material_count() == 2

        clear_lambertian_materials()
        assert get_lambertian_material_count() == 0

    @pytest.mark.parametrize(
        "albedo",
        [(-0.1, 0.5, 0.5), (0.5, 1.1, 0.5), (0.5, 0.5, 2.0)],
    )
    def test_albedo_validation(self, albedo):
        from pathtracer.materials.lambertian import add_lambertian_material

        with pytest.raises(ValueError, match="outside"):
            add_lambertian_material(albedo)

    def test_albedo_boundaries_valid(self):
        from pathtracer.materials.lambertian import add_lambertian_material

        assert add_lambertian_material((0.0, 0.0, 0.0)) == 0
        assert add_lambertian_material((1.0, 1.0, 1.0)) == 1

    def test_capacity_exceeded(self):
        from pathtracer.materials.lambertian import (
            MAX_LAMBERTIAN_MATERIALS,
            add_lambertian_material,
            num_lambertian_materials,
        )

        num_lambertian_materials[None] = MAX_LAMBERTIAN_MATERIALS
        with pytest.raises(RuntimeError, match="Maximum number"):
            add_lambertian_material((0.5, 0.5, 0.5))
