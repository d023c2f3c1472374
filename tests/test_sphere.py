"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Interval bounds (open at both ends)
- Hit record invariants: point on the ray, unit normal facing the ray
"""

import pytest
import taichi as ti


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        from pathtracer.geometry.sphere import make_sphere, vec3

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())
        material_result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5, 7)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius
            material_result[None] = sphere.material_id

        test_kernel()
        c = center_result[None]
        assert c[0] == pytest.approx(1.0)
        assert c[1] == pytest.approx(2.0)
        assert c[2] == pytest.approx(3.0)
        assert radius_result[None] == pytest.approx(0.5)
        assert material_result[None] == 7

    def test_miss_record(self):
        from pathtracer.geometry.sphere import make_miss_record

        hit = ti.field(dtype=ti.i32, shape=())
        material = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = make_miss_record()
            hit[None] = rec.hit
            material[None] = rec.material_id

        test_kernel()
        assert hit[None] == 0
        assert material[None] == -1


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def _run(self, origin, direction, center, radius, t_min=0.001, t_max=1000.0):
        from pathtracer.core.interval import make_interval
        from pathtracer.core.ray import make_ray
        from pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())
        point = ti.field(dtype=ti.math.vec3, shape=())
        normal = ti.field(dtype=ti.math.vec3, shape=())
        front_face = ti.field(dtype=ti.i32, shape=())
        material = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, lo: ti.f32, hi: ti.f32):
            ray = make_ray(o, d)
            sphere = Sphere(center=c, radius=r, material_id=3)
            record = hit_sphere(ray, sphere, make_interval(lo, hi))
            hit[None] = record.hit
            t_val[None] = record.t
            point[None] = record.point
            normal[None] = record.normal
            front_face[None] = record.front_face
            material[None] = record.material_id

        test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
        return {
            "hit": hit[None],
            "t": t_val[None],
            "point": point[None],
            "normal": normal[None],
            "front_face": front_face[None],
            "material_id": material[None],
        }

    def test_direct_hit_from_outside(self):
        rec = self._run((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(4.0, abs=1e-5)
        assert rec["point"][2] == pytest.approx(1.0, abs=1e-5)
        assert rec["normal"][2] == pytest.approx(1.0, abs=1e-5)
        assert rec["front_face"] == 1
        assert rec["material_id"] == 3

    def test_miss(self):
        rec = self._run((0.0, 5.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_hit_from_inside_is_back_face(self):
        """Origin at center: the far root is taken and the normal flipped."""
        rec = self._run((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 0.0), 2.0)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(2.0, abs=1e-5)
        assert rec["front_face"] == 0
        # Normal faces back toward the ray origin
        assert rec["normal"][0] == pytest.approx(-1.0, abs=1e-5)

    def test_unnormalized_direction(self):
        """t is measured in units of the given direction vector."""
        rec = self._run((0.0, 0.0, 5.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(2.0, abs=1e-5)

    def test_sphere_behind_ray_misses(self):
        rec = self._run((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_far_root_used_when_near_root_outside_interval(self):
        """With t_min past the near root, the far side of the sphere is hit."""
        rec = self._run((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=4.5)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(6.0, abs=1e-5)
        assert rec["front_face"] == 0

    def test_root_on_interval_bound_is_rejected(self):
        """The interval is open: a root exactly at t_max does not count."""
        rec = self._run(
            (0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=0.001, t_max=4.0
        )
        assert rec["hit"] == 0

    def test_no_roots_in_interval(self):
        rec = self._run((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_max=3.0)
        assert rec["hit"] == 0


class TestHitRecordInvariants:
    """Random rays: every hit satisfies the hit record invariants."""

    def test_random_rays(self):
        from pathtracer.core.interval import make_interval
        from pathtracer.core.ray import (
            dot,
            length,
            make_ray,
            random_vec3_range,
            ray_at,
        )
        from pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

        n = 512
        hits = ti.field(dtype=ti.i32, shape=n)
        t_in_range = ti.field(dtype=ti.i32, shape=n)
        point_error = ti.field(dtype=ti.f32, shape=n)
        normal_length = ti.field(dtype=ti.f32, shape=n)
        facing = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                sphere = Sphere(center=vec3(0.0, 0.0, -1.0), radius=0.5, material_id=0)
                origin = random_vec3_range(-2.0, 2.0)
                target = vec3(0.0, 0.0, -1.0) + random_vec3_range(-0.6, 0.6)
                ray = make_ray(origin, target - origin)
                rec = hit_sphere(ray, sphere, make_interval(0.001, 100.0))
                hits[i] = rec.hit
                t_in_range[i] = rec.t > 0.001 and rec.t < 100.0
                point_error[i] = length(rec.point - ray_at(ray, rec.t))
                normal_length[i] = length(rec.normal)
                facing[i] = dot(ray.direction, rec.normal)

        test_kernel()
        hit_arr = hits.to_numpy() == 1
        assert hit_arr.sum() > 0
        assert (t_in_range.to_numpy()[hit_arr] == 1).all()
        assert (point_error.to_numpy()[hit_arr] < 1e-4).all()
        assert (abs(normal_length.to_numpy()[hit_arr] - 1.0) < 1e-4).all()
        assert (facing.to_numpy()[hit_arr] <= 1e-6).all()
