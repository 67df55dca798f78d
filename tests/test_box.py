"""Unit tests for axis-aligned box intersection."""

import pytest
import taichi as ti


def _cast_at_box(lo, hi, origin, direction, t_min=0.001, t_max=1000.0):
    from pinray.geometry.box import Box, hit_box, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(a: vec3, b: vec3, o: vec3, d: vec3, t0: ti.f32, t1: ti.f32):
        record = hit_box(o, d, Box(minimum=a, maximum=b), t0, t1)
        hit[None] = record.hit
        t_val[None] = record.t
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel(vec3(*lo), vec3(*hi), vec3(*origin), vec3(*direction), t_min, t_max)
    n = normal[None]
    return {
        "hit": hit[None],
        "t": t_val[None],
        "normal": (n[0], n[1], n[2]),
        "front_face": front_face[None],
    }


class TestBoxIntersection:
    """Tests for ray-box intersection."""

    def test_make_box(self):
        """Test make_box stores both corners."""
        from pinray.geometry.box import make_box, vec3

        lo = ti.field(dtype=ti.math.vec3, shape=())
        hi = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            box = make_box(vec3(-1.0, 0.0, -3.0), vec3(1.0, 2.0, -2.0))
            lo[None] = box.minimum
            hi[None] = box.maximum

        test_kernel()
        assert (lo[None][0], lo[None][1], lo[None][2]) == pytest.approx((-1.0, 0.0, -3.0))
        assert (hi[None][0], hi[None][1], hi[None][2]) == pytest.approx((1.0, 2.0, -2.0))

    def test_hits_near_face(self):
        """Test ray from the front hitting the nearest face."""
        rec = _cast_at_box((-1.0, -1.0, -3.0), (1.0, 1.0, -2.0), (0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(2.0, abs=1e-5)
        # Max-z face has outward normal +z
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)
        assert rec["front_face"] == 1

    def test_hits_top_face_from_above(self):
        """Test ray from above hitting the top face with an upward normal."""
        rec = _cast_at_box((-1.0, -1.0, -3.0), (1.0, 1.0, -2.0), (0.0, 5.0, -2.5), (0.0, -1.0, 0.0))
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(4.0, abs=1e-5)
        assert rec["normal"] == pytest.approx((0.0, 1.0, 0.0), abs=1e-6)

    def test_hits_side_face(self):
        """Test ray from the side hitting the -x face."""
        rec = _cast_at_box((-1.0, -1.0, -3.0), (1.0, 1.0, -2.0), (-4.0, 0.0, -2.5), (1.0, 0.0, 0.0))
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(3.0, abs=1e-5)
        assert rec["normal"] == pytest.approx((-1.0, 0.0, 0.0), abs=1e-6)
        assert rec["front_face"] == 1

    def test_from_inside_hits_far_face_as_back_face(self):
        """Test ray starting inside the box reports a back-face hit."""
        rec = _cast_at_box((-1.0, -1.0, -3.0), (1.0, 1.0, -2.0), (0.0, 0.0, -2.5), (0.0, 0.0, -1.0))
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(0.5, abs=1e-5)
        assert rec["front_face"] == 0
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)

    def test_miss_beside_box(self):
        """Test ray passing beside the box misses."""
        rec = _cast_at_box((-1.0, -1.0, -3.0), (1.0, 1.0, -2.0), (2.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 0

    def test_box_beyond_t_max(self):
        """Test box farther than t_max is not reported."""
        rec = _cast_at_box(
            (-1.0, -1.0, -3.0), (1.0, 1.0, -2.0), (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=1.0
        )
        assert rec["hit"] == 0
