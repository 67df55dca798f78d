"""Unit tests for the pinhole camera.

Tests cover:
- Viewport vectors for the default camera
- Parameter validation
- Ray generation through normalized image coordinates
- Pixel sampling with and without jitter
"""

import pytest
import taichi as ti


class TestPinholeCameraConfig:
    """Tests for camera parameters and viewport setup."""

    def test_default_viewport(self):
        """Test the default viewport is 2 units tall at focal length 1."""
        from pinray.camera.pinhole import PinholeCamera

        camera = PinholeCamera(aspect_ratio=16.0 / 9.0)
        viewport = camera.viewport()

        width = 2.0 * 16.0 / 9.0
        assert camera.viewport_width == pytest.approx(width)
        assert viewport.origin == (0.0, 0.0, 0.0)
        assert viewport.horizontal == pytest.approx((width, 0.0, 0.0))
        assert viewport.vertical == pytest.approx((0.0, 2.0, 0.0))
        assert viewport.lower_left_corner == pytest.approx((-width / 2.0, -1.0, -1.0))

    def test_offset_origin(self):
        """Test moving the origin shifts the lower-left corner."""
        from pinray.camera.pinhole import PinholeCamera

        camera = PinholeCamera(aspect_ratio=1.0, focal_length=2.0, origin=(1.0, 2.0, 3.0))
        assert camera.viewport().lower_left_corner == pytest.approx((0.0, 1.0, 1.0))

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"aspect_ratio": 0.0},
            {"aspect_ratio": 1.0, "viewport_height": -2.0},
            {"aspect_ratio": 1.0, "focal_length": 0.0},
        ],
    )
    def test_invalid_parameters(self, kwargs):
        """Test invalid camera parameters raise ValueError."""
        from pinray.camera.pinhole import PinholeCamera

        with pytest.raises(ValueError, match="must be positive"):
            PinholeCamera(**kwargs)

    def test_setup_uploads_viewport(self):
        """Test setup_camera copies the viewport into fields."""
        from pinray.camera.pinhole import PinholeCamera, get_camera_info, setup_camera

        setup_camera(PinholeCamera(aspect_ratio=2.0))
        info = get_camera_info()
        assert info["origin"] == pytest.approx((0.0, 0.0, 0.0))
        assert info["horizontal"] == pytest.approx((4.0, 0.0, 0.0))
        assert info["vertical"] == pytest.approx((0.0, 2.0, 0.0))
        assert info["lower_left"] == pytest.approx((-2.0, -1.0, -1.0))


class TestRayGeneration:
    """Tests for get_ray inside kernels."""

    def test_center_ray_points_down_negative_z(self):
        """Test the center ray looks along -z."""
        from pinray.camera.pinhole import PinholeCamera, get_ray, setup_camera

        setup_camera(PinholeCamera(aspect_ratio=16.0 / 9.0))
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            direction[None] = get_ray(0.5, 0.5).direction

        test_kernel()
        d = direction[None]
        assert (d[0], d[1], d[2]) == pytest.approx((0.0, 0.0, -1.0), abs=1e-6)

    def test_corner_rays_are_unnormalized(self):
        """Test corner rays point at the viewport corners without normalization."""
        from pinray.camera.pinhole import PinholeCamera, get_ray, setup_camera

        setup_camera(PinholeCamera(aspect_ratio=1.0))
        corners = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            corners[0] = get_ray(0.0, 0.0).direction
            corners[1] = get_ray(1.0, 1.0).direction

        test_kernel()
        arr = corners.to_numpy()
        assert tuple(arr[0]) == pytest.approx((-1.0, -1.0, -1.0))
        assert tuple(arr[1]) == pytest.approx((1.0, 1.0, -1.0))

    def test_ray_starts_at_camera_origin(self):
        from pinray.camera.pinhole import PinholeCamera, get_ray, setup_camera

        setup_camera(PinholeCamera(aspect_ratio=1.0, origin=(0.0, 1.0, 5.0)))
        origin = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            origin[None] = get_ray(0.3, 0.7).origin

        test_kernel()
        o = origin[None]
        assert (o[0], o[1], o[2]) == pytest.approx((0.0, 1.0, 5.0))


class TestPixelSampling:
    """Tests for per-pixel primary rays."""

    def test_unjittered_pixel_uses_center(self):
        """Test without jitter the ray goes through the pixel center."""
        from pinray.camera.pinhole import PinholeCamera, get_ray_jittered, setup_camera

        setup_camera(PinholeCamera(aspect_ratio=1.0))
        direction = ti.field(dtype=ti.math.vec3, shape=())
        state_out = ti.field(dtype=ti.u32, shape=())

        @ti.kernel
        def test_kernel():
            ray, state = get_ray_jittered(1, 2, 5, 5, 0, ti.u32(77))
            direction[None] = ray.direction
            state_out[None] = state

        test_kernel()
        d = direction[None]
        # u = 1.5 / 4, v = 2.5 / 4 on a 2x2 viewport centered on the axis
        assert d[0] == pytest.approx(-1.0 + 2.0 * 1.5 / 4.0)
        assert d[1] == pytest.approx(-1.0 + 2.0 * 2.5 / 4.0)
        assert d[2] == pytest.approx(-1.0)
        # No random numbers were drawn
        assert state_out[None] == 77

    def test_jittered_pixel_stays_in_cell(self):
        """Test jittered rays stay inside the pixel's cell."""
        from pinray.camera.pinhole import PinholeCamera, get_ray_jittered, setup_camera
        from pinray.core.rng import seed_sample

        setup_camera(PinholeCamera(aspect_ratio=1.0))
        n = 500
        us = ti.field(dtype=ti.f32, shape=n)
        vs = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                ray, _ = get_ray_jittered(1, 2, 5, 5, 1, seed_sample(ti.u32(0), 0, i))
                us[i] = (ray.direction.x + 1.0) / 2.0 * 4.0
                vs[i] = (ray.direction.y + 1.0) / 2.0 * 4.0

        test_kernel()
        u = us.to_numpy()
        v = vs.to_numpy()
        assert u.min() >= 1.0 - 1e-4 and u.max() <= 2.0 + 1e-4
        assert v.min() >= 2.0 - 1e-4 and v.max() <= 3.0 + 1e-4
        # Offsets actually vary
        assert u.std() > 0.1

    def test_single_pixel_image(self):
        """Test a 1x1 image does not divide by zero."""
        from pinray.camera.pinhole import PinholeCamera, get_ray_jittered, setup_camera

        setup_camera(PinholeCamera(aspect_ratio=1.0))
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray, _ = get_ray_jittered(0, 0, 1, 1, 0, ti.u32(1))
            direction[None] = ray.direction

        test_kernel()
        d = direction[None]
        # Denominator clamps to 1, so the center maps to u = v = 0.5
        assert (d[0], d[1], d[2]) == pytest.approx((0.0, 0.0, -1.0), abs=1e-6)
