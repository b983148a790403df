"""Unit tests for the recursive tracing driver and render target.

Tests cover:
- Magenta for entities without a material
- Background color and cube map on a miss
- Bounce budget (no reflection at zero, never more than the budget)
- Mirror reflection weighting
- Fatal unrecognized light types
- Clamping, idempotence and render target errors
"""

import numpy as np
import pytest


def _sphere_entity(center, radius, material_id, local_to_world=None):
    from src.tracer.scene.intersection import PrimitiveType, add_entity, add_sphere

    idx = add_sphere(center, radius)
    return add_entity(PrimitiveType.SPHERE, idx, material_id, np.eye(4) if local_to_world is None else local_to_world)


def _plane_entity(normal, offset, material_id):
    from src.tracer.scene.intersection import PrimitiveType, add_entity, add_plane

    idx = add_plane(normal, offset)
    return add_entity(PrimitiveType.PLANE, idx, material_id, np.eye(4))


class TestTraceRay:
    """Tests for tracing single rays."""

    def test_missing_material_is_magenta(self):
        """Test an entity without material renders magenta regardless of lights."""
        from src.tracer.core.tracer import trace_single_ray
        from src.tracer.lights.light import AmbientLight, add_light

        add_light(AmbientLight(color=(1.0, 1.0, 1.0)))
        _sphere_entity((0.0, 0.0, -3.0), 1.0, -1)

        color, depth = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_bounces=3)
        assert color == pytest.approx((1.0, 0.0, 1.0))
        assert depth == 0

    def test_miss_returns_background_color(self):
        """Test a ray into empty space returns the configured background."""
        from src.tracer.core.settings import RenderSettings, apply_settings
        from src.tracer.core.tracer import trace_single_ray

        apply_settings(RenderSettings(background_color=(0.2, 0.3, 0.4)))
        color, depth = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert color == pytest.approx((0.2, 0.3, 0.4))
        assert depth == 0

    def test_miss_uses_cube_map_when_set(self):
        """Test a configured cube map replaces the background color."""
        from src.tracer.core.settings import RenderSettings, apply_settings
        from src.tracer.core.tracer import trace_single_ray
        from src.tracer.scene.environment import set_cube_map

        apply_settings(RenderSettings(background_color=(0.2, 0.3, 0.4)))
        faces = np.zeros((6, 4, 4, 3), dtype=np.float32)
        faces[5] = (0.9, 0.1, 0.1)
        set_cube_map(faces)

        color, _ = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert color == pytest.approx((0.9, 0.1, 0.1))

    def test_zero_bounces_does_not_reflect(self):
        """Test a mirror is shaded locally only when the budget is zero."""
        from src.tracer.core.settings import RenderSettings, apply_settings
        from src.tracer.core.tracer import trace_single_ray
        from src.tracer.materials.phong import add_phong_material

        apply_settings(RenderSettings(background_color=(0.5, 0.5, 0.5)))
        mirror = add_phong_material((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 10.0)
        _sphere_entity((0.0, 0.0, -3.0), 1.0, mirror)

        color, depth = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_bounces=0)
        assert depth == 0
        assert color == pytest.approx((0.0, 0.0, 0.0))

    def test_single_bounce_picks_up_background(self):
        """Test one reflection adds specular-weighted background."""
        from src.tracer.core.settings import RenderSettings, apply_settings
        from src.tracer.core.tracer import trace_single_ray
        from src.tracer.materials.phong import add_phong_material

        apply_settings(RenderSettings(background_color=(0.5, 0.5, 0.5)))
        mirror = add_phong_material((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.8, 0.4, 0.2), 10.0)
        _sphere_entity((0.0, 0.0, -3.0), 1.0, mirror)

        color, depth = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_bounces=4)
        assert depth == 1
        assert color == pytest.approx((0.4, 0.2, 0.1), abs=1e-5)

    def test_dull_surface_does_not_reflect(self):
        """Test materials with negligible specular stop the recursion."""
        from src.tracer.core.tracer import trace_single_ray
        from src.tracer.materials.phong import add_phong_material

        dull = add_phong_material((0.0, 0.0, 0.0), (0.5, 0.5, 0.5), (0.005, 0.005, 0.005), 10.0)
        _sphere_entity((0.0, 0.0, -3.0), 1.0, dull)

        _, depth = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_bounces=4)
        assert depth == 0

    def test_parallel_mirrors_stop_at_budget(self):
        """Test a ray between two facing mirrors bounces exactly max_bounces times."""
        from src.tracer.core.tracer import trace_single_ray
        from src.tracer.materials.phong import add_phong_material

        mirror = add_phong_material((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.9, 0.9, 0.9), 10.0)
        _plane_entity((0.0, 0.0, 1.0), -1.0, mirror)
        _plane_entity((0.0, 0.0, -1.0), -1.0, mirror)

        for budget in (1, 3, 7):
            _, depth = trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_bounces=budget)
            assert depth == budget

    def test_unknown_light_type_raises(self):
        """Test shading with an unrecognized light type is fatal."""
        from src.tracer.core.illumination import IlluminationError
        from src.tracer.core.tracer import trace_single_ray
        from src.tracer.lights.light import PointLight, add_light, light_types
        from src.tracer.materials.phong import add_phong_material

        material = add_phong_material((0.1, 0.1, 0.1), (0.5, 0.5, 0.5), (0.0, 0.0, 0.0), 1.0)
        _sphere_entity((0.0, 0.0, -3.0), 1.0, material)
        idx = add_light(PointLight())
        light_types[idx] = 9

        with pytest.raises(IlluminationError):
            trace_single_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

    def test_zero_attenuation_color_is_not_finite(self):
        """Test a point light with alpha = 0 yields a non-finite color."""
        from src.tracer.core.tracer import trace_single_ray
        from src.tracer.lights.light import PointLight, add_light
        from src.tracer.materials.phong import add_phong_material

        material = add_phong_material((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (0.5, 0.5, 0.5), 1.0)
        _plane_entity((0.0, 1.0, 0.0), 0.0, material)
        m = np.eye(4)
        m[:3, 3] = (0.0, 4.0, 0.0)
        add_light(PointLight(attenuation=(0.0, 0.0, 0.0)), m)

        color, depth = trace_single_ray((0.0, 1.0, 0.0), (0.0, -1.0, 0.0), max_bounces=0)
        assert not np.any(np.isfinite(color))
        assert depth == 0


class TestRenderImage:
    """Tests for full-image rendering through the Renderer."""

    def test_mirror_box_depth_equals_budget(self):
        """Test every pixel in a closed mirror box uses exactly the bounce budget."""
        from src.tracer.core.renderer import Renderer
        from src.tracer.core.settings import RenderSettings
        from src.tracer.scene.demo_scenes import create_mirror_box_scene

        scene, camera = create_mirror_box_scene()
        for budget in (0, 2, 5):
            renderer = Renderer(RenderSettings(width=16, height=16, max_bounces=budget))
            renderer.render(scene, camera)
            counts = renderer.get_bounce_counts()
            assert counts.shape == (16, 16)
            assert counts.max() <= budget
            assert np.all(counts == budget)

    def test_render_is_idempotent(self):
        """Test rendering the same scene twice gives identical images."""
        from src.tracer.core.renderer import Renderer
        from src.tracer.core.settings import RenderSettings
        from src.tracer.scene.demo_scenes import create_showcase_scene

        scene, camera = create_showcase_scene(aspect_ratio=1.0)
        renderer = Renderer(RenderSettings(width=24, height=24, max_bounces=3))
        first = renderer.render(scene, camera).copy()
        second = renderer.render(scene, camera)
        np.testing.assert_array_equal(first, second)

    def test_pixels_are_clamped(self):
        """Test overexposed pixels are clamped to [0, 1]."""
        from src.tracer.camera.pinhole import PinholeCamera
        from src.tracer.core.renderer import Renderer
        from src.tracer.core.settings import RenderSettings
        from src.tracer.lights.light import DirectionalLight
        from src.tracer.scene.manager import SceneManager

        scene = SceneManager()
        material = scene.add_material(diffuse=(1.0, 1.0, 1.0))
        scene.add_plane((0.0, 1.0, 0.0), 0.0, material_id=material)
        scene.add_light(DirectionalLight(direction=(0.0, -1.0, 0.0), color=(50.0, 50.0, 50.0)))
        camera = PinholeCamera(lookfrom=(0.0, 3.0, 3.0), lookat=(0.0, 0.0, 0.0), vfov=40.0)

        image = Renderer(RenderSettings(width=8, height=8)).render(scene, camera)
        assert image.min() >= 0.0
        assert image.max() <= 1.0
        np.testing.assert_allclose(image, 1.0)

    def test_zero_attenuation_pixels_are_clamped(self):
        """Test non-finite light from alpha = 0 is still clamped to [0, 1]."""
        from src.tracer.camera.pinhole import PinholeCamera, setup_camera
        from src.tracer.core.tracer import get_image_numpy, render_image, setup_render_target
        from src.tracer.lights.light import PointLight, add_light
        from src.tracer.materials.phong import add_phong_material

        material = add_phong_material((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (0.5, 0.5, 0.5), 1.0)
        _plane_entity((0.0, 1.0, 0.0), 0.0, material)
        m = np.eye(4)
        m[:3, 3] = (0.0, 4.0, 0.0)
        add_light(PointLight(attenuation=(0.0, 0.0, 0.0)), m)

        setup_camera(PinholeCamera(lookfrom=(0.0, 2.0, 0.0), lookat=(0.0, 0.0, 0.0), vup=(0.0, 0.0, -1.0), vfov=40.0))
        setup_render_target(8, 8)
        render_image(max_bounces=0)
        image = get_image_numpy()

        assert np.all(np.isfinite(image))
        np.testing.assert_allclose(image, 1.0)

    def test_unknown_light_clears_image(self):
        """Test a fatal illumination error leaves no partial image."""
        from src.tracer.camera.pinhole import PinholeCamera, setup_camera
        from src.tracer.core.illumination import IlluminationError
        from src.tracer.core.tracer import get_image_numpy, render_image, setup_render_target
        from src.tracer.lights.light import PointLight, add_light, light_types
        from src.tracer.materials.phong import add_phong_material

        material = add_phong_material((1.0, 1.0, 1.0), (0.5, 0.5, 0.5), (0.0, 0.0, 0.0), 1.0)
        _plane_entity((0.0, 0.0, 1.0), -2.0, material)
        idx = add_light(PointLight())
        light_types[idx] = 5

        setup_camera(PinholeCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0)))
        setup_render_target(8, 8)
        with pytest.raises(IlluminationError):
            render_image(max_bounces=1)
        assert np.all(get_image_numpy() == 0.0)

    def test_render_without_target_raises(self):
        """Test rendering before the render target exists is an error."""
        from src.tracer.core.tracer import render_image

        with pytest.raises(RuntimeError, match="not set up"):
            render_image(max_bounces=1)

    def test_negative_bounces_raises(self):
        """Test a negative bounce budget is rejected."""
        from src.tracer.core.tracer import render_image, setup_render_target

        setup_render_target(4, 4)
        with pytest.raises(ValueError):
            render_image(max_bounces=-1)

    def test_invalid_target_size_raises(self):
        """Test oversized render targets are rejected."""
        from src.tracer.core.settings import MAX_IMAGE_WIDTH
        from src.tracer.core.tracer import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(MAX_IMAGE_WIDTH + 1, 4)

    def test_image_orientation(self):
        """Test the first image row is the top of the view."""
        from src.tracer.camera.pinhole import PinholeCamera, setup_camera
        from src.tracer.core.settings import RenderSettings, apply_settings
        from src.tracer.core.tracer import get_image_numpy, render_image, setup_render_target
        from src.tracer.lights.light import AmbientLight, add_light
        from src.tracer.materials.phong import add_phong_material

        # Red floor below the horizon, black sky above
        apply_settings(RenderSettings(background_color=(0.0, 0.0, 0.0)))
        red = add_phong_material((1.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0, 0.0), 1.0)
        _plane_entity((0.0, 1.0, 0.0), -1.0, red)
        add_light(AmbientLight(color=(1.0, 1.0, 1.0)))

        setup_camera(PinholeCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, -1.0), vfov=90.0))
        setup_render_target(8, 8)
        render_image(max_bounces=0)
        image = get_image_numpy()

        assert image.shape == (8, 8, 3)
        assert image[0, 4, 0] == pytest.approx(0.0)
        assert image[7, 4, 0] == pytest.approx(1.0)
