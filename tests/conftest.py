"""Pytest configuration for raytracer tests.

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
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before each test.

    Resets entities, materials, lights, the environment map, the
    kernel-visible settings, the camera t_min and the render target so
    that tests are isolated from each other.
    """
    # Import here to avoid circular imports and ensure Taichi is initialized
    from src.tracer.camera.pinhole import PinholeCamera, setup_camera
    from src.tracer.core.illumination import clear_illumination_error
    from src.tracer.core.settings import reset_settings
    from src.tracer.core.tracer import clear_render_target, reset_render_target
    from src.tracer.lights.light import clear_lights
    from src.tracer.materials.phong import clear_phong_materials
    from src.tracer.scene.environment import clear_environment
    from src.tracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_phong_materials()
        clear_lights()
        clear_environment()
        clear_illumination_error()
        reset_settings()
        clear_render_target()
        reset_render_target()
        setup_camera(PinholeCamera(lookfrom=(0.0, 0.0, 1.0), lookat=(0.0, 0.0, 0.0)))

    # Clear everything before test
    _clear_all()

    yield

    # Clear everything after test
    _clear_all()
