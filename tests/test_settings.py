"""Unit tests for render settings.

Tests cover:
- Defaults and validation
- Dictionary round trips
- Kernel-visible copies of the shadow toggle and background color
"""

import pytest
import taichi as ti


class TestRenderSettings:
    """Tests for the RenderSettings dataclass."""

    def test_defaults(self):
        """Test default values."""
        from src.tracer.core.settings import RenderSettings

        settings = RenderSettings()
        assert (settings.width, settings.height) == (512, 512)
        assert settings.max_bounces == 5
        assert settings.shadows_enabled is True
        assert settings.background_color == (0.0, 0.0, 0.0)
        assert settings.aspect_ratio == 1.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"height": -5},
            {"width": 4096},
            {"max_bounces": -1},
            {"background_color": (0.0, -0.5, 0.0)},
            {"background_color": (0.0, 0.0)},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        """Test invalid settings are rejected on construction."""
        from src.tracer.core.settings import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**kwargs)

    def test_dict_round_trip(self):
        """Test to_dict/from_dict preserve every field."""
        from src.tracer.core.settings import RenderSettings

        settings = RenderSettings(
            width=320,
            height=200,
            max_bounces=0,
            shadows_enabled=False,
            background_color=(0.1, 0.2, 0.3),
        )
        assert RenderSettings.from_dict(settings.to_dict()) == settings

    def test_from_dict_uses_defaults(self):
        """Test missing keys fall back to defaults."""
        from src.tracer.core.settings import RenderSettings

        assert RenderSettings.from_dict({"width": 64}) == RenderSettings(width=64)


class TestKernelSettings:
    """Tests for apply_settings and the kernel accessors."""

    def test_apply_settings(self):
        """Test kernels see the applied shadow toggle and background."""
        from src.tracer.core.settings import (
            RenderSettings,
            apply_settings,
            get_background_color,
            shadows_enabled,
        )

        shadows = ti.field(dtype=ti.i32, shape=())
        background = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            shadows[None] = shadows_enabled()
            background[None] = get_background_color()

        apply_settings(RenderSettings(shadows_enabled=False, background_color=(0.5, 0.25, 1.0)))
        test_kernel()
        assert shadows[None] == 0
        assert background[None].to_numpy().tolist() == pytest.approx([0.5, 0.25, 1.0])

    def test_reset_settings(self):
        """Test reset restores shadows and a black background."""
        from src.tracer.core.settings import (
            RenderSettings,
            apply_settings,
            get_background_color,
            reset_settings,
            shadows_enabled,
        )

        shadows = ti.field(dtype=ti.i32, shape=())
        background = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            shadows[None] = shadows_enabled()
            background[None] = get_background_color()

        apply_settings(RenderSettings(shadows_enabled=False, background_color=(1.0, 1.0, 1.0)))
        reset_settings()
        test_kernel()
        assert shadows[None] == 1
        assert background[None].to_numpy().tolist() == pytest.approx([0.0, 0.0, 0.0])
