"""Render settings and their kernel-visible copies.

``RenderSettings`` is the Python-side configuration of a render. The values
needed inside kernels (shadow toggle, background color) are copied into
Taichi fields by ``apply_settings`` before each render.

Example:
    >>> settings = RenderSettings(width=320, height=240, max_bounces=3)
    >>> settings.to_dict()["max_bounces"]
    3
"""

from dataclasses import asdict, dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Offset applied along secondary rays (shadow and reflection) so they do not
# re-hit the surface they start on
RAY_EPSILON = 1e-3

# Preallocated render target size (avoids kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


@dataclass
class RenderSettings:
    """Parameters of a single render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_bounces: Maximum number of mirror reflections per primary ray.
        shadows_enabled: Whether shadow rays are cast toward lights.
        background_color: Color of rays that miss (when no cube map is set).
    """

    width: int = 512
    height: int = 512
    max_bounces: int = 5
    shadows_enabled: bool = True
    background_color: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        if not 0 < self.width <= MAX_IMAGE_WIDTH or not 0 < self.height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) must be positive and at most "
                f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}"
            )
        if self.max_bounces < 0:
            raise ValueError(f"max_bounces must be non-negative, got {self.max_bounces}")
        if len(self.background_color) != 3:
            raise ValueError("background_color must have 3 components")
        for i, component in enumerate(self.background_color):
            if component < 0.0:
                raise ValueError(f"background_color component {i} = {component} is negative")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        data = asdict(self)
        data["background_color"] = list(self.background_color)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        """Create settings from a dictionary; missing keys use defaults."""
        defaults = cls()
        return cls(
            width=int(data.get("width", defaults.width)),
            height=int(data.get("height", defaults.height)),
            max_bounces=int(data.get("max_bounces", defaults.max_bounces)),
            shadows_enabled=bool(data.get("shadows_enabled", defaults.shadows_enabled)),
            background_color=tuple(data.get("background_color", defaults.background_color)),
        )


# =============================================================================
# Kernel-visible settings
# =============================================================================

_shadows_enabled = ti.field(dtype=ti.i32, shape=())
_background_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def apply_settings(settings: RenderSettings) -> None:
    """Copy the kernel-visible settings into their fields."""
    _shadows_enabled[None] = 1 if settings.shadows_enabled else 0
    color = settings.background_color
    _background_color[None] = vec3(color[0], color[1], color[2])


def reset_settings() -> None:
    """Restore the kernel-visible settings to the defaults."""
    apply_settings(RenderSettings())


@ti.func
def shadows_enabled() -> ti.i32:
    """Whether shadow rays are cast (for use in kernels)."""
    return _shadows_enabled[None]


@ti.func
def get_background_color() -> vec3:
    """Uniform background color (for use in kernels)."""
    return _background_color[None]
