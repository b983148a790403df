"""Light sources and the scene light registry.

The set of light variants is closed: Directional, Point and Ambient. Each
variant has a Python dataclass used to author scenes, and a ``LightType``
tag stored in a Taichi field for dispatch inside kernels.

- Directional: a direction (normalized when the light is created) and a
  color. No position, no attenuation, infinitely far away.
- Point: a color and attenuation coefficients ``(alpha, beta, gamma)``. Its
  position is not stored on the light: it is the translation of the owning
  scene node's local-to-world matrix, uploaded with ``set_light_transform``.
- Ambient: a color only. Contributes uniformly and is never shadowed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.tracer.lights.light import DirectionalLight, add_light
    >>> idx = add_light(DirectionalLight(direction=(0.0, -1.0, 0.0), color=(1.0, 1.0, 1.0)))
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


class LightType(IntEnum):
    """Enumeration of supported light variants.

    Used for light dispatch in the illumination model and shading evaluator.
    """

    DIRECTIONAL = 0
    POINT = 1
    AMBIENT = 2


@dataclass
class DirectionalLight:
    """A light infinitely far away, shining along ``direction``.

    Attributes:
        direction: Direction the light travels (normalized on creation).
        color: Light color / intensity (RGB).
    """

    direction: tuple[float, float, float]
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        dx, dy, dz = self.direction
        norm = math.sqrt(dx * dx + dy * dy + dz * dz)
        if norm < 1e-12:
            raise ValueError(f"Directional light direction {self.direction} has zero length")
        self.direction = (dx / norm, dy / norm, dz / norm)


@dataclass
class PointLight:
    """A light at the origin of its scene node, with distance falloff.

    Attributes:
        color: Light color / intensity (RGB).
        attenuation: Coefficients (alpha, beta, gamma). Only alpha is used,
            as the inverse-square scale ``1 / (alpha * d^2)``. Must be
            positive; this is not validated.
    """

    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    attenuation: tuple[float, float, float] = (1.0, 0.0, 0.0)


@dataclass
class AmbientLight:
    """Uniform ambient light.

    Attributes:
        color: Ambient color (RGB).
    """

    color: tuple[float, float, float] = (0.1, 0.1, 0.1)


Light = Union[DirectionalLight, PointLight, AmbientLight]


def light_type_of(light: Light) -> LightType:
    """Map a light dataclass to its type tag.

    Raises:
        TypeError: If ``light`` is not one of the three light variants.
    """
    if isinstance(light, DirectionalLight):
        return LightType.DIRECTIONAL
    if isinstance(light, PointLight):
        return LightType.POINT
    if isinstance(light, AmbientLight):
        return LightType.AMBIENT
    raise TypeError(f"Unsupported light type: {type(light).__name__}")


# =============================================================================
# Light Field Storage
# =============================================================================

MAX_LIGHTS = 64

light_types = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_directions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_attenuations = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
# Local-to-world matrix of the light's scene node
light_transforms = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the registry."""
    num_lights[None] = 0


def add_light(light: Light, local_to_world: npt.NDArray[np.floating] | None = None) -> int:
    """Add a light to the registry.

    Args:
        light: A DirectionalLight, PointLight or AmbientLight.
        local_to_world: The 4x4 local-to-world matrix of the light's scene
            node. Defaults to identity (light at the world origin).

    Returns:
        The index of the added light.

    Raises:
        TypeError: If the light is not a supported variant.
        ValueError: If a color component is negative.
        RuntimeError: If the maximum number of lights is exceeded.
    """
    light_type = light_type_of(light)

    for i, component in enumerate(light.color):
        if component < 0.0:
            raise ValueError(f"Light color component {i} = {component} is negative")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    direction = (0.0, 0.0, 0.0)
    attenuation = (0.0, 0.0, 0.0)
    if isinstance(light, DirectionalLight):
        direction = light.direction
    elif isinstance(light, PointLight):
        attenuation = light.attenuation

    light_types[idx] = int(light_type)
    light_colors[idx] = vec3(light.color[0], light.color[1], light.color[2])
    light_directions[idx] = vec3(direction[0], direction[1], direction[2])
    light_attenuations[idx] = vec3(attenuation[0], attenuation[1], attenuation[2])
    num_lights[None] = idx + 1

    set_light_transform(idx, np.eye(4) if local_to_world is None else local_to_world)
    return idx


def set_light_transform(idx: int, local_to_world: npt.NDArray[np.floating]) -> None:
    """Upload the local-to-world matrix of a light's scene node.

    Raises:
        IndexError: If ``idx`` is not a registered light.
        ValueError: If the matrix is not 4x4.
    """
    if not 0 <= idx < num_lights[None]:
        raise IndexError(f"Invalid light index: {idx}")
    matrix = np.asarray(local_to_world, dtype=np.float32)
    if matrix.shape != (4, 4):
        raise ValueError(f"Light transform must be 4x4, got {matrix.shape}")
    light_transforms[idx] = ti.Matrix(matrix.tolist())


def get_light_count_python() -> int:
    """Get the number of lights in the registry (Python side)."""
    return int(num_lights[None])


@ti.func
def get_light_count() -> ti.i32:
    """Get the number of lights (for use in kernels)."""
    return num_lights[None]


@ti.func
def get_light_type(idx: ti.i32) -> ti.i32:
    """Get the LightType tag of a light."""
    return light_types[idx]


@ti.func
def get_light_color(idx: ti.i32) -> vec3:
    """Get the color of a light."""
    return light_colors[idx]


@ti.func
def get_light_direction(idx: ti.i32) -> vec3:
    """Get the (unit) travel direction of a directional light."""
    return light_directions[idx]


@ti.func
def get_light_attenuation(idx: ti.i32) -> vec3:
    """Get the attenuation coefficients of a point light."""
    return light_attenuations[idx]


@ti.func
def get_light_position(idx: ti.i32) -> vec3:
    """World position of a light: translation column of its node matrix."""
    m = light_transforms[idx]
    return vec3(m[0, 3], m[1, 3], m[2, 3])
