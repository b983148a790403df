"""Illumination model: what a light delivers to a surface point.

For a light and a world-space point, ``get_illumination`` returns the unit
direction from the point toward the light, the light intensity arriving at
the point, and the distance to the light:

- Directional: direction is the reverse of the light's travel direction,
  intensity is the light color, distance is T_MAX (infinitely far).
- Point: the light sits at the translation of its node's local-to-world
  matrix. Intensity falls off as ``color / (alpha * d^2)`` where alpha is the
  first attenuation coefficient. A zero alpha yields non-finite values; it is
  not validated.

Ambient lights have no direction and are handled by the shading evaluator
directly; they must not be passed here. Any other type tag is a fatal error:
the kernel raises a device-side flag and the Python entry point that
launched it raises ``IlluminationError`` via ``check_illumination_error``.

Example:
    >>> @ti.kernel
    ... def probe() -> ti.f32:
    ...     direction, intensity, distance = get_illumination(0, ti.math.vec3(0.0))
    ...     return distance
"""

import taichi as ti
import taichi.math as tm

from src.tracer.core.ray import T_MAX
from src.tracer.lights.light import (
    LightType,
    get_light_attenuation,
    get_light_color,
    get_light_direction,
    get_light_position,
    get_light_type,
)

vec3 = tm.vec3


class IlluminationError(RuntimeError):
    """Raised when a light of an unrecognized type reaches the illumination model."""


# Set to 1 by a kernel that met an unrecognized light type
_illumination_error = ti.field(dtype=ti.i32, shape=())


def clear_illumination_error() -> None:
    """Reset the device-side error flag."""
    _illumination_error[None] = 0


def check_illumination_error() -> None:
    """Raise if a kernel reported an unrecognized light type.

    The flag is cleared before raising so that a later render starts clean.

    Raises:
        IlluminationError: If the flag is set.
    """
    if _illumination_error[None] != 0:
        _illumination_error[None] = 0
        raise IlluminationError("Unrecognized light type when computing illumination")


@ti.func
def get_illumination(light_index: ti.i32, hit_point: vec3):
    """Evaluate one directional or point light at a world-space point.

    Args:
        light_index: Index of the light in the light registry.
        hit_point: World-space point being lit.

    Returns:
        A tuple (direction_to_light, intensity, distance). For an
        unrecognized light type the error flag is set and zeros are returned.
    """
    light_type = get_light_type(light_index)
    color = get_light_color(light_index)

    direction_to_light = vec3(0.0, 0.0, 0.0)
    intensity = vec3(0.0, 0.0, 0.0)
    distance = 0.0

    if light_type == int(LightType.DIRECTIONAL):
        direction_to_light = -get_light_direction(light_index)
        intensity = color
        distance = T_MAX

    elif light_type == int(LightType.POINT):
        to_light = get_light_position(light_index) - hit_point
        distance = tm.length(to_light)
        direction_to_light = to_light / distance
        alpha = get_light_attenuation(light_index).x
        intensity = color / (alpha * distance * distance)

    else:
        _illumination_error[None] = 1

    return direction_to_light, intensity, distance
