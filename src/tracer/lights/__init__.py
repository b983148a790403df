"""Lights module: the closed set of light variants and their registry.

Components:
    light: DirectionalLight, PointLight, AmbientLight dataclasses, the
        LightType tag, and Taichi-field storage with kernel accessors
"""

from .light import (
    MAX_LIGHTS,
    AmbientLight,
    DirectionalLight,
    Light,
    LightType,
    PointLight,
    add_light,
    clear_lights,
    get_light_attenuation,
    get_light_color,
    get_light_count,
    get_light_count_python,
    get_light_direction,
    get_light_position,
    get_light_type,
    light_type_of,
    set_light_transform,
)

__all__ = [
    "LightType",
    "Light",
    "DirectionalLight",
    "PointLight",
    "AmbientLight",
    "MAX_LIGHTS",
    "light_type_of",
    "add_light",
    "clear_lights",
    "set_light_transform",
    "get_light_count",
    "get_light_count_python",
    "get_light_type",
    "get_light_color",
    "get_light_direction",
    "get_light_attenuation",
    "get_light_position",
]
