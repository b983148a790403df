"""Core rendering module.

This module contains the fundamental building blocks of the ray tracer:

Components:
    ray: Ray data structure, vector utilities and affine ray transforms
    settings: RenderSettings and their kernel-visible copies
    illumination: Per-light direction, intensity and distance at a point
    shading: Phong shading evaluator with shadow rays
    tracer: Recursive (Whitted-style) ray tracing driver and render target
    renderer: Python-side render orchestration

Per-ray work runs inside Taichi kernels: the closest hit is searched over
every entity in its own local space, shaded with the Phong model, and
mirror reflections are followed up to a fixed bounce budget.
"""

from .ray import (
    T_MAX,
    Ray,
    dot,
    make_ray,
    mean_component,
    normalize,
    ray_at,
    reflect,
    transform_normal,
    transform_point,
    transform_ray,
    transform_vector,
    vec3,
)
from .settings import RenderSettings

# Note: illumination, shading, tracer and renderer are NOT imported here to
# avoid circular imports with the scene and camera packages. Import them
# directly, e.g.:
#   from src.tracer.core.renderer import Renderer

__all__ = [
    "Ray",
    "T_MAX",
    "ray_at",
    "make_ray",
    "vec3",
    "normalize",
    "dot",
    "reflect",
    "mean_component",
    "transform_point",
    "transform_vector",
    "transform_ray",
    "transform_normal",
    "RenderSettings",
]
