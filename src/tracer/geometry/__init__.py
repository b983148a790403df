"""Geometry module for shape primitives.

This module provides geometric primitives and their intersection tests:

Components:
    hit_record: Best-so-far intersection record threaded through tests
    plane: Infinite plane (unit normal + signed offset)
    triangle: Triangle with per-vertex normals (smooth shading)
    sphere: Sphere with robust quadratic root solve

All intersection routines are Taichi functions (@ti.func) operating in the
primitive's own local frame. They share one contract:

    record = hit_shape(ray_origin, ray_direction, shape, t_min, record)

A test only replaces the record when it finds a strictly closer hit with
``t_min <= t < record.time``; "no hit" is a normal result, never an error.
"""

from .hit_record import PARALLEL_EPSILON, HitRecord, carry_record, make_empty_record
from .plane import Plane, hit_plane, normalize_plane_normal
from .sphere import Sphere, hit_sphere
from .triangle import Triangle, flat_normal, hit_triangle, solve_barycentric

__all__ = [
    "HitRecord",
    "PARALLEL_EPSILON",
    "make_empty_record",
    "carry_record",
    "Plane",
    "hit_plane",
    "normalize_plane_normal",
    "Triangle",
    "hit_triangle",
    "solve_barycentric",
    "flat_normal",
    "Sphere",
    "hit_sphere",
]
