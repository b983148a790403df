"""Infinite plane primitive with ray-plane intersection.

A plane is the set of points ``x`` with ``dot(x, normal) = d`` in the
plane's own local frame. The normal is normalized when the plane is created
on the Python side and is reported exactly as stored: it is never flipped to
face the incoming ray, so a plane seen from behind shades with its authored
normal.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.tracer.geometry.plane import Plane, hit_plane
    >>> # Ground plane y = 0
    >>> plane = Plane(normal=ti.math.vec3(0, 1, 0), offset=0.0)
    >>> # Use hit_plane within a Taichi kernel
"""

import math

import taichi as ti
import taichi.math as tm

from .hit_record import PARALLEL_EPSILON, HitRecord, carry_record

vec3 = tm.vec3


@ti.dataclass
class Plane:
    """A plane defined by a unit normal and a signed offset along it.

    Attributes:
        normal: Unit normal of the plane (vec3).
        offset: Signed distance ``d`` of the plane from the origin along
            the normal.
    """

    normal: vec3
    offset: ti.f32


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    record: HitRecord,
) -> HitRecord:
    """Test for ray-plane intersection.

    Solves ``dot(origin + t * direction, normal) = d`` for ``t``. A ray whose
    direction is within PARALLEL_EPSILON of the plane is treated as parallel
    and never hits.

    Args:
        ray_origin: The starting point of the ray in plane space.
        ray_direction: The direction of the ray in plane space.
        plane: The plane to test.
        t_min: Minimum accepted ray parameter (inclusive).
        record: Best hit so far; only a strictly closer hit replaces it.

    Returns:
        The updated record. ``hit`` is 1 only if this plane was recorded.
    """
    result = carry_record(record)

    denom = tm.dot(ray_direction, plane.normal)

    if ti.abs(denom) >= PARALLEL_EPSILON:
        t = (plane.offset - tm.dot(ray_origin, plane.normal)) / denom
        if t >= t_min and t < record.time:
            result = HitRecord(hit=1, time=t, normal=plane.normal)

    return result


def normalize_plane_normal(normal: tuple[float, float, float]) -> tuple[float, float, float]:
    """Normalize a plane normal on the Python side.

    Args:
        normal: The authored plane normal.

    Returns:
        The unit-length normal.

    Raises:
        ValueError: If the normal has (near) zero length.
    """
    norm = math.sqrt(normal[0] ** 2 + normal[1] ** 2 + normal[2] ** 2)
    if norm < 1e-12:
        raise ValueError(f"Plane normal {normal} has zero length")
    return (normal[0] / norm, normal[1] / norm, normal[2] / norm)
