"""Triangle primitive with barycentric ray-triangle intersection.

A triangle stores three vertex positions and three per-vertex normals. The
intersection solves the 3x3 linear system

    origin + t * D = v0 + beta * (v1 - v0) + gamma * (v2 - v0)

which rearranges to ``[-D | e1 | e2] * (t, beta, gamma) = origin - v0``.
The shading normal is the barycentric interpolation of the vertex normals
(smooth shading), not the flat geometric normal.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.tracer.geometry.triangle import Triangle, hit_triangle
    >>> up = ti.math.vec3(0, 0, 1)
    >>> tri = Triangle(
    ...     v0=ti.math.vec3(0, 0, 0), v1=ti.math.vec3(1, 0, 0), v2=ti.math.vec3(0, 1, 0),
    ...     n0=up, n1=up, n2=up,
    ... )
    >>> # Use hit_triangle within a Taichi kernel
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from .hit_record import PARALLEL_EPSILON, HitRecord, carry_record

vec3 = tm.vec3


@ti.dataclass
class Triangle:
    """A triangle with per-vertex normals.

    Attributes:
        v0, v1, v2: Vertex positions (vec3).
        n0, n1, n2: Vertex normals (vec3), interpolated at the hit point.
    """

    v0: vec3
    v1: vec3
    v2: vec3
    n0: vec3
    n1: vec3
    n2: vec3


@ti.func
def solve_barycentric(ray_origin: vec3, ray_direction: vec3, triangle: Triangle):
    """Solve the ray/triangle system with an explicit 3x3 inverse.

    Args:
        ray_origin: The ray origin in triangle space.
        ray_direction: The ray direction in triangle space.
        triangle: The triangle.

    Returns:
        A tuple (solvable, t, beta, gamma). ``solvable`` is 0 when the
        system determinant is below PARALLEL_EPSILON (ray parallel to the
        triangle's plane); the other values are then 0.
    """
    e1 = triangle.v1 - triangle.v0
    e2 = triangle.v2 - triangle.v0

    system = ti.Matrix.cols([-ray_direction, e1, e2])
    rhs = ray_origin - triangle.v0

    solvable = 0
    t = 0.0
    beta = 0.0
    gamma = 0.0

    det = system.determinant()
    if ti.abs(det) >= PARALLEL_EPSILON:
        solution = system.inverse() @ rhs
        t = solution[0]
        beta = solution[1]
        gamma = solution[2]
        solvable = 1

    return solvable, t, beta, gamma


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    triangle: Triangle,
    t_min: ti.f32,
    record: HitRecord,
) -> HitRecord:
    """Test for ray-triangle intersection.

    The hit is inside the triangle iff beta >= 0, gamma >= 0 and
    beta + gamma <= 1. The accepted ``t`` range is the same as the plane's:
    ``t_min <= t < record.time``.

    Args:
        ray_origin: The starting point of the ray in triangle space.
        ray_direction: The direction of the ray in triangle space.
        triangle: The triangle to test.
        t_min: Minimum accepted ray parameter (inclusive).
        record: Best hit so far; only a strictly closer hit replaces it.

    Returns:
        The updated record with the normalized interpolated normal when
        this triangle was recorded.
    """
    result = carry_record(record)

    solvable, t, beta, gamma = solve_barycentric(ray_origin, ray_direction, triangle)

    if solvable == 1:
        inside = beta >= 0.0 and gamma >= 0.0 and (beta + gamma) <= 1.0
        if inside and t >= t_min and t < record.time:
            alpha = 1.0 - beta - gamma
            normal = alpha * triangle.n0 + beta * triangle.n1 + gamma * triangle.n2
            result = HitRecord(hit=1, time=t, normal=tm.normalize(normal))

    return result


def flat_normal(
    v0: tuple[float, float, float],
    v1: tuple[float, float, float],
    v2: tuple[float, float, float],
) -> tuple[float, float, float]:
    """Compute the geometric (counter-clockwise) normal of a triangle.

    Used on the Python side when a mesh is added without vertex normals.

    Raises:
        ValueError: If the triangle is degenerate (zero area).
    """
    a = np.asarray(v0, dtype=np.float64)
    e1 = np.asarray(v1, dtype=np.float64) - a
    e2 = np.asarray(v2, dtype=np.float64) - a
    n = np.cross(e1, e2)
    norm = np.linalg.norm(n)
    if norm < 1e-12:
        raise ValueError(f"Degenerate triangle {v0}, {v1}, {v2} has no normal")
    n = n / norm
    return (float(n[0]), float(n[1]), float(n[2]))
