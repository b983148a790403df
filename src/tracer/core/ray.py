"""Ray data structure, vector utilities and affine ray transforms.

This module provides the fundamental Ray dataclass and the small set of
vector helpers used by the intersection tests, the shading evaluator and the
recursive tracer. All operations are designed to work within Taichi kernels.

Rays are re-expressed in another coordinate space with a 4x4 affine matrix:
the origin is transformed as a point (w = 1) and the direction as a vector
(w = 0). The direction is deliberately not renormalized, so a ray parameter
``t`` names the same physical point in both spaces.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3
vec4 = tm.vec4
mat4 = tm.mat4
mat3 = tm.mat3

# Largest finite float32, used as "no hit yet" and as the distance to a
# directional light.
T_MAX = 3.4028234e38


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length; algorithms that need a unit direction normalize it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    The normal should be unit length for correct results.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector, incident - 2 * dot(incident, n) * n.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def mean_component(v: vec3) -> ti.f32:
    """Average of the three components of a color or vector."""
    return (v.x + v.y + v.z) / 3.0


# =============================================================================
# Affine Transforms
# =============================================================================


@ti.func
def transform_point(matrix: mat4, point: vec3) -> vec3:
    """Apply an affine 4x4 transform to a point (w = 1).

    The result is divided by the homogeneous coordinate, which is 1 for
    every affine matrix produced by the scene graph.

    Args:
        matrix: The 4x4 transform.
        point: The point to transform.

    Returns:
        The transformed point.
    """
    p = matrix @ vec4(point.x, point.y, point.z, 1.0)
    return vec3(p[0], p[1], p[2]) / p[3]


@ti.func
def transform_vector(matrix: mat4, v: vec3) -> vec3:
    """Apply the linear part of a 4x4 transform to a direction (w = 0)."""
    p = matrix @ vec4(v.x, v.y, v.z, 0.0)
    return vec3(p[0], p[1], p[2])


@ti.func
def transform_ray(matrix: mat4, origin: vec3, direction: vec3) -> Ray:
    """Re-express a ray in another coordinate space.

    The direction is not renormalized so that the ray parameter is shared
    between the source and target spaces.

    Args:
        matrix: The 4x4 transform from the ray's space to the target space.
        origin: The ray origin in the source space.
        direction: The ray direction in the source space.

    Returns:
        The transformed ray.
    """
    return Ray(
        origin=transform_point(matrix, origin),
        direction=transform_vector(matrix, direction),
    )


@ti.func
def transform_normal(normal_matrix: mat3, normal: vec3) -> vec3:
    """Transform a surface normal with a precomputed normal matrix.

    Args:
        normal_matrix: Inverse-transpose of the upper 3x3 of the
            local-to-world matrix (correct under non-uniform scale).
        normal: The local-space normal.

    Returns:
        The unit-length world-space normal.
    """
    return tm.normalize(normal_matrix @ normal)
