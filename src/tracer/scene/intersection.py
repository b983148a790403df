"""Scene-level closest-hit and occlusion queries across transformed entities.

The scene is a flat list of entities. Each entity owns one primitive
(plane, triangle or sphere) described in its own local frame, an optional
material, and the matrices of its scene node:

- ``entity_local_to_world``: maps local hits back to world space
- ``entity_world_to_local``: its inverse, maps world rays into local space
- ``entity_normal_matrices``: inverse-transpose of the upper 3x3 of
  local-to-world, maps local normals to world normals

A closest-hit search transforms the world ray into every entity's local
space and runs that entity's primitive test there. Ray parameters are not
comparable between differently scaled spaces, so candidates are ranked by
the world-space distance from the ray origin to the hit point, recomputed
for every candidate. Search is brute force over all entities.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> import numpy as np
    >>> from src.tracer.scene.intersection import (
    ...     PrimitiveType, add_plane, add_entity, clear_scene
    ... )
    >>> clear_scene()
    >>> plane = add_plane((0.0, 1.0, 0.0), 0.0)
    >>> add_entity(PrimitiveType.PLANE, plane, material_id=-1, local_to_world=np.eye(4))
    >>> # Use intersect_scene within a Taichi kernel
"""

from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.tracer.core.ray import T_MAX, transform_normal, transform_point, transform_ray
from src.tracer.geometry.hit_record import HitRecord, make_empty_record
from src.tracer.geometry.plane import Plane, hit_plane, normalize_plane_normal
from src.tracer.geometry.sphere import Sphere, hit_sphere
from src.tracer.geometry.triangle import Triangle, hit_triangle

vec3 = tm.vec3

# Material id stored for entities without a material
NO_MATERIAL = -1


class PrimitiveType(IntEnum):
    """Enumeration of primitive variants, used for intersection dispatch."""

    PLANE = 0
    TRIANGLE = 1
    SPHERE = 2


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection in world space.

    Attributes:
        hit: Whether the ray intersected any entity (1 if hit, 0 if miss).
        distance: World-space distance from the ray origin to the hit point.
        point: World-space hit point.
        normal: World-space unit normal (not flipped toward the ray).
        entity: Index of the winning entity, -1 on a miss.
        material_id: Material of the winning entity; NO_MATERIAL if it has
            none or on a miss.
    """

    hit: ti.i32
    distance: ti.f32
    point: vec3
    normal: vec3
    entity: ti.i32
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_PLANES = 256
MAX_TRIANGLES = 4096
MAX_SPHERES = 256
MAX_ENTITIES = MAX_PLANES + MAX_TRIANGLES + MAX_SPHERES

# Plane storage
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_offsets = ti.field(dtype=ti.f32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())

# Triangle storage: Structure of Arrays layout
triangle_v0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_n0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_n1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_n2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
num_triangles = ti.field(dtype=ti.i32, shape=())

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Entity storage
entity_primitive_types = ti.field(dtype=ti.i32, shape=MAX_ENTITIES)
entity_primitive_indices = ti.field(dtype=ti.i32, shape=MAX_ENTITIES)
entity_material_ids = ti.field(dtype=ti.i32, shape=MAX_ENTITIES)
entity_local_to_world = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_ENTITIES)
entity_world_to_local = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_ENTITIES)
entity_normal_matrices = ti.Matrix.field(3, 3, dtype=ti.f32, shape=MAX_ENTITIES)
num_entities = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives and entities from the scene.

    Resets the counts to zero. The field data is overwritten when new
    primitives are added.
    """
    num_planes[None] = 0
    num_triangles[None] = 0
    num_spheres[None] = 0
    num_entities[None] = 0


def _vec(values: tuple[float, float, float]) -> vec3:
    return vec3(values[0], values[1], values[2])


def add_plane(normal: tuple[float, float, float], offset: float) -> int:
    """Add a plane primitive.

    Args:
        normal: The plane normal (normalized here).
        offset: Signed offset ``d`` in ``dot(x, normal) = d``, measured
            along the normalized normal.

    Returns:
        The index of the added plane.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
        ValueError: If the normal has zero length.
    """
    unit_normal = normalize_plane_normal(normal)
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_normals[idx] = _vec(unit_normal)
    plane_offsets[idx] = offset
    num_planes[None] = idx + 1
    return idx


def add_triangle(
    positions: tuple[tuple[float, float, float], ...],
    normals: tuple[tuple[float, float, float], ...],
) -> int:
    """Add a triangle primitive.

    Args:
        positions: The three vertex positions.
        normals: The three vertex normals.

    Returns:
        The index of the added triangle.

    Raises:
        RuntimeError: If the maximum number of triangles is exceeded.
        ValueError: If positions or normals do not contain three vectors.
    """
    if len(positions) != 3 or len(normals) != 3:
        raise ValueError("A triangle needs exactly three positions and three normals")
    idx = num_triangles[None]
    if idx >= MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    triangle_v0[idx] = _vec(positions[0])
    triangle_v1[idx] = _vec(positions[1])
    triangle_v2[idx] = _vec(positions[2])
    triangle_n0[idx] = _vec(normals[0])
    triangle_n1[idx] = _vec(normals[1])
    triangle_n2[idx] = _vec(normals[2])
    num_triangles[None] = idx + 1
    return idx


def add_sphere(center: tuple[float, float, float], radius: float) -> int:
    """Add a sphere primitive.

    Args:
        center: The center of the sphere in its local frame.
        radius: The radius (must be positive).

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
        ValueError: If the radius is not positive.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = _vec(center)
    sphere_radii[idx] = radius
    num_spheres[None] = idx + 1
    return idx


def add_entity(
    primitive_type: PrimitiveType,
    primitive_index: int,
    material_id: int,
    local_to_world: npt.NDArray[np.floating],
) -> int:
    """Add a renderable entity referencing an existing primitive.

    Args:
        primitive_type: The kind of primitive.
        primitive_index: Index returned by add_plane/add_triangle/add_sphere.
        material_id: Material index, or NO_MATERIAL.
        local_to_world: 4x4 local-to-world matrix of the entity's node.

    Returns:
        The index of the added entity.

    Raises:
        RuntimeError: If the maximum number of entities is exceeded.
        numpy.linalg.LinAlgError: If the transform is singular.
    """
    idx = num_entities[None]
    if idx >= MAX_ENTITIES:
        raise RuntimeError(f"Maximum number of entities ({MAX_ENTITIES}) exceeded")
    entity_primitive_types[idx] = int(primitive_type)
    entity_primitive_indices[idx] = primitive_index
    entity_material_ids[idx] = material_id
    num_entities[None] = idx + 1
    set_entity_transform(idx, local_to_world)
    return idx


def set_entity_transform(idx: int, local_to_world: npt.NDArray[np.floating]) -> None:
    """Upload the transform matrices derived from an entity's node.

    World-to-local is the inverse of local-to-world, and the normal matrix is
    the inverse-transpose of its upper 3x3, both computed in float64 before
    being stored as float32.

    Raises:
        IndexError: If ``idx`` is not a registered entity.
        ValueError: If the matrix is not 4x4.
        numpy.linalg.LinAlgError: If the matrix is singular.
    """
    if not 0 <= idx < num_entities[None]:
        raise IndexError(f"Invalid entity index: {idx}")
    matrix = np.asarray(local_to_world, dtype=np.float64)
    if matrix.shape != (4, 4):
        raise ValueError(f"Entity transform must be 4x4, got {matrix.shape}")

    world_to_local = np.linalg.inv(matrix)
    normal_matrix = np.linalg.inv(matrix[:3, :3]).T

    entity_local_to_world[idx] = ti.Matrix(matrix.astype(np.float32).tolist())
    entity_world_to_local[idx] = ti.Matrix(world_to_local.astype(np.float32).tolist())
    entity_normal_matrices[idx] = ti.Matrix(normal_matrix.astype(np.float32).tolist())


def set_entity_material(idx: int, material_id: int) -> None:
    """Change the material of an entity (NO_MATERIAL to remove it)."""
    if not 0 <= idx < num_entities[None]:
        raise IndexError(f"Invalid entity index: {idx}")
    entity_material_ids[idx] = material_id


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


def get_triangle_count() -> int:
    """Get the number of triangles in the scene."""
    return int(num_triangles[None])


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_entity_count() -> int:
    """Get the number of entities in the scene."""
    return int(num_entities[None])


# =============================================================================
# Intersection Queries (Taichi functions)
# =============================================================================


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        distance=T_MAX,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        entity=-1,
        material_id=NO_MATERIAL,
    )


@ti.func
def intersect_primitive(
    primitive_type: ti.i32,
    primitive_index: ti.i32,
    local_origin: vec3,
    local_direction: vec3,
    t_min: ti.f32,
) -> HitRecord:
    """Dispatch a local-space ray to the matching primitive test.

    Each call starts from a fresh record, since ray parameters of different
    entities live in different spaces.

    Args:
        primitive_type: A PrimitiveType tag.
        primitive_index: Index into that primitive's storage.
        local_origin: Ray origin in the entity's local space.
        local_direction: Ray direction in the entity's local space.
        t_min: Minimum accepted ray parameter.

    Returns:
        The primitive's hit record (``hit == 0`` for an unknown tag).
    """
    record = make_empty_record()

    if primitive_type == int(PrimitiveType.PLANE):
        plane = Plane(normal=plane_normals[primitive_index], offset=plane_offsets[primitive_index])
        record = hit_plane(local_origin, local_direction, plane, t_min, record)

    elif primitive_type == int(PrimitiveType.TRIANGLE):
        triangle = Triangle(
            v0=triangle_v0[primitive_index],
            v1=triangle_v1[primitive_index],
            v2=triangle_v2[primitive_index],
            n0=triangle_n0[primitive_index],
            n1=triangle_n1[primitive_index],
            n2=triangle_n2[primitive_index],
        )
        record = hit_triangle(local_origin, local_direction, triangle, t_min, record)

    elif primitive_type == int(PrimitiveType.SPHERE):
        sphere = Sphere(center=sphere_centers[primitive_index], radius=sphere_radii[primitive_index])
        record = hit_sphere(local_origin, local_direction, sphere, t_min, record)

    return record


@ti.func
def intersect_entity(entity: ti.i32, ray_origin: vec3, ray_direction: vec3, t_min: ti.f32):
    """Intersect a world-space ray with one entity.

    Args:
        entity: The entity index.
        ray_origin: World-space ray origin.
        ray_direction: World-space ray direction.
        t_min: Minimum accepted ray parameter (in the entity's local space).

    Returns:
        A tuple (hit, distance, world_point, local_normal). ``distance`` is
        the world-space distance from ``ray_origin`` to ``world_point``.
    """
    local_ray = transform_ray(entity_world_to_local[entity], ray_origin, ray_direction)
    record = intersect_primitive(
        entity_primitive_types[entity],
        entity_primitive_indices[entity],
        local_ray.origin,
        local_ray.direction,
        t_min,
    )

    distance = T_MAX
    world_point = vec3(0.0, 0.0, 0.0)
    if record.hit == 1:
        local_point = local_ray.origin + record.time * local_ray.direction
        world_point = transform_point(entity_local_to_world[entity], local_point)
        distance = tm.length(world_point - ray_origin)

    return record.hit, distance, world_point, record.normal


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3, t_min: ti.f32) -> SceneHitRecord:
    """Find the closest entity hit by a world-space ray.

    Candidates are ranked by world-space distance with a strict comparison,
    so the result does not depend on entity order unless two hits are
    exactly equidistant (then the earlier entity wins).

    Args:
        ray_origin: World-space ray origin.
        ray_direction: World-space ray direction.
        t_min: Minimum accepted ray parameter.

    Returns:
        A SceneHitRecord with the world hit point and the world-space normal
        of the closest hit, or a miss record.
    """
    result = _make_miss_record()

    closest_entity = -1
    closest_distance = T_MAX
    closest_point = vec3(0.0, 0.0, 0.0)
    closest_local_normal = vec3(0.0, 0.0, 0.0)

    for i in range(num_entities[None]):
        hit, distance, world_point, local_normal = intersect_entity(i, ray_origin, ray_direction, t_min)
        if hit == 1 and distance < closest_distance:
            closest_entity = i
            closest_distance = distance
            closest_point = world_point
            closest_local_normal = local_normal

    if closest_entity >= 0:
        result = SceneHitRecord(
            hit=1,
            distance=closest_distance,
            point=closest_point,
            normal=transform_normal(entity_normal_matrices[closest_entity], closest_local_normal),
            entity=closest_entity,
            material_id=entity_material_ids[closest_entity],
        )

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    max_distance: ti.f32,
) -> ti.i32:
    """Test whether any entity is hit closer than ``max_distance`` (shadow query).

    Args:
        ray_origin: World-space ray origin.
        ray_direction: World-space ray direction.
        t_min: Minimum accepted ray parameter.
        max_distance: Hits at this world distance or beyond do not count.

    Returns:
        1 if an occluder was found, 0 otherwise.
    """
    hit_any = 0

    for i in range(num_entities[None]):
        if hit_any == 0:
            hit, distance, _, _ = intersect_entity(i, ray_origin, ray_direction, t_min)
            if hit == 1 and distance < max_distance:
                hit_any = 1

    return hit_any
