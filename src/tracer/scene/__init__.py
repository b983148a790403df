"""Scene module: scene graph, entity storage and ray-scene queries.

Components:
    graph: Node arena with local transforms (T @ R @ S) and world matrices
    intersection: Entity storage in Taichi fields and closest-hit / any-hit
        queries in each entity's local space
    environment: Optional cube map sampled by rays that miss
    manager: SceneManager coordinating nodes, primitives, materials, lights
        and scene serialization
    demo_scenes: Ready-made mirror box and showcase scenes

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for geometric data
    - Per-entity cached world-to-local and normal matrices
    - Integer node keys instead of object references
"""

from .demo_scenes import MirrorBoxParams, create_mirror_box_scene, create_showcase_scene
from .environment import (
    clear_environment,
    get_texel,
    is_environment_enabled,
    load_cube_map,
    set_cube_map,
)
from .graph import ROOT_NODE, SceneGraph, SceneNode, Transform
from .intersection import (
    MAX_ENTITIES,
    MAX_PLANES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    NO_MATERIAL,
    PrimitiveType,
    SceneHitRecord,
    add_entity,
    add_plane,
    add_sphere,
    add_triangle,
    clear_scene,
    get_entity_count,
    intersect_scene,
    intersect_scene_any,
)
from .manager import (
    LightInfo,
    MaterialInfo,
    PlaneInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    TriangleInfo,
)

__all__ = [
    # Graph module
    "ROOT_NODE",
    "SceneGraph",
    "SceneNode",
    "Transform",
    # Intersection module
    "PrimitiveType",
    "SceneHitRecord",
    "NO_MATERIAL",
    "add_plane",
    "add_triangle",
    "add_sphere",
    "add_entity",
    "clear_scene",
    "get_entity_count",
    "intersect_scene",
    "intersect_scene_any",
    "MAX_PLANES",
    "MAX_TRIANGLES",
    "MAX_SPHERES",
    "MAX_ENTITIES",
    # Environment module
    "set_cube_map",
    "load_cube_map",
    "clear_environment",
    "is_environment_enabled",
    "get_texel",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "MaterialInfo",
    "PlaneInfo",
    "TriangleInfo",
    "SphereInfo",
    "LightInfo",
    # Demo scenes
    "MirrorBoxParams",
    "create_mirror_box_scene",
    "create_showcase_scene",
]
