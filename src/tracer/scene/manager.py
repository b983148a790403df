"""Unified scene manager coordinating nodes, primitives, materials and lights.

This module provides a high-level scene management API on top of the
Taichi-field registries. It owns the scene graph and keeps, for every entity
and light, the key of the node it is attached to, so that the world
matrices uploaded to the kernels can be recomputed after the graph changes.

The SceneManager maintains:
- A SceneGraph (node arena) with local transforms
- The Phong material registry
- Entities (plane, triangle, sphere) with an optional material each
- Lights (directional, point, ambient) attached to nodes
- Scene serialization/configuration support (dict and JSON)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.tracer.scene.manager import SceneManager
    >>> from src.tracer.lights.light import DirectionalLight
    >>> scene = SceneManager()
    >>> red = scene.add_material(diffuse=(0.8, 0.1, 0.1))
    >>> scene.add_plane(normal=(0.0, 1.0, 0.0), offset=0.0, material_id=red)
    >>> scene.add_light(DirectionalLight(direction=(0.0, -1.0, 0.0)))
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np
import numpy.typing as npt

from src.tracer.camera.pinhole import PinholeCamera
from src.tracer.core.settings import RenderSettings
from src.tracer.geometry.plane import normalize_plane_normal
from src.tracer.geometry.triangle import flat_normal
from src.tracer.lights.light import (
    MAX_LIGHTS,
    AmbientLight,
    DirectionalLight,
    Light,
    PointLight,
    add_light,
    clear_lights,
    get_light_count_python,
    light_type_of,
    set_light_transform,
)
from src.tracer.materials.phong import (
    MAX_PHONG_MATERIALS,
    add_phong_material,
    clear_phong_materials,
    get_phong_material_count,
)
from src.tracer.scene.graph import ROOT_NODE, SceneGraph, Transform
from src.tracer.scene.intersection import (
    MAX_ENTITIES,
    MAX_PLANES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    NO_MATERIAL,
    PrimitiveType,
    add_entity,
    add_plane,
    add_sphere,
    add_triangle,
    clear_scene,
    get_entity_count,
    get_plane_count,
    get_sphere_count,
    get_triangle_count,
    set_entity_material,
    set_entity_transform,
)

logger = logging.getLogger(__name__)

Vec3 = tuple[float, float, float]


def _vec3(values: Any) -> Vec3:
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass
class MaterialInfo:
    """Information about a registered Phong material.

    Attributes:
        material_id: The material ID.
        params: The material parameters as provided during creation.
    """

    material_id: int
    params: dict[str, Any]


@dataclass
class PlaneInfo:
    """Information about a plane entity.

    Attributes:
        entity_index: The index in the entity storage arrays.
        normal: Unit normal in the node's local frame.
        offset: Signed offset along the normal.
        material_id: Material ID, or NO_MATERIAL.
        node: Key of the owning scene node.
    """

    entity_index: int
    normal: Vec3
    offset: float
    material_id: int
    node: int


@dataclass
class TriangleInfo:
    """Information about a triangle entity.

    Attributes:
        entity_index: The index in the entity storage arrays.
        positions: The three vertex positions (local frame).
        normals: The three vertex normals (local frame).
        material_id: Material ID, or NO_MATERIAL.
        node: Key of the owning scene node.
    """

    entity_index: int
    positions: tuple[Vec3, Vec3, Vec3]
    normals: tuple[Vec3, Vec3, Vec3]
    material_id: int
    node: int


@dataclass
class SphereInfo:
    """Information about a sphere entity.

    Attributes:
        entity_index: The index in the entity storage arrays.
        center: The center of the sphere (local frame).
        radius: The radius of the sphere.
        material_id: Material ID, or NO_MATERIAL.
        node: Key of the owning scene node.
    """

    entity_index: int
    center: Vec3
    radius: float
    material_id: int
    node: int


@dataclass
class LightInfo:
    """Information about a light in the scene.

    Attributes:
        light_index: The index in the light registry.
        light: The light description.
        node: Key of the owning scene node.
    """

    light_index: int
    light: Light
    node: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Node entries are listed in key order starting at key 1 (the root is
    implicit), so every parent appears before its children.

    Attributes:
        materials: List of material configurations.
        nodes: List of node configurations.
        planes: List of plane configurations.
        triangles: List of triangle configurations.
        spheres: List of sphere configurations.
        lights: List of light configurations.
        camera: Optional camera configuration.
        settings: Optional render settings.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    nodes: list[dict[str, Any]] = field(default_factory=list)
    planes: list[dict[str, Any]] = field(default_factory=list)
    triangles: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    camera: dict[str, Any] | None = None
    settings: dict[str, Any] | None = None


class SceneManager:
    """Unified scene manager coordinating the scene graph and the registries.

    Every entity and light is attached to a scene node (the root by
    default). Adding an object uploads the current local-to-world matrix of
    its node; after editing node transforms call ``update_transforms()`` to
    re-upload the matrices of everything attached.

    Attributes:
        graph: The scene graph.
        materials: List of MaterialInfo for all registered materials.
        planes: List of PlaneInfo for all plane entities.
        triangles: List of TriangleInfo for all triangle entities.
        spheres: List of SphereInfo for all sphere entities.
        lights: List of LightInfo for all lights.

    Example:
        >>> scene = SceneManager()
        >>> mirror = scene.add_material(diffuse=(0.0, 0.0, 0.0), specular=(0.9, 0.9, 0.9))
        >>> pivot = scene.add_node(position=(0.0, 1.0, 0.0))
        >>> scene.add_sphere((0.0, 0.0, 0.0), 0.5, material_id=mirror, node=pivot)
        >>> scene.add_light(AmbientLight(color=(0.1, 0.1, 0.1)))
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.graph = SceneGraph()
        self.materials: list[MaterialInfo] = []
        self.planes: list[PlaneInfo] = []
        self.triangles: list[TriangleInfo] = []
        self.spheres: list[SphereInfo] = []
        self.lights: list[LightInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_phong_materials()
        clear_lights()
        self.graph = SceneGraph()
        self.materials.clear()
        self.planes.clear()
        self.triangles.clear()
        self.spheres.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (nodes, entities, materials and lights).

        Resets all Taichi fields and internal tracking structures.
        """
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(
        self,
        ambient: Vec3 = (0.0, 0.0, 0.0),
        diffuse: Vec3 = (0.5, 0.5, 0.5),
        specular: Vec3 = (0.0, 0.0, 0.0),
        shininess: float = 1.0,
    ) -> int:
        """Add a Phong material to the scene.

        A specular color with a mean above 0.01 also makes the surface a
        mirror, weighted by that color.

        Args:
            ambient: Ambient reflectance (R, G, B).
            diffuse: Diffuse reflectance (R, G, B).
            specular: Specular reflectance (R, G, B).
            shininess: Specular exponent.

        Returns:
            The material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If a color component or the shininess is negative.
        """
        material_id = add_phong_material(ambient, diffuse, specular, shininess)
        info = MaterialInfo(
            material_id=material_id,
            params={
                "ambient": _vec3(ambient),
                "diffuse": _vec3(diffuse),
                "specular": _vec3(specular),
                "shininess": float(shininess),
            },
        )
        self.materials.append(info)
        return material_id

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_phong_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID.

        Args:
            material_id: The material ID.

        Returns:
            MaterialInfo for the material, or None if not found.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def _check_material(self, material_id: int) -> None:
        if material_id != NO_MATERIAL and not 0 <= material_id < len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Scene Graph
    # =========================================================================

    def add_node(
        self,
        parent: int = ROOT_NODE,
        position: Vec3 = (0.0, 0.0, 0.0),
        rotation: Vec3 = (0.0, 0.0, 0.0),
        scale: Vec3 = (1.0, 1.0, 1.0),
        name: str | None = None,
    ) -> int:
        """Add a scene node.

        Args:
            parent: Key of the parent node (default: the root).
            position: Local translation.
            rotation: Local rotation as XYZ Euler angles in degrees.
            scale: Local per-axis scale.
            name: Optional label.

        Returns:
            The node key.

        Raises:
            KeyError: If ``parent`` is not a node key.
        """
        transform = Transform(position=_vec3(position), rotation=_vec3(rotation), scale=_vec3(scale))
        return self.graph.add_node(parent=parent, transform=transform, name=name)

    def set_node_transform(
        self,
        node: int,
        position: Vec3 = (0.0, 0.0, 0.0),
        rotation: Vec3 = (0.0, 0.0, 0.0),
        scale: Vec3 = (1.0, 1.0, 1.0),
    ) -> None:
        """Replace the local transform of a node and re-upload world matrices.

        Raises:
            KeyError: If ``node`` is not a node key.
            numpy.linalg.LinAlgError: If an attached entity becomes singular.
        """
        transform = Transform(position=_vec3(position), rotation=_vec3(rotation), scale=_vec3(scale))
        self.graph.set_transform(node, transform)
        self.update_transforms()

    def update_transforms(self) -> None:
        """Re-upload the world matrices of every entity and light."""
        cache: dict[int, npt.NDArray[np.float64]] = {}

        def world(node: int) -> npt.NDArray[np.float64]:
            if node not in cache:
                cache[node] = self.graph.get_local_to_world(node)
            return cache[node]

        for info in [*self.planes, *self.triangles, *self.spheres]:
            set_entity_transform(info.entity_index, world(info.node))
        for light_info in self.lights:
            set_light_transform(light_info.light_index, world(light_info.node))

        logger.debug(
            "Uploaded transforms for %d entities and %d lights",
            get_entity_count(),
            len(self.lights),
        )

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_plane(
        self,
        normal: Vec3,
        offset: float,
        material_id: int = NO_MATERIAL,
        node: int = ROOT_NODE,
    ) -> int:
        """Add a plane entity ``dot(x, normal) = offset`` in the node's frame.

        Args:
            normal: Plane normal (normalized here).
            offset: Signed offset along the normalized normal.
            material_id: Material ID, or NO_MATERIAL.
            node: Key of the owning scene node.

        Returns:
            The entity index.

        Raises:
            RuntimeError: If the maximum number of planes is exceeded.
            ValueError: If the normal has zero length or material_id is invalid.
            KeyError: If ``node`` is not a node key.
        """
        self._check_material(material_id)
        local_to_world = self.graph.get_local_to_world(node)
        unit_normal = normalize_plane_normal(normal)

        plane_index = add_plane(unit_normal, offset)
        entity_index = add_entity(PrimitiveType.PLANE, plane_index, material_id, local_to_world)

        info = PlaneInfo(
            entity_index=entity_index,
            normal=unit_normal,
            offset=float(offset),
            material_id=material_id,
            node=node,
        )
        self.planes.append(info)
        return entity_index

    def add_triangle(
        self,
        positions: tuple[Vec3, Vec3, Vec3],
        normals: tuple[Vec3, Vec3, Vec3] | None = None,
        material_id: int = NO_MATERIAL,
        node: int = ROOT_NODE,
    ) -> int:
        """Add a triangle entity.

        Args:
            positions: The three vertex positions (local frame).
            normals: The three vertex normals. Defaults to the flat face
                normal (counter-clockwise winding) at every vertex.
            material_id: Material ID, or NO_MATERIAL.
            node: Key of the owning scene node.

        Returns:
            The entity index.

        Raises:
            RuntimeError: If the maximum number of triangles is exceeded.
            ValueError: If normals are omitted for a degenerate triangle, or
                material_id is invalid.
            KeyError: If ``node`` is not a node key.
        """
        self._check_material(material_id)
        local_to_world = self.graph.get_local_to_world(node)

        vertex_positions = tuple(_vec3(p) for p in positions)
        if normals is None:
            face_normal = flat_normal(*vertex_positions)
            vertex_normals = (face_normal, face_normal, face_normal)
        else:
            vertex_normals = tuple(_vec3(n) for n in normals)

        triangle_index = add_triangle(vertex_positions, vertex_normals)
        entity_index = add_entity(PrimitiveType.TRIANGLE, triangle_index, material_id, local_to_world)

        info = TriangleInfo(
            entity_index=entity_index,
            positions=vertex_positions,
            normals=vertex_normals,
            material_id=material_id,
            node=node,
        )
        self.triangles.append(info)
        return entity_index

    def add_sphere(
        self,
        center: Vec3,
        radius: float,
        material_id: int = NO_MATERIAL,
        node: int = ROOT_NODE,
    ) -> int:
        """Add a sphere entity.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: Material ID, or NO_MATERIAL.
            node: Key of the owning scene node.

        Returns:
            The entity index.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If the radius is not positive or material_id is invalid.
            KeyError: If ``node`` is not a node key.
        """
        self._check_material(material_id)
        local_to_world = self.graph.get_local_to_world(node)

        sphere_index = add_sphere(_vec3(center), radius)
        entity_index = add_entity(PrimitiveType.SPHERE, sphere_index, material_id, local_to_world)

        info = SphereInfo(
            entity_index=entity_index,
            center=_vec3(center),
            radius=float(radius),
            material_id=material_id,
            node=node,
        )
        self.spheres.append(info)
        return entity_index

    def add_mesh(
        self,
        positions: npt.ArrayLike,
        faces: npt.ArrayLike,
        normals: npt.ArrayLike | None = None,
        material_id: int = NO_MATERIAL,
        node: int = ROOT_NODE,
    ) -> list[int]:
        """Add an indexed triangle mesh as one triangle entity per face.

        Args:
            positions: Vertex positions, shape (V, 3).
            faces: Vertex indices, shape (F, 3), counter-clockwise winding.
            normals: Optional per-vertex normals, shape (V, 3). Without them
                every face uses its flat normal.
            material_id: Material ID shared by all faces, or NO_MATERIAL.
            node: Key of the owning scene node.

        Returns:
            The entity indices of the faces, in face order.

        Raises:
            ValueError: If array shapes are wrong or an index is out of range.
        """
        vertex_array = np.asarray(positions, dtype=np.float64)
        face_array = np.asarray(faces, dtype=np.int64)
        if vertex_array.ndim != 2 or vertex_array.shape[1] != 3:
            raise ValueError(f"Mesh positions must have shape (V, 3), got {vertex_array.shape}")
        if face_array.ndim != 2 or face_array.shape[1] != 3:
            raise ValueError(f"Mesh faces must have shape (F, 3), got {face_array.shape}")
        if face_array.size and (face_array.min() < 0 or face_array.max() >= len(vertex_array)):
            raise ValueError("Mesh face index out of range")

        normal_array = None
        if normals is not None:
            normal_array = np.asarray(normals, dtype=np.float64)
            if normal_array.shape != vertex_array.shape:
                raise ValueError(
                    f"Mesh normals must match positions {vertex_array.shape}, got {normal_array.shape}"
                )

        entity_indices = []
        for face in face_array:
            corners = tuple(_vec3(vertex_array[i]) for i in face)
            face_normals = None
            if normal_array is not None:
                face_normals = tuple(_vec3(normal_array[i]) for i in face)
            entity_indices.append(self.add_triangle(corners, face_normals, material_id, node))

        logger.debug("Added mesh with %d faces to node %d", len(entity_indices), node)
        return entity_indices

    def set_material(self, entity_index: int, material_id: int) -> None:
        """Assign a material to an existing entity (NO_MATERIAL to remove it).

        Raises:
            ValueError: If material_id is invalid.
            IndexError: If the entity does not exist.
        """
        self._check_material(material_id)
        set_entity_material(entity_index, material_id)
        for info in [*self.planes, *self.triangles, *self.spheres]:
            if info.entity_index == entity_index:
                info.material_id = material_id

    # =========================================================================
    # Light Management
    # =========================================================================

    def add_light(self, light: Light, node: int = ROOT_NODE) -> int:
        """Add a light attached to a scene node.

        Point lights sit at the origin of their node; directional and
        ambient lights ignore the node transform.

        Args:
            light: A DirectionalLight, PointLight or AmbientLight.
            node: Key of the owning scene node.

        Returns:
            The light index.

        Raises:
            TypeError: If the light is not a supported variant.
            ValueError: If a color component is negative.
            RuntimeError: If the maximum number of lights is exceeded.
            KeyError: If ``node`` is not a node key.
        """
        light_index = add_light(light, self.graph.get_local_to_world(node))
        self.lights.append(LightInfo(light_index=light_index, light=light, node=node))
        return light_index

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return get_plane_count()

    def get_triangle_count(self) -> int:
        """Get the number of triangles in the scene."""
        return get_triangle_count()

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_entity_count(self) -> int:
        """Get the total number of entities in the scene."""
        return get_entity_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count_python()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(
        self,
        camera: PinholeCamera | None = None,
        settings: RenderSettings | None = None,
    ) -> SceneConfig:
        """Export the scene to a configuration object.

        Args:
            camera: Optional camera to include.
            settings: Optional render settings to include.

        Returns:
            A SceneConfig containing the whole scene.
        """
        config = SceneConfig()

        for mat in self.materials:
            config.materials.append({key: _to_json(value) for key, value in mat.params.items()})

        for key in range(1, self.graph.node_count()):
            node = self.graph.get_node(key)
            config.nodes.append(
                {
                    "name": node.name,
                    "parent": node.parent,
                    "position": list(node.transform.position),
                    "rotation": list(node.transform.rotation),
                    "scale": list(node.transform.scale),
                }
            )

        for plane in self.planes:
            config.planes.append(
                {
                    "normal": list(plane.normal),
                    "offset": plane.offset,
                    "material_id": plane.material_id,
                    "node": plane.node,
                }
            )

        for triangle in self.triangles:
            config.triangles.append(
                {
                    "positions": [list(p) for p in triangle.positions],
                    "normals": [list(n) for n in triangle.normals],
                    "material_id": triangle.material_id,
                    "node": triangle.node,
                }
            )

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                    "node": sphere.node,
                }
            )

        for light_info in self.lights:
            config.lights.append(_light_to_config(light_info.light, light_info.node))

        if camera is not None:
            config.camera = camera.to_dict()
        if settings is not None:
            config.settings = settings.to_dict()

        return config

    def from_config(
        self, config: SceneConfig
    ) -> tuple[PinholeCamera | None, RenderSettings | None]:
        """Load a scene from a configuration object.

        Clears the existing scene first.

        Args:
            config: The scene configuration to load.

        Returns:
            A tuple (camera, settings), each None when absent from the config.

        Raises:
            ValueError: If a light type is unknown or a reference is invalid.
        """
        self._clear_all()

        for mat_config in config.materials:
            self.add_material(
                ambient=_vec3(mat_config.get("ambient", [0.0, 0.0, 0.0])),
                diffuse=_vec3(mat_config.get("diffuse", [0.5, 0.5, 0.5])),
                specular=_vec3(mat_config.get("specular", [0.0, 0.0, 0.0])),
                shininess=float(mat_config.get("shininess", 1.0)),
            )

        for node_config in config.nodes:
            self.add_node(
                parent=int(node_config.get("parent", ROOT_NODE)),
                position=_vec3(node_config.get("position", [0.0, 0.0, 0.0])),
                rotation=_vec3(node_config.get("rotation", [0.0, 0.0, 0.0])),
                scale=_vec3(node_config.get("scale", [1.0, 1.0, 1.0])),
                name=node_config.get("name"),
            )

        for plane_config in config.planes:
            self.add_plane(
                normal=_vec3(plane_config.get("normal", [0.0, 1.0, 0.0])),
                offset=float(plane_config.get("offset", 0.0)),
                material_id=int(plane_config.get("material_id", NO_MATERIAL)),
                node=int(plane_config.get("node", ROOT_NODE)),
            )

        for triangle_config in config.triangles:
            positions = tuple(_vec3(p) for p in triangle_config["positions"])
            normals = triangle_config.get("normals")
            self.add_triangle(
                positions,
                tuple(_vec3(n) for n in normals) if normals is not None else None,
                material_id=int(triangle_config.get("material_id", NO_MATERIAL)),
                node=int(triangle_config.get("node", ROOT_NODE)),
            )

        for sphere_config in config.spheres:
            self.add_sphere(
                center=_vec3(sphere_config.get("center", [0.0, 0.0, 0.0])),
                radius=float(sphere_config.get("radius", 1.0)),
                material_id=int(sphere_config.get("material_id", NO_MATERIAL)),
                node=int(sphere_config.get("node", ROOT_NODE)),
            )

        for light_config in config.lights:
            self.add_light(
                _light_from_config(light_config),
                node=int(light_config.get("node", ROOT_NODE)),
            )

        camera = PinholeCamera.from_dict(config.camera) if config.camera is not None else None
        settings = RenderSettings.from_dict(config.settings) if config.settings is not None else None

        logger.info(
            "Loaded scene: %d materials, %d entities, %d lights",
            len(self.materials),
            get_entity_count(),
            len(self.lights),
        )
        return camera, settings

    def to_dict(
        self,
        camera: PinholeCamera | None = None,
        settings: RenderSettings | None = None,
    ) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary representation of the scene.
        """
        config = self.to_config(camera, settings)
        data: dict[str, Any] = {
            "materials": config.materials,
            "nodes": config.nodes,
            "planes": config.planes,
            "triangles": config.triangles,
            "spheres": config.spheres,
            "lights": config.lights,
        }
        if config.camera is not None:
            data["camera"] = config.camera
        if config.settings is not None:
            data["settings"] = config.settings
        return data

    def from_dict(self, data: dict[str, Any]) -> tuple[PinholeCamera | None, RenderSettings | None]:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'nodes', 'planes', 'triangles',
                'spheres', 'lights' and optional 'camera' / 'settings' keys.

        Returns:
            A tuple (camera, settings), each None when absent.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            nodes=data.get("nodes", []),
            planes=data.get("planes", []),
            triangles=data.get("triangles", []),
            spheres=data.get("spheres", []),
            lights=data.get("lights", []),
            camera=data.get("camera"),
            settings=data.get("settings"),
        )
        return self.from_config(config)

    def save_json(
        self,
        filepath: str | Path,
        camera: PinholeCamera | None = None,
        settings: RenderSettings | None = None,
    ) -> None:
        """Write the scene (and optional camera/settings) to a JSON file."""
        path = Path(filepath)
        path.write_text(json.dumps(self.to_dict(camera, settings), indent=2))
        logger.info("Saved scene to %s", path)

    def load_json(self, filepath: str | Path) -> tuple[PinholeCamera | None, RenderSettings | None]:
        """Load a scene from a JSON file written by save_json().

        Returns:
            A tuple (camera, settings), each None when absent.
        """
        path = Path(filepath)
        logger.info("Loading scene from %s", path)
        return self.from_dict(json.loads(path.read_text()))

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_planes() -> int:
        """Get the maximum number of planes supported."""
        return MAX_PLANES

    @staticmethod
    def get_max_triangles() -> int:
        """Get the maximum number of triangles supported."""
        return MAX_TRIANGLES

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_entities() -> int:
        """Get the maximum number of entities supported."""
        return MAX_ENTITIES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_PHONG_MATERIALS

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS


def _to_json(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


def _light_to_config(light: Light, node: int) -> dict[str, Any]:
    """Describe a light as a configuration dictionary."""
    light_config: dict[str, Any] = {
        "type": light_type_of(light).name.lower(),
        "color": list(light.color),
        "node": node,
    }
    if isinstance(light, DirectionalLight):
        light_config["direction"] = list(light.direction)
    elif isinstance(light, PointLight):
        light_config["attenuation"] = list(light.attenuation)
    return light_config


def _light_from_config(light_config: dict[str, Any]) -> Light:
    """Create a light from a configuration dictionary.

    Raises:
        ValueError: If the light type is unknown.
    """
    light_type = light_config.get("type", "").lower()
    color = _vec3(light_config.get("color", [1.0, 1.0, 1.0]))
    if light_type == "directional":
        return DirectionalLight(direction=_vec3(light_config["direction"]), color=color)
    if light_type == "point":
        attenuation = _vec3(light_config.get("attenuation", [1.0, 0.0, 0.0]))
        return PointLight(color=color, attenuation=attenuation)
    if light_type == "ambient":
        return AmbientLight(color=color)
    raise ValueError(f"Unknown light type: {light_type}")
