"""Unit tests for the scene manager.

Tests cover:
- Material registration and validation
- Scene nodes and transform updates seen by intersection queries
- Planes, triangles, spheres and indexed meshes
- Lights attached to nodes
- Dictionary and JSON round trips
"""

import json

import pytest
import taichi as ti


@pytest.fixture
def scene():
    """Create a fresh SceneManager for each test."""
    from src.tracer.scene.manager import SceneManager

    return SceneManager()


def _closest_distance(origin, direction):
    from src.tracer.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    distance = ti.field(dtype=ti.f32, shape=())
    material = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: ti.math.vec3, d: ti.math.vec3):
        record = intersect_scene(o, d, 0.0)
        hit[None] = record.hit
        distance[None] = record.distance
        material[None] = record.material_id

    test_kernel(ti.math.vec3(*origin), ti.math.vec3(*direction))
    return hit[None], distance[None], material[None]


class TestMaterials:
    """Tests for material management."""

    def test_add_material_returns_sequential_ids(self, scene):
        """Test material IDs count up from zero."""
        a = scene.add_material(diffuse=(0.8, 0.1, 0.1))
        b = scene.add_material(specular=(0.9, 0.9, 0.9), shininess=64.0)

        assert (a, b) == (0, 1)
        assert scene.get_material_count() == 2
        info = scene.get_material_info(b)
        assert info.params["specular"] == (0.9, 0.9, 0.9)
        assert info.params["shininess"] == 64.0

    def test_unknown_material_info_is_none(self, scene):
        """Test looking up a missing material returns None."""
        assert scene.get_material_info(3) is None

    def test_negative_color_raises(self, scene):
        """Test negative reflectance is rejected."""
        with pytest.raises(ValueError):
            scene.add_material(diffuse=(-0.1, 0.0, 0.0))

    def test_invalid_material_reference_raises(self, scene):
        """Test entities cannot reference an unregistered material."""
        with pytest.raises(ValueError, match="material_id"):
            scene.add_sphere((0.0, 0.0, 0.0), 1.0, material_id=2)

    def test_set_material(self, scene):
        """Test assigning a material after creation."""
        entity = scene.add_sphere((0.0, 0.0, -3.0), 1.0)
        material = scene.add_material()
        scene.set_material(entity, material)

        assert scene.spheres[0].material_id == material
        assert _closest_distance((0, 0, 0), (0, 0, -1))[2] == material


class TestPrimitives:
    """Tests for adding entities."""

    def test_counts(self, scene):
        """Test entity counts per primitive kind."""
        scene.add_plane((0.0, 1.0, 0.0), 0.0)
        scene.add_triangle(((0, 0, 0), (1, 0, 0), (0, 1, 0)))
        scene.add_sphere((0.0, 0.0, 0.0), 1.0)

        assert scene.get_plane_count() == 1
        assert scene.get_triangle_count() == 1
        assert scene.get_sphere_count() == 1
        assert scene.get_entity_count() == 3

    def test_plane_normal_is_normalized(self, scene):
        """Test plane normals are stored as unit vectors."""
        scene.add_plane((0.0, 2.0, 0.0), 1.0)
        assert scene.planes[0].normal == pytest.approx((0.0, 1.0, 0.0))

    def test_triangle_default_normals_are_flat(self, scene):
        """Test omitted triangle normals use the face normal."""
        scene.add_triangle(((0, 0, 0), (0, 1, 0), (1, 0, 0)))
        for normal in scene.triangles[0].normals:
            assert normal == pytest.approx((0.0, 0.0, -1.0))

    def test_add_mesh(self, scene):
        """Test an indexed quad becomes two triangle entities."""
        positions = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]
        faces = [(0, 1, 2), (0, 2, 3)]
        entities = scene.add_mesh(positions, faces)

        assert entities == [0, 1]
        assert scene.get_triangle_count() == 2
        assert scene.triangles[1].positions[2] == (0.0, 1.0, 0.0)

    def test_mesh_with_vertex_normals(self, scene):
        """Test per-vertex mesh normals are carried to each face."""
        positions = [(0, 0, 0), (1, 0, 0), (0, 1, 0)]
        normals = [(0, 0, 1), (1, 0, 0), (0, 1, 0)]
        scene.add_mesh(positions, [(2, 1, 0)], normals=normals)
        assert scene.triangles[0].normals == ((0.0, 1.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 1.0))

    @pytest.mark.parametrize(
        "positions,faces",
        [
            ([(0, 0, 0), (1, 0, 0)], [(0, 1, 2)]),
            ([(0, 0), (1, 0), (0, 1)], [(0, 1, 2)]),
            ([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1)]),
        ],
    )
    def test_invalid_mesh_raises(self, scene, positions, faces):
        """Test malformed meshes are rejected."""
        with pytest.raises(ValueError):
            scene.add_mesh(positions, faces)


class TestNodes:
    """Tests for scene nodes and transform updates."""

    def test_entity_uses_node_transform(self, scene):
        """Test a sphere on a translated node is hit at its world position."""
        node = scene.add_node(position=(0.0, 0.0, -5.0))
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, node=node)

        hit, distance, _ = _closest_distance((0, 0, 0), (0, 0, -1))
        assert hit == 1
        assert abs(distance - 4.0) < 1e-4

    def test_nested_nodes_compose(self, scene):
        """Test a child node inherits its parent's scale."""
        parent = scene.add_node(position=(0.0, 0.0, -10.0), scale=(2.0, 2.0, 2.0))
        child = scene.add_node(parent=parent, position=(0.0, 0.0, 1.0))
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, node=child)

        # Center at z = -10 + 2 * 1 = -8, world radius 2
        _, distance, _ = _closest_distance((0, 0, 0), (0, 0, -1))
        assert abs(distance - 6.0) < 1e-4

    def test_set_node_transform_moves_entity(self, scene):
        """Test editing a node re-uploads the matrices of attached entities."""
        node = scene.add_node(position=(0.0, 0.0, -5.0))
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, node=node)
        scene.set_node_transform(node, position=(0.0, 0.0, -3.0))

        _, distance, _ = _closest_distance((0, 0, 0), (0, 0, -1))
        assert abs(distance - 2.0) < 1e-4

    def test_graph_edit_seen_after_update_transforms(self, scene):
        """Test direct graph edits apply once update_transforms() runs."""
        from src.tracer.scene.graph import Transform

        node = scene.add_node(position=(0.0, 0.0, -5.0))
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, node=node)
        scene.graph.set_transform(node, Transform(position=(0.0, 0.0, -9.0)))
        scene.update_transforms()

        _, distance, _ = _closest_distance((0, 0, 0), (0, 0, -1))
        assert abs(distance - 8.0) < 1e-4

    def test_point_light_follows_node(self, scene):
        """Test point lights sit at the origin of their node."""
        from src.tracer.lights.light import PointLight, get_light_position

        node = scene.add_node(position=(1.0, 2.0, 3.0))
        idx = scene.add_light(PointLight(), node=node)
        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            result[None] = get_light_position(i)

        scene.set_node_transform(node, position=(4.0, 5.0, 6.0))
        test_kernel(idx)
        assert result[None].to_numpy().tolist() == pytest.approx([4.0, 5.0, 6.0])

    def test_unknown_node_raises(self, scene):
        """Test attaching to a missing node raises KeyError."""
        with pytest.raises(KeyError):
            scene.add_sphere((0.0, 0.0, 0.0), 1.0, node=7)

    def test_clear(self, scene):
        """Test clear() empties the scene and resets the graph."""
        scene.add_material()
        node = scene.add_node()
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, node=node)
        scene.clear()

        assert scene.get_entity_count() == 0
        assert scene.get_material_count() == 0
        assert scene.graph.node_count() == 1


class TestSerialization:
    """Tests for dict and JSON round trips."""

    def _build(self, scene):
        from src.tracer.lights.light import AmbientLight, DirectionalLight, PointLight

        red = scene.add_material(ambient=(0.1, 0.0, 0.0), diffuse=(0.8, 0.1, 0.1))
        mirror = scene.add_material(diffuse=(0.0, 0.0, 0.0), specular=(0.9, 0.9, 0.9), shininess=32.0)
        node = scene.add_node(position=(0.0, 1.0, -4.0), rotation=(0.0, 30.0, 0.0), name="pivot")
        scene.add_plane((0.0, 1.0, 0.0), 0.0, material_id=red)
        scene.add_triangle(((0, 0, 0), (1, 0, 0), (0, 1, 0)), material_id=mirror, node=node)
        scene.add_sphere((0.0, 0.0, 0.0), 0.5, material_id=mirror, node=node)
        scene.add_light(PointLight(color=(5.0, 5.0, 5.0)), node=node)
        scene.add_light(DirectionalLight(direction=(0.0, -1.0, 0.0)))
        scene.add_light(AmbientLight())

    def test_dict_round_trip(self, scene):
        """Test to_dict/from_dict reproduce the scene."""
        from src.tracer.camera.pinhole import PinholeCamera
        from src.tracer.core.settings import RenderSettings

        self._build(scene)
        camera = PinholeCamera(lookfrom=(0.0, 2.0, 5.0), lookat=(0.0, 0.0, 0.0))
        settings = RenderSettings(width=64, height=48, max_bounces=2)
        data = scene.to_dict(camera, settings)

        scene.clear()
        loaded_camera, loaded_settings = scene.from_dict(data)

        assert loaded_camera == camera
        assert loaded_settings == settings
        assert scene.get_material_count() == 2
        assert scene.get_entity_count() == 3
        assert scene.get_light_count() == 3
        assert scene.graph.get_node(1).name == "pivot"
        assert scene.to_dict(camera, settings) == data

    def test_dict_is_json_serializable(self, scene):
        """Test the exported dictionary survives json.dumps."""
        self._build(scene)
        text = json.dumps(scene.to_dict())
        assert json.loads(text)["lights"][0]["type"] == "point"

    def test_json_file_round_trip(self, scene, tmp_path):
        """Test save_json/load_json through a file."""
        self._build(scene)
        before = _closest_distance((0.0, 5.0, 0.0), (0.0, -1.0, 0.0))

        path = tmp_path / "scene.json"
        scene.save_json(path)
        scene.clear()
        camera, settings = scene.load_json(path)

        assert camera is None
        assert settings is None
        after = _closest_distance((0.0, 5.0, 0.0), (0.0, -1.0, 0.0))
        assert after[0] == before[0]
        assert abs(after[1] - before[1]) < 1e-5
        assert after[2] == before[2]

    def test_unknown_light_type_raises(self, scene):
        """Test unknown light types in a config are rejected."""
        with pytest.raises(ValueError, match="Unknown light type"):
            scene.from_dict({"lights": [{"type": "spot", "color": [1.0, 1.0, 1.0]}]})

    def test_capacity_information(self):
        """Test capacity accessors expose the registry sizes."""
        from src.tracer.scene.manager import SceneManager

        assert SceneManager.get_max_entities() == (
            SceneManager.get_max_planes() + SceneManager.get_max_triangles() + SceneManager.get_max_spheres()
        )
        assert SceneManager.get_max_materials() > 0
        assert SceneManager.get_max_lights() > 0
