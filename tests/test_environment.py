"""Unit tests for the cube-map environment.

Tests cover:
- Face selection and face coordinates for axis directions
- Nearest-texel lookup
- Cube map validation and loading from images
"""

import numpy as np
import pytest
import taichi as ti
from PIL import Image as PILImage


def _coordinates(direction):
    from src.tracer.scene.environment import cube_map_coordinates

    face = ti.field(dtype=ti.i32, shape=())
    uv = ti.field(dtype=ti.math.vec2, shape=())

    @ti.kernel
    def test_kernel(d: ti.math.vec3):
        f, u, v = cube_map_coordinates(d)
        face[None] = f
        uv[None] = ti.math.vec2(u, v)

    test_kernel(ti.math.vec3(*direction))
    return face[None], uv[None][0], uv[None][1]


def _texel(direction):
    from src.tracer.scene.environment import get_texel

    result = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(d: ti.math.vec3):
        result[None] = get_texel(d)

    test_kernel(ti.math.vec3(*direction))
    return result[None].to_numpy()


class TestCubeMapCoordinates:
    """Tests for face selection."""

    @pytest.mark.parametrize(
        "direction,expected_face",
        [
            ((1.0, 0.0, 0.0), 0),
            ((-1.0, 0.0, 0.0), 1),
            ((0.0, 1.0, 0.0), 2),
            ((0.0, -1.0, 0.0), 3),
            ((0.0, 0.0, 1.0), 4),
            ((0.0, 0.0, -1.0), 5),
        ],
    )
    def test_axis_directions_hit_face_centers(self, direction, expected_face):
        """Test each axis selects its face at the center."""
        face, u, v = _coordinates(direction)
        assert face == expected_face
        assert abs(u - 0.5) < 1e-6
        assert abs(v - 0.5) < 1e-6

    def test_major_axis_wins(self):
        """Test the largest component selects the face."""
        face, _, _ = _coordinates((0.2, -3.0, 0.9))
        assert face == 3

    def test_face_coordinates_on_positive_z(self):
        """Test +x maps right and +y maps up on the +Z face."""
        face, u, v = _coordinates((0.5, 0.5, 1.0))
        assert face == 4
        assert abs(u - 0.75) < 1e-6
        assert abs(v - 0.25) < 1e-6


class TestCubeMapLookup:
    """Tests for texel lookup and setup."""

    def test_lookup_returns_face_color(self):
        """Test each face returns its own texels."""
        from src.tracer.scene.environment import is_environment_enabled, set_cube_map

        faces = np.zeros((6, 2, 2, 3), dtype=np.float32)
        for i in range(6):
            faces[i] = (i / 10.0, 0.0, 1.0)
        set_cube_map(faces)

        assert is_environment_enabled()
        np.testing.assert_allclose(_texel((0.0, -1.0, 0.0)), [0.3, 0.0, 1.0], atol=1e-6)
        np.testing.assert_allclose(_texel((-2.0, 0.1, 0.1)), [0.1, 0.0, 1.0], atol=1e-6)

    def test_lookup_picks_nearest_texel(self):
        """Test the top-left texel of the +Z face is seen up and to the left."""
        from src.tracer.scene.environment import set_cube_map

        faces = np.zeros((6, 2, 2, 3), dtype=np.float32)
        faces[4, 0, 0] = (1.0, 0.0, 0.0)
        faces[4, 1, 1] = (0.0, 1.0, 0.0)
        set_cube_map(faces)

        np.testing.assert_allclose(_texel((-0.5, 0.5, 1.0)), [1.0, 0.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(_texel((0.5, -0.5, 1.0)), [0.0, 1.0, 0.0], atol=1e-6)

    @pytest.mark.parametrize("shape", [(5, 4, 4, 3), (6, 4, 3, 3), (6, 4, 4, 4), (6, 0, 0, 3)])
    def test_bad_shape_raises(self, shape):
        """Test malformed face arrays are rejected."""
        from src.tracer.scene.environment import set_cube_map

        with pytest.raises(ValueError):
            set_cube_map(np.zeros(shape, dtype=np.float32))

    def test_clear_environment(self):
        """Test clearing disables lookups."""
        from src.tracer.scene.environment import clear_environment, is_environment_enabled, set_cube_map

        set_cube_map(np.zeros((6, 2, 2, 3), dtype=np.float32))
        clear_environment()
        assert not is_environment_enabled()

    def test_load_cube_map_from_images(self, tmp_path):
        """Test six PNG faces are loaded and scaled to [0, 1]."""
        from src.tracer.scene.environment import FACE_NAMES, load_cube_map

        paths = []
        for i, name in enumerate(FACE_NAMES):
            path = tmp_path / f"{name}.png"
            PILImage.new("RGB", (4, 4), (i * 40, 255, 0)).save(path)
            paths.append(str(path))

        load_cube_map(paths)
        np.testing.assert_allclose(_texel((1.0, 0.0, 0.0)), [0.0, 1.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(_texel((0.0, 0.0, -1.0)), [200 / 255, 1.0, 0.0], atol=1e-6)

    def test_load_cube_map_wrong_count(self):
        """Test anything but six paths is rejected."""
        from src.tracer.scene.environment import load_cube_map

        with pytest.raises(ValueError, match="6 face images"):
            load_cube_map(["a.png"])

    def test_load_cube_map_non_square(self, tmp_path):
        """Test rectangular face images are rejected."""
        from src.tracer.scene.environment import FACE_NAMES, load_cube_map

        paths = []
        for name in FACE_NAMES:
            path = tmp_path / f"{name}.png"
            PILImage.new("RGB", (4, 2)).save(path)
            paths.append(str(path))

        with pytest.raises(ValueError, match="not square"):
            load_cube_map(paths)
