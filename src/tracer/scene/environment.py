"""Optional cube-map environment sampled by rays that miss all geometry.

The cube map has six square faces in the order +X, -X, +Y, -Y, +Z, -Z.
A direction selects the face of its largest-magnitude component and is
projected onto that face with the usual cube-map convention (as in OpenGL):

    face  major  s      t
    +X    +x     -z     -y
    -X    -x     +z     -y
    +Y    +y     +x     +z
    -Y    -y     +x     -z
    +Z    +z     +x     -y
    -Z    -z     -x     -y

    u = (s / |major| + 1) / 2,  v = (t / |major| + 1) / 2

Row 0 of each face image is its top edge. Lookup is nearest-texel.

Example:
    >>> import numpy as np
    >>> faces = np.zeros((6, 16, 16, 3), dtype=np.float32)
    >>> faces[2] = (0.2, 0.4, 0.9)  # sky-blue +Y face
    >>> set_cube_map(faces)
"""

import logging
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm
from PIL import Image as PILImage

vec3 = tm.vec3

logger = logging.getLogger(__name__)

FACE_NAMES = ("posx", "negx", "posy", "negy", "posz", "negz")

# Preallocated face storage (avoids kernel recompilation on reload)
MAX_CUBE_MAP_RESOLUTION = 512

_cube_faces = ti.Vector.field(
    3, dtype=ti.f32, shape=(6, MAX_CUBE_MAP_RESOLUTION, MAX_CUBE_MAP_RESOLUTION)
)
_cube_resolution = ti.field(dtype=ti.i32, shape=())
_environment_enabled = ti.field(dtype=ti.i32, shape=())


def set_cube_map(faces: npt.NDArray[np.floating]) -> None:
    """Upload a cube map and enable environment lookups.

    Args:
        faces: Array of shape (6, R, R, 3) with linear RGB values, faces in
            the order +X, -X, +Y, -Y, +Z, -Z.

    Raises:
        ValueError: If the shape is wrong or R exceeds MAX_CUBE_MAP_RESOLUTION.
    """
    faces = np.asarray(faces, dtype=np.float32)
    if faces.ndim != 4 or faces.shape[0] != 6 or faces.shape[3] != 3 or faces.shape[1] != faces.shape[2]:
        raise ValueError(f"Cube map must have shape (6, R, R, 3), got {faces.shape}")
    resolution = faces.shape[1]
    if resolution == 0 or resolution > MAX_CUBE_MAP_RESOLUTION:
        raise ValueError(
            f"Cube map resolution {resolution} must be in [1, {MAX_CUBE_MAP_RESOLUTION}]"
        )

    padded = np.zeros((6, MAX_CUBE_MAP_RESOLUTION, MAX_CUBE_MAP_RESOLUTION, 3), dtype=np.float32)
    padded[:, :resolution, :resolution, :] = faces
    _cube_faces.from_numpy(padded)
    _cube_resolution[None] = resolution
    _environment_enabled[None] = 1
    logger.debug("Cube map uploaded (%dx%d per face)", resolution, resolution)


def load_cube_map(paths: Sequence[str]) -> None:
    """Load six face images and upload them as the environment.

    Images are read with Pillow, converted to RGB and scaled to [0, 1].

    Args:
        paths: Six image paths in the order +X, -X, +Y, -Y, +Z, -Z.

    Raises:
        ValueError: If there are not six paths, or the faces are not square
            images of identical size.
    """
    if len(paths) != 6:
        raise ValueError(f"A cube map needs 6 face images ({', '.join(FACE_NAMES)}), got {len(paths)}")

    faces = []
    for name, path in zip(FACE_NAMES, paths):
        with PILImage.open(path) as image:
            data = np.asarray(image.convert("RGB"), dtype=np.float32) / 255.0
        if data.shape[0] != data.shape[1]:
            raise ValueError(f"Cube map face {name} ({path}) is not square: {data.shape[:2]}")
        faces.append(data)

    if len({face.shape for face in faces}) != 1:
        raise ValueError("Cube map faces must all have the same size")

    logger.info("Loaded cube map from %s", paths[0])
    set_cube_map(np.stack(faces))


def clear_environment() -> None:
    """Disable environment lookups (misses use the background color)."""
    _environment_enabled[None] = 0


def is_environment_enabled() -> bool:
    """Check whether a cube map is configured."""
    return bool(_environment_enabled[None])


@ti.func
def environment_enabled() -> ti.i32:
    """Kernel-side check for a configured cube map."""
    return _environment_enabled[None]


@ti.func
def cube_map_coordinates(direction: vec3):
    """Select the cube face and face coordinates for a direction.

    Args:
        direction: Any non-zero direction (need not be normalized).

    Returns:
        A tuple (face, u, v) with face in [0, 6) and u, v in [0, 1].
    """
    ax = ti.abs(direction.x)
    ay = ti.abs(direction.y)
    az = ti.abs(direction.z)

    face = 0
    major = 1.0
    s = 0.0
    t = 0.0

    if ax >= ay and ax >= az:
        major = ax
        if direction.x > 0.0:
            face = 0
            s = -direction.z
        else:
            face = 1
            s = direction.z
        t = -direction.y
    elif ay >= az:
        major = ay
        s = direction.x
        if direction.y > 0.0:
            face = 2
            t = direction.z
        else:
            face = 3
            t = -direction.z
    else:
        major = az
        if direction.z > 0.0:
            face = 4
            s = direction.x
        else:
            face = 5
            s = -direction.x
        t = -direction.y

    u = 0.5 * (s / major + 1.0)
    v = 0.5 * (t / major + 1.0)
    return face, u, v


@ti.func
def get_texel(direction: vec3) -> vec3:
    """Nearest-texel cube map lookup for a world-space direction."""
    face, u, v = cube_map_coordinates(direction)
    resolution = _cube_resolution[None]
    col = ti.min(ti.cast(u * resolution, ti.i32), resolution - 1)
    row = ti.min(ti.cast(v * resolution, ti.i32), resolution - 1)
    col = ti.max(col, 0)
    row = ti.max(row, 0)
    return _cube_faces[face, row, col]
