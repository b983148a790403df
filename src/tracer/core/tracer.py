"""Recursive (Whitted-style) ray tracing driver and render target.

For every pixel a single primary ray is cast through the pixel center. Each
ray finds its closest hit over all entities, is shaded with the Phong model
(with shadow rays), and spawns a mirror reflection weighted by the
material's specular color while the bounce budget lasts:

    color = local_0 + s_0 * (local_1 + s_1 * (local_2 + ...))

Taichi functions cannot recurse, so the recursion is unrolled into a loop
that carries the product of the specular weights seen so far (throughput).
The loop runs at most ``max_bounces + 1`` times.

A ray that misses everything returns the cube-map texel for its direction
if an environment is configured, otherwise the uniform background color. An
entity without a material renders as MISSING_MATERIAL_COLOR (magenta) and
does not reflect. The final color is clamped to [0, 1] per channel before
it is written to the image buffer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.tracer.core.tracer import render_image, setup_render_target
    >>> from src.tracer.scene.demo_scenes import create_mirror_box_scene
    >>> from src.tracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_mirror_box_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(256, 256)
    >>> render_image(max_bounces=4)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.tracer.camera.pinhole import generate_ray, get_t_min, pixel_to_ndc
from src.tracer.core.illumination import (
    IlluminationError,
    check_illumination_error,
    clear_illumination_error,
)
from src.tracer.core.ray import mean_component, reflect
from src.tracer.core.settings import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    RAY_EPSILON,
    get_background_color,
)
from src.tracer.core.shading import compute_phong_shading
from src.tracer.materials.phong import get_phong_material
from src.tracer.scene.environment import environment_enabled, get_texel
from src.tracer.scene.intersection import intersect_scene

vec3 = tm.vec3

# Color of surfaces whose entity has no material
MISSING_MATERIAL_COLOR = vec3(1.0, 0.0, 1.0)

# Mean specular reflectance below which no reflection ray is spawned
MIN_REFLECTIVITY = 0.01


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer (preallocated to max size)
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Reflection bounces taken by each pixel's primary ray
_bounce_buffer = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Output of trace_single_ray
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_depth = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if not 0 < width <= MAX_IMAGE_WIDTH or not 0 < height <= MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) must be positive and at most "
            f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _bounce_buffer.fill(0)


def reset_render_target() -> None:
    """Forget the render target setup (buffers must be set up again)."""
    _render_target_initialized[None] = 0
    _image_width[None] = 0
    _image_height[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Tracing
# =============================================================================


@ti.func
def get_background(direction: vec3) -> vec3:
    """Color seen by a ray that misses every entity."""
    color = get_background_color()
    if environment_enabled() == 1:
        color = get_texel(direction)
    return color


@ti.func
def trace_ray(origin: vec3, direction: vec3, max_bounces: ti.i32):
    """Trace a ray through the scene, following mirror reflections.

    Args:
        origin: World-space ray origin.
        direction: World-space ray direction.
        max_bounces: Maximum number of reflection rays to follow.

    Returns:
        A tuple (color, depth): the unclamped color and the number of
        reflection bounces actually taken (never more than ``max_bounces``).
    """
    t_min = get_t_min()
    ray_origin = origin
    ray_direction = direction

    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    depth = 0

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for bounce in range(max_bounces + 1):
        if active == 1:
            record = intersect_scene(ray_origin, ray_direction, t_min)

            if record.hit == 0:
                radiance += throughput * get_background(ray_direction)
                active = 0
            elif record.material_id < 0:
                radiance += throughput * MISSING_MATERIAL_COLOR
                active = 0
            else:
                material = get_phong_material(record.material_id)
                local_color = compute_phong_shading(
                    record.point, record.normal, ray_direction, material
                )
                radiance += throughput * local_color

                if bounce < max_bounces and mean_component(material.specular) > MIN_REFLECTIVITY:
                    reflected = reflect(tm.normalize(ray_direction), record.normal)
                    ray_origin = record.point + RAY_EPSILON * reflected
                    ray_direction = reflected
                    throughput *= material.specular
                    depth += 1
                else:
                    active = 0

    return radiance, depth


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_kernel(width: ti.i32, height: ti.i32, max_bounces: ti.i32):
    """Trace one primary ray per pixel and store the clamped color."""
    for i, j in ti.ndrange(width, height):
        ray = generate_ray(pixel_to_ndc(i, j, width, height))
        color, depth = trace_ray(ray.origin, ray.direction, max_bounces)

        _color_buffer[i, j] = tm.clamp(color, 0.0, 1.0)
        _bounce_buffer[i, j] = depth


@ti.kernel
def _trace_probe(origin: vec3, direction: vec3, max_bounces: ti.i32):
    """Trace a single ray into the probe fields."""
    color, depth = trace_ray(origin, direction, max_bounces)
    _probe_color[None] = color
    _probe_depth[None] = depth


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(max_bounces: int) -> None:
    """Render every pixel of the render target.

    Camera, scene and kernel-visible settings must be set up beforehand.

    Args:
        max_bounces: Maximum number of mirror reflections per primary ray.

    Raises:
        RuntimeError: If the render target has not been set up.
        ValueError: If ``max_bounces`` is negative.
        IlluminationError: If a light of an unrecognized type was met. The
            image buffer is cleared.
    """
    _check_render_target_initialized()
    if max_bounces < 0:
        raise ValueError(f"max_bounces must be non-negative, got {max_bounces}")

    width, height = get_image_dimensions()
    clear_illumination_error()
    _render_kernel(width, height, max_bounces)

    try:
        check_illumination_error()
    except IlluminationError:
        clear_render_target()
        raise


def trace_single_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_bounces: int = 0,
) -> tuple[tuple[float, float, float], int]:
    """Trace one world-space ray and return its unclamped color.

    Intended for tests and debugging; uses the current camera t_min and
    kernel-visible settings.

    Args:
        origin: Ray origin.
        direction: Ray direction.
        max_bounces: Maximum number of reflection bounces.

    Returns:
        A tuple ((r, g, b), depth).

    Raises:
        IlluminationError: If a light of an unrecognized type was met.
    """
    clear_illumination_error()
    _trace_probe(vec3(*origin), vec3(*direction), max_bounces)
    check_illumination_error()

    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2])), int(_probe_depth[None])


def _active_region(field) -> np.ndarray:
    """Extract the active region of a buffer as (height, width, ...) top row first."""
    width, height = get_image_dimensions()
    data = field.to_numpy()[:width, :height]

    # Transpose from (width, height, ...) to (height, width, ...) for standard image format
    axes = (1, 0) + tuple(range(2, data.ndim))
    data = np.transpose(data, axes)

    # Flip vertically (Taichi uses bottom-left origin, images use top-left)
    return np.flipud(data)


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Returns:
        Array of shape (height, width, 3) with values in [0, 1], first row
        at the top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return np.ascontiguousarray(_active_region(_color_buffer), dtype=np.float32)


def get_bounce_counts_numpy() -> npt.NDArray[np.int32]:
    """Get the reflection bounces taken per pixel, shape (height, width).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return np.ascontiguousarray(_active_region(_bounce_buffer), dtype=np.int32)
