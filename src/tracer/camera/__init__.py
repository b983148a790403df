"""Camera module for view and primary ray generation.

Components:
    pinhole: Simple pinhole (perspective) camera model

Ray generation uses normalized device coordinates:
    x in [-1, 1]: left to right across image
    y in [-1, 1]: bottom to top across image

Each pixel is sampled exactly once, through its center.
"""

from .pinhole import (
    PinholeCamera,
    generate_ray,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_t_min,
    get_t_min_python,
    pixel_to_ndc,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "generate_ray",
    "pixel_to_ndc",
    "get_t_min",
    "get_t_min_python",
    "get_camera_origin",
    "get_camera_info",
]
