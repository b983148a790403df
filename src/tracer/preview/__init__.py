"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display and gamma correction
    export: PNG export and image comparison utilities

Example:
    >>> from src.tracer.preview import show_image, save_png_from_array
    >>>
    >>> image = renderer.render(scene, camera)
    >>> show_image(image)
    >>> save_png_from_array(image, "output.png")
"""

from src.tracer.preview.display import apply_gamma, show_comparison, show_image
from src.tracer.preview.export import (
    compute_rmse,
    image_to_uint8,
    load_png_as_array,
    save_png_from_array,
)

__all__ = [
    # Display functions
    "show_image",
    "show_comparison",
    "apply_gamma",
    # Export functions
    "save_png_from_array",
    "load_png_as_array",
    "image_to_uint8",
    "compute_rmse",
]
