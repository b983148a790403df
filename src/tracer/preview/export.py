"""Image export utilities for rendered images.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from src.tracer.preview.export import save_png_from_array
    >>>
    >>> image = renderer.render(scene, camera)
    >>> save_png_from_array(image, "output.png")
"""

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.tracer.preview.display import apply_gamma


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a float image in [0, 1] to uint8 for display/export.

    Values are clamped to [0, 1] and scaled by 255.

    Args:
        image: Image array of shape (H, W, 3).
        gamma: Gamma correction value (1.0 keeps the colors unchanged).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = np.clip(apply_gamma(image, gamma), 0.0, 1.0)
    return (processed * 255).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a NumPy array as a PNG file.

    Args:
        image: Image array of shape (H, W, 3), first row at the top.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (1.0 keeps the colors unchanged).
    """
    image_uint8 = image_to_uint8(image, gamma=gamma)

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def load_png_as_array(filepath: str) -> npt.NDArray[np.float32]:
    """Load an image file as float32 RGB values in [0, 1], shape (H, W, 3)."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.float32) / 255.0


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
