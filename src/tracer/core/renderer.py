"""High-level renderer tying settings, camera, scene and render target together.

The Renderer class owns a RenderSettings instance and drives one full
render: it resizes the render target, copies the kernel-visible settings,
configures the camera and launches the tracing kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.tracer.core.renderer import Renderer
    >>> from src.tracer.core.settings import RenderSettings
    >>> from src.tracer.scene.demo_scenes import create_showcase_scene
    >>>
    >>> settings = RenderSettings(width=320, height=180, max_bounces=3)
    >>> scene, camera = create_showcase_scene(aspect_ratio=settings.aspect_ratio)
    >>> renderer = Renderer(settings)
    >>> image = renderer.render(scene, camera)
    >>> renderer.save("showcase.png")
"""

import logging
import time
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.tracer.camera.pinhole import PinholeCamera, setup_camera
from src.tracer.core.settings import RenderSettings, apply_settings
from src.tracer.core.tracer import (
    get_bounce_counts_numpy,
    get_image_numpy,
    render_image,
    setup_render_target,
)
from src.tracer.preview.export import save_png_from_array
from src.tracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)


class Renderer:
    """Renders a scene through a camera with fixed settings.

    The renderer delegates to the global render target (Taichi fields), so
    only one image is held at a time.

    Attributes:
        settings: The render settings used by render().
    """

    def __init__(self, settings: RenderSettings | None = None) -> None:
        """Initialize the renderer.

        Args:
            settings: Render settings. Defaults to RenderSettings().
        """
        self.settings = settings if settings is not None else RenderSettings()
        self._has_image = False
        setup_render_target(self.settings.width, self.settings.height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.height

    def render(self, scene: SceneManager, camera: PinholeCamera) -> npt.NDArray[np.float32]:
        """Render the scene and return the image.

        Args:
            scene: The scene to render. Its world matrices are re-uploaded
                first, so node edits made since the last render are seen.
            camera: The camera to render through.

        Returns:
            The image as (height, width, 3) float32 values in [0, 1].

        Raises:
            IlluminationError: If a light of an unrecognized type was met.
                No image is kept.
        """
        if not np.isclose(camera.aspect_ratio, self.settings.aspect_ratio, rtol=1e-3):
            logger.warning(
                "Camera aspect ratio %.3f differs from image aspect ratio %.3f",
                camera.aspect_ratio,
                self.settings.aspect_ratio,
            )

        setup_render_target(self.settings.width, self.settings.height)
        apply_settings(self.settings)
        setup_camera(camera)
        scene.update_transforms()

        logger.info(
            "Rendering %dx%d, %d entities, %d lights, max %d bounces",
            self.settings.width,
            self.settings.height,
            scene.get_entity_count(),
            scene.get_light_count(),
            self.settings.max_bounces,
        )
        self._has_image = False
        start = time.perf_counter()
        render_image(self.settings.max_bounces)
        self._has_image = True
        logger.info("Render finished in %.2fs", time.perf_counter() - start)

        return get_image_numpy()

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the rendered image as a NumPy array.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        if not self._has_image:
            raise RuntimeError("No image rendered yet. Call render() first.")
        image = get_image_numpy()

        if gamma != 1.0:
            image = np.power(image, 1.0 / gamma)

        return image

    def get_bounce_counts(self) -> npt.NDArray[np.int32]:
        """Reflection bounces taken by each pixel's primary ray.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        if not self._has_image:
            raise RuntimeError("No image rendered yet. Call render() first.")
        return get_bounce_counts_numpy()

    def save(self, filepath: str | Path, gamma: float = 1.0) -> None:
        """Save the rendered image as a PNG file.

        Args:
            filepath: Output path.
            gamma: Gamma correction value. Default 1.0 writes the clamped
                colors unchanged.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        save_png_from_array(self.get_image_numpy(), str(filepath), gamma=gamma)
        logger.info("Saved image to %s", filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"max_bounces={self.settings.max_bounces})"
        )
