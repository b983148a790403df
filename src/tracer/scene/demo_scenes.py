"""Ready-made demonstration scenes.

Two scenes are provided:

- A closed mirror box: six inward-facing planes whose specular color makes
  every wall a partial mirror, a mirror sphere in the middle, a point light
  near the ceiling and a faint ambient light. Every primary ray keeps
  reflecting until the bounce budget runs out, which makes the scene a good
  check of the bounce limit.
- A showcase: a floor plane, a tilted triangle on its own scene node, a red
  sphere and a mirror sphere under a point light, a directional light and
  an ambient light.

Both factories return ``(SceneManager, PinholeCamera)``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.tracer.scene.demo_scenes import create_mirror_box_scene
    >>> from src.tracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_mirror_box_scene()
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

from dataclasses import dataclass

from src.tracer.camera.pinhole import PinholeCamera
from src.tracer.lights.light import AmbientLight, DirectionalLight, PointLight
from src.tracer.scene.manager import SceneManager

# =============================================================================
# Mirror Box
# =============================================================================


@dataclass
class MirrorBoxParams:
    """Parameters for configuring the mirror box scene.

    Attributes:
        half_size: Half the edge length of the box (the box spans
            [-half_size, half_size] on every axis).
        wall_specular: Specular color (and mirror reflectance) of the walls.
        light_color: Color of the point light near the ceiling.
        ambient_color: Color of the ambient light.
    """

    half_size: float = 2.0
    wall_specular: tuple[float, float, float] = (0.6, 0.6, 0.6)
    light_color: tuple[float, float, float] = (4.0, 4.0, 4.0)
    ambient_color: tuple[float, float, float] = (0.1, 0.1, 0.1)


# Wall diffuse colors: (normal pointing into the box, diffuse color)
MIRROR_BOX_WALLS = (
    ((1.0, 0.0, 0.0), (0.65, 0.05, 0.05)),  # Left, red
    ((-1.0, 0.0, 0.0), (0.12, 0.45, 0.15)),  # Right, green
    ((0.0, 1.0, 0.0), (0.73, 0.73, 0.73)),  # Floor
    ((0.0, -1.0, 0.0), (0.73, 0.73, 0.73)),  # Ceiling
    ((0.0, 0.0, 1.0), (0.2, 0.2, 0.6)),  # Back, blue
    ((0.0, 0.0, -1.0), (0.73, 0.73, 0.73)),  # Front (behind the camera)
)


def create_mirror_box_scene(
    params: MirrorBoxParams | None = None,
    aspect_ratio: float = 1.0,
) -> tuple[SceneManager, PinholeCamera]:
    """Create a closed box of partially mirrored walls.

    The walls are planes ``dot(x, n) = -half_size`` with ``n`` pointing into
    the box, so their normals face the camera and the light.

    Args:
        params: Optional MirrorBoxParams. If None, uses defaults.
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        A tuple of (SceneManager, PinholeCamera) with the camera inside the box.
    """
    if params is None:
        params = MirrorBoxParams()

    scene = SceneManager()
    h = params.half_size

    for normal, diffuse in MIRROR_BOX_WALLS:
        material = scene.add_material(
            ambient=diffuse,
            diffuse=diffuse,
            specular=params.wall_specular,
            shininess=16.0,
        )
        scene.add_plane(normal=normal, offset=-h, material_id=material)

    mirror = scene.add_material(
        ambient=(0.0, 0.0, 0.0),
        diffuse=(0.05, 0.05, 0.05),
        specular=(0.9, 0.9, 0.9),
        shininess=64.0,
    )
    scene.add_sphere(center=(0.0, -0.4 * h, -0.3 * h), radius=0.35 * h, material_id=mirror)

    light_node = scene.add_node(position=(0.0, 0.8 * h, 0.0), name="ceiling_light")
    scene.add_light(PointLight(color=params.light_color, attenuation=(1.0, 0.0, 0.0)), node=light_node)
    scene.add_light(AmbientLight(color=params.ambient_color))

    camera = PinholeCamera(
        lookfrom=(0.0, 0.0, 0.8 * h),
        lookat=(0.0, 0.0, -h),
        vup=(0.0, 1.0, 0.0),
        vfov=70.0,
        aspect_ratio=aspect_ratio,
    )
    return scene, camera


# =============================================================================
# Showcase
# =============================================================================


def create_showcase_scene(aspect_ratio: float = 16.0 / 9.0) -> tuple[SceneManager, PinholeCamera]:
    """Create a small scene exercising every primitive and light type.

    Args:
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        A tuple of (SceneManager, PinholeCamera).
    """
    scene = SceneManager()

    floor = scene.add_material(
        ambient=(0.4, 0.4, 0.4),
        diffuse=(0.6, 0.6, 0.6),
        specular=(0.2, 0.2, 0.2),
        shininess=8.0,
    )
    red = scene.add_material(
        ambient=(0.3, 0.05, 0.05),
        diffuse=(0.8, 0.1, 0.1),
        specular=(0.3, 0.3, 0.3),
        shininess=32.0,
    )
    mirror = scene.add_material(
        ambient=(0.0, 0.0, 0.0),
        diffuse=(0.0, 0.0, 0.0),
        specular=(0.9, 0.9, 0.9),
        shininess=128.0,
    )
    gold = scene.add_material(
        ambient=(0.25, 0.2, 0.05),
        diffuse=(0.75, 0.6, 0.2),
        specular=(0.0, 0.0, 0.0),
        shininess=1.0,
    )

    scene.add_plane(normal=(0.0, 1.0, 0.0), offset=0.0, material_id=floor)

    scene.add_sphere(center=(-1.2, 1.0, 0.0), radius=1.0, material_id=red)
    scene.add_sphere(center=(1.2, 1.0, -0.5), radius=1.0, material_id=mirror)

    # Triangle authored in its own frame, placed by a rotated and scaled node
    panel = scene.add_node(
        position=(0.0, 0.0, -3.0),
        rotation=(0.0, 20.0, 0.0),
        scale=(2.0, 2.0, 2.0),
        name="panel",
    )
    scene.add_triangle(
        positions=((-1.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.5, 0.0)),
        material_id=gold,
        node=panel,
    )

    lamp = scene.add_node(position=(2.0, 4.0, 3.0), name="lamp")
    scene.add_light(PointLight(color=(12.0, 12.0, 12.0), attenuation=(1.0, 0.0, 0.0)), node=lamp)
    scene.add_light(DirectionalLight(direction=(-1.0, -1.0, -0.5), color=(0.4, 0.4, 0.45)))
    scene.add_light(AmbientLight(color=(0.15, 0.15, 0.15)))

    camera = PinholeCamera(
        lookfrom=(0.0, 2.0, 7.0),
        lookat=(0.0, 1.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=45.0,
        aspect_ratio=aspect_ratio,
    )
    return scene, camera
