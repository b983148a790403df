"""Phong material properties and the scene material registry.

A Phong material describes how a surface responds to local illumination:

    color = ambient * I_ambient
          + sum_lights( max(0, n.l) * diffuse * I
                      + max(0, r.v)^shininess * specular * I )

The specular color doubles as the mirror reflectance used by the recursive
tracer: a surface whose mean specular component exceeds a small threshold
spawns a reflection ray weighted by ``specular``.

Materials are stored in preallocated Taichi fields (Structure of Arrays) and
looked up by index inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.tracer.materials.phong import add_phong_material
    >>> idx = add_phong_material(
    ...     ambient=(0.1, 0.1, 0.1),
    ...     diffuse=(0.8, 0.2, 0.2),
    ...     specular=(0.3, 0.3, 0.3),
    ...     shininess=32.0,
    ... )
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class PhongMaterial:
    """Phong reflectance properties.

    Attributes:
        ambient: Ambient reflectance color (RGB).
        diffuse: Diffuse reflectance color (RGB).
        specular: Specular reflectance color (RGB); also the mirror weight.
        shininess: Specular exponent (non-negative).
    """

    ambient: vec3
    diffuse: vec3
    specular: vec3
    shininess: ti.f32


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_PHONG_MATERIALS = 256

phong_ambient = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
phong_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
phong_specular = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
phong_shininess = ti.field(dtype=ti.f32, shape=MAX_PHONG_MATERIALS)
num_phong_materials = ti.field(dtype=ti.i32, shape=())


def clear_phong_materials() -> None:
    """Clear all Phong materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_phong_materials[None] = 0


def _validate_color(name: str, color: tuple[float, float, float]) -> None:
    if len(color) != 3:
        raise ValueError(f"{name} color must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0:
            raise ValueError(f"{name} component {i} = {component} is negative")


def add_phong_material(
    ambient: tuple[float, float, float],
    diffuse: tuple[float, float, float],
    specular: tuple[float, float, float],
    shininess: float,
) -> int:
    """Add a Phong material to the material registry.

    Colors are not clamped to [0, 1]; energy is only clamped when the final
    pixel is written.

    Args:
        ambient: Ambient reflectance (R, G, B), non-negative.
        diffuse: Diffuse reflectance (R, G, B), non-negative.
        specular: Specular reflectance (R, G, B), non-negative.
        shininess: Specular exponent, non-negative.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If a color component or the shininess is negative.
    """
    _validate_color("Ambient", ambient)
    _validate_color("Diffuse", diffuse)
    _validate_color("Specular", specular)
    if shininess < 0.0:
        raise ValueError(f"Shininess must be non-negative, got {shininess}")

    idx = num_phong_materials[None]
    if idx >= MAX_PHONG_MATERIALS:
        raise RuntimeError(f"Maximum number of Phong materials ({MAX_PHONG_MATERIALS}) exceeded")

    phong_ambient[idx] = vec3(ambient[0], ambient[1], ambient[2])
    phong_diffuse[idx] = vec3(diffuse[0], diffuse[1], diffuse[2])
    phong_specular[idx] = vec3(specular[0], specular[1], specular[2])
    phong_shininess[idx] = shininess
    num_phong_materials[None] = idx + 1
    return idx


def get_phong_material_count() -> int:
    """Get the number of Phong materials in the registry."""
    return int(num_phong_materials[None])


@ti.func
def get_phong_material(material_idx: ti.i32) -> PhongMaterial:
    """Look up a Phong material by index.

    Args:
        material_idx: The index of the material in the registry.

    Returns:
        The material properties.
    """
    return PhongMaterial(
        ambient=phong_ambient[material_idx],
        diffuse=phong_diffuse[material_idx],
        specular=phong_specular[material_idx],
        shininess=phong_shininess[material_idx],
    )
