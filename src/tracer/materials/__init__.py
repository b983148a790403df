"""Materials module for local shading models.

Components:
    phong: Phong reflectance (ambient, diffuse, specular, shininess) and
        the Taichi-field material registry

The specular color of a Phong material is also the weight of the mirror
reflection spawned by the recursive tracer.
"""

from .phong import (
    MAX_PHONG_MATERIALS,
    PhongMaterial,
    add_phong_material,
    clear_phong_materials,
    get_phong_material,
    get_phong_material_count,
)

__all__ = [
    "PhongMaterial",
    "MAX_PHONG_MATERIALS",
    "add_phong_material",
    "clear_phong_materials",
    "get_phong_material",
    "get_phong_material_count",
]
