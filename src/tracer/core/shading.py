"""Phong shading evaluator with shadow rays.

The local color at a surface point is

    ambient   = sum over ambient lights of material.ambient * light.color
    diffuse   = max(0, n.l) * material.diffuse * I
    specular  = max(0, r.v)^shininess * material.specular * I

summed over every directional and point light that is not occluded, where
``l`` is the unit direction toward the light, ``I`` the intensity arriving at
the point, ``r = reflect(-l, n)`` and ``v`` the unit direction back toward
the viewer. The result is not clamped.

When shadows are enabled, a shadow ray starts at ``hit_point + RAY_EPSILON * l``
and the light is occluded if any entity lies closer than the light distance
minus RAY_EPSILON (world distance from the shadow ray origin). An occluded
light contributes neither diffuse nor specular; ambient is never shadowed.
"""

import taichi as ti
import taichi.math as tm

from src.tracer.camera.pinhole import get_t_min
from src.tracer.core.illumination import get_illumination
from src.tracer.core.ray import reflect
from src.tracer.core.settings import RAY_EPSILON, shadows_enabled
from src.tracer.lights.light import LightType, get_light_color, get_light_count, get_light_type
from src.tracer.materials.phong import PhongMaterial
from src.tracer.scene.intersection import intersect_scene_any

vec3 = tm.vec3


@ti.func
def is_occluded(hit_point: vec3, direction_to_light: vec3, light_distance: ti.f32) -> ti.i32:
    """Cast a shadow ray from a surface point toward a light.

    Args:
        hit_point: World-space surface point.
        direction_to_light: Unit direction toward the light.
        light_distance: World distance from ``hit_point`` to the light.

    Returns:
        1 if an entity blocks the light, 0 otherwise.
    """
    shadow_origin = hit_point + RAY_EPSILON * direction_to_light
    return intersect_scene_any(
        shadow_origin, direction_to_light, get_t_min(), light_distance - RAY_EPSILON
    )


@ti.func
def compute_phong_shading(
    hit_point: vec3,
    normal: vec3,
    ray_direction: vec3,
    material: PhongMaterial,
) -> vec3:
    """Evaluate the local Phong color at a surface point.

    Args:
        hit_point: World-space surface point.
        normal: World-space unit normal at the point.
        ray_direction: Direction of the ray that hit the point.
        material: The surface material.

    Returns:
        The unclamped local color.
    """
    view = tm.normalize(-ray_direction)
    color = vec3(0.0, 0.0, 0.0)

    for i in range(get_light_count()):
        light_type = get_light_type(i)

        if light_type == int(LightType.AMBIENT):
            color += material.ambient * get_light_color(i)
        else:
            direction_to_light, intensity, light_distance = get_illumination(i, hit_point)

            visible = 1
            if shadows_enabled() == 1:
                visible = 1 - is_occluded(hit_point, direction_to_light, light_distance)

            if visible == 1:
                n_dot_l = tm.max(0.0, tm.dot(normal, direction_to_light))
                color += n_dot_l * material.diffuse * intensity

                reflected = reflect(-direction_to_light, normal)
                r_dot_v = tm.max(0.0, tm.dot(reflected, view))
                color += tm.pow(r_dot_v, material.shininess) * material.specular * intensity

    return color
