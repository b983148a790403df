"""Taichi-based recursive (Whitted-style) ray tracer.

This package renders scenes of planes, triangles and spheres lit by
directional, point and ambient lights, with support for:
- Closest-hit search over entities placed by a scene graph of transforms
- Phong shading with shadow rays
- Mirror reflections up to a fixed bounce budget
- Optional cube-map environment for rays that miss
- JSON scene descriptions and PNG output

Subpackages:
    core: Rays, settings, illumination, shading, the tracing driver and renderer
    geometry: Primitive intersection tests and hit records
    materials: Phong material registry
    lights: Light variants and the light registry
    scene: Scene graph, entity storage, environment map and scene manager
    camera: Pinhole camera with ray generation
    preview: Image export and Matplotlib preview
"""

__version__ = "0.1.0"
