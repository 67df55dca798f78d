"""pinray: a Taichi-based Whitted-style ray tracer.

Renders scenes of spheres, axis-aligned rectangles and boxes lit by point
lights, with matte, reflective and transparent materials, and writes the
result as a PNG.

Subpackages:
    core: Rays, random streams, lighting, integrator, renderer and config
    geometry: Shape primitives and intersection algorithms
    materials: Surface scattering models
    scene: Primitive storage, lights, scene manager and the demo room
    camera: Pinhole camera with ray generation
    preview: Quantization and PNG export

Modules that declare Taichi fields must be imported after ``ti.init()``.
"""

__version__ = "0.1.0"
