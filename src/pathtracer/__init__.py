"""Monte Carlo sphere path tracer built on Taichi.

This package renders scenes of spheres lit by point lights, with support for:
- Path tracing with direct point-light shadow rays at every bounce
- Lambertian, metal and dielectric materials
- A thin-lens camera with depth of field
- Independent per-frame random streams averaged into the final image

Subpackages:
    core: Vector/ray math, random streams, the path integrator and the frame renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Material models and scattering dispatch
    scene: Scene aggregate, lights, settings, scene files and scene builders
    camera: Thin-lens camera with ray generation
    preview: Tone mapping, gamma/sRGB encoding and PNG export
"""

__version__ = "0.1.0"
