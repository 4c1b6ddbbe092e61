"""Path tracing integrator for Monte Carlo light transport.

This module estimates the radiance carried along a single camera ray. At
every surface hit the direct contribution of the point lights is added, the
material scatters the ray, and the estimate continues along the scattered
ray. The recursive definition is

    ray_color(ray, 0)     = black
    ray_color(ray, depth) = background(ray)                         on a miss
                          = (ray_color(next, depth - 1) + L) * att  on scatter
                          = black                                   on absorption

where L is the direct light at the hit point and att the material
attenuation. It is evaluated here as an iterative loop carrying a
throughput (product of attenuations so far) and a radiance accumulator.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import trace_ray
    >>> from pathtracer.core.sampler import seed_streams
    >>> seed_streams(1, seed=7)
    >>> r, g, b = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=50)
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from pathtracer.materials.material import get_material, scatter
from pathtracer.scene.intersection import intersect_scene
from pathtracer.scene.lights import direct_light

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
MAX_DEPTH = 50

# t_min and t_max for ray intersection; T_MIN keeps continuation rays from
# re-hitting the surface they leave
T_MIN = 0.001
T_MAX = 1e10

# Sky gradient endpoints, scaled by BACKGROUND_SCALE
SKY_HORIZON = vec3(1.0, 1.0, 1.0)
SKY_ZENITH = vec3(0.5, 0.7, 1.0)
BACKGROUND_SCALE = 0.5


# =============================================================================
# Background
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky color seen by a ray that escapes the scene.

    A vertical gradient from white at the horizon to light blue overhead,
    driven by the y component of the normalized direction.

    Args:
        direction: The ray direction (any length).

    Returns:
        The background radiance.
    """
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return BACKGROUND_SCALE * ((1.0 - t) * SKY_HORIZON + t * SKY_ZENITH)


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (any length).
        max_depth: Number of bounces left. 0 returns black.
        stream: Random stream of the calling worker.

    Returns:
        The radiance estimate (RGB).
    """
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    ray_origin = origin
    ray_direction = direction

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                radiance += throughput * background_color(ray_direction)
                active = 0
            else:
                light = direct_light(rec.position, rec.normal)
                event = scatter(
                    get_material(rec.material_id),
                    ray_direction,
                    rec.position,
                    rec.normal,
                    rec.front_face,
                    stream,
                )

                if event.scattered == 0:
                    # Absorbed: the direct light at this vertex is dropped too
                    active = 0
                else:
                    throughput *= event.attenuation
                    radiance += throughput * light
                    ray_origin = event.origin
                    ray_direction = event.direction

    return radiance


@ti.func
def sanitize_color(color: vec3) -> vec3:
    """Replace NaN/Inf components with 0 and clamp negatives to 0."""
    result = tm.max(color, vec3(0.0, 0.0, 0.0))
    for c in ti.static(range(3)):
        if tm.isnan(color[c]) or tm.isinf(color[c]):
            result[c] = 0.0
    return result


# =============================================================================
# Single-ray Kernel
# =============================================================================


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, max_depth: ti.i32, stream: ti.i32) -> vec3:
    color = vec3(0.0, 0.0, 0.0)
    # Single serial iteration so the bounce loop stays sequential
    ti.loop_config(serialize=True)
    for _ in range(1):
        color = ray_color(origin, direction, max_depth, stream)
    return color


def trace_ray(
    origin: Sequence[float],
    direction: Sequence[float],
    max_depth: int = MAX_DEPTH,
    stream: int = 0,
) -> tuple[float, float, float]:
    """Trace one radiance estimate through the loaded scene.

    This is a Python-callable function for tests and diagnostics. For
    rendering images, use FrameRenderer which processes all frames in
    parallel.

    Args:
        origin: The ray origin (x, y, z).
        direction: The ray direction (x, y, z).
        max_depth: Maximum number of bounces.
        stream: The random stream to draw from (must be seeded).

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    color = _trace_ray_kernel(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
        stream,
    )
    return (float(color[0]), float(color[1]), float(color[2]))
