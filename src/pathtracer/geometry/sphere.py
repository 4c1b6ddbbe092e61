"""Sphere primitive with analytic ray-sphere intersection.

This module provides a Sphere dataclass and the ray-sphere intersection test,
the only root-finding in the renderer.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

which expands to the quadratic a*t^2 + 2*h*t + c = 0 with:
    oc = origin - center
    a  = dot(direction, direction)
    h  = dot(oc, direction)        (half of the traditional b)
    c  = dot(oc, oc) - radius^2

Using the half-b form keeps the discriminant h^2 - a*c free of the factor-4
terms and avoids needless cancellation. The coefficients are computed from
the raw direction, so the result does not depend on the direction's length.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The ray parameter of the intersection, in [t_min, t_max).
            Only valid if hit == 1.
        position: The 3D point where the ray intersected the sphere.
            Only valid if hit == 1.
        normal: The unit surface normal, always oriented against the
            incoming ray. Only valid if hit == 1.
        front_face: 1 if the ray hit the outside of the sphere, 0 if it hit
            from the inside. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    position: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    The smaller root is preferred; if it falls outside [t_min, t_max) the
    larger root is tried. A ray starting inside the sphere therefore hits the
    far wall from the inside (front_face == 0).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Smallest accepted t (inclusive).
        t_max: Upper bound on accepted t (exclusive).

    Returns:
        A HitRecord containing intersection information. Check the hit field
        to determine if an intersection occurred.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_position = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearest root in the accepted interval
        t = (-half_b - sqrt_d) / a
        valid = t >= t_min and t < t_max

        if not valid:
            t = (-half_b + sqrt_d) / a
            valid = t >= t_min and t < t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_position = ray_origin + t * ray_direction

            outward_normal = (hit_position - sphere.center) / sphere.radius

            if tm.dot(ray_direction, outward_normal) <= 0.0:
                is_front_face = 1
                hit_normal = outward_normal
            else:
                # Ray is inside the sphere, hitting the back face
                is_front_face = 0
                hit_normal = -outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        position=hit_position,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
