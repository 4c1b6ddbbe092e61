"""Per-frame random number streams for Monte Carlo sampling.

Every frame of a render owns exactly one random stream. A stream is a single
32-bit PCG state stored in a Taichi field and indexed by the stream id, so the
worker rendering frame ``f`` only ever advances ``_stream_states[f]``. There is
no shared mutable RNG state between frames, which keeps the frames
statistically independent and makes a render reproducible from its seed.

All sampling helpers take the stream id as an explicit argument.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.sampler import seed_streams, random_f32
    >>> seed_streams(4, seed=1234)
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     return random_f32(0)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import length_squared, normalize

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum number of independent streams (one per frame)
MAX_STREAMS = 1024

# PCG (RXS-M-XS, 32-bit) constants
_PCG_MULTIPLIER = 747796405
_PCG_INCREMENT = 1013904223
_PCG_OUTPUT_MULTIPLIER = 277803737

# 2^-24: maps the top 24 bits of a draw onto [0, 1)
_INV_2_POW_24 = 1.0 / 16777216.0

# Rejection sampling iteration cap
_MAX_REJECTION_TRIES = 100

_stream_states = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


def seed_streams(count: int, seed: int | None = None) -> None:
    """Seed the first ``count`` random streams.

    The states are derived with ``numpy.random.SeedSequence``, which produces
    well-mixed, independent 32-bit words even for consecutive integer seeds.
    Stream ``k`` receives the ``k``-th word, so the state of a given stream
    depends only on the seed and its index.

    Args:
        count: Number of streams to seed (usually the frame count).
        seed: Integer seed, or None to draw fresh OS entropy.

    Raises:
        ValueError: If count is less than 1.
        RuntimeError: If count exceeds MAX_STREAMS.
    """
    if count < 1:
        raise ValueError(f"Stream count must be at least 1, got {count}")
    if count > MAX_STREAMS:
        raise RuntimeError(f"Maximum number of streams ({MAX_STREAMS}) exceeded: {count}")

    states = np.zeros(MAX_STREAMS, dtype=np.uint32)
    states[:count] = np.random.SeedSequence(seed).generate_state(count, dtype=np.uint32)
    _stream_states.from_numpy(states)


def get_stream_state(stream: int) -> int:
    """Get the raw 32-bit state of a stream (for inspection and tests)."""
    return int(_stream_states[stream])


@ti.func
def random_u32(stream: ti.i32) -> ti.u32:
    """Advance a stream and return the next 32-bit output word.

    Args:
        stream: The stream id (frame index) owning the state.

    Returns:
        A uniformly distributed unsigned 32-bit integer.
    """
    state = _stream_states[stream] * ti.u32(_PCG_MULTIPLIER) + ti.u32(_PCG_INCREMENT)
    _stream_states[stream] = state
    shift = (state >> ti.u32(28)) + ti.u32(4)
    word = ((state >> shift) ^ state) * ti.u32(_PCG_OUTPUT_MULTIPLIER)
    return (word >> ti.u32(22)) ^ word


@ti.func
def random_f32(stream: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a stream."""
    return ti.cast(random_u32(stream) >> ti.u32(8), ti.f32) * _INV_2_POW_24


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling over the [-1, 1]^3 cube.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(_MAX_REJECTION_TRIES):
        if found == 0:
            p = vec3(
                random_f32(stream) * 2.0 - 1.0,
                random_f32(stream) * 2.0 - 1.0,
                random_f32(stream) * 2.0 - 1.0,
            )
            if length_squared(p) < 1.0:
                found = 1
    return p


@ti.func
def random_unit_vector(stream: ti.i32) -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Points too close to the origin to normalize reliably are rejected.
    """
    p = vec3(0.0, 0.0, 1.0)
    found = 0
    for _ in range(_MAX_REJECTION_TRIES):
        if found == 0:
            candidate = random_in_unit_sphere(stream)
            if length_squared(candidate) > 1e-12:
                p = normalize(candidate)
                found = 1
    return p


@ti.func
def random_in_unit_disk(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used for lens sampling (depth of field).

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    for _ in range(_MAX_REJECTION_TRIES):
        if found == 0:
            p = vec3(
                random_f32(stream) * 2.0 - 1.0,
                random_f32(stream) * 2.0 - 1.0,
                0.0,
            )
            if p.x * p.x + p.y * p.y < 1.0:
                found = 1
    return p
