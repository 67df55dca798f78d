"""Explicit random-number streams for Taichi kernels.

Every stochastic function in the renderer takes a 32-bit generator state and
returns the advanced state alongside its sample, so a render never touches a
process-wide generator. Each (seed, pixel, sample) triple gets its own stream
via ``seed_sample``, which makes renders bit-identical for a given seed no
matter how the Taichi runtime schedules the parallel pixel loop or how the
samples are batched.

The generator is Marsaglia's xorshift32, seeded through Wang's integer hash.

Example:
    >>> @ti.kernel
    ... def noise(out: ti.template()):
    ...     for i in out:
    ...         state = seed_sample(ti.u32(7), i, 0)
    ...         value, state = random_float(state)
    ...         out[i] = value
"""

import taichi as ti


@ti.func
def wang_hash(key: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer (Thomas Wang's hash)."""
    h = key
    h = (h ^ ti.u32(61)) ^ ti.bit_shr(h, ti.u32(16))
    h = h * ti.u32(9)
    h = h ^ ti.bit_shr(h, ti.u32(4))
    h = h * ti.u32(0x27D4EB2D)
    h = h ^ ti.bit_shr(h, ti.u32(15))
    return h


@ti.func
def xorshift32(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 state. A zero state stays zero."""
    x = state
    x = x ^ (x << ti.u32(13))
    x = x ^ ti.bit_shr(x, ti.u32(17))
    x = x ^ (x << ti.u32(5))
    return x


@ti.func
def seed_sample(seed: ti.u32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive the generator state for one sample of one pixel.

    Args:
        seed: The render seed.
        pixel_index: Linear pixel index (row * width + col).
        sample_index: Index of the sample within the pixel.

    Returns:
        A non-zero xorshift32 state.
    """
    h = wang_hash(seed)
    h = wang_hash(h ^ ti.cast(pixel_index, ti.u32))
    h = wang_hash(h ^ ti.cast(sample_index, ti.u32))
    if h == ti.u32(0):
        h = ti.u32(1)
    return h


@ti.func
def random_float(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Uses the top 24 bits of the advanced state so the result is exactly
    representable in f32 and never rounds up to 1.0.

    Returns:
        A tuple (value, new_state).
    """
    next_state = xorshift32(state)
    value = ti.cast(ti.bit_shr(next_state, ti.u32(8)), ti.f32) * (1.0 / 16777216.0)
    return value, next_state


@ti.func
def random_range(state: ti.u32, low: ti.f32, high: ti.f32):
    """Draw a uniform float in [low, high).

    Returns:
        A tuple (value, new_state).
    """
    value, next_state = random_float(state)
    return low + (high - low) * value, next_state
