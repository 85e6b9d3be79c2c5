"""
Nishita Geometry - Ray-sphere intersection and the ozone density profile.

Both functions accept scalars or arrays. The array module (NumPy or CuPy)
is passed as ``xp`` so the LUT fill can run on either backend.
"""

import numpy as np

from .constants import (
    NO_HIT_NEAR,
    NO_HIT_FAR,
    OZONE_BOTTOM_ALTITUDE,
    OZONE_PEAK_ALTITUDE,
    OZONE_TOP_ALTITUDE,
)


def ray_sphere_intersect(origin, direction, radius, xp=np):
    """
    Intersect a ray with a sphere centered at the origin.

    Solves a*t^2 + b*t + c = 0 with a = d.d, b = 2 d.o, c = o.o - r^2.

    Args:
        origin: Ray origin, shape (3,) or (..., 3)
        direction: Normalized ray direction, same shape as origin
        radius: Sphere radius

    Returns:
        (near, far) distances along the ray. On a miss returns the
        sentinel (1e5, -1e5): callers must check near <= far.
    """
    origin = xp.asarray(origin, dtype=xp.float64)
    direction = xp.asarray(direction, dtype=xp.float64)

    a = xp.sum(direction * direction, axis=-1)
    b = 2.0 * xp.sum(direction * origin, axis=-1)
    c = xp.sum(origin * origin, axis=-1) - radius * radius
    d = b * b - 4.0 * a * c

    miss = d < 0.0
    sqrt_d = xp.sqrt(xp.maximum(d, 0.0))

    near = xp.where(miss, NO_HIT_NEAR, (-b - sqrt_d) / (2.0 * a))
    far = xp.where(miss, NO_HIT_FAR, (-b + sqrt_d) / (2.0 * a))

    if near.ndim == 0:
        return float(near), float(far)
    return near, far


def ozone_density(height, xp=np):
    """
    Dimensionless ozone density weight at the given altitude (meters).

    Tent profile: 0 below 10 km, rising to 1 at 25 km, back to 0 at 40 km,
    and 0 from 40 km upwards.
    """
    h = xp.asarray(height, dtype=xp.float64)

    rising = (h - OZONE_BOTTOM_ALTITUDE) / (OZONE_PEAK_ALTITUDE - OZONE_BOTTOM_ALTITUDE)
    falling = 1.0 - (h - OZONE_PEAK_ALTITUDE) / (OZONE_TOP_ALTITUDE - OZONE_PEAK_ALTITUDE)

    density = xp.where(
        h < OZONE_BOTTOM_ALTITUDE, 0.0,
        xp.where(
            h < OZONE_PEAK_ALTITUDE, rising,
            xp.where(h < OZONE_TOP_ALTITUDE, falling, 0.0)
        )
    )

    if density.ndim == 0:
        return float(density)
    return density
