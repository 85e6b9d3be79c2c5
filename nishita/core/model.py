"""
Nishita LUT Model - Optical-depth lookup table precomputation.

This module handles:
- The (height, sun zenith angle) parameterization with horizon-precision remap
- Secondary-ray optical-depth integration (Rayleigh, Mie, ozone)
- Filling and persisting the flat RGBA float32 pixel buffer

The buffer layout is shared with the sky shader that samples it:
row-major with height as the fast index, texel (x, y) at (x + y * width) * 4,
channels [rayleigh, mie, ozone, 1.0].
"""

import math
import numpy as np
from typing import Optional

from .constants import LUT_CHANNELS, LUT_UNUSED_CHANNEL_VALUE, MAX_SUN_ZENITH_ANGLE
from .parameters import LUTParameters, DensityVector
from .geometry import ray_sphere_intersect, ozone_density
from .backend import ComputeBackend, get_backend


def lut_height_from_index(x, params: LUTParameters, xp=np):
    """Sample height (meters) for height index x. Quadratic: dense near the ground."""
    u = (xp.asarray(x, dtype=xp.float64) + 0.5) / params.lut_height_steps
    return u * u * params.get_atmosphere_height()


def lut_angle_from_index(y, params: LUTParameters, xp=np):
    """Sun zenith angle (radians, [0, pi]) for angle index y. Signed square: dense near the horizon."""
    v = 2.0 * (xp.asarray(y, dtype=xp.float64) + 0.5) / params.lut_angle_steps - 1.0
    v = xp.sign(v) * v * v
    half = MAX_SUN_ZENITH_ANGLE / 2.0
    return v * half + half


def lut_uv_from_height_angle(height, angle, params: LUTParameters):
    """
    Inverse of the fill remap: fractional texel coordinates (x, y) for a
    sample height in meters and a sun zenith angle in radians.

    Integer results land on texel centers.
    """
    h = np.clip(np.asarray(height, dtype=np.float64), 0.0, params.get_atmosphere_height())
    u = np.sqrt(h / params.get_atmosphere_height())

    half = MAX_SUN_ZENITH_ANGLE / 2.0
    v = (np.clip(np.asarray(angle, dtype=np.float64), 0.0, MAX_SUN_ZENITH_ANGLE) - half) / half
    v = np.sign(v) * np.sqrt(np.abs(v))

    x = u * params.lut_height_steps - 0.5
    y = (v + 1.0) * 0.5 * params.lut_angle_steps - 0.5
    return x, y


class OpticalDepthLUT:
    """
    Optical-depth LUT dataset.

    Owns the pixel buffer and the parameters it was generated with.
    The buffer is fully overwritten by every compute() call.
    """

    def __init__(self, params: Optional[LUTParameters] = None, backend: Optional[ComputeBackend] = None):
        """
        Args:
            params: Generation parameters. Uses Earth defaults if None.
            backend: Array backend for the fill. Uses the shared backend if None.
        """
        self.params = params or LUTParameters.earth_default()
        self.backend = backend or get_backend()
        self.pixels: Optional[np.ndarray] = None
        self._is_computed = False

    @property
    def is_initialized(self) -> bool:
        """Check if the pixel buffer has been allocated."""
        return self.pixels is not None

    @property
    def is_computed(self) -> bool:
        """Check if the buffer holds computed texels."""
        return self._is_computed

    @property
    def width(self) -> int:
        return self.params.lut_height_steps

    @property
    def height(self) -> int:
        return self.params.lut_angle_steps

    def init(self) -> None:
        """Allocate the pixel buffer for the configured resolution."""
        self.pixels = np.zeros(self.params.buffer_length, dtype=np.float32)
        self._is_computed = False

    def integrate_secondary_ray(self, height, angle, density: DensityVector, xp=None):
        """
        Optical depth from a sample point toward the sun.

        The sample sits on the vertical axis at ``height`` above the ground;
        the sun direction is (0, sin(angle), cos(angle)). The ray is marched
        to the far atmosphere boundary in j_steps midpoint samples.

        When the sun is below the horizon the ray crosses the planet; march
        samples under the ground use ground-level Rayleigh/Mie density so the
        result stays finite. For those angles the ground row is not always
        the largest Rayleigh depth: a higher sample can have a longer chord
        through the planet.

        Args:
            height: Sample height above the planet surface (meters), scalar or array
            angle: Sun zenith angle in radians [0, pi], broadcastable with height
            density: Rayleigh, Mie and ozone multipliers

        Returns:
            Array of shape (..., 3): rayleigh, mie and ozone optical depth.
        """
        xp = xp or self.backend.xp
        p = self.params

        height = xp.asarray(height, dtype=xp.float64)
        angle = xp.asarray(angle, dtype=xp.float64)
        height, angle = xp.broadcast_arrays(height, angle)

        zeros = xp.zeros_like(height)
        origin = xp.stack([zeros, zeros, height + p.radius_planet], axis=-1)
        sun_dir = xp.stack([zeros, xp.sin(angle), xp.cos(angle)], axis=-1)

        # The sample is inside the atmosphere, so the far hit always exists
        _, far = ray_sphere_intersect(origin, sun_dir, p.radius_atmo, xp=xp)
        step = xp.asarray(far, dtype=xp.float64) / p.j_steps

        rho = density.as_array()
        rayleigh = xp.zeros_like(height)
        mie = xp.zeros_like(height)
        ozone = xp.zeros_like(height)

        t = xp.zeros_like(height)
        for _ in range(p.j_steps):
            pos = origin + sun_dir * xp.expand_dims(t + step * 0.5, -1)
            step_height = xp.sqrt(xp.sum(pos * pos, axis=-1)) - p.radius_planet

            # Below-ground samples (sun under the horizon) use ground density
            decay_height = xp.maximum(step_height, 0.0)
            rayleigh += xp.exp(-decay_height / p.rayleigh_scale) * rho[0]
            mie += xp.exp(-decay_height / p.mie_scale) * rho[1]
            ozone += ozone_density(step_height, xp=xp) * rho[2]

            t = t + step

        return xp.stack([rayleigh, mie, ozone], axis=-1) * xp.expand_dims(step, -1)

    def compute(self, density: Optional[DensityVector] = None, progress_callback=None) -> np.ndarray:
        """
        Fill the whole pixel buffer.

        Args:
            density: Density multipliers. Defaults to (1, 1, 1).
            progress_callback: Optional callback(progress, message)

        Returns:
            The flat float32 pixel buffer.
        """
        density = density or DensityVector()
        p = self.params
        # Fields may have been edited since construction
        p.validate()
        xp = self.backend.xp

        if self.pixels is None or self.pixels.size != p.buffer_length:
            self.init()

        if progress_callback:
            progress_callback(0.0, f"Computing optical depth LUT {p.lut_height_steps}x{p.lut_angle_steps}...")

        heights = lut_height_from_index(xp.arange(p.lut_height_steps), p, xp=xp)
        angles = lut_angle_from_index(xp.arange(p.lut_angle_steps), p, xp=xp)

        # (angle, height) grid: height is the fast index
        depth = self.integrate_secondary_ray(heights[None, :], angles[:, None], density, xp=xp)
        self.backend.synchronize()

        image = self.pixels.reshape(p.lut_angle_steps, p.lut_height_steps, LUT_CHANNELS)
        image[..., :3] = self.backend.to_numpy(depth)
        image[..., 3] = LUT_UNUSED_CHANNEL_VALUE

        self._is_computed = True

        if progress_callback:
            progress_callback(1.0, "Optical depth LUT complete.")

        return self.pixels

    def as_image(self) -> np.ndarray:
        """Return the buffer as an (angle_steps, height_steps, 4) view."""
        if not self._is_computed:
            raise RuntimeError("LUT not computed. Call compute() first.")
        return self.pixels.reshape(self.height, self.width, LUT_CHANNELS)

    def texel(self, x: int, y: int) -> np.ndarray:
        """Return the 4 channels of texel (x, y)."""
        if not self._is_computed:
            raise RuntimeError("LUT not computed. Call compute() first.")
        index = (x + y * self.width) * LUT_CHANNELS
        return self.pixels[index:index + LUT_CHANNELS]

    def sample(self, height: float, angle: float) -> np.ndarray:
        """
        Bilinear lookup of the optical depth at (height, angle), the way
        the sky shader reads the texture (clamped to the edge texels).

        Returns:
            (3,) array: rayleigh, mie and ozone optical depth.
        """
        image = self.as_image()
        x, y = lut_uv_from_height_angle(height, angle, self.params)
        x = float(np.clip(x, 0.0, self.width - 1))
        y = float(np.clip(y, 0.0, self.height - 1))

        x0, y0 = int(math.floor(x)), int(math.floor(y))
        x1, y1 = min(x0 + 1, self.width - 1), min(y0 + 1, self.height - 1)
        fx, fy = x - x0, y - y0

        top = image[y0, x0, :3] * (1.0 - fx) + image[y0, x1, :3] * fx
        bottom = image[y1, x0, :3] * (1.0 - fx) + image[y1, x1, :3] * fx
        return top * (1.0 - fy) + bottom * fy

    def save_textures(self, filepath: str) -> None:
        """Save the buffer and its generation parameters (NumPy .npz)."""
        if not self._is_computed:
            raise RuntimeError("LUT not computed. Call compute() first.")

        np.savez_compressed(
            filepath,
            pixels=self.pixels,
            **{name: np.asarray(value) for name, value in self.params.to_dict().items()}
        )

    def load_textures(self, filepath: str) -> None:
        """Load a buffer saved by save_textures(), replacing the parameters."""
        with np.load(filepath) as data:
            params = LUTParameters(**{
                name: data[name].item()
                for name in LUTParameters.earth_default().to_dict()
            })
            pixels = np.asarray(data['pixels'], dtype=np.float32)

        if pixels.size != params.buffer_length:
            raise ValueError(
                f"Buffer holds {pixels.size} floats, expected {params.buffer_length}"
            )
        self.params = params
        self.pixels = pixels
        self._is_computed = True
