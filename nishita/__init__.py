"""
Nishita - Optical-depth lookup tables for a Nishita-style sky model.

Precomputes, for a grid of (sample height, sun zenith angle) pairs, the
Rayleigh, Mie and ozone optical depth from the sample point toward the sun.
A real-time sky shader samples the resulting RGBA float texture instead of
ray-marching the sun ray per pixel.
"""

__version__ = "1.0.0"

from .core import (
    DensityVector,
    LUTParameters,
    SkyParameters,
    OpticalDepthLUT,
    ray_sphere_intersect,
    ozone_density,
)
from .controller import SkyController, SkyState
from .utils import LUTTexture, compare_luts
