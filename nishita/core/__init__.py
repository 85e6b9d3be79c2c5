"""
Nishita Core - Optical-depth LUT precomputation.
"""

from .constants import *
from .parameters import DensityVector, LUTParameters, SkyParameters
from .geometry import ray_sphere_intersect, ozone_density
from .backend import ComputeBackend, CUPY_AVAILABLE, get_backend, set_backend, is_gpu_available
from .model import (
    OpticalDepthLUT,
    lut_height_from_index,
    lut_angle_from_index,
    lut_uv_from_height_angle,
)
