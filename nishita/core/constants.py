"""
Nishita Constants - Default configuration for the optical-depth LUT.

All lengths are in meters.
"""

import math

# LUT grid resolution (texels)
LUT_HEIGHT_STEPS = 128
LUT_ANGLE_STEPS = 128

# Integration samples along the secondary (sun) ray
J_STEPS = 8

# Planet geometry
PLANET_RADIUS = 6360000.0
ATMOSPHERE_RADIUS = 6420000.0

# Scattering scale heights
RAYLEIGH_SCALE_HEIGHT = 8000.0
MIE_SCALE_HEIGHT = 1200.0

# Ozone layer, piecewise-linear tent (meters)
OZONE_BOTTOM_ALTITUDE = 10000.0
OZONE_PEAK_ALTITUDE = 25000.0
OZONE_TOP_ALTITUDE = 40000.0

# Ray-sphere miss sentinel, near > far signals "no hit"
NO_HIT_NEAR = 1e5
NO_HIT_FAR = -1e5

# Texel layout: rayleigh, mie, ozone, unused
LUT_CHANNELS = 4
LUT_UNUSED_CHANNEL_VALUE = 1.0

# Sun zenith angle range covered by the LUT
MAX_SUN_ZENITH_ANGLE = math.pi
