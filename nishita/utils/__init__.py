"""
Nishita Utilities
"""

from .textures import LUTTexture
from .compare import compare_luts
from .exr import LUTEXRWriter, EXRTextureSink, read_lut_exr, HAS_OPENEXR
