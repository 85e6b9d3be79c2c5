"""
Nishita Texture Utilities - In-memory texture for the optical-depth LUT.
"""

import numpy as np
from typing import Optional


class LUTTexture:
    """Holds an uploaded LUT as a float32 RGBA image."""

    FORMATS = {1: 'R32F', 2: 'RG32F', 3: 'RGB32F', 4: 'RGBA32F'}

    def __init__(self):
        self.data: Optional[np.ndarray] = None
        self.format: Optional[str] = None
        self._is_valid = False

    @property
    def is_valid(self) -> bool:
        return self._is_valid and self.data is not None

    @property
    def size(self):
        """(width, height) of the uploaded texture."""
        if not self.is_valid:
            return 0, 0
        return self.data.shape[1], self.data.shape[0]

    def upload(self, pixels: np.ndarray, width: int, height: int, channels: int = 4) -> 'LUTTexture':
        """
        Copy a flat pixel buffer into the texture.

        Args:
            pixels: Flat buffer, row-major, ``channels`` floats per texel
            width: Texels per row
            height: Number of rows
            channels: Channels per texel (1-4)
        """
        if channels not in self.FORMATS:
            raise ValueError(f"Unsupported channel count: {channels}")

        pixels = np.asarray(pixels, dtype=np.float32)
        expected = width * height * channels
        if pixels.size != expected:
            raise ValueError(f"Buffer holds {pixels.size} floats, expected {expected} "
                             f"for {width}x{height}x{channels}")

        # Free existing data
        self.free()

        self.data = np.array(pixels, dtype=np.float32).reshape(height, width, channels)
        self.format = self.FORMATS[channels]
        self._is_valid = True
        return self

    def free(self) -> None:
        """Drop the texture data."""
        self.data = None
        self.format = None
        self._is_valid = False
