"""
Nishita EXR Utilities - OpenEXR export of the optical-depth LUT.
"""

import numpy as np
from typing import Dict
import os

# Try to import OpenEXR - optional extra
try:
    import OpenEXR
    import Imath
    HAS_OPENEXR = True
except ImportError:
    HAS_OPENEXR = False


class LUTEXRWriter:
    """
    Writes LUT layers to a float EXR file.

    Channel naming: nishita.<layer>.R/G/B/A, so the optical depth LUT is
    nishita.optical_depth.R (rayleigh), .G (mie), .B (ozone), .A (unused).
    Row 0 of the image is angle index 0.
    """

    CHANNEL_PREFIX = "nishita"
    COMPONENTS = ('R', 'G', 'B', 'A')

    def __init__(self, width: int, height: int, half_precision: bool = False):
        """
        Initialize EXR writer.

        Args:
            width: Image width in pixels
            height: Image height in pixels
            half_precision: Use 16-bit float (True) or 32-bit float (False)
        """
        self.width = width
        self.height = height
        self.half_precision = half_precision
        self.layers: Dict[str, np.ndarray] = {}

    def add_layer(self, name: str, data: np.ndarray) -> None:
        """
        Add a layer to the EXR.

        Args:
            name: Layer name (e.g., "optical_depth")
            data: Image data as (height, width, 4) array
        """
        if data.shape != (self.height, self.width, 4):
            raise ValueError(f"Layer data must be shape ({self.height}, {self.width}, 4), "
                             f"got {data.shape}")

        self.layers[name] = np.asarray(data, dtype=np.float32)

    def write(self, filepath: str) -> None:
        """
        Write the EXR file.

        Args:
            filepath: Output file path
        """
        if not HAS_OPENEXR:
            raise RuntimeError("OpenEXR module not available. "
                               "Install with: pip install OpenEXR")

        if not self.layers:
            raise ValueError("No layers added to EXR")

        if self.half_precision:
            pixel_type = Imath.PixelType(Imath.PixelType.HALF)
            dtype = np.float16
        else:
            pixel_type = Imath.PixelType(Imath.PixelType.FLOAT)
            dtype = np.float32

        header = OpenEXR.Header(self.width, self.height)
        channels = {}
        channel_data = {}

        for layer_name, data in self.layers.items():
            for i, component in enumerate(self.COMPONENTS):
                full_name = f"{self.CHANNEL_PREFIX}.{layer_name}.{component}"
                channels[full_name] = Imath.Channel(pixel_type)
                channel_data[full_name] = np.ascontiguousarray(data[:, :, i]).astype(dtype).tobytes()

        header['channels'] = channels

        exr_file = OpenEXR.OutputFile(filepath, header)
        exr_file.writePixels(channel_data)
        exr_file.close()

    @classmethod
    def write_lut(cls, filepath: str, lut, half_precision: bool = False) -> None:
        """
        Convenience method to write a computed OpticalDepthLUT.

        Args:
            filepath: Output file path
            lut: Computed OpticalDepthLUT
            half_precision: Use half float precision
        """
        writer = cls(lut.width, lut.height, half_precision)
        writer.add_layer("optical_depth", lut.as_image())
        writer.write(filepath)


class EXRTextureSink:
    """
    Texture collaborator that writes each uploaded LUT buffer to an EXR file.

    Returns the written path as the texture handle.
    """

    def __init__(self, filepath: str, half_precision: bool = False):
        self.filepath = filepath
        self.half_precision = half_precision

    def upload(self, pixels: np.ndarray, width: int, height: int, channels: int = 4) -> str:
        if channels != 4:
            raise ValueError(f"EXR LUT export needs 4 channels, got {channels}")

        directory = os.path.dirname(self.filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)

        image = np.asarray(pixels, dtype=np.float32).reshape(height, width, channels)
        writer = LUTEXRWriter(width, height, self.half_precision)
        writer.add_layer("optical_depth", image)
        writer.write(self.filepath)
        print(f"[Nishita] Saved EXR: {self.filepath}")
        return self.filepath


def read_lut_exr(filepath: str) -> Dict[str, np.ndarray]:
    """
    Read Nishita layers from an EXR file.

    Args:
        filepath: Path to EXR file

    Returns:
        Dictionary mapping layer names to (H, W, 4) float32 arrays
    """
    if not HAS_OPENEXR:
        raise RuntimeError("OpenEXR module not available")

    if not os.path.exists(filepath):
        raise FileNotFoundError(f"EXR file not found: {filepath}")

    exr_file = OpenEXR.InputFile(filepath)
    header = exr_file.header()

    dw = header['dataWindow']
    width = dw.max.x - dw.min.x + 1
    height = dw.max.y - dw.min.y + 1

    # Group channels by layer
    layers = {}
    prefix = LUTEXRWriter.CHANNEL_PREFIX + "."
    for channel_name in header['channels']:
        if channel_name.startswith(prefix):
            parts = channel_name[len(prefix):].split('.')
            if len(parts) == 2:
                layer_name, component = parts
                layers.setdefault(layer_name, {})[component] = channel_name

    result = {}
    pt = Imath.PixelType(Imath.PixelType.FLOAT)

    for layer_name, components in layers.items():
        if all(c in components for c in LUTEXRWriter.COMPONENTS):
            planes = [
                np.frombuffer(exr_file.channel(components[c], pt), dtype=np.float32).reshape(height, width)
                for c in LUTEXRWriter.COMPONENTS
            ]
            result[layer_name] = np.stack(planes, axis=2)

    exr_file.close()
    return result
