"""
Nishita Sky Controller - Recomputes the optical-depth LUT when the sky changes.

This module handles:
- Owning the current LUT dataset through an explicit SkyState
- Skipping recomputes that have no sun direction to work against
- Handing the finished buffer to the texture collaborator

Recomputes are synchronous and not locked; callers must not overlap them.
"""

from dataclasses import dataclass
from typing import Any, Optional

from .core.constants import LUT_CHANNELS
from .core.parameters import LUTParameters, DensityVector
from .core.model import OpticalDepthLUT
from .utils.textures import LUTTexture


@dataclass
class SkyState:
    """State owned by a SkyController: the dataset and the texture built from it."""
    lut: Optional[OpticalDepthLUT] = None
    texture: Any = None


class SkyController:
    """
    Single owner of the LUT dataset.

    The texture factory is any object with
    ``upload(pixels, width, height, channels)`` returning the texture handle;
    an in-memory LUTTexture is used when none is given.
    """

    def __init__(
        self,
        params: Optional[LUTParameters] = None,
        state: Optional[SkyState] = None,
        texture_factory=None,
    ):
        self.params = params or LUTParameters.earth_default()
        self.state = state if state is not None else SkyState()
        self.texture_factory = texture_factory if texture_factory is not None else LUTTexture()

    @property
    def lut(self) -> Optional[OpticalDepthLUT]:
        return self.state.lut

    @property
    def texture(self):
        return self.state.texture

    def initialize(self) -> OpticalDepthLUT:
        """Create and allocate the dataset if the state has none yet."""
        if self.state.lut is None:
            lut = OpticalDepthLUT(self.params)
            lut.init()
            self.state.lut = lut
            print(f"[Nishita] Allocated {lut.width}x{lut.height} optical depth LUT")
        return self.state.lut

    def recompute(self, world_parameters, progress_callback=None):
        """
        Rebuild the LUT for new sky parameters.

        Does nothing when there are no parameters or no sun direction; the
        previous dataset and texture stay as they are.

        Args:
            world_parameters: Sky input (SkyParameters or any object with
                ``sun_direction`` and optionally ``density``)
            progress_callback: Optional callback(progress, message)

        Returns:
            The texture handle produced by the texture factory, or None if skipped.
        """
        sun_direction = getattr(world_parameters, 'sun_direction', None)
        if sun_direction is None:
            print("[Nishita] No sun direction, skipping LUT recompute")
            return None

        density = getattr(world_parameters, 'density', None)
        if density is not None and not isinstance(density, DensityVector):
            density = DensityVector.from_sequence(density)

        lut = self.initialize()
        # Parameters replaced after initialize() apply to the next fill
        lut.params = self.params
        pixels = lut.compute(density, progress_callback=progress_callback)

        self.state.texture = self.texture_factory.upload(
            pixels,
            width=lut.width,
            height=lut.height,
            channels=LUT_CHANNELS,
        )
        return self.state.texture
