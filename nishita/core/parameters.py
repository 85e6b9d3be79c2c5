"""
Nishita Parameters - LUT generation and sky input structures.
"""

import math
from dataclasses import dataclass, field, asdict
from typing import Optional, Sequence
import numpy as np

from .constants import (
    LUT_HEIGHT_STEPS,
    LUT_ANGLE_STEPS,
    LUT_CHANNELS,
    J_STEPS,
    PLANET_RADIUS,
    ATMOSPHERE_RADIUS,
    RAYLEIGH_SCALE_HEIGHT,
    MIE_SCALE_HEIGHT,
)


@dataclass
class DensityVector:
    """
    Per-pass density multipliers for the three optical-depth channels.

    Attributes:
        rayleigh: Air molecule density multiplier
        mie: Aerosol density multiplier
        ozone: Ozone density multiplier
    """
    rayleigh: float = 1.0
    mie: float = 1.0
    ozone: float = 1.0

    def as_array(self) -> np.ndarray:
        """Return densities as a (3,) float64 array."""
        return np.array([self.rayleigh, self.mie, self.ozone], dtype=np.float64)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> 'DensityVector':
        """Build from any 3-element sequence (rayleigh, mie, ozone)."""
        rayleigh, mie, ozone = (float(v) for v in values)
        return cls(rayleigh=rayleigh, mie=mie, ozone=ozone)

    @classmethod
    def zero(cls) -> 'DensityVector':
        return cls(0.0, 0.0, 0.0)


@dataclass
class LUTParameters:
    """
    Generation parameters for the optical-depth LUT.

    Grid resolution is fixed per dataset; every field can be changed
    before the next compute() call. All spatial values are in meters.
    Physical constants are not validated: degenerate scale heights
    produce non-finite texels.
    """

    # Grid resolution
    lut_height_steps: int = LUT_HEIGHT_STEPS
    lut_angle_steps: int = LUT_ANGLE_STEPS

    # Secondary-ray integration samples
    j_steps: int = J_STEPS

    # Planet geometry (sphere radii, planet centered at origin)
    radius_atmo: float = ATMOSPHERE_RADIUS
    radius_planet: float = PLANET_RADIUS

    # Exponential falloff of air molecules and aerosols
    rayleigh_scale: float = RAYLEIGH_SCALE_HEIGHT
    mie_scale: float = MIE_SCALE_HEIGHT

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate the grid and integration sizes (ValueError if below 1)."""
        self.lut_height_steps = int(self.lut_height_steps)
        self.lut_angle_steps = int(self.lut_angle_steps)
        self.j_steps = int(self.j_steps)
        if self.lut_height_steps < 1 or self.lut_angle_steps < 1:
            raise ValueError(
                f"LUT resolution must be positive, got "
                f"{self.lut_height_steps}x{self.lut_angle_steps}"
            )
        if self.j_steps < 1:
            raise ValueError(f"j_steps must be at least 1, got {self.j_steps}")

    @classmethod
    def earth_default(cls) -> 'LUTParameters':
        """Create default Earth parameters."""
        return cls()

    @classmethod
    def from_artistic_controls(
        cls,
        planet_radius_km: float = PLANET_RADIUS / 1000.0,
        atmosphere_height_km: float = (ATMOSPHERE_RADIUS - PLANET_RADIUS) / 1000.0,
        rayleigh_height: float = RAYLEIGH_SCALE_HEIGHT,
        mie_height: float = MIE_SCALE_HEIGHT,
        resolution: int = LUT_HEIGHT_STEPS,
        j_steps: int = J_STEPS,
    ) -> 'LUTParameters':
        """
        Create parameters from user-facing control values.

        Args:
            planet_radius_km: Planet radius in kilometers
            atmosphere_height_km: Atmosphere thickness in kilometers
            rayleigh_height: Scale height for air molecules (meters)
            mie_height: Scale height for aerosols (meters)
            resolution: Square LUT resolution (height and angle steps)
            j_steps: Secondary-ray integration samples
        """
        radius_planet = planet_radius_km * 1000.0
        return cls(
            lut_height_steps=resolution,
            lut_angle_steps=resolution,
            j_steps=j_steps,
            radius_atmo=radius_planet + atmosphere_height_km * 1000.0,
            radius_planet=radius_planet,
            rayleigh_scale=rayleigh_height,
            mie_scale=mie_height,
        )

    @classmethod
    def from_settings(cls, settings) -> 'LUTParameters':
        """
        Create parameters from any settings object exposing the field names
        as attributes. Missing attributes fall back to the defaults.
        """
        defaults = cls()
        return cls(**{
            name: getattr(settings, name, value)
            for name, value in asdict(defaults).items()
        })

    def get_atmosphere_height(self) -> float:
        """Return the atmosphere thickness in meters."""
        return self.radius_atmo - self.radius_planet

    @property
    def texture_size(self):
        """(width, height) of the LUT texture."""
        return self.lut_height_steps, self.lut_angle_steps

    @property
    def buffer_length(self) -> int:
        """Number of floats in the flat pixel buffer."""
        return self.lut_height_steps * self.lut_angle_steps * LUT_CHANNELS

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SkyParameters:
    """
    Sky input driving a LUT recompute.

    Only the sun direction is required; a LUT is never built without one.
    The density vector defaults to (1, 1, 1).
    """
    sun_direction: Optional[np.ndarray] = None
    density: DensityVector = field(default_factory=DensityVector)

    def __post_init__(self):
        if self.sun_direction is not None:
            self.sun_direction = np.asarray(self.sun_direction, dtype=np.float64)
        if not isinstance(self.density, DensityVector):
            self.density = DensityVector.from_sequence(self.density)

    @property
    def has_sun(self) -> bool:
        return self.sun_direction is not None

    @property
    def sun_zenith_angle(self) -> float:
        """Angle between the sun direction and +Z (up), in radians."""
        if self.sun_direction is None:
            raise ValueError("No sun direction set")
        direction = self.sun_direction / np.linalg.norm(self.sun_direction)
        return float(np.arccos(np.clip(direction[2], -1.0, 1.0)))

    @classmethod
    def from_sun_angles(
        cls,
        elevation: float,
        heading: float = 180.0,
        density: Optional[DensityVector] = None,
    ) -> 'SkyParameters':
        """
        Create sky parameters from sun elevation and heading in degrees.

        Z-up: elevation 0 = horizon, 90 = overhead;
        heading 0 = North (+Y), 90 = East (+X).
        """
        elev = math.radians(elevation)
        head = math.radians(heading)
        cos_elev = math.cos(elev)

        sun_direction = np.array([
            cos_elev * math.sin(head),
            cos_elev * math.cos(head),
            math.sin(elev),
        ])
        return cls(sun_direction=sun_direction, density=density or DensityVector())
