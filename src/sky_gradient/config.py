"""
Immutable physical and rendering parameters for the sky renderer.
"""
import math
from dataclasses import dataclass, field

from sky_gradient import constants
from sky_gradient.vectors import Vector3


@dataclass(frozen=True)
class PhaseConstants:
    """Precomputed factors of the Rayleigh and Henyey-Greenstein phase functions."""
    rayleigh_scale: float
    mie_scale: float
    mie_g: float
    mie_g2: float
    mie_coeff: float
    mie_denom: float

    @classmethod
    def for_asymmetry(cls, g: float) -> "PhaseConstants":
        return cls(
            rayleigh_scale=3.0 / (16.0 * math.pi),
            mie_scale=3.0 / (8.0 * math.pi),
            mie_g=g,
            mie_g2=g * g,
            mie_coeff=1.0 - g * g,
            mie_denom=2.0 + g * g,
        )


@dataclass(frozen=True)
class AtmosphereConfig:
    """
    Atmosphere, camera and post-processing parameters.

    Built once and shared by every render that uses the same physics.
    Derived values (focal length, phase constants) are filled in by
    __post_init__ and never change afterwards.

    Attributes:
        rayleigh_scatter: Rayleigh scattering coefficients per channel (1/m)
        mie_scatter: Mie scattering coefficient (1/m)
        mie_extinction: Mie extinction coefficient, scatter + absorb (1/m)
        ozone_absorb: Ozone absorption coefficients per channel (1/m)
        rayleigh_scale_height: Rayleigh density scale height (m)
        mie_scale_height: Mie density scale height (m)
        ground_radius: Planet radius (m)
        top_radius: Radius of the top of the atmosphere (m)
        sun_intensity: Multiplier applied to the inscattered radiance
        samples: View directions per gradient, also march steps per ray
        fov_deg: Vertical field of view (degrees)
        exposure: Linear exposure multiplier
        gamma: Display gamma
        sunset_bias_strength: Strength of the low-luminance hue bias
        mie_g: Henyey-Greenstein asymmetry parameter
        use_cache: Whether transmittance lookups are memoized
        cache_capacity: Maximum cached transmittance samples
        cache_precision: Decimal places kept in the cache key
    """
    rayleigh_scatter: Vector3 = Vector3(*constants.RAYLEIGH_SCATTER)
    mie_scatter: float = constants.MIE_SCATTER
    mie_extinction: float = constants.MIE_EXTINCTION
    ozone_absorb: Vector3 = Vector3(*constants.OZONE_ABSORB)

    rayleigh_scale_height: float = constants.RAYLEIGH_SCALE_HEIGHT
    mie_scale_height: float = constants.MIE_SCALE_HEIGHT

    ground_radius: float = constants.GROUND_RADIUS
    top_radius: float = constants.TOP_RADIUS
    sun_intensity: float = constants.SUN_INTENSITY

    samples: int = constants.DEFAULT_SAMPLES
    fov_deg: float = constants.DEFAULT_FOV_DEG

    exposure: float = constants.DEFAULT_EXPOSURE
    gamma: float = constants.DEFAULT_GAMMA
    sunset_bias_strength: float = constants.DEFAULT_SUNSET_BIAS
    mie_g: float = constants.MIE_G

    use_cache: bool = True
    cache_capacity: int = constants.DEFAULT_CACHE_CAPACITY
    cache_precision: int = constants.DEFAULT_CACHE_PRECISION

    # Derived
    fov_radians: float = field(init=False, repr=False)
    focal_z: float = field(init=False, repr=False)
    phase_constants: PhaseConstants = field(init=False, repr=False)

    def __post_init__(self):
        """Validate parameters and precompute derived constants."""
        object.__setattr__(self, "rayleigh_scatter", Vector3(*self.rayleigh_scatter))
        object.__setattr__(self, "ozone_absorb", Vector3(*self.ozone_absorb))

        if isinstance(self.samples, bool) or not isinstance(self.samples, int) or self.samples < 2:
            raise ValueError(f"samples must be an integer >= 2, got {self.samples!r}")
        for name in ("rayleigh_scale_height", "mie_scale_height", "ground_radius",
                     "top_radius", "exposure", "gamma"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0.0:
                raise ValueError(f"{name} must be positive and finite, got {value!r}")
        if self.top_radius <= self.ground_radius:
            raise ValueError(
                f"top_radius {self.top_radius} must exceed ground_radius {self.ground_radius}")
        if not 0.0 < self.fov_deg < 180.0:
            raise ValueError(f"fov_deg must be in (0, 180), got {self.fov_deg!r}")
        if not -1.0 < self.mie_g < 1.0:
            raise ValueError(f"mie_g must be in (-1, 1), got {self.mie_g!r}")
        if self.cache_capacity < 1:
            raise ValueError(f"cache_capacity must be >= 1, got {self.cache_capacity!r}")
        if self.cache_precision < 0:
            raise ValueError(f"cache_precision must be >= 0, got {self.cache_precision!r}")

        fov_radians = math.radians(self.fov_deg * 0.5)
        object.__setattr__(self, "fov_radians", fov_radians)
        object.__setattr__(self, "focal_z", 1.0 / math.tan(fov_radians))
        object.__setattr__(self, "phase_constants", PhaseConstants.for_asymmetry(self.mie_g))

    @property
    def atmosphere_thickness(self) -> float:
        return self.top_radius - self.ground_radius
