"""
Entry points: location and time in, renderable gradient out.

`generate` never raises. Any failure (bad coordinates, bad timestamp,
non-finite numerics) is logged and replaced by the flat sky-blue
FALLBACK_GRADIENT.
"""
import logging
import threading

from sky_gradient import constants
from sky_gradient.config import AtmosphereConfig
from sky_gradient.core import SkyRenderer
from sky_gradient.errors import SkyGradientError
from sky_gradient.rendering import FALLBACK_GRADIENT, GradientDescriptor
from sky_gradient.solar import solar_elevation

logger = logging.getLogger(__name__)


class SkyGradientGenerator:
    """
    Couples the solar position calculator with a SkyRenderer.

    Args:
        config: AtmosphereConfig; the defaults reproduce a clear Earth sky.
    """

    def __init__(self, config: AtmosphereConfig | None = None):
        self.config = config if config is not None else AtmosphereConfig()
        self.renderer = SkyRenderer(self.config)

    def elevation(self, latitude, longitude, timestamp=None) -> float:
        """Solar elevation in radians; raises InvalidCoordinate/InvalidTimestamp."""
        return solar_elevation(latitude, longitude, timestamp)

    def elevation_or_default(self, latitude, longitude, timestamp=None) -> float:
        try:
            return self.elevation(latitude, longitude, timestamp)
        except SkyGradientError as exc:
            logger.warning("Sun elevation unavailable (%s); using %s",
                           exc, constants.FALLBACK_SUN_ELEVATION)
            return constants.FALLBACK_SUN_ELEVATION

    def render_elevation(self, elevation: float) -> GradientDescriptor:
        """Render for an explicit elevation, with the same fallback guarantee as generate()."""
        try:
            return self.renderer.render(elevation)
        except Exception:
            logger.exception("Sky gradient render failed for elevation %r", elevation)
            return FALLBACK_GRADIENT

    def generate(self, latitude, longitude, timestamp=None) -> GradientDescriptor:
        """
        Sky gradient for a location and moment.

        Args:
            latitude: Degrees, [-90, 90]
            longitude: Degrees east, [-180, 180]
            timestamp: Unix seconds (signed 32-bit); None means now

        Returns:
            GradientDescriptor; FALLBACK_GRADIENT when anything fails
        """
        try:
            elevation = self.elevation(latitude, longitude, timestamp)
        except Exception:
            logger.exception("Sky gradient error for (%r, %r, %r)", latitude, longitude, timestamp)
            return FALLBACK_GRADIENT
        return self.render_elevation(elevation)


_default_generator = None
_default_lock = threading.Lock()


def default_generator() -> SkyGradientGenerator:
    """Process-wide generator built from the default AtmosphereConfig."""
    global _default_generator
    with _default_lock:
        if _default_generator is None:
            _default_generator = SkyGradientGenerator()
        return _default_generator


def generate(latitude, longitude, timestamp=None) -> GradientDescriptor:
    return default_generator().generate(latitude, longitude, timestamp)


def elevation(latitude, longitude, timestamp=None) -> float:
    return default_generator().elevation(latitude, longitude, timestamp)
