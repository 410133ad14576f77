"""
Pytest fixtures and configuration for sky gradient tests.

Rendering cost grows with samples^2, so most tests use a reduced sample
count; tests that check the default output use the module-scoped
`default_render` fixture so the full render runs once.
"""

import numpy as np
import pytest
from sky_gradient.config import AtmosphereConfig
from sky_gradient.core import SkyRenderer
from sky_gradient.generator import SkyGradientGenerator

# 2024-06-21 12:00:00 UTC
REFERENCE_TIMESTAMP = 1718971200
# 2000-03-20 12:00:00 UTC, a few hours after the March equinox
EQUINOX_NOON_TIMESTAMP = 953553600


@pytest.fixture
def config():
    """Default atmosphere configuration."""
    return AtmosphereConfig()


@pytest.fixture
def small_config():
    """Reduced sample count for fast renders."""
    return AtmosphereConfig(samples=8)


@pytest.fixture
def renderer(small_config):
    return SkyRenderer(small_config)


@pytest.fixture
def generator(small_config):
    return SkyGradientGenerator(small_config)


@pytest.fixture(scope="module")
def default_render():
    """Full default-config gradient for the reference location and time."""
    gen = SkyGradientGenerator()
    return gen.generate(51.285335, 9.787075, REFERENCE_TIMESTAMP)


@pytest.fixture
def elevations():
    """Solar elevations (radians) for common sky conditions."""
    return {
        'high_noon': np.radians(60.0),
        'low_sun': np.radians(3.0),
        'sunset': 0.0,
        'night': np.radians(-30.0),
    }


def assert_rgb_valid(rgb, err_msg=""):
    """Assert a colour is three ints in [0, 255]."""
    assert len(rgb) == 3, f"Expected 3 channels: {rgb} - {err_msg}"
    for c in rgb:
        assert isinstance(c, int), f"Channel {c!r} is not an int - {err_msg}"
        assert 0 <= c <= 255, f"Channel {c} out of range - {err_msg}"
