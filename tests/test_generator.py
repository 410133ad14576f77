import logging
import math

import numpy as np
import pytest
from sky_gradient import generator as generator_module
from sky_gradient.config import AtmosphereConfig
from sky_gradient.generator import SkyGradientGenerator, elevation, generate
from sky_gradient.rendering import FALLBACK_GRADIENT
from sky_gradient.solar import solar_elevation

from conftest import REFERENCE_TIMESTAMP, assert_rgb_valid


def test_default_render_has_one_stop_per_sample(default_render, config):
    assert not default_render.fallback
    assert len(default_render.stops) == config.samples
    assert default_render.gradient.count("rgb(") == config.samples


def test_default_render_percent_span(default_render):
    percents = [stop.percent for stop in default_render.stops]
    assert all(a <= b for a, b in zip(percents, percents[1:]))
    assert percents[0] == pytest.approx(0.0)
    assert percents[-1] == pytest.approx(100.0)
    assert default_render.gradient.startswith("linear-gradient(to bottom, rgb(")
    assert default_render.gradient.endswith(" 100%)")


def test_default_render_colours_valid(default_render):
    for stop in default_render.stops:
        assert_rgb_valid(stop.rgb, f"stop at {stop.percent}%")
    assert default_render.top == default_render.stops[0].rgb
    assert default_render.bottom == default_render.stops[-1].rgb


def test_summer_noon_sky_is_blue(default_render):
    # 2024-06-21 12:00 UTC in central Germany: sun high in the south
    r, g, b = default_render.top
    assert b > r, f"Zenith colour {default_render.top} should be blue"


def test_generate_is_idempotent(generator):
    first = generator.generate(40.7, -74.0, REFERENCE_TIMESTAMP)
    second = generator.generate(40.7, -74.0, REFERENCE_TIMESTAMP)
    assert first.gradient == second.gradient
    assert first == second


def test_fresh_generators_agree(small_config):
    a = SkyGradientGenerator(small_config).generate(-33.9, 151.2, REFERENCE_TIMESTAMP)
    b = SkyGradientGenerator(small_config).generate(-33.9, 151.2, REFERENCE_TIMESTAMP)
    assert a.gradient == b.gradient


def test_cache_toggle_does_not_change_output():
    cached = SkyGradientGenerator(AtmosphereConfig(samples=8, use_cache=True))
    uncached = SkyGradientGenerator(AtmosphereConfig(samples=8, use_cache=False))
    for ts in (REFERENCE_TIMESTAMP, REFERENCE_TIMESTAMP + 6 * 3600, REFERENCE_TIMESTAMP + 9 * 3600):
        assert cached.generate(51.3, 9.8, ts).gradient == uncached.generate(51.3, 9.8, ts).gradient


def test_invalid_latitude_yields_fallback(generator, caplog):
    with caplog.at_level(logging.ERROR, logger="sky_gradient.generator"):
        result = generator.generate(91.0, 0.0, REFERENCE_TIMESTAMP)
    assert result is FALLBACK_GRADIENT
    assert result.top == (135, 206, 235)
    assert result.bottom == (135, 206, 235)
    assert "Sky gradient error" in caplog.text


@pytest.mark.parametrize("latitude,longitude,timestamp", [
    (float('nan'), 0.0, REFERENCE_TIMESTAMP),
    (0.0, -181.0, REFERENCE_TIMESTAMP),
    (0.0, 0.0, 2**40),
    ("north", 0.0, None),
])
def test_generate_never_raises(generator, latitude, longitude, timestamp):
    assert generator.generate(latitude, longitude, timestamp) is FALLBACK_GRADIENT


def test_non_finite_elevation_yields_fallback(generator):
    assert generator.render_elevation(float('nan')) is FALLBACK_GRADIENT
    assert generator.render_elevation(float('inf')) is FALLBACK_GRADIENT


def test_renderer_failure_yields_fallback(generator, monkeypatch):
    def explode(elevation):
        raise ZeroDivisionError("boom")

    monkeypatch.setattr(generator.renderer, "render", explode)
    assert generator.generate(10.0, 10.0, REFERENCE_TIMESTAMP) is FALLBACK_GRADIENT


def test_elevation_accessor(generator):
    assert generator.elevation(0.0, 0.0, REFERENCE_TIMESTAMP) == solar_elevation(0.0, 0.0, REFERENCE_TIMESTAMP)
    assert generator.elevation_or_default(95.0, 0.0, REFERENCE_TIMESTAMP) == 0.0


def test_module_level_entry_points(monkeypatch, small_config):
    monkeypatch.setattr(generator_module, "_default_generator", SkyGradientGenerator(small_config))
    result = generate(48.85, 2.35, REFERENCE_TIMESTAMP)
    assert len(result.stops) == small_config.samples
    assert math.isfinite(elevation(48.85, 2.35, REFERENCE_TIMESTAMP))
    assert generator_module.default_generator() is generator_module._default_generator


def test_sky_darkens_after_sunset(generator):
    # Equator, longitude 0: local noon at 12:00 UTC, night at 00:00 UTC
    day = generator.generate(0.0, 0.0, REFERENCE_TIMESTAMP)
    night = generator.generate(0.0, 0.0, REFERENCE_TIMESTAMP - 12 * 3600)
    assert sum(night.top) < sum(day.top)
    assert np.sum([s.rgb for s in night.stops]) < np.sum([s.rgb for s in day.stops])
