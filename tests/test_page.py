import pytest
from sky_gradient import constants
from sky_gradient.page import (build_page, render_page, sanitize_css_value, sanitize_rgb,
                               validated_coordinates)
from sky_gradient.rendering import FALLBACK_GRADIENT, ColorStop, GradientBuilder, GradientDescriptor

from conftest import REFERENCE_TIMESTAMP


def test_sanitize_css_value_strips_injection():
    dirty = 'rgb(1, 2, 3) 0%; } body { background: url("javascript:alert(1)") }'
    clean = sanitize_css_value(dirty)
    for ch in ';{}:"':
        assert ch not in clean
    assert clean.startswith("rgb(1, 2, 3) 0%")


def test_sanitize_css_value_keeps_gradients_intact():
    assert sanitize_css_value(FALLBACK_GRADIENT.gradient) == FALLBACK_GRADIENT.gradient


def test_sanitize_rgb_clamps():
    assert sanitize_rgb([-5, 300.7, "42"]) == (0, 255, 42)


@pytest.mark.parametrize("environ,query,expected", [
    ({}, {}, (constants.DEFAULT_LATITUDE, constants.DEFAULT_LONGITUDE)),
    ({"SKY_LATITUDE": "10.5", "SKY_LONGITUDE": "-20"}, {}, (10.5, -20.0)),
    ({}, {"lat": "45", "lon": "90"}, (45.0, 90.0)),
    ({"SKY_LATITUDE": "1"}, {"lat": "2", "lon": "3"}, (1.0, 3.0)),
    ({"SKY_LATITUDE": "91", "SKY_LONGITUDE": "nan"}, {}, (constants.DEFAULT_LATITUDE, constants.DEFAULT_LONGITUDE)),
    ({}, {"lat": "north", "lon": "inf"}, (constants.DEFAULT_LATITUDE, constants.DEFAULT_LONGITUDE)),
])
def test_validated_coordinates(environ, query, expected):
    assert validated_coordinates(environ, query) == pytest.approx(expected)


def test_render_page_contents():
    descriptor = GradientBuilder().build([ColorStop(0.0, (10, 20, 30)), ColorStop(100.0, (200, 150, 100))])
    page = render_page(descriptor, 51.5, -0.125, 0.123456789)

    assert page.startswith("<!DOCTYPE html>")
    assert 'http-equiv="Refresh" content="60"' in page
    assert '<meta name="theme-color" content="rgb(10, 20, 30)">' in page
    assert "background-color: rgb(200, 150, 100);" in page
    assert descriptor.gradient in page
    assert "Sun Elevation: 0.123457 rad" in page
    assert "Sky Gradient at 51.5, -0.125" in page


def test_render_page_escapes_values():
    descriptor = GradientDescriptor('red"><script>alert(1)</script>', (1, 2, 3), (4, 5, 6))
    page = render_page(descriptor, 1.0, 2.0, 0.0)
    assert "<script" not in page
    assert 'red">' not in page


def test_build_page_uses_generator(generator):
    page = build_page(generator, {"SKY_LATITUDE": "0", "SKY_LONGITUDE": "0"},
                      timestamp=REFERENCE_TIMESTAMP)
    expected = generator.generate(0.0, 0.0, REFERENCE_TIMESTAMP)
    assert expected.gradient in page
    assert not expected.fallback


def test_build_page_survives_generator_errors():
    class Broken:
        def generate(self, *args):
            raise RuntimeError("down")

        def elevation_or_default(self, *args):
            raise RuntimeError("down")

    page = build_page(Broken())
    assert FALLBACK_GRADIENT.gradient in page
    assert "Sun Elevation: 0.000000 rad" in page


def test_build_page_uses_one_timestamp_for_gradient_and_elevation():
    seen = []

    class Recording:
        def generate(self, latitude, longitude, timestamp):
            seen.append(timestamp)
            return FALLBACK_GRADIENT

        def elevation_or_default(self, latitude, longitude, timestamp):
            seen.append(timestamp)
            return 0.5

    build_page(Recording())
    assert len(seen) == 2
    assert seen[0] is not None
    assert seen[0] == seen[1]
