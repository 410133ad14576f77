"""
HTML page that uses the current sky as its background.

Coordinates come from the environment (SKY_LATITUDE / SKY_LONGITUDE),
then from the query string, then from the built-in default location.
Everything interpolated into the document is sanitized and escaped.
"""
import html
import logging
import math
import re

from sky_gradient import constants
from sky_gradient.rendering import FALLBACK_GRADIENT, css_rgb
from sky_gradient.solar import validate_timestamp

logger = logging.getLogger(__name__)

_UNSAFE_CSS = re.compile(r"[^\w\s\-.(),%#]")

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en" style="height: 100%; background: {gradient}">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta http-equiv="Refresh" content="{refresh}">
    <meta name="theme-color" content="{top}">
    <meta name="darkreader-lock">
    <meta name="description" content="The current sky at location ({latitude}, {longitude}), rendered as a CSS gradient. Refreshes every minute.">
    <title>Sky Gradient at {latitude}, {longitude}</title>
</head>
<body style="margin: 0; padding: 0; height: 100vh;">
<header style="background-color: {top};"></header>
<div style="height: 100%; background: {gradient}">
    Sky Gradient at {latitude}, {longitude} <br>
    Sun Elevation: {elevation} rad <br>
</div>
<footer style="background-color: {bottom};"></footer>
</body>
</html>
"""


def sanitize_css_value(value: str) -> str:
    """Drop every character that has no business in a gradient/colour value."""
    return _UNSAFE_CSS.sub("", value)


def sanitize_rgb(rgb) -> tuple[int, int, int]:
    return tuple(max(0, min(255, int(c))) for c in rgb[:3])


def _parse_coordinate(raw, name, bound, default):
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid %s provided: %r, using default", name, raw)
        return default
    if not math.isfinite(value) or value < -bound or value > bound:
        logger.warning("Invalid %s provided: %r, using default", name, raw)
        return default
    return value


def validated_coordinates(environ=None, query=None):
    """
    Resolve the location to render.

    Args:
        environ: Mapping checked first (SKY_LATITUDE / SKY_LONGITUDE)
        query: Mapping checked second (lat / lon)

    Returns:
        tuple: (latitude, longitude) floats, defaults substituted for
        anything missing or invalid
    """
    environ = environ or {}
    query = query or {}
    lat_raw = environ.get("SKY_LATITUDE", query.get("lat"))
    lon_raw = environ.get("SKY_LONGITUDE", query.get("lon"))
    return (
        _parse_coordinate(lat_raw, "latitude", 90.0, constants.DEFAULT_LATITUDE),
        _parse_coordinate(lon_raw, "longitude", 180.0, constants.DEFAULT_LONGITUDE),
    )


def render_page(descriptor, latitude, longitude, sun_elevation) -> str:
    """Fill the page template from a GradientDescriptor."""
    escape = html.escape
    return PAGE_TEMPLATE.format(
        gradient=escape(sanitize_css_value(descriptor.gradient)),
        top=escape(css_rgb(sanitize_rgb(descriptor.top))),
        bottom=escape(css_rgb(sanitize_rgb(descriptor.bottom))),
        latitude=escape(f"{latitude:g}"),
        longitude=escape(f"{longitude:g}"),
        elevation=escape(f"{sun_elevation:.6f}"),
        refresh=constants.REFRESH_SECONDS,
    )


def build_page(generator, environ=None, query=None, timestamp=None) -> str:
    """Resolve coordinates, render the sky and return the HTML document."""
    latitude, longitude = validated_coordinates(environ, query)
    if timestamp is None:
        # One "now" for both the gradient and the printed elevation
        timestamp = validate_timestamp(None)
    try:
        descriptor = generator.generate(latitude, longitude, timestamp)
        sun_elevation = generator.elevation_or_default(latitude, longitude, timestamp)
    except Exception:
        logger.exception("Index page error")
        descriptor = FALLBACK_GRADIENT
        sun_elevation = constants.FALLBACK_SUN_ELEVATION
    return render_page(descriptor, latitude, longitude, sun_elevation)
