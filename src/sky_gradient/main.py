import argparse
import json
import logging
import os
import sys
import time

from sky_gradient.config import AtmosphereConfig
from sky_gradient.generator import SkyGradientGenerator
from sky_gradient.page import build_page, validated_coordinates
from sky_gradient.preview import gradient_image
from sky_gradient.solar import validate_timestamp


def build_parser():
    parser = argparse.ArgumentParser(description="Render the current sky as a CSS gradient")
    parser.add_argument("--lat", type=float, default=None, help="Latitude in degrees (default: $SKY_LATITUDE or built-in)")
    parser.add_argument("--lon", type=float, default=None, help="Longitude in degrees (default: $SKY_LONGITUDE or built-in)")
    parser.add_argument("--timestamp", type=int, default=None, help="Unix time to render (default: now)")
    parser.add_argument("--samples", type=int, default=None, help="Gradient stops / march steps per ray")
    parser.add_argument("--no-cache", action="store_true", help="Disable the transmittance cache")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--html", metavar="PATH", help="Write an HTML page using the gradient as background")
    parser.add_argument("--png", metavar="PATH", help="Write a PNG preview of the gradient")
    parser.add_argument("--ui", action="store_true", help="Launch the interactive Gradio UI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def make_generator(args):
    overrides = {}
    if args.samples is not None:
        overrides["samples"] = args.samples
    if args.no_cache:
        overrides["use_cache"] = False
    return SkyGradientGenerator(AtmosphereConfig(**overrides))


def resolve_location(args, environ):
    """Command-line values win; otherwise fall back to the environment/defaults."""
    env_lat, env_lon = validated_coordinates(environ)
    latitude = args.lat if args.lat is not None else env_lat
    longitude = args.lon if args.lon is not None else env_lon
    return latitude, longitude


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.ui:
        from sky_gradient.ui import CSS, create_ui
        print("Launching UI...")
        create_ui().launch(css=CSS)
        return 0

    try:
        generator = make_generator(args)
    except ValueError as exc:
        parser.error(str(exc))

    latitude, longitude = resolve_location(args, os.environ)
    timestamp = args.timestamp if args.timestamp is not None else validate_timestamp(None)

    t0 = time.time()
    descriptor = generator.generate(latitude, longitude, timestamp)
    elapsed = time.time() - t0
    sun_elevation = generator.elevation_or_default(latitude, longitude, timestamp)

    if args.json:
        payload = descriptor.as_dict()
        payload.update(latitude=latitude, longitude=longitude, elevation=sun_elevation)
        print(json.dumps(payload))
    else:
        print(f"Location: {latitude:g}, {longitude:g}")
        print(f"Sun elevation: {sun_elevation:.6f} rad")
        print(f"Top: {descriptor.top_css}  Bottom: {descriptor.bottom_css}")
        print(descriptor.gradient)
        print(f"Rendered in {elapsed:.2f}s" + (" (fallback)" if descriptor.fallback else ""))

    if args.html:
        page = build_page(generator, {"SKY_LATITUDE": latitude, "SKY_LONGITUDE": longitude},
                          timestamp=timestamp)
        with open(args.html, "w", encoding="utf-8") as fh:
            fh.write(page)
        print(f"Wrote {args.html}")

    if args.png:
        gradient_image(descriptor).save(args.png)
        print(f"Wrote {args.png}")

    return 1 if descriptor.fallback else 0


def run_ui():
    """Entry point for sky-gradient-ui command."""
    sys.argv = [sys.argv[0], "--ui"]
    sys.exit(main())


if __name__ == "__main__":
    sys.exit(main())
