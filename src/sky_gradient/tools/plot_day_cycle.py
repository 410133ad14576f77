"""
Plot solar elevation and sky colours across one UTC day at a location.

Usage: python -m sky_gradient.tools.plot_day_cycle --lat 51.3 --lon 9.8 --date 2024-06-21
"""
import argparse
import calendar
from datetime import date

import matplotlib
import matplotlib.pyplot as plt
import numpy as np

from sky_gradient import constants
from sky_gradient.config import AtmosphereConfig
from sky_gradient.generator import SkyGradientGenerator


def day_cycle(generator, latitude, longitude, day, steps=48):
    """
    Sample elevation and top/bottom colours at evenly spaced UTC times.

    Returns:
        tuple: (hours (S,), elevations (S,), top colours (S, 3), bottom colours (S, 3))
    """
    start = calendar.timegm((day.year, day.month, day.day, 0, 0, 0))
    hours = np.linspace(0.0, 24.0, steps, endpoint=False)
    elevations = np.zeros(steps)
    tops = np.zeros((steps, 3), dtype=np.uint8)
    bottoms = np.zeros((steps, 3), dtype=np.uint8)

    for i, hour in enumerate(hours):
        timestamp = int(start + hour * 3600.0)
        elevations[i] = generator.elevation(latitude, longitude, timestamp)
        descriptor = generator.generate(latitude, longitude, timestamp)
        tops[i] = descriptor.top
        bottoms[i] = descriptor.bottom

    return hours, elevations, tops, bottoms


def plot_day_cycle(generator, latitude, longitude, day, steps=48):
    hours, elevations, tops, bottoms = day_cycle(generator, latitude, longitude, day, steps)

    fig, (ax_elev, ax_strip) = plt.subplots(
        2, 1, figsize=(10, 6), sharex=True, gridspec_kw={"height_ratios": [3, 1]})

    ax_elev.plot(hours, np.degrees(elevations), color="#f5a623")
    ax_elev.axhline(0.0, color="grey", linewidth=0.8, linestyle="--")
    ax_elev.set_ylabel("Solar elevation (deg)")
    ax_elev.set_title(f"Sky at ({latitude:g}, {longitude:g}) on {day.isoformat()} (UTC)")
    ax_elev.set_ylim(-90, 90)

    # Row 0 = zenith colour, row 1 = horizon colour
    strip = np.stack([tops, bottoms], axis=0)
    step = hours[1] - hours[0] if len(hours) > 1 else 24.0
    ax_strip.imshow(strip, aspect="auto", extent=[hours[0], hours[-1] + step, 2, 0])
    ax_strip.set_yticks([0.5, 1.5])
    ax_strip.set_yticklabels(["Top", "Bottom"])
    ax_strip.set_xlabel("Hour (UTC)")
    ax_strip.set_xlim(0, 24)

    fig.tight_layout()
    return fig


def main(argv=None):
    parser = argparse.ArgumentParser(description="Plot a day of sky colours")
    parser.add_argument("--lat", type=float, default=constants.DEFAULT_LATITUDE)
    parser.add_argument("--lon", type=float, default=constants.DEFAULT_LONGITUDE)
    parser.add_argument("--date", type=date.fromisoformat, default=date.today())
    parser.add_argument("--steps", type=int, default=48)
    parser.add_argument("--samples", type=int, default=16)
    parser.add_argument("--out", default=None, help="Save to this file instead of showing")
    args = parser.parse_args(argv)

    if args.out:
        matplotlib.use("Agg")

    generator = SkyGradientGenerator(AtmosphereConfig(samples=args.samples))
    fig = plot_day_cycle(generator, args.lat, args.lon, args.date, args.steps)

    if args.out:
        fig.savefig(args.out, dpi=120)
        print(f"Saved {args.out}")
    else:
        plt.show()


if __name__ == "__main__":
    main()
