"""
Raster previews of a gradient descriptor.
"""
import numpy as np
import PIL.Image


def gradient_array(descriptor, width=64, height=256):
    """
    Rasterize a gradient top-to-bottom by linear interpolation of its stops.

    Args:
        descriptor: GradientDescriptor (stops in ascending percent)
        width, height: Output size in pixels

    Returns:
        (height, width, 3) uint8 array
    """
    stops = descriptor.stops
    if not stops:
        rows = np.tile(np.array(descriptor.top, dtype=float), (height, 1))
    else:
        percents = np.array([stop.percent for stop in stops])
        colors = np.array([stop.rgb for stop in stops], dtype=float)
        y = np.linspace(0.0, 100.0, height)
        rows = np.stack([np.interp(y, percents, colors[:, c]) for c in range(3)], axis=1)

    img = np.repeat(rows[:, None, :], width, axis=1)
    return np.clip(np.rint(img), 0, 255).astype(np.uint8)


def gradient_image(descriptor, width=64, height=256):
    return PIL.Image.fromarray(gradient_array(descriptor, width, height))
