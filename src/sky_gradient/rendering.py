"""
Data structures and post-processing stages for the sky gradient pipeline.

Raw inscattered radiance (N, 3) flows through PostProcessPipeline into
8-bit colours, which GradientBuilder pairs with gradient positions and
formats as a CSS linear-gradient.
"""
from dataclasses import dataclass, field

import numpy as np

from sky_gradient import constants
from sky_gradient.errors import ComputationFailure

RGB = tuple[int, int, int]


def css_rgb(rgb: RGB) -> str:
    return f"rgb({rgb[0]}, {rgb[1]}, {rgb[2]})"


def format_percent(percent: float) -> str:
    """Round to two decimals and drop trailing zeros (100, 96.77, 3.2)."""
    value = round(percent, 2)
    if value == 0.0:
        value = 0.0 # no "-0"
    return f"{value:g}"


@dataclass(frozen=True)
class ColorStop:
    """
    One colour stop of the gradient.

    Attributes:
        percent: Position from the top of the gradient, [0, 100]
        rgb: 8-bit colour
    """
    percent: float
    rgb: RGB

    def __post_init__(self):
        if not 0.0 <= self.percent <= 100.0:
            raise ValueError(f"percent must be in [0, 100], got {self.percent}")
        if len(self.rgb) != 3 or any(not 0 <= c <= 255 for c in self.rgb):
            raise ValueError(f"rgb must be three values in [0, 255], got {self.rgb}")

    def css(self) -> str:
        return f"{css_rgb(self.rgb)} {format_percent(self.percent)}%"


@dataclass(frozen=True)
class GradientDescriptor:
    """
    Final output of a render.

    Attributes:
        gradient: CSS linear-gradient string, stops in ascending percent
        top: Colour of the first stop (zenith)
        bottom: Colour of the last stop (horizon)
        stops: The stops the gradient was built from, ascending percent
        fallback: True when this is the substitute for a failed render
    """
    gradient: str
    top: RGB
    bottom: RGB
    stops: tuple[ColorStop, ...] = field(default=(), repr=False)
    fallback: bool = False

    @property
    def top_css(self) -> str:
        return css_rgb(self.top)

    @property
    def bottom_css(self) -> str:
        return css_rgb(self.bottom)

    def as_dict(self) -> dict:
        return {
            "gradient": self.gradient,
            "top": list(self.top),
            "bottom": list(self.bottom),
            "fallback": self.fallback,
        }


class PostProcessPipeline:
    """
    Exposure -> sunset bias -> ACES tonemap -> gamma -> 8-bit quantization.

    Every stage works on an (N, 3) array so a whole gradient is processed
    at once.
    """

    LUMINANCE_WEIGHTS = np.array([0.2126, 0.7152, 0.0722])

    def __init__(self, config):
        self.exposure = config.exposure
        self.inv_gamma = 1.0 / config.gamma
        self.sunset_bias_strength = config.sunset_bias_strength

    def apply_exposure(self, colors: np.ndarray) -> np.ndarray:
        return colors * self.exposure

    def apply_sunset_bias(self, colors: np.ndarray) -> np.ndarray:
        """
        Push dim skies toward red/blue and away from green.

        The weight 1 / (1 + 2 * luminance) is largest for dark colours, so
        twilight is tinted while the midday sky is nearly untouched.
        """
        lum = colors @ self.LUMINANCE_WEIGHTS
        kw = self.sunset_bias_strength / (1.0 + 2.0 * lum)
        gains = np.stack([1.0 + 0.5 * kw, 1.0 - 0.5 * kw, 1.0 + kw], axis=-1)
        return np.maximum(colors * gains, 0.0)

    @staticmethod
    def tonemap_aces(colors: np.ndarray) -> np.ndarray:
        """ACES filmic curve (Narkowicz fit), clamped to [0, 1]."""
        numerator = colors * (2.51 * colors + 0.03)
        denominator = colors * (2.43 * colors + 0.59) + 0.14
        safe = np.abs(denominator) >= constants.TONEMAP_EPSILON
        mapped = np.zeros_like(colors)
        np.divide(numerator, denominator, out=mapped, where=safe)
        return np.clip(mapped, 0.0, 1.0)

    def apply_gamma(self, colors: np.ndarray) -> np.ndarray:
        return np.power(colors, self.inv_gamma)

    @staticmethod
    def quantize(colors: np.ndarray) -> np.ndarray:
        """Round half up to integers in [0, 255]."""
        return np.floor(np.clip(colors, 0.0, 1.0) * 255.0 + 0.5).astype(np.int64)

    def process(self, radiance: np.ndarray) -> np.ndarray:
        """
        Convert raw linear radiance into 8-bit colours.

        Args:
            radiance: (N, 3) or (3,) inscattered radiance

        Returns:
            Integer array of the same shape with values in [0, 255]

        Raises:
            ComputationFailure: radiance contains NaN or infinity
        """
        colors = np.asarray(radiance, dtype=float)
        if not np.all(np.isfinite(colors)):
            raise ComputationFailure("non-finite radiance reached post-processing")

        colors = self.apply_exposure(colors)
        colors = self.apply_sunset_bias(colors)
        colors = self.tonemap_aces(colors)
        colors = self.apply_gamma(colors)

        if not np.all(np.isfinite(colors)):
            raise ComputationFailure("post-processing produced non-finite colour")
        return self.quantize(colors)


class GradientBuilder:
    """
    Assembles colour stops into a GradientDescriptor.
    """

    def make_stops(self, positions, colors) -> list[ColorStop]:
        """
        Pair each colour with percent = (1 - s) * 100.

        Args:
            positions: Sequence of s in [0, 1] (0 = horizon, 1 = zenith)
            colors: (N, 3) integer colours

        Returns:
            Stops in the order given (descending percent for ascending s)
        """
        stops = []
        for s, rgb in zip(positions, colors):
            percent = min(100.0, max(0.0, (1.0 - float(s)) * 100.0))
            stops.append(ColorStop(percent, tuple(int(c) for c in rgb)))
        return stops

    def build(self, stops, fallback=False) -> GradientDescriptor:
        """
        Sort stops by ascending percent and format the CSS gradient.

        Raises:
            ValueError: no stops given
        """
        if not stops:
            raise ValueError("a gradient needs at least one colour stop")
        ordered = tuple(sorted(stops, key=lambda stop: stop.percent))
        gradient = "linear-gradient(to bottom, " + ", ".join(stop.css() for stop in ordered) + ")"
        return GradientDescriptor(
            gradient=gradient,
            top=ordered[0].rgb,
            bottom=ordered[-1].rgb,
            stops=ordered,
            fallback=fallback,
        )

    def fallback(self) -> GradientDescriptor:
        """Flat sky-blue gradient substituted whenever a render fails."""
        color = constants.FALLBACK_COLOR
        return self.build([ColorStop(0.0, color), ColorStop(100.0, color)], fallback=True)


FALLBACK_GRADIENT = GradientBuilder().fallback()
