"""
Exception types raised by the sky gradient pipeline.
"""


class SkyGradientError(Exception):
    """Base class for every failure the renderer reports."""


class InvalidCoordinate(SkyGradientError, ValueError):
    """Latitude or longitude is non-finite or outside its valid range."""


class InvalidTimestamp(SkyGradientError, ValueError):
    """Timestamp is not an integer inside the signed 32-bit range."""


class ComputationFailure(SkyGradientError, ArithmeticError):
    """A non-finite value reached the output boundary."""
