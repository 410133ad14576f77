"""
Fixed-size 3-component vector arithmetic.

Vector3 is used both for geometry (positions, directions) and for
per-channel RGB quantities (coefficients, transmittance, radiance).
All operations are total: a zero-length vector normalizes to zero and
per-channel division by zero yields zero.
"""
import math
from typing import NamedTuple


class Vector3(NamedTuple):
    x: float
    y: float
    z: float


ZERO = Vector3(0.0, 0.0, 0.0)
ONE = Vector3(1.0, 1.0, 1.0)


def splat(value: float) -> Vector3:
    """Vector with the same value in every component."""
    return Vector3(value, value, value)


def dot(a: Vector3, b: Vector3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def length(v: Vector3) -> float:
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def normalize(v: Vector3) -> Vector3:
    l = length(v)
    if l == 0.0:
        return ZERO
    return Vector3(v[0] / l, v[1] / l, v[2] / l)


def add(a: Vector3, b: Vector3) -> Vector3:
    return Vector3(a[0] + b[0], a[1] + b[1], a[2] + b[2])


def scale(v: Vector3, s: float) -> Vector3:
    return Vector3(v[0] * s, v[1] * s, v[2] * s)


def exp(v: Vector3) -> Vector3:
    return Vector3(math.exp(v[0]), math.exp(v[1]), math.exp(v[2]))


def multiply(a: Vector3, b: Vector3) -> Vector3:
    """Per-channel product."""
    return Vector3(a[0] * b[0], a[1] * b[1], a[2] * b[2])


def divide(a: Vector3, b: Vector3) -> Vector3:
    """Per-channel quotient; channels with a zero denominator are 0."""
    return Vector3(
        a[0] / b[0] if b[0] != 0.0 else 0.0,
        a[1] / b[1] if b[1] != 0.0 else 0.0,
        a[2] / b[2] if b[2] != 0.0 else 0.0,
    )


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def is_finite(v: Vector3) -> bool:
    return math.isfinite(v[0]) and math.isfinite(v[1]) and math.isfinite(v[2])
