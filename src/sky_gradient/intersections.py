"""
Ray-sphere intersection for the atmosphere shell.

Both the planet and the top of the atmosphere are spheres centred at the
origin, so a single solver covers every query the renderer makes.
"""
import math
from dataclasses import dataclass
from enum import Enum

from sky_gradient.vectors import Vector3, dot


class HitType(Enum):
    """Outcome of an intersection query."""
    HIT = "hit"
    MISS = "miss"


@dataclass(frozen=True)
class RayHit:
    """
    Result of a ray-sphere intersection.

    Attributes:
        hit_type: HitType.HIT or HitType.MISS
        distance: Ray parameter of the selected root (inf on a miss)
    """
    hit_type: HitType
    distance: float = math.inf

    @property
    def is_hit(self) -> bool:
        return self.hit_type is HitType.HIT

    def __bool__(self) -> bool:
        return self.is_hit


MISS = RayHit(HitType.MISS)


def solve_sphere_roots(b: float, c: float):
    """
    Solve t^2 + 2bt + c = 0 (unit direction, sphere at origin).

    Args:
        b: origin . direction
        c: |origin|^2 - radius^2

    Returns:
        tuple: (t_near, t_far) or None when the discriminant is negative
    """
    discriminant = b * b - c
    if discriminant < 0.0:
        return None
    sqrt_disc = math.sqrt(discriminant)
    return -b - sqrt_disc, -b + sqrt_disc


def intersect_sphere(origin: Vector3, direction: Vector3, radius: float) -> RayHit:
    """
    Intersect a ray with a sphere of the given radius centred at the origin.

    Args:
        origin: Ray origin
        direction: Unit ray direction
        radius: Sphere radius (meters)

    Returns:
        RayHit with the near root, or the far root when the origin lies
        inside the sphere (near root negative). MISS when the ray passes by.
    """
    roots = solve_sphere_roots(dot(origin, direction), dot(origin, origin) - radius * radius)
    if roots is None:
        return MISS

    t_near, t_far = roots
    if t_near < 0.0:
        return RayHit(HitType.HIT, t_far)
    return RayHit(HitType.HIT, t_near)
