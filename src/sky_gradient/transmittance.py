"""
Atmospheric transmittance from a point toward the top of the atmosphere.

The optical depth along the exit segment is integrated with the midpoint
rule (vectorized over sub-segments). Results are memoized per
(height, angle) in a bounded LRU cache owned by the engine.
"""
import logging
import math
import threading
from collections import OrderedDict

import numpy as np

from sky_gradient import constants
from sky_gradient import vectors
from sky_gradient.intersections import intersect_sphere
from sky_gradient.vectors import Vector3

logger = logging.getLogger(__name__)


def rayleigh_density(height, scale_height):
    return np.exp(-np.asarray(height) / scale_height)


def mie_density(height, scale_height):
    return np.exp(-np.asarray(height) / scale_height)


def ozone_density(height):
    """Triangular ozone profile peaking at 25 km, zero beyond +/-15 km."""
    distance = np.abs(np.asarray(height) - constants.OZONE_PEAK_HEIGHT) / constants.OZONE_HALF_WIDTH
    return np.clip(1.0 - np.minimum(distance, 1.0), 0.0, 1.0)


def quantize(height, angle, precision) -> tuple[int, int]:
    """Fixed-point (height, angle) with `precision` decimal places."""
    scale = 10 ** precision
    return round(height * scale), round(angle * scale)


def dequantize(key, precision) -> tuple[float, float]:
    scale = 10 ** precision
    return key[0] / scale, key[1] / scale


class TransmittanceCache:
    """
    Bounded LRU map from quantized (height, angle) to transmittance.

    Every lookup refreshes recency. Inserting into a full cache evicts the
    least recently used quarter of the entries (at least one).
    """

    def __init__(self, capacity=constants.DEFAULT_CACHE_CAPACITY,
                 precision=constants.DEFAULT_CACHE_PRECISION):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.precision = precision
        self._entries = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def key(self, height: float, angle: float) -> tuple[int, int]:
        """Quantize a lookup to fixed-point integers."""
        return quantize(height, angle, self.precision)

    def get(self, key):
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return value

    def put(self, key, value: Vector3):
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self._entries[key] = value
                return
            if len(self._entries) >= self.capacity:
                self._evict()
            self._entries[key] = value

    def _evict(self):
        count = min(max(1, int(self.capacity * constants.CACHE_EVICT_FRACTION)), len(self._entries))
        for _ in range(count):
            self._entries.popitem(last=False)
        self.evictions += count
        logger.debug("Transmittance cache full; evicted %d entries", count)

    def clear(self):
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0
            self.evictions = 0

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def __contains__(self, key):
        with self._lock:
            return key in self._entries

    def keys(self):
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._entries.keys())


class TransmittanceEngine:
    """
    Per-channel transmittance from a height above ground along a direction.
    """

    def __init__(self, config, cache=None):
        """
        Args:
            config: AtmosphereConfig
            cache: Optional TransmittanceCache; one is created from the
                config when caching is enabled and none is given.
        """
        self.config = config
        if cache is None and config.use_cache:
            cache = TransmittanceCache(config.cache_capacity, config.cache_precision)
        self.cache = cache if config.use_cache else None
        self.precision = self.cache.precision if self.cache is not None else config.cache_precision

        self._mie_extinction = vectors.splat(config.mie_extinction)
        # Midpoints of the sub-segments as a fraction of the segment count
        self._midpoints = np.arange(config.samples) + 0.5

    def compute_transmittance(self, height: float, angle: float) -> Vector3:
        """
        Transmittance from `height` meters above ground to space.

        Args:
            height: Height above the ground sphere (m)
            angle: Angle from the local vertical (radians)

        Returns:
            Vector3 of per-channel transmittance in [0, 1]

        Inputs are snapped to the cache grid before integrating, with or
        without a cache, so every lookup in a bucket sees the same value.
        """
        key = quantize(height, angle, self.precision)
        if self.cache is None:
            return self._integrate(*dequantize(key, self.precision))

        cached = self.cache.get(key)
        if cached is not None:
            return cached
        value = self._integrate(*dequantize(key, self.precision))
        self.cache.put(key, value)
        return value

    def optical_depths(self, height: float, angle: float):
        """
        Rayleigh, Mie and ozone optical depths (density x length) to space.

        Returns:
            tuple: (od_rayleigh, od_mie, od_ozone), or None when the ray
            misses the top of the atmosphere
        """
        cfg = self.config
        origin = Vector3(0.0, cfg.ground_radius + height, 0.0)
        direction = Vector3(math.sin(angle), math.cos(angle), 0.0)

        hit = intersect_sphere(origin, direction, cfg.top_radius)
        if not hit:
            return None

        segment_length = hit.distance / cfg.samples
        t = self._midpoints * segment_length

        px = origin.x + direction.x * t
        py = origin.y + direction.y * t
        heights = np.sqrt(px * px + py * py) - cfg.ground_radius

        # Rays toward a sun below the horizon pass through the planet (negative
        # heights); densities may overflow to inf, giving zero transmittance.
        with np.errstate(over='ignore'):
            od_rayleigh = float(np.sum(rayleigh_density(heights, cfg.rayleigh_scale_height))) * segment_length
            od_mie = float(np.sum(mie_density(heights, cfg.mie_scale_height))) * segment_length
        od_ozone = float(np.sum(ozone_density(heights))) * segment_length
        return od_rayleigh, od_mie, od_ozone

    def _integrate(self, height, angle):
        depths = self.optical_depths(height, angle)
        if depths is None:
            return vectors.ONE
        od_rayleigh, od_mie, od_ozone = depths

        tau = vectors.add(
            vectors.add(vectors.scale(self.config.rayleigh_scatter, od_rayleigh),
                        vectors.scale(self._mie_extinction, od_mie)),
            vectors.scale(self.config.ozone_absorb, od_ozone),
        )
        return vectors.exp(vectors.scale(tau, -1.0))

    def clear_cache(self):
        if self.cache is not None:
            self.cache.clear()
