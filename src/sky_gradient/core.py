import math

import numpy as np

from sky_gradient import vectors
from sky_gradient.config import AtmosphereConfig
from sky_gradient.errors import ComputationFailure
from sky_gradient.intersections import intersect_sphere
from sky_gradient.rendering import GradientBuilder, PostProcessPipeline
from sky_gradient.transmittance import TransmittanceEngine, mie_density, rayleigh_density
from sky_gradient.vectors import Vector3


class SkyRenderer:
    def __init__(self, config=None):
        """
        Single-scattering sky renderer producing a vertical gradient.

        Coordinate System (Planet-Centric):
        - Origin (0,0,0): Centre of the planet.
        - Camera: On the ground at (0, ground_radius, 0).
        - Y-Axis: Local "up" at the camera.
        - Sun: In the XY plane, direction (cos e, sin e, 0) for elevation e.
        - Views: (0, s, focal_z) normalized; s=0 is the horizon, s=1 the
          highest direction in the field of view.

        The transmittance cache belongs to this instance; give each
        concurrent render its own renderer or rely on the cache lock.
        """
        self.config = config if config is not None else AtmosphereConfig()
        self.transmittance = TransmittanceEngine(self.config)
        self.post_process = PostProcessPipeline(self.config)
        self.builder = GradientBuilder()

        self.camera_position = Vector3(0.0, self.config.ground_radius, 0.0)
        n = self.config.samples
        self.positions = np.arange(n) / (n - 1)

    @property
    def cache(self):
        return self.transmittance.cache

    def clear_cache(self):
        self.transmittance.clear_cache()

    def compute_transmittance(self, height, angle):
        return self.transmittance.compute_transmittance(height, angle)

    def view_direction(self, s):
        return vectors.normalize(Vector3(0.0, s, self.config.focal_z))

    @staticmethod
    def sun_direction(elevation):
        return vectors.normalize(Vector3(math.cos(elevation), math.sin(elevation), 0.0))

    def rayleigh_phase(self, cos_theta):
        pc = self.config.phase_constants
        return pc.rayleigh_scale * (1.0 + cos_theta * cos_theta)

    def mie_phase(self, cos_theta):
        """Henyey-Greenstein (Cornette-Shanks form) for aerosols."""
        pc = self.config.phase_constants
        num = pc.mie_coeff * (1.0 + cos_theta * cos_theta)
        denom = pc.mie_denom * (1.0 + pc.mie_g2 - 2.0 * pc.mie_g * cos_theta) ** 1.5
        return pc.mie_scale * num / denom

    def inscattered_radiance(self, view_dir, sun_dir):
        """
        March one view ray through the atmosphere.

        Camera-to-sample transmittance is the ratio of the two
        transmittances to space (camera and sample) so every integral
        along the view ray is a cacheable boundary-to-space query.
        The ratio is not clamped here; post-processing clamps colours.
        """
        cfg = self.config
        origin = self.camera_position

        hit = intersect_sphere(origin, view_dir, cfg.top_radius)
        if not hit or hit.distance <= 0.0:
            return vectors.ZERO

        n = cfg.samples
        segment_length = hit.distance / n
        t_ray = 0.5 * segment_length

        origin_radius = vectors.length(origin)
        start_cos = vectors.clamp(vectors.dot(vectors.scale(origin, 1.0 / origin_radius), view_dir), -1.0, 1.0)
        pointing_down = start_cos < 0.0
        start_height = origin_radius - cfg.ground_radius
        camera_to_space = self.compute_transmittance(start_height, math.acos(abs(start_cos)))

        # Angle between view and sun is constant along the ray
        sun_view_cos = vectors.clamp(vectors.dot(sun_dir, view_dir), -1.0, 1.0)
        phase_r = self.rayleigh_phase(sun_view_cos)
        phase_m = self.mie_phase(sun_view_cos)
        mie_scatter = vectors.splat(cfg.mie_scatter)

        inscattered = vectors.ZERO
        for _ in range(n):
            sample_pos = vectors.add(origin, vectors.scale(view_dir, t_ray))
            sample_radius = vectors.length(sample_pos)
            up = vectors.scale(sample_pos, 1.0 / sample_radius)
            sample_height = sample_radius - cfg.ground_radius

            view_cos = vectors.clamp(vectors.dot(up, view_dir), -1.0, 1.0)
            sun_cos = vectors.clamp(vectors.dot(up, sun_dir), -1.0, 1.0)

            to_space = self.compute_transmittance(sample_height, math.acos(abs(view_cos)))
            if pointing_down:
                camera_to_sample = vectors.divide(to_space, camera_to_space)
            else:
                camera_to_sample = vectors.divide(camera_to_space, to_space)

            to_sun = self.compute_transmittance(sample_height, math.acos(sun_cos))

            density_r = float(rayleigh_density(sample_height, cfg.rayleigh_scale_height))
            density_m = float(mie_density(sample_height, cfg.mie_scale_height))
            scattering = vectors.add(
                vectors.scale(cfg.rayleigh_scatter, density_r * phase_r),
                vectors.scale(mie_scatter, density_m * phase_m),
            )
            scattered = vectors.multiply(to_sun, scattering)

            inscattered = vectors.add(
                inscattered,
                vectors.scale(vectors.multiply(camera_to_sample, scattered), segment_length),
            )
            t_ray += segment_length

        return vectors.scale(inscattered, cfg.sun_intensity)

    def render_radiance(self, elevation):
        """
        Raw inscattered radiance for every gradient sample.

        Args:
            elevation: Solar elevation (radians)

        Returns:
            tuple: (positions, radiance) where positions is the (N,) array
            of s values and radiance the (N, 3) linear radiance

        Raises:
            ComputationFailure: elevation or any radiance is not finite
        """
        if not math.isfinite(elevation):
            raise ComputationFailure(f"solar elevation must be finite, got {elevation!r}")

        sun_dir = self.sun_direction(elevation)
        radiance = np.zeros((self.config.samples, 3))
        for i, s in enumerate(self.positions):
            radiance[i] = self.inscattered_radiance(self.view_direction(float(s)), sun_dir)

        if not np.all(np.isfinite(radiance)):
            raise ComputationFailure("ray march produced non-finite radiance")
        return self.positions, radiance

    def render_stops(self, elevation):
        """Colour stops in generation order (horizon first, descending percent)."""
        positions, radiance = self.render_radiance(elevation)
        colors = self.post_process.process(radiance)
        return self.builder.make_stops(positions, colors)

    def render(self, elevation):
        """
        Render the sky gradient for a solar elevation.

        Raises the pipeline's typed errors; see SkyGradientGenerator for the
        fallback-guarded entry point.
        """
        return self.builder.build(self.render_stops(elevation))
