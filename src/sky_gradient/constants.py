"""
Physical constants and defaults for the sky gradient renderer.
"""

# Scattering coefficients at sea level (per meter), channels [R, G, B]
RAYLEIGH_SCATTER = (5.802e-6, 13.558e-6, 33.1e-6)
MIE_SCATTER = 3.996e-6
MIE_EXTINCTION = 4.44e-6 # scatter + absorb
OZONE_ABSORB = (0.65e-6, 1.881e-6, 0.085e-6)

# Altitude density distribution (meters)
RAYLEIGH_SCALE_HEIGHT = 8e3
MIE_SCALE_HEIGHT = 1.2e3
OZONE_PEAK_HEIGHT = 25e3
OZONE_HALF_WIDTH = 15e3

# Planet
GROUND_RADIUS = 6360e3
TOP_RADIUS = 6460e3
SUN_INTENSITY = 1.0

# Henyey-Greenstein asymmetry for aerosols
MIE_G = 0.8

# Rendering
DEFAULT_SAMPLES = 32
DEFAULT_FOV_DEG = 75.0

# Post-processing
DEFAULT_EXPOSURE = 25.0
DEFAULT_GAMMA = 2.2
DEFAULT_SUNSET_BIAS = 0.1
TONEMAP_EPSILON = 1e-12

# Transmittance cache
DEFAULT_CACHE_CAPACITY = 4096
DEFAULT_CACHE_PRECISION = 6 # decimal places of the (height, angle) key
CACHE_EVICT_FRACTION = 0.25

# Time
J2000_JULIAN_DAY = 2451545.0
DAYS_PER_CENTURY = 36525.0
SECONDS_PER_DAY = 86400.0
TIMESTAMP_MIN = -2**31
TIMESTAMP_MAX = 2**31 - 1

# Location used when none (or an invalid one) is supplied
DEFAULT_LATITUDE = 51.285335
DEFAULT_LONGITUDE = 9.787075

# Fallback output
FALLBACK_COLOR = (135, 206, 235) # sky blue
FALLBACK_SUN_ELEVATION = 0.0
REFRESH_SECONDS = 60
