"""
Solar position from latitude, longitude and a Unix timestamp.

Low-precision almanac formulas (mean longitude, mean anomaly, equation of
centre, obliquity) giving the solar elevation to well under a degree.
Civil time is taken in UTC.
"""
import math
import numbers
import time
from datetime import datetime, timedelta, timezone

from sky_gradient import constants
from sky_gradient.errors import InvalidCoordinate, InvalidTimestamp

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def validate_coordinates(latitude, longitude):
    """
    Check latitude/longitude and return them as floats.

    Raises:
        InvalidCoordinate: non-numeric, non-finite or out of range
    """
    for name, value, bound in (("latitude", latitude, 90.0), ("longitude", longitude, 180.0)):
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidCoordinate(f"{name} must be a real number, got {value!r}")
        if not math.isfinite(value):
            raise InvalidCoordinate(f"{name} must be finite, got {value!r}")
        if value < -bound or value > bound:
            raise InvalidCoordinate(
                f"{name.capitalize()} must be between {-bound:g} and {bound:g} degrees, got {value!r}")
    return float(latitude), float(longitude)


def validate_timestamp(timestamp):
    """
    Return the timestamp as an int, defaulting to the current time.

    Raises:
        InvalidTimestamp: non-integral, non-finite or outside signed 32-bit range
    """
    if timestamp is None:
        return int(time.time())
    if isinstance(timestamp, bool) or not isinstance(timestamp, numbers.Real):
        raise InvalidTimestamp(f"timestamp must be an integer, got {timestamp!r}")
    if isinstance(timestamp, numbers.Integral):
        value = int(timestamp)
    else:
        if not math.isfinite(timestamp) or not float(timestamp).is_integer():
            raise InvalidTimestamp(f"timestamp must be an integer, got {timestamp!r}")
        value = int(timestamp)
    if not constants.TIMESTAMP_MIN <= value <= constants.TIMESTAMP_MAX:
        raise InvalidTimestamp(f"timestamp {value} is outside the signed 32-bit range")
    return value


def julian_day(moment: datetime) -> float:
    """Julian Day of a UTC datetime, time of day included."""
    year, month, day = moment.year, moment.month, moment.day
    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    jd = math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1)) + day + b - 1524.5
    return jd + day_fraction(moment)


def day_fraction(moment: datetime) -> float:
    return (moment.hour + moment.minute / 60.0 + moment.second / 3600.0) / 24.0


def solar_declination(jd: float) -> float:
    """Declination of the sun (radians) at the given Julian Day."""
    t = (jd - constants.J2000_JULIAN_DAY) / constants.DAYS_PER_CENTURY

    # Mean longitude and mean anomaly (degrees)
    l0 = math.fmod(280.46646 + t * (36000.76983 + t * 0.0003032), 360.0)
    m = math.radians(357.52911 + t * (35999.05029 - 0.0001537 * t))

    # Equation of centre
    c = (math.sin(m) * (1.914602 - t * (0.004817 + 0.000014 * t))
         + math.sin(2.0 * m) * (0.019993 - 0.000101 * t)
         + math.sin(3.0 * m) * 0.000289)
    true_longitude = l0 + c

    obliquity = 23.439291 - t * (0.0130042 + t * (0.00000016 - t * 0.000000504))
    return math.asin(math.sin(math.radians(obliquity)) * math.sin(math.radians(true_longitude)))


def solar_elevation(latitude, longitude, timestamp=None) -> float:
    """
    Elevation of the sun above the horizon.

    Args:
        latitude: Degrees, [-90, 90]
        longitude: Degrees east, [-180, 180]
        timestamp: Seconds since the Unix epoch; None means now

    Returns:
        Elevation in radians, [-pi/2, pi/2]
    """
    latitude, longitude = validate_coordinates(latitude, longitude)
    timestamp = validate_timestamp(timestamp)

    moment = EPOCH + timedelta(seconds=timestamp)
    declination = solar_declination(julian_day(moment))

    hour_angle = math.radians(15.0 * (day_fraction(moment) * 24.0 - 12.0)) + math.radians(longitude)

    lat = math.radians(latitude)
    sin_elevation = (math.sin(lat) * math.sin(declination)
                     + math.cos(lat) * math.cos(declination) * math.cos(hour_angle))
    return math.asin(max(-1.0, min(1.0, sin_elevation)))
