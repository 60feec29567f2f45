"""Solar geometry.

Closed-form solar position for an instant and location: day of year,
declination, equation of time, local solar time, hour angle and the
resulting zenith angle. Angles are in degrees unless a name says otherwise.
"""

import math
from dataclasses import dataclass
from datetime import datetime

# Earth's axial tilt used by the declination approximation (degrees)
AXIAL_TILT_DEG = 23.45
DAYS_PER_YEAR = 365.0
# Degrees of hour angle per hour of solar time
DEG_PER_HOUR = 15.0


@dataclass(frozen=True)
class SolarPosition:
    day_of_year: int
    declination_deg: float
    hour_angle_deg: float
    cos_zenith: float
    zenith_deg: float  # 90 when below the horizon
    is_below_horizon: bool


def to_radians(degrees: float) -> float:
    # Not math.radians: the two can differ in the last bit
    return degrees * math.pi / 180.0


def to_degrees(radians: float) -> float:
    return radians * 180.0 / math.pi


def day_of_year(when: datetime) -> int:
    """1-based ordinal day within the calendar year of `when`."""
    return when.timetuple().tm_yday


def solar_declination(day: int) -> float:
    """Sun's declination in degrees, ±23.45 over the year."""
    return AXIAL_TILT_DEG * math.sin(to_radians(360.0 / DAYS_PER_YEAR * (284.0 + day)))


def equation_of_time(day: int) -> float:
    """Equation of time in minutes."""
    b = to_radians(360.0 / DAYS_PER_YEAR * (day - 81.0))
    return 9.87 * math.sin(2.0 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b)


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def longitude_correction(longitude: float) -> float:
    """Offset in hours between the standard meridian and the observer's meridian.

    The time zone is approximated as longitude / 15 rounded to the nearest
    whole hour (halves away from zero); 4 minutes per degree of difference.
    """
    timezone_offset_h = _round_half_away(longitude / DEG_PER_HOUR)
    return 4.0 * (longitude - DEG_PER_HOUR * timezone_offset_h) / 60.0


def clock_hours(when: datetime) -> float:
    """Wall-clock time of `when` in its own time zone, as decimal hours."""
    return when.hour + when.minute / 60.0 + when.second / 3600.0


def local_solar_time(when: datetime, longitude: float) -> float:
    day = day_of_year(when)
    return clock_hours(when) + longitude_correction(longitude) + equation_of_time(day) / 60.0


def hour_angle(solar_time: float) -> float:
    """0 at solar noon, positive in the afternoon."""
    return DEG_PER_HOUR * (solar_time - 12.0)


def solar_position(latitude: float, longitude: float, when: datetime) -> SolarPosition:
    """Compute the solar zenith angle for `when` at (latitude, longitude).

    Args:
        latitude: Observer latitude in degrees.
        longitude: Observer longitude in degrees.
        when: Observer's local civil time. Aware datetimes are read in
            their own zone; naive ones are taken as-is.

    Returns:
        SolarPosition. When cos(zenith) <= 0 the sun is at or below the
        horizon and zenith_deg is fixed at 90.
    """
    day = day_of_year(when)
    declination = solar_declination(day)
    angle = hour_angle(local_solar_time(when, longitude))

    lat_rad = to_radians(latitude)
    dec_rad = to_radians(declination)
    cos_zenith = (
        math.sin(lat_rad) * math.sin(dec_rad)
        + math.cos(lat_rad) * math.cos(dec_rad) * math.cos(to_radians(angle))
    )

    if cos_zenith <= 0.0:
        return SolarPosition(
            day_of_year=day,
            declination_deg=declination,
            hour_angle_deg=angle,
            cos_zenith=cos_zenith,
            zenith_deg=90.0,
            is_below_horizon=True,
        )

    return SolarPosition(
        day_of_year=day,
        declination_deg=declination,
        hour_angle_deg=angle,
        cos_zenith=cos_zenith,
        zenith_deg=to_degrees(math.acos(min(cos_zenith, 1.0))),
        is_below_horizon=False,
    )
