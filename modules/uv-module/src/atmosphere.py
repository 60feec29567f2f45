"""Atmospheric transmission model.

Four independent multiplicative factors: ozone column, aerosol pollution,
cloud cover and altitude. No interaction terms.
"""

import math
from dataclasses import dataclass

from .models import CloudCondition
from .solar import to_radians

# Reference ozone column for the attenuation curve (DU)
REFERENCE_OZONE_DU = 250.0
# Ozone attenuation per DU above the reference
OZONE_K = 0.0003
# Aerosol attenuation per AQI unit
AEROSOL_K = 0.002
# Surface UV gain per 1000 m of altitude
ALTITUDE_GAIN_PER_KM = 0.1

# (upper |latitude| bound, base DU, seasonal amplitude DU)
_OZONE_BANDS = (
    (20.0, 260.0, 10.0),
    (40.0, 285.0, 15.0),
    (math.inf, 310.0, 20.0),
)


@dataclass(frozen=True)
class Transmission:
    ozone_du: float
    ozone: float
    pollution: float
    cloud: float
    altitude: float

    @property
    def total(self) -> float:
        return self.ozone * self.pollution * self.cloud * self.altitude


def ozone_column(latitude: float, day: int) -> float:
    """Climatological ozone column in Dobson Units, peaking near day 80."""
    abs_lat = abs(latitude)
    for bound, base, amplitude in _OZONE_BANDS:
        if abs_lat <= bound:
            break
    return base + amplitude * math.sin(to_radians(360.0 / 365.0 * (day - 80.0)))


def ozone_factor(ozone_du: float) -> float:
    return math.exp(-OZONE_K * (ozone_du - REFERENCE_OZONE_DU))


def pollution_factor(aqi: float) -> float:
    """Negative AQI counts as clean air."""
    return math.exp(-AEROSOL_K * max(aqi, 0.0))


def altitude_factor(altitude_m: float) -> float:
    """Linear and unbounded; below sea level gives a factor under 1."""
    return 1.0 + ALTITUDE_GAIN_PER_KM * (altitude_m / 1000.0)


def transmission(
    day: int,
    latitude: float,
    altitude_m: float,
    aqi: float,
    cloud: CloudCondition,
) -> Transmission:
    ozone_du = ozone_column(latitude, day)
    return Transmission(
        ozone_du=ozone_du,
        ozone=ozone_factor(ozone_du),
        pollution=pollution_factor(aqi),
        cloud=cloud.transmission_factor,
        altitude=altitude_factor(altitude_m),
    )
