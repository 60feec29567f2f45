"""UV engine.

Combines solar geometry and atmospheric transmission into UV irradiance,
UV Index, a risk category and time-to-sunburn. Pure and stateless: no I/O,
no clock reads, safe to call from any thread.
"""

import math
from datetime import datetime

from .atmosphere import transmission
from .models import CloudCondition, RiskCategory, SkinType, UVInputs, UVResult
from .solar import solar_position

# Surface erythemal irradiance with the sun overhead and full transmission (W/m²).
# Calibrated so that cos(zenith)=1 lands near UV Index 11-12.
BASE_UV_W_M2 = 0.302
# 1 UV Index unit in erythemally weighted W/m²
UV_INDEX_UNIT_W_M2 = 0.025

# (lower bound inclusive, category), highest first
_RISK_THRESHOLDS = (
    (11.0, RiskCategory.EXTREME),
    (8.0, RiskCategory.VERY_HIGH),
    (6.0, RiskCategory.HIGH),
    (3.0, RiskCategory.MODERATE),
    (0.0, RiskCategory.LOW),
)


def classify_risk(uv_index: float) -> RiskCategory:
    for lower, category in _RISK_THRESHOLDS:
        if uv_index >= lower:
            return category
    return RiskCategory.NONE


def burn_times(uv_power_w_m2: float, skin_type: SkinType, spf: float) -> tuple[float, float]:
    """Seconds to reach the skin type's MED, without and with sunscreen.

    SPF below 1 counts as no sunscreen.
    """
    if uv_power_w_m2 <= 0:
        return math.inf, math.inf
    unprotected = skin_type.med / uv_power_w_m2
    return unprotected, unprotected * max(spf, 1.0)


def calculate(
    latitude: float,
    longitude: float,
    when: datetime,
    altitude_m: float,
    aqi: float,
    cloud: CloudCondition,
    skin_type: SkinType,
    spf: float,
) -> UVResult:
    """Estimate UV exposure for a place and instant.

    Args:
        latitude: Degrees, not validated.
        longitude: Degrees, not validated.
        when: Observer's local civil time.
        altitude_m: Metres above sea level.
        aqi: Air Quality Index; negative values count as 0.
        cloud: Cloud condition.
        skin_type: Fitzpatrick skin type.
        spf: Sunscreen protection factor; below 1 means none.

    Returns:
        UVResult. When the sun is at or below the horizon this is the
        `UVResult.sun_below_horizon()` sentinel.
    """
    position = solar_position(latitude, longitude, when)
    if position.is_below_horizon:
        return UVResult.sun_below_horizon()

    atmosphere = transmission(position.day_of_year, latitude, altitude_m, aqi, cloud)

    uv_power = BASE_UV_W_M2 * position.cos_zenith * atmosphere.total
    uv_index = uv_power / UV_INDEX_UNIT_W_M2
    burn_s, burn_spf_s = burn_times(uv_power, skin_type, spf)

    return UVResult(
        uv_index=uv_index,
        uv_power_w_m2=uv_power,
        risk_category=classify_risk(uv_index),
        burn_time_s=burn_s,
        burn_time_with_spf_s=burn_spf_s,
        solar_zenith_deg=position.zenith_deg,
        is_sun_below_horizon=False,
    )


def compute(inputs: UVInputs) -> UVResult:
    return calculate(
        latitude=inputs.latitude,
        longitude=inputs.longitude,
        when=inputs.when,
        altitude_m=inputs.altitude_m,
        aqi=inputs.aqi,
        cloud=inputs.cloud,
        skin_type=inputs.skin_type,
        spf=inputs.spf,
    )
