"""Presentation helpers: colours, labels and formatted strings for reports."""

from datetime import datetime
from enum import Enum

from uvsafe_base.location import LocationFix

from .models import RiskCategory, UVResult

NO_VALUE = "—"

RISK_COLORS = {
    RiskCategory.NONE: "#6B7280",
    RiskCategory.LOW: "#22C55E",
    RiskCategory.MODERATE: "#EAB308",
    RiskCategory.HIGH: "#F97316",
    RiskCategory.VERY_HIGH: "#EF4444",
    RiskCategory.EXTREME: "#8B5CF6",
}

# Okabe-Ito colour-blind safe palette
COLOR_BLIND_RISK_COLORS = {
    RiskCategory.NONE: "#999999",
    RiskCategory.LOW: "#009E73",
    RiskCategory.MODERATE: "#F0E442",
    RiskCategory.HIGH: "#E69F00",
    RiskCategory.VERY_HIGH: "#D55E00",
    RiskCategory.EXTREME: "#CC79A7",
}

# (exclusive upper bound, label)
_AQI_LABELS = (
    (51, "Good"),
    (101, "Moderate"),
    (151, "Unhealthy for sensitive groups"),
    (201, "Unhealthy"),
    (301, "Very Unhealthy"),
)

_SPF_LABELS = (
    (1, "No sunscreen"),
    (15, "Low SPF"),
    (30, "Medium SPF"),
    (50, "High SPF"),
)


class TimeOfDay(str, Enum):
    NIGHT = "NIGHT"  # 00:00 - 05:00
    DAWN = "DAWN"  # 05:00 - 07:00
    MORNING = "MORNING"  # 07:00 - 11:00
    AFTERNOON = "AFTERNOON"  # 11:00 - 17:00
    DUSK = "DUSK"  # 17:00 - 20:00
    EVENING = "EVENING"  # 20:00 - 24:00

    @classmethod
    def from_datetime(cls, when: datetime) -> "TimeOfDay":
        hour = when.hour
        if hour < 5:
            return cls.NIGHT
        if hour < 7:
            return cls.DAWN
        if hour < 11:
            return cls.MORNING
        if hour < 17:
            return cls.AFTERNOON
        if hour < 20:
            return cls.DUSK
        return cls.EVENING


def risk_color(category: RiskCategory, color_blind: bool = False) -> str:
    palette = COLOR_BLIND_RISK_COLORS if color_blind else RISK_COLORS
    return palette[category]


def aqi_label(aqi: float) -> str:
    for upper, label in _AQI_LABELS:
        if aqi < upper:
            return label
    return "Hazardous"


def spf_label(spf: float) -> str:
    for upper, label in _SPF_LABELS:
        if spf < upper:
            return label
    return "Very High SPF"


def format_uv_index(result: UVResult | None) -> str:
    if result is None:
        return NO_VALUE
    return f"{max(result.uv_index, 0.0):.1f}"


def format_burn_range(result: UVResult | None) -> str:
    if result is None or result.is_sun_below_horizon or result.uv_power_w_m2 <= 0:
        return "No burn risk"
    low = result.burn_time_min_minutes
    high = result.burn_time_max_minutes
    if high >= 999:
        return "> 16 hours"
    return f"{low:.0f} – {high:.0f} min"


def format_zenith(result: UVResult | None) -> str:
    if result is None:
        return NO_VALUE
    return f"{result.solar_zenith_deg:.1f}°"


def format_location(fix: LocationFix | None) -> str:
    if fix is None:
        return "Acquiring location…"
    return f"{fix.latitude:.4f}°, {fix.longitude:.4f}°  •  {fix.altitude_m:.0f} m"
