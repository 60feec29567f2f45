"""UV engine value types.

Enumerations are closed variants; their associated data (transmission
factor, MED, recommendation text) lives in static lookup tables.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class CloudCondition(str, Enum):
    CLEAR = "CLEAR"
    PARTLY_CLOUDY = "PARTLY_CLOUDY"
    OVERCAST = "OVERCAST"

    @property
    def transmission_factor(self) -> float:
        return _CLOUD_TRANSMISSION[self]

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class SkinType(str, Enum):
    """Fitzpatrick skin type."""

    TYPE_I = "I"
    TYPE_II = "II"
    TYPE_III = "III"
    TYPE_IV = "IV"
    TYPE_V = "V"
    TYPE_VI = "VI"

    @property
    def med(self) -> float:
        """Minimal Erythemal Dose in J/m²."""
        return _SKIN_MED[self]

    @property
    def label(self) -> str:
        return f"Type {self.value} ({_SKIN_TONE[self]})"

    @property
    def description(self) -> str:
        return _SKIN_DESCRIPTION[self]


class RiskCategory(str, Enum):
    NONE = "NONE"
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"
    EXTREME = "EXTREME"

    @property
    def label(self) -> str:
        return _RISK_LABEL[self]

    @property
    def recommendation(self) -> str:
        return _RISK_RECOMMENDATION[self]


_CLOUD_TRANSMISSION = {
    CloudCondition.CLEAR: 1.0,
    CloudCondition.PARTLY_CLOUDY: 0.75,
    CloudCondition.OVERCAST: 0.40,
}

_SKIN_MED = {
    SkinType.TYPE_I: 200.0,
    SkinType.TYPE_II: 250.0,
    SkinType.TYPE_III: 300.0,
    SkinType.TYPE_IV: 450.0,
    SkinType.TYPE_V: 600.0,
    SkinType.TYPE_VI: 1000.0,
}

_SKIN_TONE = {
    SkinType.TYPE_I: "Very Fair",
    SkinType.TYPE_II: "Fair",
    SkinType.TYPE_III: "Medium",
    SkinType.TYPE_IV: "Olive",
    SkinType.TYPE_V: "Brown",
    SkinType.TYPE_VI: "Dark Brown/Black",
}

_SKIN_DESCRIPTION = {
    SkinType.TYPE_I: "Always burns, never tans",
    SkinType.TYPE_II: "Usually burns, rarely tans",
    SkinType.TYPE_III: "Sometimes burns, gradually tans",
    SkinType.TYPE_IV: "Rarely burns, always tans",
    SkinType.TYPE_V: "Very rarely burns, tans darkly",
    SkinType.TYPE_VI: "Never burns, deeply pigmented",
}

_RISK_LABEL = {
    RiskCategory.NONE: "None (Sun Below Horizon)",
    RiskCategory.LOW: "Low",
    RiskCategory.MODERATE: "Moderate",
    RiskCategory.HIGH: "High",
    RiskCategory.VERY_HIGH: "Very High",
    RiskCategory.EXTREME: "Extreme",
}

_RISK_RECOMMENDATION = {
    RiskCategory.NONE: "The sun is below the horizon. No UV risk at this time.",
    RiskCategory.LOW: (
        "UV risk is low. You can safely enjoy outdoor activities. "
        "No special protection needed for most people."
    ),
    RiskCategory.MODERATE: (
        "Take precautions: wear sunscreen SPF 30+, protective clothing, and a hat. "
        "Seek shade near midday."
    ),
    RiskCategory.HIGH: (
        "Protection is essential. Reduce sun exposure between 10am and 4pm. "
        "Apply SPF 50+ every 2 hours."
    ),
    RiskCategory.VERY_HIGH: (
        "Extra protection required. Avoid sun exposure near midday. "
        "Unprotected skin can burn quickly."
    ),
    RiskCategory.EXTREME: (
        "Extreme UV levels. Try to stay indoors. If outdoors, wear full-body protection, "
        "SPF 50+ and UV-blocking sunglasses."
    ),
}


@dataclass(frozen=True)
class UVInputs:
    """One complete input set for the engine. Built right before a computation."""

    latitude: float  # degrees, not validated
    longitude: float  # degrees, not validated
    when: datetime  # observer's local civil time
    altitude_m: float = 0.0
    aqi: float = 0.0
    cloud: CloudCondition = CloudCondition.CLEAR
    skin_type: SkinType = SkinType.TYPE_II
    spf: float = 1.0  # < 1 means no sunscreen


@dataclass(frozen=True)
class UVResult:
    uv_index: float
    uv_power_w_m2: float  # erythemally weighted
    risk_category: RiskCategory
    burn_time_s: float  # without sunscreen, may be inf
    burn_time_with_spf_s: float  # may be inf
    solar_zenith_deg: float
    is_sun_below_horizon: bool

    @classmethod
    def sun_below_horizon(cls) -> "UVResult":
        return cls(
            uv_index=0.0,
            uv_power_w_m2=0.0,
            risk_category=RiskCategory.NONE,
            burn_time_s=math.inf,
            burn_time_with_spf_s=math.inf,
            solar_zenith_deg=90.0,
            is_sun_below_horizon=True,
        )

    @property
    def burn_time_min_minutes(self) -> float:
        """Lower end of the ±20% uncertainty band, in minutes."""
        return self.burn_time_with_spf_s * 0.80 / 60.0

    @property
    def burn_time_max_minutes(self) -> float:
        """Upper end of the ±20% uncertainty band, in minutes."""
        return self.burn_time_with_spf_s * 1.20 / 60.0

    def to_dict(self) -> dict:
        return {
            "uv_index": self.uv_index,
            "uv_power_w_m2": self.uv_power_w_m2,
            "risk_category": self.risk_category.value,
            "burn_time_s": _finite_or_none(self.burn_time_s),
            "burn_time_with_spf_s": _finite_or_none(self.burn_time_with_spf_s),
            "solar_zenith_deg": self.solar_zenith_deg,
            "is_sun_below_horizon": self.is_sun_below_horizon,
        }


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None
