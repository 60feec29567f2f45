"""UV monitoring session.

Holds the user's exposure settings, the latest location fix and the
observed instant. Any change requests a debounced recomputation; each
fresh result is reported and handed to the burn reminder.
"""

from dataclasses import dataclass, replace
from datetime import datetime

import structlog

from uvsafe_base.location import LocationFix
from uvsafe_base.settings import DisplaySettings

from .calculator import compute
from .display import (
    TimeOfDay,
    aqi_label,
    format_burn_range,
    format_location,
    format_uv_index,
    format_zenith,
    risk_color,
    spf_label,
)
from .models import CloudCondition, SkinType, UVInputs, UVResult
from .recompute import DEFAULT_DEBOUNCE_S, ComputeFn, Recomputer
from .reminder import BurnReminder

logger = structlog.get_logger()


@dataclass(frozen=True)
class ExposureSettings:
    aqi: float = 50.0
    cloud: CloudCondition = CloudCondition.CLEAR
    skin_type: SkinType = SkinType.TYPE_II
    spf: float = 1.0


class UVMonitor:
    """Recomputes UV exposure whenever location, time or settings change.

    No computation happens until a location fix has been received.

    Args:
        settings: Initial exposure settings.
        reminder: Optional sunburn reminder fed with every result.
        display: Presentation preferences used in reports.
        debounce_s: Quiet period before recomputing.
        compute_fn: Engine function, replaceable in tests.
    """

    def __init__(
        self,
        settings: ExposureSettings | None = None,
        reminder: BurnReminder | None = None,
        display: DisplaySettings | None = None,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
        compute_fn: ComputeFn = compute,
    ) -> None:
        self.settings = settings or ExposureSettings()
        self.display = display or DisplaySettings()
        self._reminder = reminder
        self._fix: LocationFix | None = None
        self._when: datetime | None = None
        self._recomputer = Recomputer(compute_fn, self._publish, debounce_s=debounce_s)

    @property
    def latest(self) -> UVResult | None:
        return self._recomputer.latest

    @property
    def fix(self) -> LocationFix | None:
        return self._fix

    async def handle_fix(self, fix: LocationFix) -> None:
        self._fix = fix
        logger.info("Location updated", latitude=fix.latitude, longitude=fix.longitude, altitude_m=fix.altitude_m)
        self._request()

    def set_time(self, when: datetime) -> None:
        self._when = when
        self._request()

    def update_settings(self, **changes) -> ExposureSettings:
        """Apply changes to the exposure settings, e.g. update_settings(spf=30)."""
        self.settings = replace(self.settings, **changes)
        logger.info("Exposure settings updated", **changes)
        if self._reminder is not None and ("skin_type" in changes or "spf" in changes):
            self._reminder.reset()
        self._request()
        return self.settings

    def current_inputs(self) -> UVInputs | None:
        if self._fix is None or self._when is None:
            return None
        return UVInputs(
            latitude=self._fix.latitude,
            longitude=self._fix.longitude,
            when=self._when,
            altitude_m=self._fix.altitude_m,
            aqi=self.settings.aqi,
            cloud=self.settings.cloud,
            skin_type=self.settings.skin_type,
            spf=self.settings.spf,
        )

    def _request(self) -> None:
        inputs = self.current_inputs()
        if inputs is None:
            logger.debug("Awaiting location fix and time", has_fix=self._fix is not None, has_time=self._when is not None)
            return
        self._recomputer.submit(inputs)

    async def _publish(self, inputs: UVInputs, result: UVResult) -> None:
        logger.info(
            "UV report",
            when=inputs.when.isoformat(),
            time_of_day=TimeOfDay.from_datetime(inputs.when).value,
            location=format_location(self._fix),
            uv_index=format_uv_index(result),
            risk=result.risk_category.label,
            color=risk_color(result.risk_category, self.display.color_blind_mode),
            burn_range=format_burn_range(result),
            zenith=format_zenith(result),
            air_quality=aqi_label(inputs.aqi),
            sunscreen=spf_label(inputs.spf),
            recommendation=result.risk_category.recommendation,
        )
        if self._reminder is not None:
            await self._reminder.update(result, inputs.skin_type, inputs.spf)

    async def wait_idle(self) -> None:
        await self._recomputer.wait_idle()

    async def close(self) -> None:
        await self._recomputer.close()
