from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.models import RiskCategory, SkinType, UVResult
from src.reminder import REMINDER_ID, TITLE, BurnReminder, reminder_body

FIRE_AT = datetime(2025, 7, 1, 12, 30, tzinfo=timezone.utc)


def _result(burn_with_spf_s: float) -> UVResult:
    return UVResult(
        uv_index=8.0,
        uv_power_w_m2=0.2,
        risk_category=RiskCategory.VERY_HIGH,
        burn_time_s=burn_with_spf_s / 10,
        burn_time_with_spf_s=burn_with_spf_s,
        solar_zenith_deg=20.0,
        is_sun_below_horizon=False,
    )


@pytest.fixture
def notifier():
    notifier = MagicMock()
    notifier.schedule = AsyncMock(return_value=FIRE_AT)
    notifier.cancel = AsyncMock()
    return notifier


@pytest.fixture
def reminder(notifier) -> BurnReminder:
    return BurnReminder(notifier)


class TestScheduling:
    @pytest.mark.asyncio
    async def test_schedules_for_burn_time_with_spf(self, reminder, notifier) -> None:
        scheduled = await reminder.update(_result(3600.0), SkinType.TYPE_II, 10.0)

        assert scheduled
        notifier.cancel.assert_awaited_once_with(REMINDER_ID)
        notifier.schedule.assert_awaited_once_with(
            REMINDER_ID, 3600.0, TITLE, reminder_body(SkinType.TYPE_II, 10.0)
        )
        assert reminder.pending_until == FIRE_AT

    @pytest.mark.asyncio
    async def test_sun_below_horizon_is_not_scheduled(self, reminder, notifier) -> None:
        assert not await reminder.update(UVResult.sun_below_horizon(), SkinType.TYPE_I, 30.0)
        notifier.schedule.assert_not_awaited()
        notifier.cancel.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_a_day_or_more_is_not_scheduled(self, reminder, notifier) -> None:
        assert not await reminder.update(_result(86_400.0), SkinType.TYPE_VI, 50.0)
        notifier.schedule.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_notifier_failure_clears_pending(self, reminder, notifier) -> None:
        await reminder.update(_result(1200.0), SkinType.TYPE_II, 1.0)
        notifier.schedule = AsyncMock(side_effect=RuntimeError("permission denied"))

        assert not await reminder.update(_result(900.0), SkinType.TYPE_II, 1.0)
        assert reminder.pending_until is None

    @pytest.mark.asyncio
    async def test_cancel(self, reminder, notifier) -> None:
        await reminder.update(_result(1200.0), SkinType.TYPE_II, 1.0)
        await reminder.cancel()
        assert reminder.pending_until is None


class TestReminderBody:
    def test_mentions_skin_type_and_spf(self) -> None:
        body = reminder_body(SkinType.TYPE_III, 30.0)
        assert "Type III" in body
        assert "(SPF 30 applied)" in body

    def test_no_sunscreen_omits_spf(self) -> None:
        assert "SPF" not in reminder_body(SkinType.TYPE_I, 0.0)


class TestDoseAccumulation:
    """Refreshes with an unchanged burn time keep the original deadline."""

    @pytest.fixture
    def clock(self) -> list[float]:
        return [0.0]

    @pytest.fixture
    def reminder(self, notifier, clock) -> BurnReminder:
        return BurnReminder(notifier, clock=lambda: clock[0])

    def _delay(self, notifier) -> float:
        return notifier.schedule.call_args[0][1]

    @pytest.mark.asyncio
    async def test_refresh_schedules_only_the_remainder(self, reminder, notifier, clock) -> None:
        await reminder.update(_result(600.0), SkinType.TYPE_II, 1.0)
        assert self._delay(notifier) == 600.0

        clock[0] = 60.0
        await reminder.update(_result(600.0), SkinType.TYPE_II, 1.0)
        assert self._delay(notifier) == pytest.approx(540.0)
        assert reminder.dose == pytest.approx(0.1)

    @pytest.mark.asyncio
    async def test_rising_uv_consumes_remainder_faster(self, reminder, notifier, clock) -> None:
        await reminder.update(_result(600.0), SkinType.TYPE_II, 1.0)
        clock[0] = 100.0
        await reminder.update(_result(300.0), SkinType.TYPE_II, 1.0)

        assert reminder.dose == pytest.approx(100.0 / 600.0)
        assert self._delay(notifier) == pytest.approx(250.0)

    @pytest.mark.asyncio
    async def test_nothing_scheduled_once_dose_reached(self, reminder, notifier, clock) -> None:
        await reminder.update(_result(600.0), SkinType.TYPE_II, 1.0)
        clock[0] = 601.0
        notifier.schedule.reset_mock()

        assert not await reminder.update(_result(600.0), SkinType.TYPE_II, 1.0)
        notifier.schedule.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_night_accrues_nothing(self, reminder, notifier, clock) -> None:
        await reminder.update(UVResult.sun_below_horizon(), SkinType.TYPE_II, 1.0)
        clock[0] = 3600.0
        await reminder.update(_result(600.0), SkinType.TYPE_II, 1.0)

        assert reminder.dose == 0.0
        assert self._delay(notifier) == 600.0

    @pytest.mark.asyncio
    async def test_reset_starts_a_new_exposure(self, reminder, notifier, clock) -> None:
        await reminder.update(_result(600.0), SkinType.TYPE_II, 1.0)
        clock[0] = 300.0
        await reminder.update(_result(600.0), SkinType.TYPE_II, 1.0)

        reminder.reset()
        clock[0] = 400.0
        await reminder.update(_result(600.0), SkinType.TYPE_II, 30.0)

        assert reminder.dose == 0.0
        assert self._delay(notifier) == 600.0
