from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog.testing

from src.calculator import compute
from src.models import CloudCondition, SkinType
from src.monitor import ExposureSettings, UVMonitor
from uvsafe_base.location import LocationFix

EQUATOR = LocationFix(latitude=0.0, longitude=0.0, altitude_m=0.0)
EQUINOX_NOON = datetime(2025, 3, 21, 12, 8)


@pytest.fixture
def compute_fn() -> MagicMock:
    return MagicMock(side_effect=compute)


@pytest.fixture
def reminder():
    reminder = MagicMock()
    reminder.update = AsyncMock(return_value=True)
    return reminder


@pytest.fixture
def monitor(compute_fn, reminder) -> UVMonitor:
    return UVMonitor(reminder=reminder, debounce_s=0.01, compute_fn=compute_fn)


class TestGating:
    @pytest.mark.asyncio
    async def test_no_computation_without_location(self, monitor, compute_fn) -> None:
        monitor.set_time(EQUINOX_NOON)
        await monitor.wait_idle()
        compute_fn.assert_not_called()
        assert monitor.latest is None

    @pytest.mark.asyncio
    async def test_no_computation_without_time(self, monitor, compute_fn) -> None:
        await monitor.handle_fix(EQUATOR)
        await monitor.wait_idle()
        compute_fn.assert_not_called()

    def test_default_settings(self) -> None:
        settings = ExposureSettings()
        assert settings.aqi == 50.0
        assert settings.cloud == CloudCondition.CLEAR
        assert settings.skin_type == SkinType.TYPE_II
        assert settings.spf == 1.0


class TestRecompute:
    @pytest.mark.asyncio
    async def test_fix_and_time_produce_result(self, monitor, compute_fn) -> None:
        await monitor.handle_fix(EQUATOR)
        monitor.set_time(EQUINOX_NOON)
        await monitor.wait_idle()

        compute_fn.assert_called_once()
        assert monitor.latest == compute(monitor.current_inputs())

    @pytest.mark.asyncio
    async def test_settings_change_flows_into_inputs(self, monitor, compute_fn) -> None:
        await monitor.handle_fix(EQUATOR)
        monitor.set_time(EQUINOX_NOON)
        await monitor.wait_idle()

        monitor.update_settings(spf=30.0, cloud=CloudCondition.OVERCAST)
        await monitor.wait_idle()

        inputs = compute_fn.call_args[0][0]
        assert inputs.spf == 30.0
        assert inputs.cloud == CloudCondition.OVERCAST
        assert inputs.aqi == 50.0

    @pytest.mark.asyncio
    async def test_fix_altitude_is_used(self, monitor, compute_fn) -> None:
        await monitor.handle_fix(LocationFix(latitude=-16.5, longitude=-68.15, altitude_m=3640.0))
        monitor.set_time(datetime(2025, 1, 15, 12, 0))
        await monitor.wait_idle()
        assert compute_fn.call_args[0][0].altitude_m == 3640.0

    @pytest.mark.asyncio
    async def test_result_is_handed_to_reminder(self, monitor, reminder) -> None:
        monitor.update_settings(skin_type=SkinType.TYPE_I, spf=15.0)
        await monitor.handle_fix(EQUATOR)
        monitor.set_time(EQUINOX_NOON)
        await monitor.wait_idle()

        reminder.update.assert_awaited_once_with(monitor.latest, SkinType.TYPE_I, 15.0)

    @pytest.mark.asyncio
    async def test_close_stops_pending_work(self, monitor, compute_fn) -> None:
        await monitor.handle_fix(EQUATOR)
        monitor.set_time(EQUINOX_NOON)
        await monitor.close()
        compute_fn.assert_not_called()

    @pytest.mark.asyncio
    async def test_new_sunscreen_restarts_exposure(self, monitor, reminder) -> None:
        monitor.update_settings(spf=30.0)
        reminder.reset.assert_called_once()

    @pytest.mark.asyncio
    async def test_air_quality_change_keeps_exposure(self, monitor, reminder) -> None:
        monitor.update_settings(aqi=150.0)
        reminder.reset.assert_not_called()


class TestReport:
    @pytest.mark.asyncio
    async def test_report_includes_time_of_day_and_location(self, monitor) -> None:
        with structlog.testing.capture_logs() as logs:
            await monitor.handle_fix(EQUATOR)
            monitor.set_time(EQUINOX_NOON)
            await monitor.wait_idle()

        report = next(entry for entry in logs if entry["event"] == "UV report")
        assert report["time_of_day"] == "AFTERNOON"
        assert report["location"] == "0.0000°, 0.0000°  •  0 m"
        assert report["risk"] == monitor.latest.risk_category.label
