"""UV module entry point.

Wires the location provider, UV monitor, burn reminder and display
settings together, then feeds the current local time to the monitor on a
fixed interval. In feed mode, location fixes are read from stdin as
newline-delimited JSON. Controlled via environment variables.
"""

import asyncio
import os
import signal
import sys
from datetime import datetime
from typing import AsyncIterator

import structlog

from src.models import CloudCondition, SkinType
from src.monitor import ExposureSettings, UVMonitor
from src.reminder import BurnReminder
from uvsafe_base.location import BaseLocationProvider, FeedLocationProvider, create_location_provider
from uvsafe_base.notifier import create_notifier
from uvsafe_base.settings import SettingsStore

structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ]
)
logger = structlog.get_logger()

DEBOUNCE_MS = int(os.environ.get("DEBOUNCE_MS", "300"))
REFRESH_INTERVAL_S = int(os.environ.get("REFRESH_INTERVAL_S", "60"))
REMINDERS_ENABLED = os.environ.get("REMINDERS_ENABLED", "true").lower() in ("1", "true", "yes")
SETTINGS_PATH = os.environ.get("SETTINGS_PATH", "uvsafe-settings.json")


def load_exposure_settings() -> ExposureSettings:
    """Read exposure settings from the environment.

    Raises:
        ValueError: On unparseable numbers or unknown enum names.
    """
    cloud = os.environ.get("CLOUD_CONDITION", CloudCondition.CLEAR.value).upper()
    skin = os.environ.get("SKIN_TYPE", SkinType.TYPE_II.value).upper()
    try:
        cloud_condition = CloudCondition[cloud]
    except KeyError:
        raise ValueError(f"Unknown CLOUD_CONDITION: {cloud}") from None
    try:
        skin_type = SkinType(skin)
    except ValueError:
        raise ValueError(f"Unknown SKIN_TYPE: {skin}") from None
    return ExposureSettings(
        aqi=float(os.environ.get("AQI", "50")),
        cloud=cloud_condition,
        skin_type=skin_type,
        spf=float(os.environ.get("SPF", "1.0")),
    )


async def register_handlers(location: BaseLocationProvider, monitor: UVMonitor) -> None:
    location.on_fix(monitor.handle_fix)


async def refresh_loop(monitor: UVMonitor, interval_s: float = REFRESH_INTERVAL_S) -> None:
    while True:
        try:
            monitor.set_time(datetime.now().astimezone())
        except Exception:
            logger.exception("Refresh loop error")

        await asyncio.sleep(interval_s)


async def stdin_lines() -> AsyncIterator[str]:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    while True:
        line = await reader.readline()
        if not line:
            return
        yield line.decode("utf-8", errors="replace")


async def main() -> None:
    display = SettingsStore(SETTINGS_PATH).load()
    settings = load_exposure_settings()
    location = create_location_provider()
    notifier = create_notifier()
    reminder = BurnReminder(notifier) if REMINDERS_ENABLED else None
    monitor = UVMonitor(
        settings=settings,
        reminder=reminder,
        display=display,
        debounce_s=DEBOUNCE_MS / 1000.0,
    )

    await register_handlers(location, monitor)
    await location.start()

    logger.info(
        "UV module ready",
        aqi=settings.aqi,
        cloud=settings.cloud.value,
        skin_type=settings.skin_type.value,
        spf=settings.spf,
        reminders=REMINDERS_ENABLED,
        color_blind_mode=display.color_blind_mode,
    )

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    loop.add_signal_handler(signal.SIGTERM, stop_event.set)
    loop.add_signal_handler(signal.SIGINT, stop_event.set)

    refresh_task = asyncio.create_task(refresh_loop(monitor))
    feed_task = None
    if isinstance(location, FeedLocationProvider):
        feed_task = asyncio.create_task(location.listen(stdin_lines()))

    await stop_event.wait()
    refresh_task.cancel()
    if feed_task is not None:
        feed_task.cancel()
    await monitor.close()
    await location.stop()
    await notifier.close()
    logger.info("UV module shut down gracefully")


if __name__ == "__main__":
    asyncio.run(main())
