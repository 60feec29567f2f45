"""Deferred local alerts.

A notifier fires one alert per reminder id after a delay. Scheduling an id
that is already pending replaces the earlier alert.
"""

import asyncio
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class Alert:
    reminder_id: str
    title: str
    body: str


AlertHandler = Callable[[Alert], Awaitable[None]]


class BaseNotifier(ABC):
    @abstractmethod
    async def schedule(self, reminder_id: str, delay_s: float, title: str, body: str) -> datetime: ...

    @abstractmethod
    async def cancel(self, reminder_id: str) -> None: ...

    @abstractmethod
    def pending(self, reminder_id: str) -> datetime | None: ...

    async def close(self) -> None:
        pass


class LogNotifier(BaseNotifier):
    """In-process notifier backed by the event loop.

    When an alert fires it is logged and, if given, passed to `handler`.
    """

    def __init__(self, handler: AlertHandler | None = None) -> None:
        self._handler = handler
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._fire_at: dict[str, datetime] = {}
        self._tasks: set[asyncio.Task] = set()

    async def schedule(self, reminder_id: str, delay_s: float, title: str, body: str) -> datetime:
        """Schedule an alert `delay_s` seconds from now.

        Returns:
            The wall-clock time the alert is due.

        Raises:
            ValueError: If delay_s is negative.
        """
        if delay_s < 0:
            raise ValueError(f"delay_s must be >= 0, got {delay_s}")
        await self.cancel(reminder_id)

        alert = Alert(reminder_id=reminder_id, title=title, body=body)
        loop = asyncio.get_running_loop()
        self._timers[reminder_id] = loop.call_later(delay_s, self._fire, alert)
        fire_at = datetime.now(timezone.utc) + timedelta(seconds=delay_s)
        self._fire_at[reminder_id] = fire_at
        logger.info("Reminder scheduled", reminder_id=reminder_id, delay_s=round(delay_s, 1), fire_at=fire_at.isoformat())
        return fire_at

    async def cancel(self, reminder_id: str) -> None:
        timer = self._timers.pop(reminder_id, None)
        self._fire_at.pop(reminder_id, None)
        if timer is not None:
            timer.cancel()
            logger.info("Reminder cancelled", reminder_id=reminder_id)

    def pending(self, reminder_id: str) -> datetime | None:
        return self._fire_at.get(reminder_id)

    def _fire(self, alert: Alert) -> None:
        self._timers.pop(alert.reminder_id, None)
        self._fire_at.pop(alert.reminder_id, None)
        logger.warning("Reminder fired", reminder_id=alert.reminder_id, title=alert.title, body=alert.body)
        if self._handler is None:
            return
        task = asyncio.get_running_loop().create_task(self._dispatch(alert))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _dispatch(self, alert: Alert) -> None:
        try:
            await self._handler(alert)
        except Exception:
            logger.exception("Alert handler error", reminder_id=alert.reminder_id)

    async def close(self) -> None:
        for reminder_id in list(self._timers):
            await self.cancel(reminder_id)
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


def create_notifier(handler: AlertHandler | None = None) -> BaseNotifier:
    mode = os.environ.get("NOTIFIER_MODE", "log")
    if mode != "log":
        raise ValueError(f"Unknown NOTIFIER_MODE: {mode}")
    logger.info("Using log notifier")
    return LogNotifier(handler=handler)
