"""Sunburn reminder.

Tracks the share of the skin's burn dose received since exposure started
and keeps a single alert due when the remaining share runs out. Each new
result only changes the rate at which the remainder is consumed, so
periodic refreshes never push the deadline back.
"""

import math
import time
from datetime import datetime
from typing import Callable

import structlog

from uvsafe_base.notifier import BaseNotifier

from .models import SkinType, UVResult

logger = structlog.get_logger()

REMINDER_ID = "uvsafe.sunburn-reminder"
# Reminders further out than this are not scheduled
MAX_DELAY_S = 86_400.0

TITLE = "Time to seek shade!"


def reminder_body(skin_type: SkinType, spf: float) -> str:
    spf_text = f" (SPF {int(spf)} applied)" if spf >= 1 else ""
    return (
        f"You've reached your estimated sunburn threshold for {skin_type.label}{spf_text}. "
        "Head indoors or reapply sunscreen now."
    )


class BurnReminder:
    """Keeps one sunburn alert in sync with the latest UV result.

    Args:
        notifier: Notification collaborator.
        max_delay_s: Remaining times at or above this are not scheduled.
        clock: Monotonic clock in seconds, replaceable in tests.
    """

    def __init__(
        self,
        notifier: BaseNotifier,
        max_delay_s: float = MAX_DELAY_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._notifier = notifier
        self._max_delay_s = max_delay_s
        self._clock = clock
        self._dose = 0.0  # fraction of the burn dose received so far
        self._burn_s: float | None = None  # burn time in force since _updated_at
        self._updated_at: float | None = None
        self.pending_until: datetime | None = None

    @property
    def dose(self) -> float:
        return self._dose

    def should_schedule(self, seconds: float) -> bool:
        return math.isfinite(seconds) and 0 < seconds < self._max_delay_s

    def reset(self) -> None:
        """Start a new exposure, e.g. after sunscreen is reapplied or skin type changes."""
        self._dose = 0.0
        self._burn_s = None
        self._updated_at = None

    def _accrue(self, now: float) -> None:
        if self._burn_s is not None and self._updated_at is not None:
            self._dose += (now - self._updated_at) / self._burn_s
        self._updated_at = now

    async def update(self, result: UVResult, skin_type: SkinType, spf: float) -> bool:
        """Reschedule the reminder for `result`. Returns True if one is pending.

        A result with no schedulable remaining time leaves any existing reminder untouched.
        Notifier failures are logged and clear `pending_until`.
        """
        self._accrue(self._clock())
        burn_seconds = result.burn_time_with_spf_s
        self._burn_s = burn_seconds if math.isfinite(burn_seconds) and burn_seconds > 0 else None

        if self._dose >= 1.0:
            logger.debug("Burn dose already reached", dose=round(self._dose, 3))
            return False

        remaining_s = (1.0 - self._dose) * burn_seconds
        if not self.should_schedule(remaining_s):
            logger.debug("No reminder for burn time", burn_time_s=burn_seconds, dose=round(self._dose, 3))
            return False

        try:
            await self._notifier.cancel(REMINDER_ID)
            self.pending_until = await self._notifier.schedule(
                REMINDER_ID,
                remaining_s,
                TITLE,
                reminder_body(skin_type, spf),
            )
        except Exception:
            logger.exception("Failed to schedule reminder", remaining_s=remaining_s)
            self.pending_until = None
            return False
        return True

    async def cancel(self) -> None:
        try:
            await self._notifier.cancel(REMINDER_ID)
        except Exception:
            logger.exception("Failed to cancel reminder")
        self.pending_until = None
        self.reset()
