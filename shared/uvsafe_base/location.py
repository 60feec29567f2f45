"""Location providers.

Supplies observer coordinates to the UV monitor as they become available.
Supports two modes, controlled by the LOCATION_MODE environment variable:
  - static (default): a fixed coordinate from LATITUDE / LONGITUDE / ALTITUDE_M
  - feed: push-based source for streaming device updates; the entry point
    feeds it newline-delimited JSON fixes from stdin
"""

import json
import math
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable

import structlog

logger = structlog.get_logger()

EARTH_RADIUS_M = 6_371_000.0
DEFAULT_DISTANCE_FILTER_M = 50.0


@dataclass(frozen=True)
class LocationFix:
    latitude: float
    longitude: float
    altitude_m: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


FixHandler = Callable[[LocationFix], Awaitable[None]]


def distance_m(a: LocationFix, b: LocationFix) -> float:
    """Great-circle (haversine) distance between two fixes, ignoring altitude."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


class BaseLocationProvider(ABC):
    """Delivers location fixes to a single registered handler.

    Handler errors are logged and never propagate back into the provider.
    """

    def __init__(self) -> None:
        self._handler: FixHandler | None = None
        self._last_fix: LocationFix | None = None

    @property
    def last_fix(self) -> LocationFix | None:
        return self._last_fix

    @property
    def has_fix(self) -> bool:
        return self._last_fix is not None

    def on_fix(self, handler: FixHandler) -> None:
        self._handler = handler

    async def _deliver(self, fix: LocationFix) -> None:
        self._last_fix = fix
        if self._handler is None:
            return
        try:
            await self._handler(fix)
        except Exception:
            logger.exception("Location handler error", latitude=fix.latitude, longitude=fix.longitude)

    @abstractmethod
    async def start(self) -> None: ...

    @abstractmethod
    async def stop(self) -> None: ...


class StaticLocationProvider(BaseLocationProvider):
    """Fixed coordinate, delivered once on start."""

    def __init__(self, fix: LocationFix | None) -> None:
        super().__init__()
        self._fix = fix

    async def start(self) -> None:
        if self._fix is None:
            logger.warning("No static location configured, waiting indefinitely for a fix")
            return
        logger.info(
            "Static location",
            latitude=self._fix.latitude,
            longitude=self._fix.longitude,
            altitude_m=self._fix.altitude_m,
        )
        await self._deliver(self._fix)

    async def stop(self) -> None:
        pass


class FeedLocationProvider(BaseLocationProvider):
    """Push-based provider for streaming position updates.

    Updates closer than `distance_filter_m` to the last delivered fix are
    dropped. Nothing is delivered before start() or after stop().

    Args:
        distance_filter_m: Minimum movement in metres before a new fix is delivered.
    """

    def __init__(self, distance_filter_m: float = DEFAULT_DISTANCE_FILTER_M) -> None:
        super().__init__()
        self.distance_filter_m = distance_filter_m
        self._running = False

    async def start(self) -> None:
        self._running = True
        logger.info("Location feed started", distance_filter_m=self.distance_filter_m)

    async def stop(self) -> None:
        self._running = False

    async def push(self, fix: LocationFix) -> bool:
        """Offer a new fix. Returns True if it was delivered."""
        if not self._running:
            logger.debug("Location feed not running, fix ignored")
            return False
        if self._last_fix is not None and distance_m(self._last_fix, fix) < self.distance_filter_m:
            return False
        await self._deliver(fix)
        return True

    async def listen(self, lines: AsyncIterator[str]) -> None:
        """Push one fix per JSON line until `lines` is exhausted.

        Line format: {"latitude": 51.5, "longitude": -0.12, "altitude_m": 20}
        (altitude_m optional). Blank and malformed lines are skipped.
        """
        async for line in lines:
            if not line.strip():
                continue
            try:
                fix = parse_fix(line)
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning("Malformed location line skipped", line=line.strip(), error=str(exc))
                continue
            await self.push(fix)
        logger.info("Location feed input closed")


def parse_fix(line: str) -> LocationFix:
    data = json.loads(line)
    return LocationFix(
        latitude=float(data["latitude"]),
        longitude=float(data["longitude"]),
        altitude_m=float(data.get("altitude_m", 0.0)),
    )


def _static_fix_from_env() -> LocationFix | None:
    lat = os.environ.get("LATITUDE")
    lon = os.environ.get("LONGITUDE")
    if lat is None or lon is None:
        return None
    return LocationFix(
        latitude=float(lat),
        longitude=float(lon),
        altitude_m=float(os.environ.get("ALTITUDE_M", "0")),
    )


def create_location_provider() -> BaseLocationProvider:
    mode = os.environ.get("LOCATION_MODE", "static")
    if mode == "feed":
        distance_filter = float(os.environ.get("LOCATION_DISTANCE_FILTER_M", str(DEFAULT_DISTANCE_FILTER_M)))
        logger.info("Using location feed", distance_filter_m=distance_filter)
        return FeedLocationProvider(distance_filter_m=distance_filter)
    if mode != "static":
        raise ValueError(f"Unknown LOCATION_MODE: {mode}")
    logger.info("Using static location")
    return StaticLocationProvider(_static_fix_from_env())
