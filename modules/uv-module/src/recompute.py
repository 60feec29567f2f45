"""Debounced recomputation.

Coalesces bursts of input changes into a single engine run. A debounce
timer restarts on every submission; only the latest pending input set is
computed once the burst settles. The engine runs in a worker thread so the
event loop stays responsive. A result that finishes after a newer
submission is discarded (last write wins).
"""

import asyncio
from typing import Awaitable, Callable

import structlog

from .models import UVInputs, UVResult

logger = structlog.get_logger()

DEFAULT_DEBOUNCE_S = 0.3

ComputeFn = Callable[[UVInputs], UVResult]
ResultHandler = Callable[[UVInputs, UVResult], Awaitable[None]]


class Recomputer:
    """Single-slot, debounced runner for the UV engine.

    Args:
        compute: Pure engine function.
        on_result: Awaited with each result that is still current.
        debounce_s: Quiet period required before computing.
    """

    def __init__(
        self,
        compute: ComputeFn,
        on_result: ResultHandler,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
    ) -> None:
        self._compute = compute
        self._on_result = on_result
        self._debounce_s = debounce_s
        self._pending: UVInputs | None = None
        self._generation = 0
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()
        self._latest: UVResult | None = None

    @property
    def latest(self) -> UVResult | None:
        return self._latest

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, inputs: UVInputs) -> None:
        """Replace the pending input set and restart the debounce window.

        Must be called from within the running event loop.
        """
        self._pending = inputs
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._debounce_s, self._fire, self._generation)

    def _fire(self, generation: int) -> None:
        self._timer = None
        inputs = self._pending
        if inputs is None:
            return
        task = asyncio.get_running_loop().create_task(self._run(generation, inputs))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, generation: int, inputs: UVInputs) -> None:
        try:
            result = await asyncio.to_thread(self._compute, inputs)
        except Exception:
            logger.exception("UV computation failed", generation=generation)
            return

        if generation != self._generation:
            logger.debug("Discarding stale result", generation=generation, current=self._generation)
            return

        self._latest = result
        try:
            await self._on_result(inputs, result)
        except Exception:
            logger.exception("Result handler error", generation=generation)

    async def wait_idle(self) -> None:
        """Wait until no debounce timer or computation is outstanding."""
        while self._timer is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
            else:
                await asyncio.sleep(self._debounce_s / 2)

    async def close(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._pending = None
