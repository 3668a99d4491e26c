"""Check-then-wait scheduler for monitoring sweeps."""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from typing import Any, Awaitable, Callable

LOGGER = logging.getLogger(__name__)


class SchedulerState(enum.Enum):
    IDLE = "idle"
    RUNNING_CYCLE = "running_cycle"
    WAITING = "waiting"
    STOPPED = "stopped"


class MonitorScheduler:
    """Runs sweeps back to back, waiting the poll interval after each one ends.

    The next sweep starts only once the previous one has returned, so sweeps
    never overlap no matter how long they take.
    """

    def __init__(
        self,
        sweep: Callable[[asyncio.Event], Awaitable[Any]],
        poll_interval_seconds: float,
    ) -> None:
        self._sweep = sweep
        self._poll_interval_seconds = poll_interval_seconds
        self._stop_event = asyncio.Event()
        self._state = SchedulerState.IDLE

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def stop_event(self) -> asyncio.Event:
        return self._stop_event

    async def run_forever(self) -> None:
        """Run sweeps until stop() is called."""

        try:
            while not self._stop_event.is_set():
                self._state = SchedulerState.RUNNING_CYCLE
                LOGGER.info("Checking for new messages...")
                started = time.monotonic()
                try:
                    await self._sweep(self._stop_event)
                except Exception:  # noqa: BLE001
                    LOGGER.exception("Unexpected error during check cycle")
                LOGGER.debug("Cycle took %.3fs", time.monotonic() - started)

                if self._stop_event.is_set():
                    break
                self._state = SchedulerState.WAITING
                LOGGER.info("Waiting %ss before next cycle", self._poll_interval_seconds)
                await self._wait()
        finally:
            self._state = SchedulerState.STOPPED

    def stop(self) -> None:
        """Signal the loop to stop at its next checkpoint."""

        self._stop_event.set()

    async def _wait(self) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self._poll_interval_seconds)
        except asyncio.TimeoutError:
            pass
