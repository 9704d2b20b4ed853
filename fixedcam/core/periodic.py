"""Cancellable fixed-rate job running on the asyncio loop."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Awaitable, Callable, Optional

from .logging_utils import LoggerLike, ensure_structured_logger

TickCallback = Callable[[], Awaitable[None]]


class PeriodicJob:
    """Run ``callback`` every ``interval_s`` seconds until stopped.

    Ticks run one after another inside a single task, so they never overlap.
    The schedule is anchored on the time the job was started; when a tick
    overruns, the slots it covered are dropped and the job resumes on the next
    slot boundary instead of firing a burst of catch-up ticks.

    Exceptions from the callback are logged and the schedule carries on.
    """

    def __init__(
        self,
        callback: TickCallback,
        interval_s: float,
        *,
        initial_delay_s: float = 0.0,
        name: str = "PeriodicJob",
        logger: LoggerLike = None,
    ) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval must be positive, got {interval_s}")
        self._callback = callback
        self._interval = float(interval_s)
        self._initial_delay = max(0.0, float(initial_delay_s))
        self._name = name
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()
        self._ticks = 0
        self._skipped = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def ticks(self) -> int:
        """Number of ticks whose callback has returned (or raised)."""
        return self._ticks

    @property
    def skipped(self) -> int:
        """Number of schedule slots dropped because a tick overran."""
        return self._skipped

    def start(self) -> None:
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._ticks = 0
        self._skipped = 0
        self._task = asyncio.create_task(self._loop(), name=self._name)
        self._logger.debug("%s armed: interval=%.3fs initial_delay=%.3fs", self._name, self._interval, self._initial_delay)

    async def stop(self) -> None:
        """Disarm the job. A tick in progress is allowed to finish first.

        When this returns no further ticks will run.
        """
        task = self._task
        if task is None:
            return
        self._stop_event.set()
        if task is asyncio.current_task():
            # Called from inside a tick; the loop exits once the tick returns.
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise
        finally:
            self._task = None
        self._logger.debug("%s stopped after %d tick(s)", self._name, self._ticks)

    async def _sleep_until(self, deadline: float) -> bool:
        """Wait for ``deadline`` (loop time). Returns False when stopped meanwhile."""
        loop = asyncio.get_running_loop()
        delay = deadline - loop.time()
        if delay <= 0:
            return not self._stop_event.is_set()
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        return not self._stop_event.is_set()

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        next_due = loop.time() + self._initial_delay

        while await self._sleep_until(next_due):
            try:
                await self._callback()
            except asyncio.CancelledError:
                raise
            except Exception:
                self._logger.exception("%s tick %d failed", self._name, self._ticks + 1)
            self._ticks += 1

            next_due += self._interval
            now = loop.time()
            if now > next_due:
                missed = int((now - next_due) // self._interval) + 1
                next_due += missed * self._interval
                self._skipped += missed
                self._logger.warning(
                    "%s tick overran its interval; skipping %d slot(s)",
                    self._name,
                    missed,
                )


__all__ = ["PeriodicJob", "TickCallback"]
