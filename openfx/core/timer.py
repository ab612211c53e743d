"""
Cancellable interval timer on top of asyncio.

Replaces ad-hoc ``while True: sleep`` loops for the ledger sweeper and the
quote expiry watch. After :meth:`IntervalTimer.cancel` returns, the tick
callback is never invoked again; an async tick that is mid-flight is
cancelled together with the timer task.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

TickCallback = Callable[[], Awaitable[None] | None]


class IntervalTimer:
    """Calls *callback* every *interval* seconds until cancelled."""

    def __init__(
        self,
        interval: float,
        callback: TickCallback,
        *,
        name: str = "interval-timer",
        immediate: bool = False,
    ):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.name = name
        self._callback = callback
        self._immediate = immediate
        self._task: asyncio.Task | None = None
        self._cancelled = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "IntervalTimer":
        """Schedule the timer on the running event loop."""
        if self._cancelled:
            raise RuntimeError(f"Timer {self.name} was cancelled and cannot restart")
        if self.running:
            return self
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        return self

    def cancel(self) -> None:
        """Stop the timer. Idempotent; safe to call from within a tick."""
        self._cancelled = True
        if self._task is not None and not self._task.done():
            if self._task is not asyncio.current_task():
                self._task.cancel()
        self._task = None

    async def stop(self) -> None:
        """Cancel the timer and wait for its task to finish (used on shutdown)."""
        task = self._task
        self.cancel()
        if task is None or task is asyncio.current_task():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        if self._immediate:
            await self._tick()
        while not self._cancelled:
            await asyncio.sleep(self.interval)
            if self._cancelled:
                break
            await self._tick()

    async def _tick(self) -> None:
        try:
            result = self._callback()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            # One bad tick must not kill the timer.
            logger.exception("Timer %s tick failed", self.name)

    async def __aenter__(self) -> "IntervalTimer":
        return self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
