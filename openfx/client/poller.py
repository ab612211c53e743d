"""
Transaction status polling.

``poll_until_terminal`` yields one snapshot immediately and then one per
interval until the transaction settles or fails. Transient fetch errors are
tolerated up to a consecutive-failure budget, after which
``PollingExhausted`` is raised; the transaction itself is unaffected.
"""

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable

import httpx

from openfx.config import settings
from openfx.errors import OpenFXError, PollingExhausted
from openfx.schemas.transaction import Transaction

logger = logging.getLogger(__name__)

FetchFn = Callable[[str], Awaitable[Transaction]]
SleepFn = Callable[[float], Awaitable[None]]

# Failures that count against the retry budget
FETCH_ERRORS = (OpenFXError, httpx.HTTPError)


class TransactionPoller:
    """Polls a transaction through *fetch* until it reaches a terminal status."""

    def __init__(
        self,
        fetch: FetchFn,
        interval_ms: int = settings.POLL_INTERVAL_MS,
        max_consecutive_errors: int = settings.POLL_MAX_CONSECUTIVE_ERRORS,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._fetch = fetch
        self.interval_ms = interval_ms
        self.max_consecutive_errors = max_consecutive_errors
        self._sleep = sleep

    async def poll_until_terminal(
        self,
        transaction_id: str,
        interval_ms: int | None = None,
        max_consecutive_errors: int | None = None,
    ) -> AsyncIterator[Transaction]:
        """
        Yield snapshots of *transaction_id* until a terminal status is seen.

        The terminal snapshot is yielded before the stream ends. Closing the
        generator (``aclose`` or cancelling the consuming task) stops polling
        and discards any fetch still in flight.
        """
        interval = self.interval_ms if interval_ms is None else interval_ms
        budget = self.max_consecutive_errors if max_consecutive_errors is None else max_consecutive_errors
        if interval < 0:
            raise ValueError("interval_ms must not be negative")
        if budget < 1:
            raise ValueError("max_consecutive_errors must be at least 1")

        consecutive_errors = 0
        while True:
            try:
                snapshot = await self._fetch(transaction_id)
            except FETCH_ERRORS as exc:
                consecutive_errors += 1
                logger.warning(
                    "Polling %s failed (%d/%d): %s",
                    transaction_id, consecutive_errors, budget, exc,
                )
                if consecutive_errors >= budget:
                    raise PollingExhausted(transaction_id, consecutive_errors) from exc
            else:
                consecutive_errors = 0
                yield snapshot
                if snapshot.is_terminal:
                    logger.info("Transaction %s reached %s", transaction_id, snapshot.status.value)
                    return

            await self._sleep(interval / 1000)

    def watch(
        self,
        transaction_id: str,
        on_snapshot: Callable[[Transaction], None],
        on_error: Callable[[PollingExhausted], None] | None = None,
        **kwargs,
    ) -> "PollingHandle":
        """
        Poll in a background task, delivering snapshots to *on_snapshot*.

        After ``PollingHandle.cancel()`` neither callback is invoked again.
        """
        handle = PollingHandle()

        async def run() -> None:
            stream = self.poll_until_terminal(transaction_id, **kwargs)
            try:
                async for snapshot in stream:
                    if handle.cancelled:
                        return
                    on_snapshot(snapshot)
            except PollingExhausted as exc:
                if handle.cancelled:
                    return
                if on_error is None:
                    raise
                on_error(exc)
            finally:
                await stream.aclose()

        handle._task = asyncio.get_running_loop().create_task(
            run(), name=f"poll-{transaction_id}",
        )
        return handle


class PollingHandle:
    """Cancellation handle for :meth:`TransactionPoller.watch`."""

    def __init__(self):
        self.cancelled = False
        self._task: asyncio.Task | None = None

    @property
    def done(self) -> bool:
        return self._task is not None and self._task.done()

    def cancel(self) -> None:
        """Stop polling. Idempotent."""
        self.cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """
        Wait for polling to finish.

        Re-raises PollingExhausted when no ``on_error`` callback was given.
        Returns normally after cancellation.
        """
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            if not self.cancelled:
                raise
