"""
Injectable randomness for the mock payment rail.

All "luck" in the system (artificial latency, payment failures, transactions
that fail during processing) goes through a :class:`Simulation` instance so
tests can seed it or force either branch.
"""

import asyncio
import logging
import random

from openfx.config import settings

logger = logging.getLogger(__name__)


class Simulation:
    """Seedable latency and failure injection."""

    def __init__(
        self,
        *,
        pay_failure_rate: float = 0.0,
        processing_failure_rate: float = 0.0,
        latency_ms: tuple[int, int] = (0, 0),
        seed: int | None = None,
        rng: random.Random | None = None,
    ):
        for name, rate in (
            ("pay_failure_rate", pay_failure_rate),
            ("processing_failure_rate", processing_failure_rate),
        ):
            if not 0.0 <= rate <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {rate}")
        low, high = latency_ms
        if low < 0 or high < low:
            raise ValueError(f"Invalid latency range: {latency_ms}")

        self.pay_failure_rate = pay_failure_rate
        self.processing_failure_rate = processing_failure_rate
        self.latency_ms = latency_ms
        self._rng = rng or random.Random(seed)

    @classmethod
    def from_settings(cls) -> "Simulation":
        """Build from the configured failure rates and latency range."""
        return cls(
            pay_failure_rate=settings.PAY_FAILURE_RATE,
            processing_failure_rate=settings.PROCESSING_FAILURE_RATE,
            latency_ms=(settings.SIMULATED_LATENCY_MIN_MS, settings.SIMULATED_LATENCY_MAX_MS),
            seed=settings.SIMULATION_SEED,
        )

    @classmethod
    def deterministic(cls) -> "Simulation":
        """No latency, no failures."""
        return cls()

    def _roll(self, rate: float) -> bool:
        if rate <= 0.0:
            return False
        if rate >= 1.0:
            return True
        return self._rng.random() < rate

    def payment_fails(self) -> bool:
        """Decide whether a payment submission is rejected by the rail."""
        return self._roll(self.pay_failure_rate)

    def processing_fails(self) -> bool:
        """Decide, once at creation, whether a transaction will end in failed."""
        return self._roll(self.processing_failure_rate)

    async def delay(self) -> None:
        """Sleep for a random duration within the configured latency range."""
        low, high = self.latency_ms
        if high <= 0:
            return
        ms = low if low == high else self._rng.randint(low, high)
        logger.debug("Simulated latency: %d ms", ms)
        await asyncio.sleep(ms / 1000)
