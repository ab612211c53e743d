"""
Wall-clock access behind a small protocol so tests can freeze time.
"""

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Current time as an aware UTC datetime."""
        ...


class SystemClock:
    """Real wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def to_epoch_ms(moment: datetime) -> int:
    """Convert an aware datetime to a Unix timestamp in milliseconds."""
    return int(round(moment.timestamp() * 1000))


def from_epoch_ms(epoch_ms: int) -> datetime:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)


def is_expired(expires_at_ms: int, now: datetime) -> bool:
    """A quote is expired from the instant ``now`` reaches ``expires_at``."""
    return to_epoch_ms(now) >= expires_at_ms


system_clock = SystemClock()
