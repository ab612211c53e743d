"""
Transaction ledger record — a transfer created from a confirmed quote.

Status lifecycle:
    processing → sent → settled
    processing → failed

Status is derived from the record's age (see ``status_at``); the stored
``status`` field is only a materialized cache written by the ledger sweeper
through ``transition_to``.
"""

import enum
import random
import string
from dataclasses import dataclass, field
from datetime import datetime, timedelta

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TransactionStatus(str, enum.Enum):
    PROCESSING = "processing"
    SENT = "sent"
    SETTLED = "settled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({TransactionStatus.SETTLED, TransactionStatus.FAILED})


# ---------------------------------------------------------------------------
# Status transition map
# ---------------------------------------------------------------------------

VALID_TRANSITIONS: dict[TransactionStatus, set[TransactionStatus]] = {
    TransactionStatus.PROCESSING: {
        TransactionStatus.SENT,
        TransactionStatus.SETTLED,  # a sweep may observe sent and settled in one step
        TransactionStatus.FAILED,
    },
    TransactionStatus.SENT: {
        TransactionStatus.SETTLED,
    },
    TransactionStatus.SETTLED: set(),
    TransactionStatus.FAILED: set(),
}


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------


@dataclass
class TransactionRecord:
    id: str
    source_currency: str
    destination_currency: str
    source_amount: float
    destination_amount: float
    fx_rate: float
    fee: float
    created_at: datetime
    failed: bool = False
    status: TransactionStatus = TransactionStatus.PROCESSING
    updated_at: datetime | None = field(default=None)

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at
        if self.failed:
            self.status = TransactionStatus.FAILED

    # ------------------------------------------------------------------
    # Reference generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_id() -> str:
        """Generate a TXN-XXXXXXXX id (8 uppercase alphanumeric chars)."""
        chars = string.ascii_uppercase + string.digits
        suffix = "".join(random.choices(chars, k=8))
        return f"TXN-{suffix}"

    # ------------------------------------------------------------------
    # Derived status
    # ------------------------------------------------------------------

    def status_at(
        self,
        now: datetime,
        sent_after: timedelta,
        settled_after: timedelta,
    ) -> tuple[TransactionStatus, datetime]:
        """
        Return ``(status, reached_at)`` for the instant *now*.

        A record flagged ``failed`` is failed from creation. Otherwise the
        status follows the record's age: processing before *sent_after*,
        sent before *settled_after*, settled afterwards. ``reached_at`` is
        the moment the returned status began, so repeated reads agree.
        """
        if self.failed:
            return TransactionStatus.FAILED, self.created_at

        elapsed = now - self.created_at
        if elapsed >= settled_after:
            return TransactionStatus.SETTLED, self.created_at + settled_after
        if elapsed >= sent_after:
            return TransactionStatus.SENT, self.created_at + sent_after
        return TransactionStatus.PROCESSING, self.created_at

    # ------------------------------------------------------------------
    # Status transition validation
    # ------------------------------------------------------------------

    @staticmethod
    def is_valid_transition(from_status: TransactionStatus, to_status: TransactionStatus) -> bool:
        """Check whether a status transition is allowed."""
        return to_status in VALID_TRANSITIONS.get(from_status, set())

    def transition_to(self, new_status: TransactionStatus, at: datetime) -> None:
        """
        Move to *new_status* if the move is valid.

        Raises ValueError if the transition is not allowed.
        """
        if not self.is_valid_transition(self.status, new_status):
            raise ValueError(
                f"Invalid transition: {self.status.value} -> {new_status.value}"
            )
        self.status = new_status
        self.updated_at = at

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.id} "
            f"{self.source_amount} {self.source_currency}->{self.destination_currency} "
            f"status={self.status.value}>"
        )
