"""
Transaction ledger — creates transactions from quotes and reports their status.

Status is computed on read from the record's age and its ``failed`` flag, so
no background scheduler is needed for correctness. ``advance`` materializes
the derived status into the repository and is driven periodically by the
application's sweep timer; once a record's stored status is terminal, reads
report it as stored.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Protocol

from openfx.config import settings
from openfx.core.clock import Clock, system_clock
from openfx.core.simulation import Simulation
from openfx.errors import TransactionNotFound
from openfx.models.transaction import TransactionRecord
from openfx.schemas.quote import Quote
from openfx.schemas.transaction import Transaction

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Repository protocol
# ---------------------------------------------------------------------------


class TransactionRepository(Protocol):
    def create(self, record: TransactionRecord) -> None:
        """Store a new record. Raises ValueError on duplicate id."""
        ...

    def get(self, transaction_id: str) -> TransactionRecord | None:
        ...

    def update(self, record: TransactionRecord) -> None:
        """Replace an existing record. Raises KeyError if unknown."""
        ...

    def all(self) -> list[TransactionRecord]:
        ...


class InMemoryTransactionRepository:
    """Dict-backed repository; a lock keeps concurrent access consistent."""

    def __init__(self):
        self._records: dict[str, TransactionRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def create(self, record: TransactionRecord) -> None:
        with self._lock:
            if record.id in self._records:
                raise ValueError(f"Duplicate transaction id: {record.id}")
            self._records[record.id] = record

    def get(self, transaction_id: str) -> TransactionRecord | None:
        with self._lock:
            return self._records.get(transaction_id)

    def update(self, record: TransactionRecord) -> None:
        with self._lock:
            if record.id not in self._records:
                raise KeyError(record.id)
            self._records[record.id] = record

    def all(self) -> list[TransactionRecord]:
        with self._lock:
            return list(self._records.values())


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class TransactionLedger:
    """Owns transaction records and derives their status over time."""

    def __init__(
        self,
        repository: TransactionRepository | None = None,
        simulation: Simulation | None = None,
        clock: Clock = system_clock,
        sent_after_seconds: float = settings.TXN_SENT_AFTER_SECONDS,
        settled_after_seconds: float = settings.TXN_SETTLED_AFTER_SECONDS,
    ):
        if not 0 <= sent_after_seconds <= settled_after_seconds:
            raise ValueError("Expected 0 <= sent_after_seconds <= settled_after_seconds")
        self.repository = repository if repository is not None else InMemoryTransactionRepository()
        self.simulation = simulation or Simulation.deterministic()
        self.clock = clock
        self.sent_after = timedelta(seconds=sent_after_seconds)
        self.settled_after = timedelta(seconds=settled_after_seconds)

    # --- Create ---

    def create_transaction(self, quote: Quote, *, failed: bool | None = None) -> str:
        """
        Allocate a new transaction for an already-validated *quote*.

        The transaction starts in ``processing``. Whether it will end in
        ``failed`` is decided here, once, by the simulation unless *failed*
        is given explicitly.
        """
        if failed is None:
            failed = self.simulation.processing_fails()

        now = self.clock.now()
        record = TransactionRecord(
            id=self._new_id(),
            source_currency=quote.source_currency,
            destination_currency=quote.destination_currency,
            source_amount=quote.source_amount,
            destination_amount=quote.destination_amount,
            fx_rate=quote.fx_rate,
            fee=quote.fee,
            created_at=now,
            failed=failed,
        )
        self.repository.create(record)

        logger.info(
            "Transaction %s created from quote %s: %s %s -> %s %s%s",
            record.id, quote.id,
            record.source_amount, record.source_currency,
            record.destination_amount, record.destination_currency,
            " (will fail)" if failed else "",
        )
        return record.id

    def _new_id(self) -> str:
        while True:
            candidate = TransactionRecord.generate_id()
            if self.repository.get(candidate) is None:
                return candidate

    # --- Read ---

    def get_transaction(self, transaction_id: str, now: datetime | None = None) -> Transaction:
        """
        Return a snapshot of the transaction at *now* (defaults to the clock).

        Raises TransactionNotFound for unknown ids. Reading never mutates
        the record.
        """
        record = self.repository.get(transaction_id)
        if record is None:
            raise TransactionNotFound()
        return self._snapshot(record, now or self.clock.now())

    def _snapshot(self, record: TransactionRecord, now: datetime) -> Transaction:
        if record.status.is_terminal:
            status, reached_at = record.status, record.updated_at
        else:
            status, reached_at = record.status_at(now, self.sent_after, self.settled_after)
        return Transaction(
            id=record.id,
            status=status,
            source_currency=record.source_currency,
            destination_currency=record.destination_currency,
            source_amount=record.source_amount,
            destination_amount=record.destination_amount,
            fx_rate=record.fx_rate,
            fee=record.fee,
            created_at=record.created_at,
            updated_at=reached_at,
            failed=record.failed,
        )

    # --- Advance ---

    def advance(self, now: datetime | None = None) -> int:
        """
        Write the derived status of every non-terminal record back to the
        repository. Returns the number of records that changed status.
        """
        moment = now or self.clock.now()
        changed = 0
        for record in self.repository.all():
            if record.status.is_terminal:
                continue
            status, reached_at = record.status_at(moment, self.sent_after, self.settled_after)
            if status == record.status:
                continue
            record.transition_to(status, reached_at)
            self.repository.update(record)
            changed += 1
            logger.info("Transaction %s -> %s", record.id, status.value)
        return changed
