"""
In-process domain records.
"""

from openfx.models.transaction import (
    TERMINAL_STATUSES,
    VALID_TRANSITIONS,
    TransactionRecord,
    TransactionStatus,
)

__all__ = ["TransactionRecord", "TransactionStatus", "TERMINAL_STATUSES", "VALID_TRANSITIONS"]
