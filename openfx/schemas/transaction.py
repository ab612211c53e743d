"""
Pydantic schemas for payment submission and transaction snapshots.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from openfx.models.transaction import TransactionStatus


class PayRequest(BaseModel):
    """Body of ``POST /api/pay``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    quote_id: str = Field(..., min_length=1, examples=["QT-3F9A1C2B7D4E"])


class PayResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    transaction_id: str


class Transaction(BaseModel):
    """Point-in-time snapshot of a ledger transaction."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    status: TransactionStatus
    source_currency: str
    destination_currency: str
    source_amount: float
    destination_amount: float
    fx_rate: float
    fee: float
    created_at: datetime
    updated_at: datetime
    failed: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str
    code: str
