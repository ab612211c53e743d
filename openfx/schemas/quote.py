"""
Pydantic schemas for FX quote requests and quotes.

Wire format is camelCase; Python attributes are snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuoteRequest(BaseModel):
    """Body of ``POST /api/quote``. Amount is validated by the quote engine."""

    model_config = CAMEL_CONFIG

    source_currency: str = Field(..., examples=["USD"])
    destination_currency: str = Field(..., examples=["EUR"])
    amount: float = Field(..., examples=[100])


class Quote(BaseModel):
    """A priced, time-limited offer. ``expires_at`` is Unix time in milliseconds."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    source_currency: str
    destination_currency: str
    source_amount: float
    destination_amount: float
    fx_rate: float
    fee: float
    total_payable: float
    expires_at: int
