"""
Currency table endpoint — the codes the quote endpoint accepts.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from openfx.currencies import CURRENCIES

router = APIRouter()


class CurrencyResponse(BaseModel):
    code: str
    name: str
    symbol: str
    flag: str


@router.get("/currencies", response_model=list[CurrencyResponse])
async def list_currencies():
    """List supported currencies with their display metadata."""
    return [
        CurrencyResponse(code=c.code, name=c.name, symbol=c.symbol, flag=c.flag)
        for c in CURRENCIES
    ]
