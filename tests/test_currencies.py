"""Tests for the currency table and the currencies endpoint."""

from decimal import Decimal

import pytest

from openfx.currencies import CURRENCIES, format_amount, get_currency, get_rate, is_supported
from openfx.errors import UnsupportedCurrencyPair


class TestCurrencyTable:

    def test_supported_codes(self):
        codes = [c.code for c in CURRENCIES]
        assert codes == ["USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "INR", "SGD", "NGN"]

    def test_usd_is_base(self):
        assert get_rate("USD") == Decimal("1")

    def test_lookup(self):
        eur = get_currency("EUR")
        assert eur is not None
        assert eur.name == "Euro"
        assert eur.symbol == "€"
        assert eur.rate == Decimal("0.92")

    def test_unknown_code(self):
        assert get_currency("XXX") is None
        assert not is_supported("XXX")

    def test_lookup_is_case_sensitive(self):
        assert not is_supported("eur")

    def test_get_rate_unknown_raises(self):
        with pytest.raises(UnsupportedCurrencyPair):
            get_rate("BTC")

    def test_table_is_immutable(self):
        with pytest.raises(AttributeError):
            CURRENCIES[0].rate = Decimal("2")


class TestFormatAmount:

    def test_symbol_and_separators(self):
        assert format_amount(1234.5, "EUR") == "€1,234.50"

    def test_rounds_to_cents(self):
        assert format_amount(Decimal("10.005"), "USD") == "$10.01"

    def test_negative(self):
        assert format_amount(-5, "USD") == "-$5.00"

    def test_unknown_currency_falls_back(self):
        assert format_amount(1234.5, "XXX") == "1234.50"


class TestCurrenciesEndpoint:

    @pytest.mark.asyncio
    async def test_lists_table(self, client):
        response = await client.get("/api/currencies")
        assert response.status_code == 200
        data = response.json()
        assert len(data) == len(CURRENCIES)
        assert data[0] == {"code": "USD", "name": "US Dollar", "symbol": "$", "flag": "US"}
        assert "rate" not in data[0]
