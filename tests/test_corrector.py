"""Tests for post-extraction corrections."""

import pytest

from lma_bridge.corrector import correct, detect_symbol_currency
from lma_bridge.models import NO_ESG_TARGET


class TestDetectSymbolCurrency:
    """Test suite for detect_symbol_currency."""

    def test_most_frequent_symbol(self):
        """The most frequent symbol determines the currency."""
        assert detect_symbol_currency("€10 and €20 and $5") == "EUR"

    def test_tie_goes_to_first_symbol(self):
        """Ties are broken by first occurrence."""
        assert detect_symbol_currency("£10 then $20") == "GBP"

    def test_no_symbols(self):
        """Text without symbol-prefixed amounts has no symbol currency."""
        assert detect_symbol_currency("USD 10,000,000") is None


class TestCorrect:
    """Test suite for correct."""

    def test_amount_in_millions_scaled_up(self):
        """Amounts below 100,000 are assumed to be in millions."""
        assert correct({"facility_amount": 250}, "")["facility_amount"] == 250_000_000

    def test_oversized_amount_scaled_down(self):
        """Amounts above 1e11 are divided by 1,000."""
        assert correct({"facility_amount": 500_000_000_000}, "")["facility_amount"] == 500_000_000

    def test_symbol_currency_overrides_disagreeing_code(self):
        """A disagreeing body symbol replaces the assigned currency."""
        record = correct({"currency": "USD"}, "a facility of €300,000,000")

        assert record["currency"] == "EUR"

    def test_currency_defaults_to_usd_with_amount(self):
        """An amount without any currency defaults to USD."""
        record = correct({"facility_amount": 50_000_000}, "a facility of 50,000,000")

        assert record["currency"] == "USD"

    def test_no_currency_without_amount(self):
        """No currency is invented when there is no amount."""
        assert "currency" not in correct({}, "")

    def test_margin_artifact_divided(self):
        """Margins above 50 are divided by 100."""
        assert correct({"interest_rate_margin": 275}, "")["interest_rate_margin"] == pytest.approx(2.75)

    def test_borrower_name_cleaned(self):
        """Leading articles are removed and whitespace collapsed."""
        record = correct({"borrower_name": "the  Acme   Holdings LLC"}, "")

        assert record["borrower_name"] == "Acme Holdings LLC"

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Northwind Trading Company.", "Northwind Trading Company"),
            ("Acme Holdings LLC,", "Acme Holdings LLC"),
            ("TECHCORP INDUSTRIES INC.", "TECHCORP INDUSTRIES INC."),
            ("Redwood Partners L.P.", "Redwood Partners L.P."),
        ],
    )
    def test_borrower_trailing_punctuation(self, name, expected):
        """Sentence punctuation is dropped; abbreviation periods are kept."""
        assert correct({"borrower_name": name}, "")["borrower_name"] == expected

    @pytest.mark.parametrize("esg_target", [None, "", "   "])
    def test_esg_sentinel(self, esg_target):
        """Missing or blank ESG targets become the sentinel."""
        record = {} if esg_target is None else {"esg_target": esg_target}

        assert correct(record, "")["esg_target"] == NO_ESG_TARGET

    def test_out_of_bounds_fields_dropped(self):
        """Fields that still fail validation after correction are removed."""
        record = correct({"leverage_covenant": 42.0, "currency": "XYZ"}, "")

        assert "leverage_covenant" not in record
        assert "currency" not in record

    def test_valid_record_unchanged(self):
        """A record already within bounds passes through."""
        record = {
            "borrower_name": "TECHCORP INDUSTRIES INC.",
            "facility_amount": 500_000_000,
            "currency": "USD",
            "interest_rate_margin": 2.75,
            "leverage_covenant": 4.25,
            "esg_target": "reduce Scope 1 emissions by 40% by 2030.",
        }

        assert correct(record, "($500,000,000)") == record
