"""Tests for the pattern library and its value helpers."""

import dataclasses

import pytest

from lma_bridge.matcher import match_field
from lma_bridge.models import LOAN_FIELDS
from lma_bridge.patterns import (
    BORROWER_NAME,
    CURRENCY,
    ESG_TARGET,
    FACILITY_AMOUNT,
    INTEREST_RATE_MARGIN,
    LEVERAGE_COVENANT,
    PATTERN_LIBRARY,
    PATTERNS_BY_FIELD,
    magnitude,
    parse_money,
    parse_written_number,
    to_number,
)
from lma_bridge.preprocessor import preprocess


def extract_value(text: str, pattern):
    value, _ = match_field(preprocess(text), pattern)
    return value


class TestValueHelpers:
    """Test suite for number parsing helpers."""

    def test_to_number(self):
        """Plain numeric strings with separators parse."""
        assert to_number("500,000,000.00") == 500_000_000
        assert to_number("4.25") == 4.25
        assert to_number("abc") is None

    def test_magnitude(self):
        """Amount suffixes map to multipliers."""
        assert magnitude(None) == 1
        assert magnitude("k") == 1_000
        assert magnitude("MM") == 1_000_000
        assert magnitude("million") == 1_000_000
        assert magnitude("bn") == 1_000_000_000

    @pytest.mark.parametrize(
        "words,expected",
        [
            ("FIVE HUNDRED MILLION", 500_000_000),
            ("one hundred fifty three million", 153_000_000),
            ("two billion five hundred million", 2_500_000_000),
            ("twenty-five million", 25_000_000),
            ("seventy five thousand", 75_000),
        ],
    )
    def test_parse_written_number(self, words, expected):
        """Spelled-out magnitudes accumulate into a number."""
        assert parse_written_number(words) == expected

    def test_parse_written_number_without_number_words(self):
        """Text without number words is not a number."""
        assert parse_written_number("lots of money") is None

    def test_parse_money(self):
        """Money tokens with symbols, codes and suffixes parse."""
        assert parse_money("$1.5 billion") == 1_500_000_000
        assert parse_money("€250,000,000") == 250_000_000
        assert parse_money("USD 40m") == 40_000_000
        assert parse_money("no amount here") is None


class TestPatternLibrary:
    """Test suite for the library structure."""

    def test_one_pattern_per_field_in_record_order(self):
        """The library covers every loan field once, in record order."""
        assert tuple(pattern.field for pattern in PATTERN_LIBRARY) == LOAN_FIELDS
        assert set(PATTERNS_BY_FIELD) == set(LOAN_FIELDS)

    def test_patterns_are_immutable(self):
        """Patterns cannot be mutated after construction."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            BORROWER_NAME.confidence = 0.1

        with pytest.raises(TypeError):
            PATTERNS_BY_FIELD["currency"] = BORROWER_NAME

    def test_base_confidences(self):
        """Each field has its own base confidence weight."""
        assert FACILITY_AMOUNT.confidence == 0.95
        assert BORROWER_NAME.confidence == 0.9
        assert CURRENCY.confidence == 0.9
        assert INTEREST_RATE_MARGIN.confidence == 0.85
        assert LEVERAGE_COVENANT.confidence == 0.8
        assert ESG_TARGET.confidence == 0.7


class TestBorrowerName:
    """Test suite for borrower name rules."""

    def test_between_clause(self):
        """Name introduced by "between ..., a" is captured with its suffix."""
        text = "This Agreement is made between TECHCORP INDUSTRIES INC., a Delaware corporation."
        assert extract_value(text, BORROWER_NAME) == "TECHCORP INDUSTRIES INC."

    def test_labeled_borrower(self):
        """A "Borrower:" label introduces the name."""
        assert extract_value("Borrower: ACME HOLDINGS LLC", BORROWER_NAME) == "ACME HOLDINGS LLC"

    def test_name_at_document_start(self):
        """A name opening the document followed by a jurisdiction is the borrower."""
        text = "GLOBEX CORPORATION, a Delaware corporation, as borrower"
        assert extract_value(text, BORROWER_NAME) == "GLOBEX CORPORATION"

    def test_defined_term(self):
        """A capitalized name followed by (the "Borrower") is captured."""
        text = 'ACME HOLDINGS LLC (the "Borrower") enters into this agreement.'
        assert extract_value(text, BORROWER_NAME) == "ACME HOLDINGS LLC"

    def test_no_entity_suffix(self):
        """Names without an entity suffix are not matched."""
        assert extract_value("Borrower: John Smith", BORROWER_NAME) is None

    def test_generic_entity_word_rejected(self):
        """A bare reference such as "the corporation" is not a name."""
        text = "Borrower: the corporation is a subsidiary of PARENT CO"
        assert extract_value(text, BORROWER_NAME) is None


class TestFacilityAmount:
    """Test suite for facility amount rules."""

    def test_parenthesized_amount_wins_over_words(self):
        """The parenthesized figure is used when present."""
        text = "an aggregate principal amount of FIVE HUNDRED MILLION DOLLARS ($500,000,000)"
        assert extract_value(text, FACILITY_AMOUNT) == 500_000_000

    def test_written_amount_only(self):
        """Spelled-out amounts are converted when no figure is given."""
        text = "an aggregate principal amount of two hundred fifty million dollars under the facility"
        assert extract_value(text, FACILITY_AMOUNT) == 250_000_000

    def test_symbol_amount_before_facility(self):
        """Symbol amounts with a multiplier before "term loan" are scaled."""
        assert extract_value("a $250 million term loan", FACILITY_AMOUNT) == 250_000_000

    def test_labeled_amount(self):
        """A "Facility Amount:" label with a currency code is parsed."""
        assert extract_value("Facility Amount: USD 75,000,000", FACILITY_AMOUNT) == 75_000_000

    def test_out_of_range_amount_rejected(self):
        """Amounts outside [100,000, 1e11] fail the validator."""
        assert extract_value("a $5,000 loan", FACILITY_AMOUNT) is None


class TestCurrency:
    """Test suite for currency rules."""

    def test_denominated_in_with_code(self):
        """The parenthesized ISO code wins."""
        text = "denominated in United States Dollars (USD)"
        assert extract_value(text, CURRENCY) == "USD"

    def test_labeled_code(self):
        """A "Currency:" label introduces the code."""
        assert extract_value("Currency: EUR", CURRENCY) == "EUR"

    def test_symbol(self):
        """Currency symbols map to codes."""
        assert extract_value("a facility of £10,000,000", CURRENCY) == "GBP"

    def test_unsupported_code(self):
        """Unsupported currency codes are not extracted."""
        assert extract_value("Currency: XYZ", CURRENCY) is None


class TestInterestRateMargin:
    """Test suite for margin rules."""

    def test_reference_rate_plus_percent(self):
        """"SOFR plus N%" yields N."""
        assert extract_value("Term SOFR plus 2.75% per annum", INTEREST_RATE_MARGIN) == 2.75

    def test_basis_points(self):
        """Basis points are converted to percent."""
        assert extract_value("SOFR + 275 bps", INTEREST_RATE_MARGIN) == 2.75

    def test_labeled_margin(self):
        """A "Margin:" label introduces the rate."""
        assert extract_value("Applicable Margin: 3.25%", INTEREST_RATE_MARGIN) == 3.25

    def test_out_of_range_margin_rejected(self):
        """Margins above 20% are rejected."""
        assert extract_value("SOFR plus 25% per annum", INTEREST_RATE_MARGIN) is None


class TestLeverageCovenant:
    """Test suite for leverage covenant rules."""

    def test_total_leverage_ratio(self):
        """"not to exceed N:1.00" yields N."""
        text = "Total Leverage Ratio not to exceed 4.25:1.00"
        assert extract_value(text, LEVERAGE_COVENANT) == 4.25

    def test_maximum_leverage(self):
        """A "Maximum leverage ratio:" label introduces the ratio."""
        assert extract_value("Maximum leverage ratio: 5.0x", LEVERAGE_COVENANT) == 5.0

    def test_out_of_range_ratio_rejected(self):
        """Ratios above 20 are rejected."""
        assert extract_value("Leverage Ratio not to exceed 25.0", LEVERAGE_COVENANT) is None


class TestESGTarget:
    """Test suite for ESG target rules."""

    def test_labeled_target(self):
        """A "Sustainability Target:" label introduces the sentence."""
        text = "Sustainability Target: reduce Scope 1 emissions by 40% by 2030."
        assert extract_value(text, ESG_TARGET) == "reduce Scope 1 emissions by 40% by 2030."

    def test_net_zero_commitment(self):
        """"achieve net zero ..." sentences are captured."""
        text = "The Borrower commits to achieve net zero emissions across its operations by 2040."
        assert extract_value(text, ESG_TARGET) == "achieve net zero emissions across its operations by 2040."

    def test_too_short_target_rejected(self):
        """Targets shorter than ten characters are not captured."""
        assert extract_value("Green target: none.", ESG_TARGET) is None

    def test_length_capped(self):
        """Captured targets never exceed 200 characters."""
        text = "Sustainability Target: " + "increase renewable sourcing " * 6 + "by 2030."
        value = extract_value(text, ESG_TARGET)
        assert value is not None
        assert len(value) <= 200
