"""Tests for confidence scoring and suggestions."""

import pytest

from lma_bridge.models import NO_ESG_TARGET
from lma_bridge.scoring import (
    ESG_SUGGESTION,
    FIELD_SUGGESTIONS,
    assess_document_quality,
    calculate_confidence,
    generate_suggestions,
    score,
)

FULL_RECORD = {
    "borrower_name": "TECHCORP INDUSTRIES INC.",
    "facility_amount": 500_000_000,
    "currency": "USD",
    "interest_rate_margin": 2.75,
    "leverage_covenant": 4.25,
    "esg_target": "reduce Scope 1 emissions by 40% by 2030.",
}


class TestDocumentQuality:
    """Test suite for assess_document_quality."""

    def test_base_quality(self):
        """Short text without keywords has the base quality."""
        assert assess_document_quality("hello") == pytest.approx(0.5)

    def test_keyword_contribution(self):
        """Each of the ten keywords adds 0.03."""
        assert assess_document_quality("borrower lender facility") == pytest.approx(0.59)

    def test_length_bonuses(self):
        """Texts over 5,000 and 10,000 characters get +0.1 each."""
        assert assess_document_quality("x" * 5_001) == pytest.approx(0.6)
        assert assess_document_quality("x" * 10_001) == pytest.approx(0.7)

    def test_capped_at_one(self):
        """Quality never exceeds 1.0."""
        keywords = (
            "borrower lender facility covenant default security "
            "guarantee interest repayment maturity "
        )
        assert assess_document_quality(keywords * 200) == pytest.approx(1.0)


class TestConfidence:
    """Test suite for calculate_confidence."""

    def test_empty_record(self):
        """No fields means zero confidence."""
        assert calculate_confidence({}, "borrower lender") == 0.0

    def test_sentinel_only_record(self):
        """The ESG sentinel alone carries no weight."""
        assert calculate_confidence({"esg_target": NO_ESG_TARGET}, "borrower") == 0.0

    def test_full_record(self):
        """Present fields contribute 0.9 each, scaled by quality."""
        text = "borrower lender facility covenant interest"
        expected = 0.9 * assess_document_quality(text)

        assert calculate_confidence(FULL_RECORD, text) == pytest.approx(expected)

    def test_within_bounds(self):
        """Confidence is always in [0, 1]."""
        confidence = calculate_confidence(FULL_RECORD, "borrower " * 3_000)

        assert 0.0 <= confidence <= 1.0


class TestSuggestions:
    """Test suite for generate_suggestions."""

    def test_complete_record_has_no_suggestions(self):
        """A record with every field needs no hints."""
        assert generate_suggestions(FULL_RECORD) == []

    def test_one_hint_per_missing_field(self):
        """Each missing field produces its fixed hint, in record order."""
        suggestions = generate_suggestions({"currency": "USD", "esg_target": "renewable energy by 2030."})

        assert suggestions == [
            FIELD_SUGGESTIONS["borrower_name"],
            FIELD_SUGGESTIONS["facility_amount"],
            FIELD_SUGGESTIONS["interest_rate_margin"],
            FIELD_SUGGESTIONS["leverage_covenant"],
        ]

    def test_esg_note_for_sentinel(self):
        """The ESG note is added when only the sentinel is present."""
        record = dict(FULL_RECORD, esg_target=NO_ESG_TARGET)

        assert generate_suggestions(record) == [ESG_SUGGESTION]

    def test_score_returns_both(self):
        """score combines confidence and suggestions."""
        confidence, suggestions = score(FULL_RECORD, "borrower")

        assert confidence > 0
        assert suggestions == []
