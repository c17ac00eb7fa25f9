"""Confidence scoring and user-facing suggestions."""

from typing import Any

from .models import NO_ESG_TARGET

# Weight of each field in the overall confidence
FIELD_WEIGHTS: dict[str, float] = {
    "borrower_name": 0.25,
    "facility_amount": 0.30,
    "currency": 0.15,
    "interest_rate_margin": 0.20,
    "leverage_covenant": 0.10,
}
ESG_BONUS_WEIGHT = 0.10

# Per-field reliability discount
FIELD_RELIABILITY = 0.9

LOAN_KEYWORDS: tuple[str, ...] = (
    "borrower",
    "lender",
    "facility",
    "covenant",
    "default",
    "security",
    "guarantee",
    "interest",
    "repayment",
    "maturity",
)

BASE_QUALITY = 0.5
LENGTH_BONUSES: tuple[tuple[int, float], ...] = ((5_000, 0.1), (10_000, 0.1))
KEYWORD_QUALITY_WEIGHT = 0.3

FIELD_SUGGESTIONS: dict[str, str] = {
    "borrower_name": "Could not identify borrower name. Please verify the company name in the document.",
    "facility_amount": "Facility amount not found. Look for loan amount, credit facility, or principal amount.",
    "currency": "Currency not specified. Please check if the document mentions USD, EUR, GBP, etc.",
    "interest_rate_margin": (
        "Interest rate margin not found. Look for pricing terms, LIBOR/SOFR spread, or margin information."
    ),
    "leverage_covenant": (
        "Leverage covenant not identified. Check for debt-to-EBITDA ratios or financial covenants."
    ),
}
ESG_SUGGESTION = "No ESG targets found. This may be a traditional loan without sustainability features."


def has_esg_target(record: dict[str, Any]) -> bool:
    """Whether the record carries a real ESG target rather than the sentinel."""
    target = record.get("esg_target")
    return bool(target) and target != NO_ESG_TARGET


def assess_document_quality(text: str) -> float:
    """
    Document quality factor in [0.5, 1.0].

    Starts at 0.5, adds 0.1 past 5,000 and again past 10,000 characters,
    and up to 0.3 for the share of the ten loan keywords present.
    """
    quality = BASE_QUALITY
    for threshold, bonus in LENGTH_BONUSES:
        if len(text) > threshold:
            quality += bonus

    lowered = text.lower()
    found = sum(1 for keyword in LOAN_KEYWORDS if keyword in lowered)
    quality += (found / len(LOAN_KEYWORDS)) * KEYWORD_QUALITY_WEIGHT

    return min(quality, 1.0)


def calculate_confidence(record: dict[str, Any], text: str) -> float:
    """Weighted field confidence scaled by document quality, clamped to [0, 1]."""
    weights = {
        name: weight for name, weight in FIELD_WEIGHTS.items()
        if record.get(name) is not None
    }
    if has_esg_target(record):
        weights["esg_target"] = ESG_BONUS_WEIGHT

    total_weight = sum(weights.values())
    if total_weight == 0:
        return 0.0

    weighted = sum(weight * FIELD_RELIABILITY for weight in weights.values())
    confidence = (weighted / total_weight) * assess_document_quality(text)
    return max(0.0, min(1.0, confidence))


def generate_suggestions(record: dict[str, Any]) -> list[str]:
    """One hint per missing field, in record order."""
    suggestions = [
        message for name, message in FIELD_SUGGESTIONS.items()
        if record.get(name) is None
    ]
    if not has_esg_target(record):
        suggestions.append(ESG_SUGGESTION)
    return suggestions


def score(record: dict[str, Any], text: str) -> tuple[float, list[str]]:
    """
    Score an extracted record.

    Args:
        record: Corrected record keyed by snake_case field name
        text: Preprocessed document text

    Returns:
        (confidence, suggestions)
    """
    return calculate_confidence(record, text), generate_suggestions(record)
