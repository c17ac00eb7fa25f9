"""Context heuristics that fill fields the pattern matcher missed.

Lightweight token detection (organization names, money amounts,
percentages) with keyword-proximity checks. The enhancer only adds
fields; it never replaces a value found by the pattern matcher.
"""

import re
from typing import Any, NamedTuple

import structlog

from .models import INTEREST_MARGIN_RANGE
from .patterns import BORROWER_NAME, parse_money

logger = structlog.get_logger()

MIN_FACILITY_AMOUNT = 1_000_000
CONTEXT_WINDOW = 50

RATE_CONTEXT = re.compile(r"interest|margin|rate|spread|pricing", re.IGNORECASE)

_ORG_SUFFIX = (
    r"(?:Inc|INC|LLC|L\.P|LP|Corp|CORP|Corporation|CORPORATION|Limited|LIMITED|Ltd|LTD"
    r"|Company|COMPANY|Co|CO|PLC|plc|GmbH|Holdings|HOLDINGS|Group|GROUP|Partners|PARTNERS"
    r"|Bank|BANK)"
)
_ORGANIZATION = re.compile(rf"\b((?:[A-Z][A-Za-z0-9&'-]{{0,40}}\s+){{0,5}}{_ORG_SUFFIX}\b\.?)")

# Capitalized words that open sentences or clauses rather than names
_ORG_STOPWORDS = frozenset({
    "the", "this", "that", "between", "and", "by", "among", "borrower",
    "lender", "lenders", "agreement", "each", "any", "whereas", "dated",
})

_MONEY = re.compile(
    r"(?:[$€£¥]\s?|\b(?:USD|EUR|GBP|JPY|CHF|CAD|AUD)\s?)\d[\d,]*(?:\.\d+)?"
    r"(?:\s*(?:thousand|million|billion|mm|bn|k|m|b)\b)?"
    r"|\b\d[\d,]*(?:\.\d+)?\s+(?:million|billion)\s+(?:dollars|euros|pounds)\b",
    re.IGNORECASE,
)

_PERCENTAGE = re.compile(r"(\d+(?:\.\d+)?)\s*%")


class Organization(NamedTuple):
    """An organization-like name and where it starts in the text."""

    name: str
    start: int


class Percentage(NamedTuple):
    """A percentage token and its span in the text."""

    value: float
    start: int
    end: int


def _strip_stopwords(name: str) -> str:
    words = name.split()
    while len(words) > 1 and words[0].lower() in _ORG_STOPWORDS:
        words.pop(0)
    return " ".join(words)


def find_organizations(text: str) -> list[Organization]:
    """Organization-like capitalized sequences ending in an entity suffix."""
    organizations = []
    for match in _ORGANIZATION.finditer(text):
        name = _strip_stopwords(match.group(1).strip())
        # A bare suffix ("Bank", "Company") is a reference, not a name
        if len(name.split()) < 2:
            continue
        organizations.append(Organization(name=name, start=match.start()))
    return organizations


def find_money_amounts(text: str) -> list[float]:
    """Money-like tokens ("$500,000,000", "EUR 40m", "250 million dollars") as numbers."""
    amounts = []
    for match in _MONEY.finditer(text):
        amount = parse_money(match.group(0))
        if amount is not None:
            amounts.append(amount)
    return amounts


def find_percentages(text: str) -> list[Percentage]:
    """Percentage tokens in document order."""
    return [
        Percentage(value=float(match.group(1)), start=match.start(), end=match.end())
        for match in _PERCENTAGE.finditer(text)
    ]


def context_window(text: str, start: int, end: int, size: int = CONTEXT_WINDOW) -> str:
    """Text surrounding a span, ``size`` characters on either side."""
    return text[max(0, start - size):min(len(text), end + size)]


def _infer_borrower(text: str) -> Any:
    halfway = len(text) / 2
    for organization in find_organizations(text):
        if organization.start >= halfway:
            break
        if BORROWER_NAME.validator(organization.name):
            return organization.name
    return None


def _infer_facility_amount(text: str) -> Any:
    # No upper bound here; oversized figures are rescaled by the corrector
    candidates = [amount for amount in find_money_amounts(text) if amount >= MIN_FACILITY_AMOUNT]
    return max(candidates) if candidates else None


def _infer_interest_margin(text: str) -> Any:
    low, high = INTEREST_MARGIN_RANGE
    for percentage in find_percentages(text):
        if not low <= percentage.value <= high:
            continue
        if RATE_CONTEXT.search(context_window(text, percentage.start, percentage.end)):
            return percentage.value
    return None


def enhance(text: str, partial: dict[str, Any]) -> dict[str, Any]:
    """
    Fill missing borrower, facility amount and interest margin from context.

    - Borrower: first organization name found in the first half of the text.
    - Facility amount: largest money amount of at least 1,000,000.
    - Interest margin: first percentage in [0.1, 20] with "interest",
      "margin", "rate", "spread" or "pricing" within 50 characters.

    Args:
        text: Preprocessed document text
        partial: Fields found by the pattern matcher

    Returns:
        A new dict with the pattern fields plus any inferred ones
    """
    enhanced = dict(partial)
    inferred = []

    if enhanced.get("borrower_name") is None:
        borrower = _infer_borrower(text)
        if borrower is not None:
            enhanced["borrower_name"] = borrower
            inferred.append("borrower_name")

    if enhanced.get("facility_amount") is None:
        amount = _infer_facility_amount(text)
        if amount is not None:
            enhanced["facility_amount"] = amount
            inferred.append("facility_amount")

    if enhanced.get("interest_rate_margin") is None:
        margin = _infer_interest_margin(text)
        if margin is not None:
            enhanced["interest_rate_margin"] = margin
            inferred.append("interest_rate_margin")

    if inferred:
        logger.debug("context_fields_inferred", fields=inferred)

    return enhanced
