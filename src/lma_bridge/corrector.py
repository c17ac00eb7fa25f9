"""Post-extraction corrections and normalization."""

import re
from collections import Counter
from typing import Any, Optional

import structlog

from .models import FACILITY_AMOUNT_RANGE, NO_ESG_TARGET
from .patterns import PATTERNS_BY_FIELD

logger = structlog.get_logger()

DEFAULT_CURRENCY = "USD"

# Figures below this were almost certainly written in millions without a suffix
MILLIONS_SCALE = 1_000_000
UNITS_MISSCALE = 1_000
PERCENT_ARTIFACT_THRESHOLD = 50

SYMBOL_CURRENCIES: dict[str, str] = {"$": "USD", "€": "EUR", "£": "GBP"}

_SYMBOL_AMOUNT = re.compile(r"([$€£])\s?\d")
_LEADING_ARTICLE = re.compile(r"^(?:the|a)\s+", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

# Suffixes whose trailing period belongs to the name
_DOTTED_ABBREVIATIONS = frozenset({"inc", "corp", "ltd", "co", "l.p", "s.a", "n.a", "plc"})


def detect_symbol_currency(text: str) -> Optional[str]:
    """
    Currency implied by symbol-prefixed amounts in the document body.

    The most frequent symbol wins; ties go to the symbol seen first.
    """
    symbols = [SYMBOL_CURRENCIES[match.group(1)] for match in _SYMBOL_AMOUNT.finditer(text)]
    if not symbols:
        return None
    # Counter preserves first-seen order, so most_common breaks ties by position
    return Counter(symbols).most_common(1)[0][0]


def _correct_facility_amount(amount: float) -> float:
    low, high = FACILITY_AMOUNT_RANGE
    if amount < low:
        return amount * MILLIONS_SCALE
    if amount > high:
        return amount / UNITS_MISSCALE
    return amount


def _correct_borrower_name(name: str) -> str:
    name = _LEADING_ARTICLE.sub("", name.strip())
    name = _WHITESPACE.sub(" ", name).rstrip(",;: ")
    if name.endswith(".") and " " in name:
        last_word = name.rsplit(" ", 1)[1][:-1].lower()
        if last_word not in _DOTTED_ABBREVIATIONS:
            name = name[:-1]
    return name


def correct(record: dict[str, Any], text: str) -> dict[str, Any]:
    """
    Apply field corrections and drop anything left out of bounds.

    Args:
        record: Partial loan record keyed by snake_case field name
        text: Preprocessed document text

    Returns:
        Corrected record; ``esg_target`` is always present
    """
    corrected = {name: value for name, value in record.items() if value is not None}

    amount = corrected.get("facility_amount")
    if isinstance(amount, (int, float)) and not isinstance(amount, bool):
        corrected["facility_amount"] = _correct_facility_amount(float(amount))

    currency = corrected.get("currency")
    if currency is not None:
        symbol_currency = detect_symbol_currency(text)
        if symbol_currency and symbol_currency != currency:
            logger.debug(
                "currency_corrected_from_symbol",
                original=currency,
                corrected=symbol_currency,
            )
            corrected["currency"] = symbol_currency
    elif "facility_amount" in corrected:
        corrected["currency"] = DEFAULT_CURRENCY

    margin = corrected.get("interest_rate_margin")
    if isinstance(margin, (int, float)) and margin > PERCENT_ARTIFACT_THRESHOLD:
        corrected["interest_rate_margin"] = margin / 100

    borrower = corrected.get("borrower_name")
    if isinstance(borrower, str):
        corrected["borrower_name"] = _correct_borrower_name(borrower)

    esg_target = corrected.get("esg_target")
    if not isinstance(esg_target, str) or not esg_target.strip():
        corrected["esg_target"] = NO_ESG_TARGET

    dropped = [
        name for name, value in corrected.items()
        if name in PATTERNS_BY_FIELD
        and value != NO_ESG_TARGET
        and not PATTERNS_BY_FIELD[name].validator(value)
    ]
    for name in dropped:
        del corrected[name]
    if dropped:
        logger.debug("corrected_fields_out_of_bounds", fields=dropped)

    return corrected
