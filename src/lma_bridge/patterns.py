"""Pattern library for loan agreement term extraction.

Each loan field has one ExtractionPattern: an ordered tuple of compiled
regular expressions, a processor turning a match into a raw candidate value,
a validator bounding acceptable values, and a base confidence weight.

Processors receive ``(capture, match_text, document)``: the first capture
group, the full matched span and the whole preprocessed document. Amount and
currency rules use the matched span to cross-reference a parenthesized
numeric amount or ISO code sitting next to a spelled-out form.

The library is built once at import time and never mutated.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from .models import (
    BORROWER_NAME_LENGTH,
    ESG_TARGET_LENGTH,
    FACILITY_AMOUNT_RANGE,
    INTEREST_MARGIN_RANGE,
    LEVERAGE_RANGE,
    SUPPORTED_CURRENCIES,
)

Processor = Callable[[str, str, str], Any]
Validator = Callable[[Any], bool]


@dataclass(frozen=True)
class ExtractionPattern:
    """Extraction rule for a single loan field."""

    field: str
    patterns: tuple[re.Pattern, ...]
    processor: Processor
    validator: Validator
    confidence: float


# =============================================================================
# VALUE HELPERS
# =============================================================================

WRITTEN_NUMBERS: dict[str, int] = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19,
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
    "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
    "hundred": 100, "thousand": 1_000, "million": 1_000_000, "billion": 1_000_000_000,
}

CURRENCY_ALIASES: dict[str, str] = {
    "$": "USD", "usd": "USD", "dollar": "USD", "dollars": "USD",
    "€": "EUR", "eur": "EUR", "euro": "EUR", "euros": "EUR",
    "£": "GBP", "gbp": "GBP", "pound": "GBP", "pounds": "GBP", "sterling": "GBP",
    "¥": "JPY", "yen": "JPY", "jpy": "JPY",
    "franc": "CHF", "francs": "CHF", "chf": "CHF",
}

_NUMERIC = re.compile(r"[\d,]+(?:\.\d+)?")
_WORD_SPLIT = re.compile(r"[\s-]+")
_MONEY_TOKEN = re.compile(
    r"(\d[\d,]*(?:\.\d+)?)\s*(thousand|million|billion|mm|bn|k|m|b)?\b",
    re.IGNORECASE,
)


def to_number(value: str) -> Optional[float]:
    """Parse a plain numeric string such as "500,000,000.00"."""
    try:
        return float(value.replace(",", "").strip())
    except (ValueError, AttributeError):
        return None


def magnitude(suffix: Optional[str]) -> int:
    """Multiplier for an amount suffix (k, m, mm, bn, million, ...)."""
    if not suffix:
        return 1
    suffix = suffix.lower()
    if suffix in ("k", "thousand"):
        return 1_000
    if suffix in ("m", "mm", "million"):
        return 1_000_000
    if suffix in ("b", "bn", "billion"):
        return 1_000_000_000
    return 1


def parse_written_number(words: str) -> Optional[float]:
    """
    Convert spelled-out English magnitudes to a number.

    Words accumulate into a current buffer; "hundred" multiplies the buffer,
    and thousand-or-larger multipliers flush ``buffer * multiplier`` into the
    total. Unknown words (e.g. "and") are ignored.

    Examples:
        "FIVE HUNDRED MILLION" -> 500000000
        "one hundred fifty three million" -> 153000000
    """
    total = 0
    current = 0
    found = False

    for word in _WORD_SPLIT.split(words.lower()):
        num = WRITTEN_NUMBERS.get(word)
        if not num:
            continue
        found = True
        if num == 100:
            current *= 100
        elif num >= 1_000:
            total += current * num
            current = 0
        else:
            current += num

    if not found:
        return None
    return float(total + current)


def parse_money(text: str) -> Optional[float]:
    """Parse a money token like "$1.5 billion", "€250,000,000" or "USD 40m"."""
    cleaned = re.sub(r"[$€£¥]", "", text)
    match = _MONEY_TOKEN.search(cleaned)
    if not match:
        return None
    amount = to_number(match.group(1))
    if amount is None:
        return None
    return amount * magnitude(match.group(2))


def _in_range(value: Any, bounds: tuple[float, float]) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return bounds[0] <= value <= bounds[1]


def _length_between(value: Any, bounds: tuple[int, int]) -> bool:
    return isinstance(value, str) and bounds[0] <= len(value) <= bounds[1]


# =============================================================================
# BORROWER NAME
# =============================================================================

_ENTITY_SUFFIX = r"(?:INC|LLC|L\.P|LP|CORP|CORPORATION|LIMITED|LTD|COMPANY|CO|PLC|GMBH)"
_ENTITY_SUFFIX_CASED = (
    r"(?:INC|Inc|LLC|L\.P|LP|CORP|Corp|CORPORATION|Corporation|LIMITED|Limited"
    r"|LTD|Ltd|COMPANY|Company|CO|Co|PLC|plc|GmbH|GMBH)"
)
_LOOSE_NAME = rf"[A-Z][A-Za-z0-9\s&.,'-]{{0,100}}?\b{_ENTITY_SUFFIX}\b\.?"

_LEADING_ARTICLE = re.compile(r"^(?:the|a)\s+", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

# A capture made only of these is a reference to an entity, not its name
_GENERIC_ENTITY_WORDS = frozenset({
    "borrower", "company", "corporation", "entity", "co", "corp", "inc", "llc",
    "lp", "l.p", "ltd", "limited", "plc", "gmbh",
})


def _process_borrower_name(capture: str, match_text: str, document: str) -> Optional[str]:
    name = _LEADING_ARTICLE.sub("", capture.strip())
    name = _WHITESPACE.sub(" ", name).rstrip(",;: ")
    if all(word.strip(".,").lower() in _GENERIC_ENTITY_WORDS for word in name.split()):
        return None
    return name


BORROWER_NAME = ExtractionPattern(
    field="borrower_name",
    patterns=(
        # between TECHCORP INDUSTRIES INC., a Delaware corporation
        re.compile(rf"\bbetween\s+({_LOOSE_NAME})\s*,?\s*an?\s+", re.IGNORECASE),
        # Borrower: ACME HOLDINGS LLC / "Borrower" means ACME HOLDINGS LLC
        re.compile(
            rf"\b(?:borrower|company|corporation|entity)\"?"
            rf"(?:\s*[:\-]\s*|\s+is\s+|\s+being\s+|\s+means\s+)\"?({_LOOSE_NAME})",
            re.IGNORECASE,
        ),
        # ACME HOLDINGS LLC, a Delaware limited liability company (at document start)
        re.compile(
            rf"^({_LOOSE_NAME})\s*,?\s*an?\s+"
            r"(?:Delaware|New\s+York|California|Texas|Nevada|English|corporation|company|limited)",
            re.IGNORECASE,
        ),
        # ACME Holdings Inc., a Delaware corporation (the "Borrower")
        re.compile(
            rf"((?:[A-Z][A-Za-z0-9&.,'-]{{0,40}}\s+){{0,8}}?{_ENTITY_SUFFIX_CASED}\b\.?)"
            r"\s*,?\s*[^()\"]{0,80}?\(\s*(?:the\s+|as\s+)?\"?Borrower\"?\s*\)"
        ),
    ),
    processor=_process_borrower_name,
    validator=lambda value: _length_between(value, BORROWER_NAME_LENGTH),
    confidence=0.9,
)


# =============================================================================
# FACILITY AMOUNT
# =============================================================================

_AMOUNT = r"[\d,]+(?:\.\d{1,2})?"
_AMOUNT_MULTIPLIER = r"(?:\s*(million|billion|mm|bn|m|b)\b)?"
_PARENTHESIZED_AMOUNT = re.compile(rf"\(\s*(?:USD)?\s*\$?\s*({_AMOUNT})\s*\)")
_AMOUNT_SUFFIX = re.compile(r"\d\s*(million|billion|mm|bn|m|b)\b", re.IGNORECASE)


def _process_facility_amount(capture: str, match_text: str, document: str) -> Optional[float]:
    # A parenthesized figure is authoritative over the spelled-out words
    parenthesized = _PARENTHESIZED_AMOUNT.search(match_text)
    if parenthesized:
        return to_number(parenthesized.group(1))

    if _NUMERIC.fullmatch(capture.strip()):
        amount = to_number(capture)
        suffix = _AMOUNT_SUFFIX.search(match_text)
        if amount is not None and suffix:
            amount *= magnitude(suffix.group(1))
        return amount

    return parse_written_number(capture)


FACILITY_AMOUNT = ExtractionPattern(
    field="facility_amount",
    patterns=(
        # aggregate principal amount of FIVE HUNDRED MILLION DOLLARS ($500,000,000)
        re.compile(
            r"aggregate\s+principal\s+amount\s+of\s+([A-Za-z][A-Za-z\s-]{2,120}?)\s+DOLLARS?\b"
            rf"(?:\s*\(\s*(?:USD)?\s*\$?\s*{_AMOUNT}\s*\))?",
            re.IGNORECASE,
        ),
        # DOLLARS ($500,000,000)
        re.compile(rf"DOLLARS?\s*\(\s*(?:USD)?\s*\$?\s*({_AMOUNT})\s*\)", re.IGNORECASE),
        # $50,000,000 revolving credit facility / $250 million term loan
        re.compile(
            rf"(?:\$|€|£|\b(?:USD|EUR|GBP)\s?)\s*({_AMOUNT}){_AMOUNT_MULTIPLIER}\s*"
            r"(?:(?:senior|secured|unsecured|revolving|term|syndicated|credit)\s+){0,3}"
            r"(?:facility|facilities|loan|credit)\b",
            re.IGNORECASE,
        ),
        # Facility Amount: USD 75,000,000 / principal of 2.5 billion
        re.compile(
            r"\b(?:facility|loan|credit|commitment|principal)(?:\s+amount)?"
            r"(?:\s*[:\-]\s*|\s+of\s+|\s+is\s+)(?:up\s+to\s+)?"
            rf"(?:USD|EUR|GBP|\$|€|£)?\s*({_AMOUNT}){_AMOUNT_MULTIPLIER}",
            re.IGNORECASE,
        ),
    ),
    processor=_process_facility_amount,
    validator=lambda value: _in_range(value, FACILITY_AMOUNT_RANGE),
    confidence=0.95,
)


# =============================================================================
# CURRENCY
# =============================================================================

_CURRENCY_CODES = "|".join(SUPPORTED_CURRENCIES)
_PARENTHESIZED_CODE = re.compile(r"\(\s*([A-Za-z]{3})\s*\)")
_NON_ALIAS_CHARS = re.compile(r"[^a-z$€£¥]")


def _process_currency(capture: str, match_text: str, document: str) -> Optional[str]:
    # An explicit parenthesized ISO code wins over symbol inference
    code = _PARENTHESIZED_CODE.search(match_text)
    if code:
        return code.group(1).upper()

    key = _NON_ALIAS_CHARS.sub("", capture.lower())
    return CURRENCY_ALIASES.get(key, capture.strip().upper()[:3])


CURRENCY = ExtractionPattern(
    field="currency",
    patterns=(
        # denominated in United States Dollars (USD)
        re.compile(r"denominated\s+in\s+([A-Za-z][A-Za-z\s]{1,40}?)\s*\(\s*[A-Z]{3}\s*\)", re.IGNORECASE),
        # Currency: EUR / payable in GBP
        re.compile(
            rf"\b(?:currency|denominated|payable)(?:\s*[:\-]\s*|\s+in\s+)({_CURRENCY_CODES})\b",
            re.IGNORECASE,
        ),
        # United States Dollars (USD)
        re.compile(r"United\s+States\s+Dollars?\s*\(\s*([A-Z]{3})\s*\)", re.IGNORECASE),
        # $25,000,000 / USD 25,000,000
        re.compile(r"([$€£¥])\s?\d"),
        re.compile(rf"\b({_CURRENCY_CODES})\s?\d"),
    ),
    processor=_process_currency,
    validator=lambda value: value in SUPPORTED_CURRENCIES,
    confidence=0.9,
)


# =============================================================================
# INTEREST RATE MARGIN
# =============================================================================

_REFERENCE_RATE = r"(?:Term\s+)?(?:SOFR|LIBOR|EURIBOR|SONIA|ESTR|Base\s+Rate|Prime\s+Rate)"
_RATE = r"(\d+(?:\.\d+)?)"
_BASIS_POINTS = re.compile(r"\b(?:bps?|basis\s+points?)\b", re.IGNORECASE)


def _process_interest_margin(capture: str, match_text: str, document: str) -> Optional[float]:
    rate = to_number(capture)
    if rate is None:
        return None
    if _BASIS_POINTS.search(match_text):
        rate = rate / 100
    # A whole-number-times-100 artifact, e.g. 275 captured for 2.75
    if rate > 50:
        rate = rate / 100
    return round(rate, 6)


INTEREST_RATE_MARGIN = ExtractionPattern(
    field="interest_rate_margin",
    patterns=(
        # Term SOFR plus 2.75% per annum
        re.compile(rf"\b{_REFERENCE_RATE}\)?\s+plus\s+(?:a\s+margin\s+of\s+)?{_RATE}\s*%", re.IGNORECASE),
        # SOFR + 275 bps / SOFR + 2.75%
        re.compile(rf"\b{_REFERENCE_RATE}\s*\+\s*{_RATE}\s*(?:%|bps?\b|basis\s+points?)", re.IGNORECASE),
        # rate per annum equal to ... plus 2.75% per annum
        re.compile(rf"\brate\b[^.]{{0,120}}?\bequal\s+to\b[^.]{{0,120}}?\bplus\s+{_RATE}\s*%\s*per\s+annum", re.IGNORECASE),
        # Margin: 3.25% / spread of 150 bps
        re.compile(
            rf"\b(?:margin|spread|rate)(?:\s*[:\-]\s*|\s+of\s+|\s+is\s+){_RATE}\s*(?:%|bps?\b|basis\s+points?)",
            re.IGNORECASE,
        ),
    ),
    processor=_process_interest_margin,
    validator=lambda value: _in_range(value, INTEREST_MARGIN_RANGE),
    confidence=0.85,
)


# =============================================================================
# LEVERAGE COVENANT
# =============================================================================

def _process_leverage(capture: str, match_text: str, document: str) -> Optional[float]:
    ratio = to_number(capture)
    if ratio is None or not _in_range(ratio, LEVERAGE_RANGE):
        return None
    return ratio


LEVERAGE_COVENANT = ExtractionPattern(
    field="leverage_covenant",
    patterns=(
        # Total Leverage Ratio not to exceed 4.25:1.00
        re.compile(
            rf"Total\s+Leverage\s+Ratio\s+(?:shall\s+)?(?:not\s+to\s+exceed|not\s+exceed)\s+{_RATE}\s*:\s*1(?:\.0+)?",
            re.IGNORECASE,
        ),
        # leverage ratio ... not to exceed 4.25
        re.compile(rf"leverage\s+ratio[^.]{{0,100}}?not\s+(?:to\s+)?exceed\s+{_RATE}", re.IGNORECASE),
        # Leverage: 3.5x / debt to EBITDA of 4.0 to 1
        re.compile(
            r"\b(?:leverage|debt)(?:\s+to\s+EBITDA|\s+ratio)?"
            rf"(?:\s*[:\-]\s*|\s+of\s+|\s+not\s+to\s+exceed\s+){_RATE}"
            r"(?:\s*x\b|\s*:\s*1|\s*to\s*1|\s*times)?",
            re.IGNORECASE,
        ),
        # Maximum leverage ratio: 5.0x
        re.compile(
            rf"\b(?:maximum|max)(?:\s+permitted)?\s+(?:leverage|debt)(?:\s+ratio)?\s*[:\-]\s*{_RATE}",
            re.IGNORECASE,
        ),
    ),
    processor=_process_leverage,
    validator=lambda value: _in_range(value, LEVERAGE_RANGE),
    confidence=0.8,
)


# =============================================================================
# ESG TARGET
# =============================================================================

_LEADING_SEPARATORS = re.compile(r"^[:\-\s]+")


def _process_esg_target(capture: str, match_text: str, document: str) -> Optional[str]:
    target = _LEADING_SEPARATORS.sub("", capture.strip())
    target = _WHITESPACE.sub(" ", target)
    return target[:ESG_TARGET_LENGTH[1]] or None


ESG_TARGET = ExtractionPattern(
    field="esg_target",
    patterns=(
        # Sustainability Target: reduce Scope 1 emissions by 40% by 2030.
        re.compile(
            r"\b(?:ESG|environmental|sustainability|green|carbon)\s+"
            r"(?:target|goal|objective|commitment)s?\s*[:\-]\s*([^.!?]{10,200}[.!?])",
            re.IGNORECASE,
        ),
        re.compile(
            r"\b((?:reduce|decrease|cut)\s+(?:its\s+)?(?:carbon|greenhouse\s+gas|emissions|energy)[^.!?]{5,150}[.!?])",
            re.IGNORECASE,
        ),
        re.compile(
            r"\b((?:achieve|reach|attain)\s+(?:net\s+zero|carbon\s+neutral(?:ity)?|sustainability)[^.!?]{5,150}[.!?])",
            re.IGNORECASE,
        ),
        re.compile(r"\b((?:renewable|clean)\s+energy[^.!?]{5,150}[.!?])", re.IGNORECASE),
        re.compile(
            r"\bby\s+\d{4}\s*[,:]?\s*([^.!?]{0,150}?"
            r"(?:carbon|emission|energy|renewable|sustainab|ESG)[^.!?]{0,150}[.!?])",
            re.IGNORECASE,
        ),
    ),
    processor=_process_esg_target,
    validator=lambda value: _length_between(value, ESG_TARGET_LENGTH),
    confidence=0.7,
)


PATTERN_LIBRARY: tuple[ExtractionPattern, ...] = (
    BORROWER_NAME,
    FACILITY_AMOUNT,
    CURRENCY,
    INTEREST_RATE_MARGIN,
    LEVERAGE_COVENANT,
    ESG_TARGET,
)

PATTERNS_BY_FIELD: Mapping[str, ExtractionPattern] = MappingProxyType(
    {pattern.field: pattern for pattern in PATTERN_LIBRARY}
)
