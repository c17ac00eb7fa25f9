"""
Validation and sanitization of extracted loan records.

This is the authoritative check applied to the output of every extraction
strategy. The pattern library's per-field validators are only a fast local
filter; these rules also enforce required presence and the borrower-name
character set, and produce human-readable error strings.
"""

import math
import re
from typing import Any, Callable, Optional, Union

from .exceptions import ValidationError
from .models import (
    BORROWER_NAME_LENGTH,
    ESG_TARGET_LENGTH,
    FACILITY_AMOUNT_RANGE,
    INTEREST_MARGIN_RANGE,
    LEVERAGE_RANGE,
    LOAN_FIELDS,
    SUPPORTED_CURRENCIES,
    LoanRecord,
    ValidationResult,
)

# Letters, digits, whitespace and common business-name punctuation,
# plus Latin-1 Supplement / Latin Extended-A letters
BORROWER_NAME_CHARSET = re.compile(r"^[a-zA-Z0-9\s\-&.,()'À-ſ]+$")

_UNSAFE_CHARS = re.compile(r"[<>\"'&]")
_WHITESPACE = re.compile(r"\s+")
_NON_NUMERIC = re.compile(r"[^\d.\-]")
_LEADING_NUMBER = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _format_amount(value: float) -> str:
    return f"${value:,.0f}"


def _format_bound(value: float) -> str:
    return f"{value:g}"


# =============================================================================
# FIELD RULES
# =============================================================================

def _check_borrower_name(value: Any) -> list[str]:
    if not isinstance(value, str) or not value.strip():
        return ["Borrower name is required"]

    errors = []
    low, high = BORROWER_NAME_LENGTH
    if len(value) < low:
        errors.append(f"Borrower name must be at least {low} characters")
    if len(value) > high:
        errors.append(f"Borrower name must not exceed {high} characters")
    if not BORROWER_NAME_CHARSET.match(value):
        errors.append("Borrower name contains invalid characters")
    return errors


def _check_facility_amount(value: Any) -> list[str]:
    if not _is_number(value):
        return ["Facility amount must be a valid number"]

    low, high = FACILITY_AMOUNT_RANGE
    if value < low:
        return [f"Facility amount must be at least {_format_amount(low)}"]
    if value > high:
        return [f"Facility amount must not exceed {_format_amount(high)}"]
    return []


def _check_currency(value: Any) -> list[str]:
    if value not in SUPPORTED_CURRENCIES:
        return [f"Currency must be one of: {', '.join(SUPPORTED_CURRENCIES)}"]
    return []


def _check_interest_rate_margin(value: Any) -> list[str]:
    if not _is_number(value):
        return ["Interest rate margin must be a valid number"]

    low, high = INTEREST_MARGIN_RANGE
    if value < low:
        return [f"Interest rate margin must be at least {_format_bound(low)}%"]
    if value > high:
        return [f"Interest rate margin must not exceed {_format_bound(high)}%"]
    return []


def _check_leverage_covenant(value: Any) -> list[str]:
    if not _is_number(value):
        return ["Leverage covenant must be a valid number"]

    low, high = LEVERAGE_RANGE
    if value < low:
        return [f"Leverage covenant must be at least {_format_bound(low)}x"]
    if value > high:
        return [f"Leverage covenant must not exceed {_format_bound(high)}x"]
    return []


def _check_esg_target(value: Any) -> list[str]:
    if not isinstance(value, str) or not value.strip():
        return ["ESG target is required"]

    errors = []
    low, high = ESG_TARGET_LENGTH
    if len(value.strip()) < low:
        errors.append(f"ESG target must be at least {low} characters")
    if len(value) > high:
        errors.append(f"ESG target must not exceed {high} characters")
    return errors


FIELD_CHECKS: dict[str, Callable[[Any], list[str]]] = {
    "borrower_name": _check_borrower_name,
    "facility_amount": _check_facility_amount,
    "currency": _check_currency,
    "interest_rate_margin": _check_interest_rate_margin,
    "leverage_covenant": _check_leverage_covenant,
    "esg_target": _check_esg_target,
}

REQUIRED_MESSAGES: dict[str, str] = {
    "borrower_name": "Borrower name is required",
    "facility_amount": "Facility amount is required",
    "currency": "Currency is required",
    "interest_rate_margin": "Interest rate margin is required",
    "leverage_covenant": "Leverage covenant is required",
    "esg_target": "ESG target is required",
}


def _as_fields(record: Union[LoanRecord, dict[str, Any]]) -> dict[str, Any]:
    if isinstance(record, LoanRecord):
        return record.as_fields()
    return dict(record)


# =============================================================================
# VALIDATION
# =============================================================================

def validate_loan_data(record: Union[LoanRecord, dict[str, Any]]) -> ValidationResult:
    """
    Validate a (possibly partial) loan record.

    Every field is required. Present fields are checked against their bounds
    and, for the borrower name, the business-name character set.

    Args:
        record: LoanRecord or dict keyed by snake_case field name

    Returns:
        ValidationResult with one human-readable message per problem
    """
    fields = _as_fields(record)
    errors: list[str] = []

    for name in LOAN_FIELDS:
        value = fields.get(name)
        if value is None:
            errors.append(REQUIRED_MESSAGES[name])
            continue
        errors.extend(FIELD_CHECKS[name](value))

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_field(name: str, value: Any) -> ValidationResult:
    """Validate a single field value in isolation."""
    check = FIELD_CHECKS.get(name)
    if check is None:
        raise ValidationError(
            f"Unknown loan field: {name}",
            field=name,
            value=value,
            constraint=f"one of {', '.join(LOAN_FIELDS)}",
        )

    errors = [REQUIRED_MESSAGES[name]] if value is None else check(value)
    return ValidationResult(is_valid=not errors, errors=errors)


# =============================================================================
# SANITIZATION
# =============================================================================

def sanitize_string(value: Any) -> str:
    """Strip HTML-significant characters and normalize whitespace."""
    if not isinstance(value, str):
        return ""
    value = _UNSAFE_CHARS.sub("", value)
    return _WHITESPACE.sub(" ", value).strip()


def sanitize_number(value: Any) -> Optional[float]:
    """
    Coerce a numeric-like value to a number.

    Strings such as "$1,000,000" or "2.75%" are reduced to their digits,
    decimal point and sign. Returns None if nothing numeric remains.
    """
    if _is_number(value):
        return value

    if isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value)
        match = _LEADING_NUMBER.match(cleaned)
        if match:
            try:
                number = float(match.group(0))
            except ValueError:
                return None
            if math.isfinite(number):
                return number

    return None


_NUMERIC_FIELDS = ("facility_amount", "interest_rate_margin", "leverage_covenant")
_STRING_FIELDS = ("borrower_name", "esg_target")


def sanitize_loan_data(record: Union[LoanRecord, dict[str, Any]]) -> dict[str, Any]:
    """
    Sanitize a loan record before validation or display.

    Unparseable numeric fields are dropped; currency codes are uppercased.
    """
    fields = _as_fields(record)
    sanitized: dict[str, Any] = {}

    for name in _STRING_FIELDS:
        if fields.get(name) is not None:
            sanitized[name] = sanitize_string(fields[name])

    if fields.get("currency") is not None:
        sanitized["currency"] = sanitize_string(fields["currency"]).upper()

    for name in _NUMERIC_FIELDS:
        if fields.get(name) is not None:
            number = sanitize_number(fields[name])
            if number is not None:
                sanitized[name] = number

    return {name: sanitized[name] for name in LOAN_FIELDS if name in sanitized}
