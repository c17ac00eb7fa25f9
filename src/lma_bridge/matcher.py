"""Apply the pattern library to preprocessed text."""

import re
from typing import Any, Iterable

import structlog

from .patterns import PATTERN_LIBRARY, ExtractionPattern

logger = structlog.get_logger()

# Matches in the first part of a document sit in the recitals/key terms
EARLY_POSITION_RATIO = 0.3
EARLY_POSITION_BONUS = 0.1
LONG_MATCH_LENGTH = 20
LONG_MATCH_BONUS = 0.05
MIN_MATCH_CONFIDENCE = 0.5


def match_confidence(match: re.Match, text: str, pattern: ExtractionPattern) -> float:
    """
    Confidence for one regex occurrence.

    Base weight of the field's pattern, +0.1 when the occurrence starts in
    the first 30% of the document, +0.05 when the matched span is longer
    than 20 characters, capped at 1.0.
    """
    confidence = pattern.confidence

    if text and match.start() / len(text) < EARLY_POSITION_RATIO:
        confidence += EARLY_POSITION_BONUS

    if len(match.group(0)) > LONG_MATCH_LENGTH:
        confidence += LONG_MATCH_BONUS

    return min(confidence, 1.0)


def match_field(text: str, pattern: ExtractionPattern) -> tuple[Any, float]:
    """
    Find the best candidate value for a single field.

    Every occurrence of every regex is processed and validated; the
    highest-confidence valid candidate wins, and on ties the earlier
    declared regex (then the earlier occurrence) is kept.

    Returns:
        (value, confidence), or (None, 0.0) when nothing valid matched
    """
    best_value: Any = None
    best_confidence = 0.0

    for regex in pattern.patterns:
        for match in regex.finditer(text):
            capture = match.group(1) if regex.groups else None
            if not capture:
                continue

            value = pattern.processor(capture, match.group(0), text)
            if value is None or not pattern.validator(value):
                continue

            confidence = match_confidence(match, text, pattern)
            if confidence > best_confidence:
                best_value = value
                best_confidence = confidence

    if best_confidence <= MIN_MATCH_CONFIDENCE:
        return None, 0.0
    return best_value, best_confidence


def match_patterns(
    text: str,
    library: Iterable[ExtractionPattern] = PATTERN_LIBRARY,
) -> dict[str, Any]:
    """
    Extract a partial loan record from preprocessed text.

    Args:
        text: Preprocessed document text
        library: Extraction patterns to apply, one per field

    Returns:
        Dict of field name -> value for fields with at least one valid match
    """
    results: dict[str, Any] = {}

    for pattern in library:
        value, confidence = match_field(text, pattern)
        if value is None:
            continue
        results[pattern.field] = value
        logger.debug(
            "pattern_field_matched",
            field=pattern.field,
            confidence=round(confidence, 3),
        )

    return results
