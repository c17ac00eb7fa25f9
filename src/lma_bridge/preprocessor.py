"""Text normalization applied before pattern matching."""

import re

_WHITESPACE = re.compile(r"\s+")

# Only whole single-character tokens, so digits inside numbers are untouched
_OCR_ZERO = re.compile(r"(?<!\S)0(?!\S)")
_OCR_LOWER_L = re.compile(r"(?<!\S)l(?!\S)")

_US_DOLLAR_PREFIX = re.compile(r"US\$")
_US_DOLLAR_SUFFIX = re.compile(r"\$US")
_PERCENT_WORDS = re.compile(r"\bper\s?cent\b", re.IGNORECASE)

_DOUBLE_QUOTES = re.compile(r"[“”„‟″]")
_SINGLE_QUOTES = re.compile(r"[‘’‚‛′]")


def preprocess(text: str) -> str:
    """
    Normalize raw document text for extraction.

    Steps, in order: collapse whitespace runs, fix standalone OCR
    confusions ("0" -> "O", "l" -> "I"), rewrite "US$"/"$US" as "USD",
    rewrite "per cent"/"percent" as "%", straighten curly quotes, trim.

    Args:
        text: Raw document text

    Returns:
        Normalized text (possibly empty)
    """
    text = _WHITESPACE.sub(" ", text)
    text = _OCR_ZERO.sub("O", text)
    text = _OCR_LOWER_L.sub("I", text)
    text = _US_DOLLAR_PREFIX.sub("USD", text)
    text = _US_DOLLAR_SUFFIX.sub("USD", text)
    text = _PERCENT_WORDS.sub("%", text)
    text = _DOUBLE_QUOTES.sub('"', text)
    text = _SINGLE_QUOTES.sub("'", text)
    return text.strip()
