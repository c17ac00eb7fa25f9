"""
Rule-based loan agreement extractor.

Runs the local pipeline over raw agreement text:

    preprocess -> match_patterns -> enhance -> correct -> score

The engine is deterministic and holds no state between calls, so a single
instance (or the module-level ``extract``) can be shared freely. It never
raises: unexpected internal faults are logged and converted into an empty,
zero-confidence result.
"""

import time
from typing import Protocol, runtime_checkable

import structlog

from .context import enhance
from .corrector import correct
from .matcher import match_patterns
from .models import ExtractionResult, LoanRecord
from .preprocessor import preprocess
from .scoring import score

logger = structlog.get_logger()

UNRECOGNIZED_DOCUMENT = "Document format not recognized. Please ensure it's a valid loan agreement."


@runtime_checkable
class LoanExtractor(Protocol):
    """Capability shared by every extraction strategy.

    Any class with a matching ``extract`` method is compatible; no
    inheritance required. Implementations return an ExtractionResult for
    each document and leave timeouts and strategy choice to the caller.
    """

    def extract(self, document_text: str) -> ExtractionResult:
        """Extract loan terms from raw document text."""
        ...


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class PatternLoanExtractor:
    """Local pattern-library extraction engine."""

    method = "pattern"

    def extract(self, document_text: str) -> ExtractionResult:
        """
        Extract loan terms from agreement text.

        Args:
            document_text: Raw agreement text

        Returns:
            ExtractionResult; blank input or an internal fault yields the
            empty zero-confidence result with a single suggestion
        """
        started = time.perf_counter()

        try:
            text = preprocess(document_text)
            if not text:
                return ExtractionResult.failed(
                    UNRECOGNIZED_DOCUMENT,
                    processing_time_ms=_elapsed_ms(started),
                    method=self.method,
                )

            fields = match_patterns(text)
            fields = enhance(text, fields)
            fields = correct(fields, text)
            confidence, suggestions = score(fields, text)
            record = LoanRecord.from_fields(fields)

            result = ExtractionResult(
                data=record,
                confidence=confidence,
                extracted_fields=record.present_fields(),
                suggestions=suggestions,
                processing_time_ms=_elapsed_ms(started),
                method=self.method,
            )
        except Exception as e:
            logger.error(
                "pattern_extraction_failed",
                error=str(e),
                error_type=type(e).__name__,
                document_length=len(document_text) if isinstance(document_text, str) else None,
            )
            return ExtractionResult.failed(
                UNRECOGNIZED_DOCUMENT,
                processing_time_ms=_elapsed_ms(started),
                method=self.method,
            )

        logger.info(
            "pattern_extraction_complete",
            fields=len(result.extracted_fields),
            confidence=round(result.confidence, 3),
            processing_time_ms=round(result.processing_time_ms, 2),
        )
        return result


_default_extractor = PatternLoanExtractor()


def extract(document_text: str) -> ExtractionResult:
    """Extract loan terms with the local pattern engine."""
    return _default_extractor.extract(document_text)
