"""
Loan analysis entry point.

Wraps an extraction strategy with caller-side input checks, remote-to-local
fallback, sanitization and validation, and returns a single response
envelope suitable for a UI or API layer.
"""

import re
from enum import Enum
from typing import Any, Optional

import structlog
from pydantic import BaseModel, Field

from .config import ExtractionStrategy, LMABridgeConfig
from .exceptions import AgentError, ConfigurationError
from .extractor import LoanExtractor, PatternLoanExtractor
from .llm_extractor import LLMLoanExtractor
from .models import FIELD_ALIASES, ExtractionResult
from .validation import sanitize_loan_data, validate_loan_data

logger = structlog.get_logger()

GENERIC_FAILURE_SUGGESTIONS: tuple[str, ...] = (
    "Please check document format and try again",
    "Ensure the document contains loan agreement information",
)

_ANGLE_BRACKETS = re.compile(r"[<>]")


class AnalysisErrorCode(str, Enum):
    """Error codes returned in AnalyzeLoanResponse.error."""

    INVALID_INPUT = "INVALID_INPUT"
    EMPTY_INPUT = "EMPTY_INPUT"
    INPUT_TOO_LARGE = "INPUT_TOO_LARGE"
    VALIDATION_WARNING = "VALIDATION_WARNING"
    EXTRACTION_ERROR = "EXTRACTION_ERROR"


class AnalyzeLoanResponse(BaseModel):
    """Response envelope for a loan analysis request.

    ``success`` is True whenever extraction ran, even if validation raised
    warnings; in that case ``error`` is VALIDATION_WARNING and the partial
    data is still returned for manual review.
    """

    success: bool
    data: dict[str, Any] = Field(default_factory=dict)
    error: Optional[AnalysisErrorCode] = None
    validation_errors: list[str] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    extracted_fields: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    processing_time_ms: float = Field(default=0.0, ge=0)
    method: Optional[str] = None

    @classmethod
    def rejected(cls, error: AnalysisErrorCode) -> "AnalyzeLoanResponse":
        """Create a response for input rejected before extraction."""
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the external camelCase response shape."""
        payload: dict[str, Any] = {
            "success": self.success,
            "data": {FIELD_ALIASES[name]: value for name, value in self.data.items()},
            "confidence": self.confidence,
            "extractedFields": [FIELD_ALIASES[name] for name in self.extracted_fields],
            "suggestions": list(self.suggestions),
            "processingTimeMs": self.processing_time_ms,
        }
        if self.error is not None:
            payload["error"] = self.error.value
        if self.validation_errors:
            payload["validationErrors"] = list(self.validation_errors)
        if self.method is not None:
            payload["method"] = self.method
        return payload


def build_extractor(config: Optional[LMABridgeConfig] = None) -> LoanExtractor:
    """
    Build the extractor selected by configuration.

    Raises:
        ConfigurationError: If the remote strategy is selected but not usable.
    """
    config = config or LMABridgeConfig()
    if config.extraction.strategy == ExtractionStrategy.REMOTE:
        return LLMLoanExtractor(config=config)
    return PatternLoanExtractor()


def _run_extraction(
    text: str,
    extractor: LoanExtractor,
    fallback: Optional[LoanExtractor],
) -> ExtractionResult:
    try:
        return extractor.extract(text)
    except AgentError as e:
        if not e.recoverable or fallback is None:
            raise
        logger.warning(
            "extraction_falling_back",
            error=e.message,
            agent_name=e.agent_name,
        )
        return fallback.extract(text)


def analyze_loan(
    document_text: Any,
    *,
    extractor: Optional[LoanExtractor] = None,
    fallback: Optional[LoanExtractor] = None,
    config: Optional[LMABridgeConfig] = None,
) -> AnalyzeLoanResponse:
    """
    Analyze a loan agreement and return extracted, validated terms.

    Args:
        document_text: Raw agreement text
        extractor: Extraction strategy; built from ``config`` if omitted
        fallback: Strategy used when ``extractor`` raises a recoverable
            AgentError. Defaults to the local pattern engine when
            ``fallback_to_local`` is enabled.
        config: Application configuration

    Returns:
        AnalyzeLoanResponse. Input problems and unexpected failures are
        reported through ``success``/``error``, never raised.
    """
    if not isinstance(document_text, str):
        return AnalyzeLoanResponse.rejected(AnalysisErrorCode.INVALID_INPUT)

    if not document_text.strip():
        return AnalyzeLoanResponse.rejected(AnalysisErrorCode.EMPTY_INPUT)

    text = _ANGLE_BRACKETS.sub("", document_text).strip()
    if not text:
        return AnalyzeLoanResponse.rejected(AnalysisErrorCode.EMPTY_INPUT)

    try:
        config = config or LMABridgeConfig()

        if len(text) > config.extraction.max_document_chars:
            logger.info(
                "document_too_large",
                document_length=len(text),
                max_document_chars=config.extraction.max_document_chars,
            )
            return AnalyzeLoanResponse.rejected(AnalysisErrorCode.INPUT_TOO_LARGE)

        if extractor is None:
            try:
                extractor = build_extractor(config)
            except ConfigurationError as e:
                if not config.extraction.fallback_to_local:
                    raise
                logger.warning("remote_extractor_unavailable", reason=e.message)
                extractor = PatternLoanExtractor()
        if fallback is None and config.extraction.fallback_to_local and not isinstance(
            extractor, PatternLoanExtractor
        ):
            fallback = PatternLoanExtractor()

        result = _run_extraction(text, extractor, fallback)
        data = sanitize_loan_data(result.data)
        validation = validate_loan_data(data)
    except Exception as e:
        logger.error(
            "loan_analysis_failed",
            error=str(e),
            error_type=type(e).__name__,
            document_length=len(document_text),
        )
        return AnalyzeLoanResponse(
            success=False,
            error=AnalysisErrorCode.EXTRACTION_ERROR,
            suggestions=list(GENERIC_FAILURE_SUGGESTIONS),
        )

    response = AnalyzeLoanResponse(
        success=True,
        data=data,
        confidence=result.confidence,
        extracted_fields=[name for name in result.extracted_fields if name in data],
        suggestions=result.suggestions,
        processing_time_ms=result.processing_time_ms,
        method=result.method,
    )

    if not validation.is_valid:
        logger.warning("loan_validation_warnings", errors=validation.errors)
        response.error = AnalysisErrorCode.VALIDATION_WARNING
        response.validation_errors = validation.errors

    logger.info(
        "loan_analysis_complete",
        method=result.method,
        fields=len(response.extracted_fields),
        confidence=round(result.confidence, 3),
        needs_review=not validation.is_valid,
    )
    return response
