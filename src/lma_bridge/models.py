"""Data models for loan term extraction.

Python code works with snake_case attribute names. The external contract
(UI, remote model JSON, API responses) uses camelCase keys, produced by the
``to_dict()`` methods below.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


SUPPORTED_CURRENCIES: tuple[str, ...] = (
    "USD", "EUR", "GBP", "JPY", "CHF", "CAD", "AUD", "SEK", "NOK", "DKK",
)

NO_ESG_TARGET = "No specific ESG targets identified in this agreement"

# Ordered as they appear in a loan record
LOAN_FIELDS: tuple[str, ...] = (
    "borrower_name",
    "facility_amount",
    "currency",
    "interest_rate_margin",
    "leverage_covenant",
    "esg_target",
)

FIELD_ALIASES: dict[str, str] = {
    "borrower_name": "borrowerName",
    "facility_amount": "facilityAmount",
    "currency": "currency",
    "interest_rate_margin": "interestRateMargin",
    "leverage_covenant": "leverageCovenant",
    "esg_target": "esgTarget",
}

# Inclusive bounds shared by the pattern validators and downstream validation
BORROWER_NAME_LENGTH = (3, 100)
FACILITY_AMOUNT_RANGE = (100_000, 100_000_000_000)
INTEREST_MARGIN_RANGE = (0.1, 20.0)
LEVERAGE_RANGE = (0.1, 20.0)
ESG_TARGET_LENGTH = (10, 200)


class LoanRecord(BaseModel):
    """Structured loan terms; any subset of fields may be absent."""

    model_config = ConfigDict(populate_by_name=True)

    borrower_name: Optional[str] = Field(default=None, alias="borrowerName")
    facility_amount: Optional[float] = Field(default=None, alias="facilityAmount")
    currency: Optional[str] = Field(default=None, alias="currency")
    interest_rate_margin: Optional[float] = Field(default=None, alias="interestRateMargin")
    leverage_covenant: Optional[float] = Field(default=None, alias="leverageCovenant")
    esg_target: Optional[str] = Field(default=None, alias="esgTarget")

    @classmethod
    def from_fields(cls, fields: dict[str, Any]) -> "LoanRecord":
        """Build a record from a snake_case field dict, ignoring unknown keys."""
        return cls(**{name: fields[name] for name in LOAN_FIELDS if fields.get(name) is not None})

    def present_fields(self) -> list[str]:
        """Names of populated fields, in record order."""
        return [name for name in LOAN_FIELDS if getattr(self, name) is not None]

    def as_fields(self) -> dict[str, Any]:
        """Return populated fields keyed by snake_case name."""
        return {name: getattr(self, name) for name in self.present_fields()}

    def to_dict(self) -> dict[str, Any]:
        """Convert populated fields to a camelCase dictionary."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ExtractionResult(BaseModel):
    """Output envelope for a single extraction call."""

    data: LoanRecord = Field(default_factory=LoanRecord)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    extracted_fields: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    processing_time_ms: float = Field(default=0.0, ge=0)
    method: str = Field(
        default="pattern",
        description="Extraction strategy that produced the result",
    )

    @classmethod
    def failed(
        cls,
        suggestion: str,
        *,
        processing_time_ms: float = 0.0,
        method: str = "pattern",
    ) -> "ExtractionResult":
        """Create the empty, zero-confidence result used when extraction fails."""
        return cls(
            data=LoanRecord(),
            confidence=0.0,
            extracted_fields=[],
            suggestions=[suggestion],
            processing_time_ms=processing_time_ms,
            method=method,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the external camelCase result shape."""
        return {
            "data": self.data.to_dict(),
            "confidence": self.confidence,
            "extractedFields": [FIELD_ALIASES[name] for name in self.extracted_fields],
            "suggestions": list(self.suggestions),
            "processingTimeMs": self.processing_time_ms,
        }


class ValidationResult(BaseModel):
    """Result of validating a (possibly partial) loan record."""

    is_valid: bool = True
    errors: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"isValid": self.is_valid, "errors": list(self.errors)}
