"""LMA Bridge - Rule-based loan agreement term extraction."""

__version__ = "0.1.0"

from .extractor import LoanExtractor, PatternLoanExtractor, extract
from .models import ExtractionResult, LoanRecord, ValidationResult
from .service import AnalyzeLoanResponse, analyze_loan
from .validation import validate_loan_data

__all__ = [
    "LoanExtractor",
    "PatternLoanExtractor",
    "extract",
    "ExtractionResult",
    "LoanRecord",
    "ValidationResult",
    "AnalyzeLoanResponse",
    "analyze_loan",
    "validate_loan_data",
]
