"""Custom exceptions for LMA Bridge.

This module provides a hierarchy of exception classes for consistent error
handling across document acquisition, extraction and validation. All
exceptions inherit from LMABridgeError, making it easy to catch all
application-specific errors.

The pattern extraction engine itself never lets these escape: it converts
internal faults into an empty, zero-confidence result. They are raised by the
collaborators around it (document loading, the remote model adapter,
configuration checks) so that callers can decide how to recover.

Example:
    try:
        result = remote_extractor.extract(text)
    except AgentError as e:
        if e.recoverable:
            result = PatternLoanExtractor().extract(text)
        else:
            raise
"""

from typing import Any, Optional


class LMABridgeError(Exception):
    """Base exception for all LMA Bridge errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ExtractionError(LMABridgeError):
    """Error raised when text or terms cannot be extracted from a document.

    Attributes:
        source: The document path or identifier being processed.
        field: The loan field that failed to extract (if applicable).

    Example:
        >>> raise ExtractionError(
        ...     "Unsupported file type: .xls",
        ...     source="facility_agreement.xls",
        ... )
        ExtractionError: Unsupported file type: .xls
    """

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ExtractionError.

        Args:
            message: Human-readable error description.
            source: The document path or identifier being processed.
            field: The loan field that failed extraction.
            details: Optional dictionary with additional context.
            recoverable: Whether extraction can be retried. Defaults to True
                since an alternative extraction strategy may succeed.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.source = source
        self.field = field

        if source:
            self.details["source"] = source
        if field:
            self.details["field"] = field


class ValidationError(LMABridgeError):
    """Error raised when extracted loan data fails validation rules.

    Attributes:
        field: The field that failed validation.
        value: The invalid value (if safe to include).
        constraint: The validation constraint that was violated.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class AgentError(LMABridgeError):
    """Error raised when the remote model extraction path fails.

    Attributes:
        agent_name: Name or identifier of the extractor that failed.
        operation: The operation being attempted.
        api_error: The underlying API error message (if applicable).

    Example:
        >>> raise AgentError(
        ...     "Remote extraction failed after 3 attempts",
        ...     agent_name="llm_loan_extractor",
        ...     operation="messages.create",
        ...     api_error="Rate limit exceeded",
        ... )
        AgentError: Remote extraction failed after 3 attempts
    """

    def __init__(
        self,
        message: str,
        *,
        agent_name: Optional[str] = None,
        operation: Optional[str] = None,
        api_error: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize AgentError.

        Args:
            message: Human-readable error description.
            agent_name: Identifier for the extractor that encountered the error.
            operation: The specific operation being attempted.
            api_error: The underlying API error message from the remote service.
            details: Optional dictionary with additional context.
            recoverable: Whether the caller may fall back or retry. Defaults to
                True since rate limits, timeouts and malformed replies are
                usually transient.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.agent_name = agent_name
        self.operation = operation
        self.api_error = api_error

        if agent_name:
            self.details["agent_name"] = agent_name
        if operation:
            self.details["operation"] = operation
        if api_error:
            self.details["api_error"] = api_error


class ConfigurationError(LMABridgeError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "LMABridgeError",
    "ExtractionError",
    "ValidationError",
    "AgentError",
    "ConfigurationError",
]
