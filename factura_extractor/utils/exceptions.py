"""
Custom Exceptions Module.

This module defines the custom exceptions used by the extraction engine.
Field absence is never an exception: the engine reports missing fields
structurally in the ExtractionResult. Exceptions are reserved for broken
configuration, for InvoiceExtractor.parse_strict() and for the optional
oracle integration, whose failures are caught at the client boundary and
turned into a heuristic-only result.

Exception Hierarchy:
    InvoiceExtractionError (base)
    ├── ConfigurationError
    ├── ExtractionError
    │   └── InvalidInputError
    └── OracleError
        ├── OracleUnavailableError
        └── OracleResponseError
"""


class InvoiceExtractionError(Exception):
    """
    Base exception for all invoice extraction errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(InvoiceExtractionError):
    """Raised when settings.yaml is missing or malformed."""
    pass


# =============================================================================
# EXTRACTION ERRORS
# =============================================================================

class ExtractionError(InvoiceExtractionError):
    """Raised by InvoiceExtractor.parse_strict() for empty input; base of InvalidInputError."""
    pass


class InvalidInputError(ExtractionError):
    """
    Raised by InvoiceExtractor.parse_strict() when the input is not a string.

    InvoiceExtractor.parse() never raises this; it returns an empty result.
    """

    def __init__(self, received_type: str):
        message = f"Invoice text must be a string, got {received_type}"
        details = {"type": received_type}
        super().__init__(message, details)


# =============================================================================
# ORACLE ERRORS
# =============================================================================

class OracleError(InvoiceExtractionError):
    """Base exception for the external extraction oracle."""
    pass


class OracleUnavailableError(OracleError):
    """Raised when an oracle backend cannot be reached or refuses the call."""

    def __init__(self, backend: str, reason: str = None):
        message = f"Oracle backend unavailable: {backend}"
        details = {"backend": backend, "reason": reason}
        super().__init__(message, details)


class OracleResponseError(OracleError):
    """Raised when an oracle backend answers with an unusable payload."""

    def __init__(self, backend: str, reason: str = None):
        message = f"Oracle backend returned an invalid response: {backend}"
        details = {"backend": backend, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'InvoiceExtractionError',
    'ConfigurationError',
    'ExtractionError',
    'InvalidInputError',
    'OracleError',
    'OracleUnavailableError',
    'OracleResponseError',
]
