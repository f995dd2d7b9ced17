"""
Custom Error Types for the HVAC Diagnostic Pipeline

Separates input errors (caught before any generator call) from upstream
errors (transport failures and unusable generator output). Everything
raised here is converted into an error-status DiagnosticResult by the
diagnostic service; only the HTTP layer ever renders these directly.
"""

import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class DiagnosticError(Exception):
    """Base exception for all diagnostic pipeline errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InputError(DiagnosticError):
    """
    Problems with what the caller handed us.

    Examples:
    - Required request field missing
    - Unit asked to convert outside its family
    """
    pass


class MissingFieldError(InputError):
    """A mandatory request field is absent or empty."""

    def __init__(self, field: str, message: str):
        super().__init__(message, {"field": field})
        self.field = field

    def __str__(self):
        return self.message


class UnsupportedUnitError(InputError):
    """A unit was handed to a converter for a quantity family it does not belong to."""

    def __init__(self, unit: str, family: str):
        super().__init__(f"Cannot convert {unit} to {family}", {"unit": unit, "family": family})
        self.unit = unit
        self.family = family

    def __str__(self):
        return self.message


class UpstreamError(DiagnosticError):
    """Base for failures originating at the generative model."""
    pass


class UpstreamTransportError(UpstreamError):
    """
    The generator call itself failed.

    Examples:
    - Non-success HTTP status (401, 429, 500...)
    - Connection refused / DNS failure
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message, {"status_code": status_code} if status_code is not None else None)
        self.status_code = status_code
        self.body = body

    def __str__(self):
        return self.message


class GeneratorTimeoutError(UpstreamTransportError):
    """The generator did not answer within the configured timeout."""
    pass


class UpstreamParseError(UpstreamError):
    """No usable JSON object could be recovered from the generator's text."""

    def __init__(self, message: str, raw_excerpt: str = ""):
        super().__init__(message)
        self.raw_excerpt = raw_excerpt


class ConfigurationError(DiagnosticError):
    """
    Configuration errors that prevent a diagnostic from being attempted.

    Examples:
    - Generator API key not configured
    """
    pass


def log_error_with_context(error: DiagnosticError, context: Dict[str, Any]):
    """
    Log error with additional context information.

    Args:
        error: Error to log
        context: Additional context (model_id, system_type, etc.)
    """
    log_data = {
        'error_type': type(error).__name__,
        'error_message': error.message,
        'details': error.details,
        'context': context
    }

    if isinstance(error, InputError):
        logger.warning(f"Rejected diagnostic input: {error.message}", extra=log_data)
    else:
        logger.error(f"Diagnostic failed: {error.message}", extra=log_data)
