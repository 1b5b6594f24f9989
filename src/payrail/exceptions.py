"""Exception hierarchy for payrail.

All payrail-specific exceptions inherit from PayrailError, which carries:
- error_code: Machine-readable error code (e.g., "RAIL_ERROR")
- message: Human-readable error message
- details: Optional additional context dictionary
- to_dict(): Convert to an API-style error payload

Risk evaluation never raises these; only rail adapters, audit sinks,
webhook verification and configuration do.
"""
from __future__ import annotations

from typing import Any, Optional


class PayrailError(Exception):
    """Base exception for all payrail errors."""

    error_code: str = "PAYRAIL_ERROR"
    retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class PaymentValidationError(PayrailError):
    """Malformed payment request."""

    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)


class ComplianceRejected(PayrailError):
    """Payment blocked by the compliance gate. Not retryable."""

    error_code = "COMPLIANCE_REJECTED"


class RailError(PayrailError):
    """A downstream rail adapter failed. Callers may retry with backoff."""

    error_code = "RAIL_ERROR"
    retryable = True

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if provider:
            details["provider"] = provider
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details)
        self.provider = provider
        self.status_code = status_code


class AuditSinkError(PayrailError):
    """Audit sink could not record an event. Never fails a payment."""

    error_code = "AUDIT_SINK_ERROR"


class WebhookSignatureInvalid(PayrailError):
    """Webhook signature did not verify."""

    error_code = "WEBHOOK_SIGNATURE_INVALID"


class ConfigurationError(PayrailError):
    """Invalid or incomplete runtime configuration."""

    error_code = "CONFIGURATION_ERROR"
