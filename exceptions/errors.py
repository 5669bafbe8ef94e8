"""
Custom exception classes for the application.

Every error carries a stable code so API clients can branch on it.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "INVALID_PERIOD")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


# ===================
# ANALYTICS ERRORS
# ===================

class InvalidPeriodError(ValidationError):
    """Unknown period token, or a period the operation does not support."""

    def __init__(self, period: str, valid: Optional[list[str]] = None):
        super().__init__(
            code="INVALID_PERIOD",
            message=f"Unsupported analysis period: {period}",
            details={"provided": period, "valid": valid or []}
        )


class InvoiceValidationError(ValidationError):
    """Invoice record does not match the input contract."""

    def __init__(self, index: int, errors: list[dict]):
        super().__init__(
            code="INVOICE_VALIDATION_FAILED",
            message=f"Invoice at position {index} is malformed",
            details={"index": index, "errors": errors}
        )
