"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,

    # Analytics
    InvalidPeriodError,
    InvoiceValidationError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",

    # Analytics
    "InvalidPeriodError",
    "InvoiceValidationError",
]
