"""
Custom exceptions for the class finder backend.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for the application."""

    # Search area errors
    ONBOARDING_REQUIRED = "ONBOARDING_REQUIRED"
    INVALID_LOCATION = "INVALID_LOCATION"

    # Upstream errors
    CONTENT_STORE_ERROR = "CONTENT_STORE_ERROR"
    CONTENT_STORE_UNAVAILABLE = "CONTENT_STORE_UNAVAILABLE"

    # Authentication errors
    INVALID_TOKEN = "INVALID_TOKEN"

    # Generic errors
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ClassFinderException(Exception):
    """Base exception for the class finder backend."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code


class OnboardingRequiredError(ClassFinderException):
    """
    Raised when a user has no stored search area.

    Handled by redirecting to the onboarding flow rather than an error body.
    """

    def __init__(self, missing: list, redirect_to: str = "/onboarding"):
        super().__init__(
            message="Search location and radius must be set before browsing classes",
            error_code=ErrorCode.ONBOARDING_REQUIRED,
            details={"missing": missing, "redirect_to": redirect_to},
            status_code=307
        )
        self.redirect_to = redirect_to


class InvalidLocationError(ClassFinderException):
    """Raised when a stored search area holds out-of-range values."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_LOCATION,
            details=details,
            status_code=422
        )


class ContentStoreError(ClassFinderException):
    """Raised when a content store query or mutation fails."""

    def __init__(
        self,
        message: str = "Content store request failed",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 502
    ):
        super().__init__(
            message=message,
            error_code=(
                ErrorCode.CONTENT_STORE_UNAVAILABLE if status_code == 503
                else ErrorCode.CONTENT_STORE_ERROR
            ),
            details=details,
            status_code=status_code
        )

