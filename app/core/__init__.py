"""
Core infrastructure for the class finder backend.
Provides the error hierarchy, caching, logging and token verification.
"""

from .exceptions import (
    ClassFinderException,
    ContentStoreError,
    ErrorCode,
    InvalidLocationError,
    OnboardingRequiredError,
)
from .cache_client import CacheClient

__all__ = [
    "ClassFinderException",
    "ContentStoreError",
    "ErrorCode",
    "InvalidLocationError",
    "OnboardingRequiredError",
    "CacheClient",
]
