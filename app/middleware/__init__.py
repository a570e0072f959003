"""
Middleware package for FastAPI application.
"""

from .auth import AuthenticationMiddleware
from .request_context import RequestContextMiddleware

__all__ = ["AuthenticationMiddleware", "RequestContextMiddleware"]
