"""
Authentication middleware for auth provider session tokens.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
import logging
from typing import Optional, Set

from app.config.settings import AuthSettings
from app.core.exceptions import ErrorCode
from app.core.jwt import decode_session_token
from app.schemas.base import StandardErrorResponse

logger = logging.getLogger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Bearer token middleware.

    Anonymous requests pass through with ``request.state.user_id = None``;
    a token that is present but fails verification is rejected with 401.
    """

    def __init__(self, app, auth_settings: AuthSettings, public_paths: Optional[Set[str]] = None):
        super().__init__(app)
        self.auth_settings = auth_settings
        self.public_paths = public_paths or {
            "/",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/health",
            "/metrics",
        }

    async def dispatch(self, request: Request, call_next):
        """
        Resolve the requesting user from the Authorization header.

        Args:
            request: FastAPI request object
            call_next: Next middleware in chain

        Returns:
            Response object
        """
        request.state.user_id = None

        if request.url.path in self.public_paths:
            return await call_next(request)

        header = request.headers.get("Authorization", "")
        if not header:
            return await call_next(request)

        scheme, _, token = header.partition(" ")
        claims = await self._verify(token) if scheme.lower() == "bearer" else None

        if not claims:
            request_id = getattr(request.state, 'request_id', 'unknown')
            logger.warning(
                f"Invalid session token for request {request_id}",
                extra={
                    'request_id': request_id,
                    'path': request.url.path,
                    'client_ip': request.client.host if request.client else 'unknown'
                }
            )
            error = StandardErrorResponse(
                error_code=ErrorCode.INVALID_TOKEN.value,
                message="Invalid or expired session token",
                request_id=request_id,
            )
            return JSONResponse(status_code=401, content=error.model_dump(mode="json"))

        request.state.user_id = claims["sub"]
        return await call_next(request)

    async def _verify(self, token: str):
        # JWKS lookups may hit the network; keep them off the event loop
        if self.auth_settings.jwks_url:
            return await run_in_threadpool(decode_session_token, token, self.auth_settings)
        return decode_session_token(token, self.auth_settings)
