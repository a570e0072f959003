"""
Error handlers for the FastAPI application.
"""

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import time
from typing import Dict, Any, Optional

from app.core.exceptions import (
    ClassFinderException,
    ContentStoreError,
    ErrorCode,
    OnboardingRequiredError,
)
from app.schemas.base import StandardErrorResponse

logger = logging.getLogger(__name__)


class ErrorHandler:
    """
    Error handling with logging and per-code frequency tracking.
    """

    # Seconds clients should wait before retrying an unavailable content store
    RETRY_AFTER_SECONDS = 5

    def __init__(self, expose_upstream_body: bool = False):
        self.expose_upstream_body = expose_upstream_body
        self.error_counts: Dict[str, int] = {}
        self.last_error_time: Dict[str, float] = {}

    async def handle_class_finder_exception(
        self,
        request: Request,
        exc: ClassFinderException
    ) -> JSONResponse:
        """
        Handle ClassFinderException with detailed logging.

        Args:
            request: FastAPI request object
            exc: ClassFinderException instance

        Returns:
            JSONResponse with structured error information
        """
        request_id = getattr(request.state, 'request_id', 'unknown')

        logger.error(
            f"ClassFinderException in request {request_id}: {exc.message}",
            extra={
                'request_id': request_id,
                'error_code': exc.error_code.value,
                'status_code': exc.status_code,
                'details': exc.details,
                'request_path': request.url.path,
                'request_method': request.method,
            }
        )

        self._track_error(exc.error_code.value)

        return self._create_error_response(
            error_code=exc.error_code.value,
            message=exc.message,
            details=exc.details,
            request_id=request_id,
            status_code=exc.status_code
        )

    async def handle_onboarding_required(
        self,
        request: Request,
        exc: OnboardingRequiredError
    ) -> RedirectResponse:
        """
        Send users without a search area to onboarding.

        Args:
            request: FastAPI request object
            exc: OnboardingRequiredError instance

        Returns:
            Temporary redirect to the onboarding path
        """
        request_id = getattr(request.state, 'request_id', 'unknown')

        logger.info(
            f"Redirecting request {request_id} to onboarding",
            extra={
                'request_id': request_id,
                'missing': exc.details.get('missing', []),
            }
        )

        return RedirectResponse(url=exc.redirect_to, status_code=307)

    async def handle_content_store_error(
        self,
        request: Request,
        exc: ContentStoreError
    ) -> JSONResponse:
        """
        Upstream CMS failures. The raw upstream body is only returned in debug.
        """
        request_id = getattr(request.state, 'request_id', 'unknown')

        logger.warning(
            f"Content store failure in request {request_id}: {exc.message}",
            extra={
                'request_id': request_id,
                'error_code': exc.error_code.value,
                'upstream_status': exc.details.get('upstream_status'),
                'request_path': request.url.path,
            }
        )

        self._track_error(exc.error_code.value)

        details = dict(exc.details)
        if not self.expose_upstream_body:
            details.pop('body', None)

        response = self._create_error_response(
            error_code=exc.error_code.value,
            message=exc.message,
            details=details,
            request_id=request_id,
            status_code=exc.status_code
        )
        if exc.status_code in (503, 504):
            response.headers["Retry-After"] = str(self.RETRY_AFTER_SECONDS)
        return response

    async def handle_validation_error(
        self,
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """
        Handle Pydantic validation errors with detailed field information.
        """
        request_id = getattr(request.state, 'request_id', 'unknown')

        validation_errors = []
        for error in exc.errors():
            validation_errors.append({
                'field': '.'.join(str(loc) for loc in error['loc']),
                'message': error['msg'],
                'type': error['type'],
            })

        logger.warning(
            f"Validation error in request {request_id}: {len(validation_errors)} field errors",
            extra={
                'request_id': request_id,
                'validation_errors': validation_errors,
                'request_path': request.url.path
            }
        )

        return self._create_error_response(
            error_code=ErrorCode.VALIDATION_ERROR.value,
            message="Request validation failed",
            details={'validation_errors': validation_errors},
            request_id=request_id,
            status_code=422
        )

    async def handle_http_exception(
        self,
        request: Request,
        exc: StarletteHTTPException
    ) -> JSONResponse:
        """
        Handle HTTP exceptions with proper logging.
        """
        request_id = getattr(request.state, 'request_id', 'unknown')

        error_code_map = {
            400: ErrorCode.VALIDATION_ERROR,
            401: ErrorCode.INVALID_TOKEN,
            404: ErrorCode.NOT_FOUND,
        }
        error_code = error_code_map.get(exc.status_code, ErrorCode.INTERNAL_SERVER_ERROR)

        logger.warning(
            f"HTTP exception in request {request_id}: {exc.status_code} - {exc.detail}",
            extra={
                'request_id': request_id,
                'status_code': exc.status_code,
                'request_path': request.url.path
            }
        )

        return self._create_error_response(
            error_code=error_code.value,
            message=str(exc.detail),
            request_id=request_id,
            status_code=exc.status_code
        )

    async def handle_generic_exception(
        self,
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """
        Handle unexpected exceptions with full error logging.
        """
        request_id = getattr(request.state, 'request_id', 'unknown')

        logger.error(
            f"Unhandled exception in request {request_id}: {exc}",
            exc_info=exc,
            extra={
                'request_id': request_id,
                'exception_type': type(exc).__name__,
                'request_path': request.url.path,
            }
        )

        self._track_error(ErrorCode.INTERNAL_SERVER_ERROR.value)

        return self._create_error_response(
            error_code=ErrorCode.INTERNAL_SERVER_ERROR.value,
            message="An unexpected error occurred",
            request_id=request_id,
            status_code=500
        )

    def _create_error_response(
        self,
        error_code: str,
        message: str,
        request_id: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None
    ) -> JSONResponse:
        """
        Create standardized error response.
        """
        error_response = StandardErrorResponse(
            error_code=error_code,
            message=message,
            details=details,
            request_id=request_id,
        )

        return JSONResponse(
            status_code=status_code,
            content=error_response.model_dump(mode="json")
        )

    def _track_error(self, error_code: str) -> None:
        """
        Track error frequency for monitoring and alerting.
        """
        self.error_counts[error_code] = self.error_counts.get(error_code, 0) + 1
        self.last_error_time[error_code] = time.time()

        if self.error_counts[error_code] % 10 == 0:
            logger.warning(
                f"High frequency error detected: {error_code} occurred {self.error_counts[error_code]} times"
            )

    def get_error_statistics(self) -> Dict[str, Any]:
        """
        Get error statistics for monitoring.
        """
        current_time = time.time()

        return {
            'error_counts': dict(self.error_counts),
            'recent_errors': {
                code: count for code, count in self.error_counts.items()
                if current_time - self.last_error_time.get(code, 0) < 3600  # Last hour
            },
            'total_errors': sum(self.error_counts.values())
        }


# Global error handler instance
error_handler = ErrorHandler()


def setup_error_handlers(app, debug: bool = False):
    """
    Set up all error handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
        debug: Include upstream response bodies in content store errors
    """
    error_handler.expose_upstream_body = debug

    @app.exception_handler(OnboardingRequiredError)
    async def onboarding_required_handler(request: Request, exc: OnboardingRequiredError):
        return await error_handler.handle_onboarding_required(request, exc)

    @app.exception_handler(ContentStoreError)
    async def content_store_error_handler(request: Request, exc: ContentStoreError):
        return await error_handler.handle_content_store_error(request, exc)

    @app.exception_handler(ClassFinderException)
    async def class_finder_exception_handler(request: Request, exc: ClassFinderException):
        return await error_handler.handle_class_finder_exception(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return await error_handler.handle_validation_error(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return await error_handler.handle_http_exception(request, exc)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        return await error_handler.handle_generic_exception(request, exc)
