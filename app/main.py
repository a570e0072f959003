"""
FastAPI application setup with dependency injection.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
from datetime import datetime, timezone
from contextlib import asynccontextmanager

from app.config import get_settings
from app.core.logging import configure_logging
from app.core.dependencies import ServiceContainer
from app.core.error_handlers import setup_error_handlers
from app.middleware import AuthenticationMiddleware, RequestContextMiddleware

# Get application settings
settings = get_settings()

configure_logging(settings.log_level.value, settings.log_format)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management with service container.
    Builds the shared clients on startup and releases them on shutdown.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    service_container = ServiceContainer(settings)
    try:
        await service_container.initialize_services()
        app.state.service_container = service_container
        logger.info("Application startup complete")

        yield

    except Exception as e:
        logger.error(f"Application startup failed: {e}", exc_info=True)
        raise

    finally:
        logger.info("Shutting down application")
        await service_container.cleanup_services()
        logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan
    )

    # Last added runs outermost: CORS -> request context -> authentication
    app.add_middleware(AuthenticationMiddleware, auth_settings=settings.auth)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        **settings.get_cors_config()
    )

    setup_error_handlers(app, debug=settings.debug)

    from app.api import classes_router, metrics_router
    app.include_router(classes_router)
    app.include_router(metrics_router)

    @app.get("/")
    async def root():
        """Root endpoint for basic health check."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        """Health check with service container and cache status."""
        from app.core.error_handlers import error_handler

        container = getattr(app.state, "service_container", None)
        if container is None or not container.is_initialized:
            return {
                "status": "unhealthy",
                "message": "Service container not initialized",
                "version": settings.app_version,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }

        cache = container.get_cache_client()
        if not cache.enabled:
            cache_status = "disabled"
        else:
            cache_status = "healthy" if cache.is_connected else "degraded"

        return {
            "status": "healthy",
            "version": settings.app_version,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "details": {
                "content_store": {
                    "project_id": settings.content.project_id or None,
                    "dataset": settings.content.dataset,
                    "write_token": bool(container.get_write_client().token),
                },
                "cache": {"status": cache_status},
            },
            "error_statistics": error_handler.get_error_statistics(),
        }

    return app


# Create application instance
app = create_app()
