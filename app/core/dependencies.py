"""
Dependency injection setup for FastAPI.
Builds the shared clients once at startup and hands them to request handlers.
"""

from fastapi import Request
from typing import Optional
import logging
import asyncio

from app.config.settings import Settings
from app.core.cache_client import CacheClient
from app.services.classes_service import ClassesService
from app.services.content_client import ContentStoreClient, create_write_client
from app.services.preferences_service import PreferencesService


logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for the application's long-lived clients and services.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._cache_client: Optional[CacheClient] = None
        self._content_client: Optional[ContentStoreClient] = None
        self._write_client: Optional[ContentStoreClient] = None
        self._preferences_service: Optional[PreferencesService] = None
        self._classes_service: Optional[ClassesService] = None
        self._initialized = False
        self._initialization_lock = asyncio.Lock()

    async def initialize_services(self) -> None:
        """
        Initialize all services with proper dependency order.
        """
        async with self._initialization_lock:
            if self._initialized:
                return

            logger.info("Initializing service container")

            self._cache_client = CacheClient(self.settings.redis, namespace=self.settings.content.dataset)
            await self._cache_client.connect()

            self._content_client = ContentStoreClient(self.settings.content, cache=self._cache_client)
            self._write_client = create_write_client(self.settings.content)

            search = self.settings.search
            self._preferences_service = PreferencesService(
                self._content_client,
                max_radius=search.max_radius,
                onboarding_path=search.onboarding_path,
            )
            self._classes_service = ClassesService(
                self._content_client,
                self._preferences_service,
                unit=search.distance_unit,
                grouping_timezone=search.grouping_timezone,
                categories_cache_ttl=search.categories_cache_ttl_seconds,
            )

            self._initialized = True
            logger.info("Service container initialized")

    async def cleanup_services(self) -> None:
        """Release connections held by the container."""
        if self._cache_client:
            await self._cache_client.disconnect()
        self._initialized = False
        logger.info("Service container cleaned up")

    def _require(self, service):
        if not self._initialized or service is None:
            raise RuntimeError("Service container not initialized")
        return service

    def get_cache_client(self) -> CacheClient:
        return self._require(self._cache_client)

    def get_content_client(self) -> ContentStoreClient:
        return self._require(self._content_client)

    def get_write_client(self) -> ContentStoreClient:
        return self._require(self._write_client)

    def get_classes_service(self) -> ClassesService:
        return self._require(self._classes_service)

    @property
    def is_initialized(self) -> bool:
        return self._initialized


def get_service_container(request: Request) -> ServiceContainer:
    """FastAPI dependency for the container stored on app state."""
    container = getattr(request.app.state, "service_container", None)
    if container is None:
        raise RuntimeError("Service container not initialized")
    return container


def get_classes_service(request: Request) -> ClassesService:
    """FastAPI dependency for the classes service."""
    return get_service_container(request).get_classes_service()


def get_current_user_id(request: Request) -> Optional[str]:
    """User ID resolved by the authentication middleware, None if anonymous."""
    return getattr(request.state, "user_id", None)
