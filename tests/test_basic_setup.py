"""
Basic test to verify the project setup is working correctly.
"""

import pytest
from fastapi.testclient import TestClient
from app.main import app
from app.core.dependencies import ServiceContainer
from app.config import get_settings


def test_app_creation():
    """Test that the FastAPI app can be created successfully."""
    assert app is not None
    assert app.title == "Class Finder Backend"


def test_root_endpoint():
    """Test the root endpoint returns expected response."""
    client = TestClient(app)
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert "message" in data
    assert "version" in data
    assert data["status"] == "running"


def test_health_without_container_is_unhealthy():
    """Without the lifespan the container is never built."""
    client = TestClient(app)
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "unhealthy"


def test_service_container_requires_initialization():
    container = ServiceContainer(get_settings())
    assert not container.is_initialized
    with pytest.raises(RuntimeError):
        container.get_classes_service()


@pytest.mark.asyncio
async def test_service_container_lifecycle():
    """Services are wired without touching the network while Redis is disabled."""
    settings = get_settings().model_copy(deep=True)
    settings.redis.enabled = False
    container = ServiceContainer(settings)

    await container.initialize_services()
    try:
        assert container.is_initialized
        service = container.get_classes_service()
        assert service.content is container.get_content_client()
        assert service.unit == settings.search.distance_unit
        assert container.get_cache_client().is_connected is False
    finally:
        await container.cleanup_services()

    assert not container.is_initialized


if __name__ == "__main__":
    pytest.main([__file__])
