import pytest
from fastapi.testclient import TestClient

from app.core import metrics
from app.main import app


@pytest.fixture(autouse=True)
def clean_metrics():
    metrics.reset_metrics()
    yield
    metrics.reset_metrics()


def test_record_latency_and_counters():
    for _ in range(3):
        with metrics.record_latency("classes_page"):
            pass
    metrics.increment("content_store.cache_hit")
    metrics.increment("content_store.cache_hit", 2)

    snapshot = metrics.get_metrics_snapshot()

    assert snapshot["latency"]["classes_page"]["count"] == 3
    assert snapshot["latency"]["classes_page"]["p95_ms"] >= 0
    assert snapshot["counters"] == {"content_store.cache_hit": 3}


def test_latency_recorded_when_block_raises():
    with pytest.raises(RuntimeError):
        with metrics.record_latency("content_store.query"):
            raise RuntimeError("boom")

    assert metrics.get_metrics_snapshot()["latency"]["content_store.query"]["count"] == 1


def test_metrics_endpoint_is_public():
    metrics.increment("content_store.error")

    r = TestClient(app).get("/metrics")

    assert r.status_code == 200
    assert r.json()["data"]["counters"]["content_store.error"] == 1
