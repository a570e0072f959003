"""
Metrics endpoint for observability and monitoring.
"""

from fastapi import APIRouter

from app.core.metrics import get_metrics_snapshot
from app.schemas.base import Envelope

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("", response_model=Envelope[dict])
async def get_metrics():
    """Latency percentiles and counters collected since startup."""
    return Envelope(status="ok", data=get_metrics_snapshot())
