"""
Classes API endpoints - classes listing filtered by the user's search area
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import get_classes_service, get_current_user_id
from app.core.metrics import record_latency
from app.core.validation import parse_multi_value
from app.schemas.base import Envelope
from app.schemas.classes import ClassesPage, ClassFilters
from app.services.classes_service import ClassesService

router = APIRouter(prefix="/classes", tags=["classes"])


@router.get("", response_model=Envelope[ClassesPage])
async def list_classes(
    q: Optional[str] = Query(None, description="Free-text search"),
    venue: Optional[str] = Query(None, description="Venue ID"),
    category: Optional[str] = Query(None, description="Comma-separated category IDs"),
    tier: Optional[str] = Query(None, description="Comma-separated tier levels"),
    user_id: Optional[str] = Depends(get_current_user_id),
    service: ClassesService = Depends(get_classes_service),
):
    """
    Upcoming class sessions within the user's search radius

    - **q**: Search activities, instructors and categories (ignores other filters)
    - **venue**: Only sessions at this venue
    - **category**: Category IDs, e.g. `yoga,pilates`
    - **tier**: Membership tier levels, e.g. `basic,premium`

    Users without a saved location and radius are redirected to onboarding.
    """
    filters = ClassFilters(
        search_query=q.strip() if q and q.strip() else None,
        venue_id=venue or None,
        category_ids=parse_multi_value(category),
        tier_levels=parse_multi_value(tier),
    )
    with record_latency("classes_page"):
        page = await service.get_classes_page(user_id, filters)
    return Envelope(status="ok", data=page)
