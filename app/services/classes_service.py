"""
Classes Service - composes the classes listing page

Upstream fetches run concurrently; the geographic pipeline only starts once
all of them have resolved.
"""
import asyncio
import logging
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from app.config.settings import DistanceUnit
from app.core.metrics import increment
from app.schemas.classes import (
    BoundingBox,
    Category,
    ClassesPage,
    ClassFilters,
    SearchArea,
    SessionRecord,
)
from app.services.content_client import ContentStoreClient
from app.services.distance import filter_sessions_by_distance, get_bounding_box
from app.services.preferences_service import PreferencesService
from app.services.queries import (
    CATEGORIES_QUERY,
    FILTERED_SESSIONS_QUERY,
    SEARCH_SESSIONS_QUERY,
    USER_BOOKED_SESSION_IDS_QUERY,
    VENUE_NAME_BY_ID_QUERY,
)
from app.services.session_grouping import (
    extract_venues,
    group_sessions_by_day,
    to_day_groups,
)

logger = logging.getLogger(__name__)


async def _resolved(value):
    return value


def _parse_sessions(raw: Iterable[Any]) -> list[SessionRecord]:
    """Validate records one by one; malformed ones are logged and skipped."""
    sessions = []
    for doc in raw:
        try:
            sessions.append(SessionRecord.model_validate(doc))
        except ValidationError as e:
            session_id = doc.get("_id") if isinstance(doc, dict) else None
            logger.warning(
                f"Skipping malformed session {session_id}: {e.error_count()} validation errors",
                extra={"session_id": session_id, "errors": e.errors(include_url=False)},
            )
            increment("classes.invalid_session")
    return sessions


class ClassesService:
    """Builds the classes listing for one request"""

    def __init__(
        self,
        content: ContentStoreClient,
        preferences: PreferencesService,
        unit: DistanceUnit = DistanceUnit.MILES,
        grouping_timezone: str = "UTC",
        categories_cache_ttl: int = 0,
    ):
        self.content = content
        self.preferences = preferences
        self.unit = unit
        self.grouping_timezone = grouping_timezone
        self.categories_cache_ttl = categories_cache_ttl

    def _sessions_query(self, filters: ClassFilters, box: BoundingBox):
        box_params = {
            "minLat": box.min_lat,
            "maxLat": box.max_lat,
            "minLng": box.min_lng,
            "maxLng": box.max_lng,
        }
        if filters.search_query:
            return self.content.fetch(
                SEARCH_SESSIONS_QUERY,
                {"searchTerm": f"{filters.search_query}*", **box_params},
            )
        return self.content.fetch(
            FILTERED_SESSIONS_QUERY,
            {
                "venueId": filters.venue_id or "",
                "categoryIds": filters.category_ids,
                "tierLevels": filters.tier_levels,
                **box_params,
            },
        )

    async def get_classes_page(self, user_id: Optional[str], filters: ClassFilters) -> ClassesPage:
        """
        Build the classes page for a user

        Args:
            user_id: Auth provider user ID (None when anonymous)
            filters: Search term and listing filters

        Returns:
            ClassesPage with sessions grouped by day and venues for the map

        Raises:
            OnboardingRequiredError: The user has no search area yet
            ContentStoreError: Any upstream query failed
        """
        prefs = await self.preferences.get_user_preferences(user_id)
        location, radius = self.preferences.require_search_area(prefs)

        box = get_bounding_box(location.lat, location.lng, radius, self.unit)

        sessions_raw, categories_raw, booked_raw, venue_raw = await asyncio.gather(
            self._sessions_query(filters, box),
            self.content.fetch(CATEGORIES_QUERY, cache_ttl=self.categories_cache_ttl or None),
            (
                self.content.fetch(USER_BOOKED_SESSION_IDS_QUERY, {"clerkId": user_id})
                if user_id else _resolved([])
            ),
            (
                self.content.fetch(VENUE_NAME_BY_ID_QUERY, {"venueId": filters.venue_id})
                if filters.venue_id else _resolved(None)
            ),
        )

        sessions = _parse_sessions(sessions_raw or [])
        scheduled = [s for s in sessions if s.start_time is not None]

        within_radius = filter_sessions_by_distance(
            scheduled, location.lat, location.lng, radius, self.unit
        )
        grouped = group_sessions_by_day(within_radius, self.grouping_timezone)

        booked_ids = sorted({sid for sid in (booked_raw or []) if sid is not None})

        logger.info(
            f"Classes page: {len(within_radius)}/{len(sessions)} sessions within {radius} {self.unit.value}",
            extra={
                "user_id": user_id,
                "bounding_box": box.model_dump(),
                "active_filters": filters.active_filter_count,
                "day_count": len(grouped),
            },
        )

        return ClassesPage(
            day_groups=to_day_groups(grouped),
            venues=extract_venues(within_radius),
            categories=[Category.model_validate(c) for c in categories_raw or []],
            booked_session_ids=booked_ids,
            venue_name=(venue_raw or {}).get("name"),
            active_filter_count=filters.active_filter_count,
            search_query=filters.search_query,
            search_area=SearchArea(center=location, radius=radius, unit=self.unit, bounding_box=box),
            total_sessions=len(within_radius),
        )
