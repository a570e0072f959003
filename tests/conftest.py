"""
Shared fixtures: session record factories and an in-memory content store.
"""
import pytest

from app.schemas.classes import SessionRecord
from app.services.queries import (
    CATEGORIES_QUERY,
    FILTERED_SESSIONS_QUERY,
    SEARCH_SESSIONS_QUERY,
    USER_BOOKED_SESSION_IDS_QUERY,
    USER_PREFERENCES_QUERY,
    VENUE_NAME_BY_ID_QUERY,
)

# Downtown Austin
USER_LAT = 30.2672
USER_LNG = -97.7431

# One degree of latitude is ~69.09 miles at the mean Earth radius
MILES_PER_DEGREE_LAT = 69.09


def venue_doc(venue_id: str, lat_offset_miles: float, name: str | None = None) -> dict:
    """Venue document due north of the user by ``lat_offset_miles``."""
    return {
        "_id": venue_id,
        "name": name or f"Venue {venue_id}",
        "location": {"lat": USER_LAT + lat_offset_miles / MILES_PER_DEGREE_LAT, "lng": USER_LNG},
    }


def session_doc(session_id: str, start_time: str | None, venue: dict | None) -> dict:
    return {
        "_id": session_id,
        "startTime": start_time,
        "maxCapacity": 20,
        "status": "scheduled",
        "activity": {
            "_id": f"activity-{session_id}",
            "name": "Vinyasa Flow",
            "instructor": "Sam Lee",
            "duration": 60,
            "tierLevel": "basic",
            "category": {"_id": "cat-yoga", "name": "Yoga"},
        },
        "venue": venue,
    }


@pytest.fixture
def make_session(session_docs):
    def _make(session_id, start_time="2025-03-01T09:00:00Z", miles=1.0, venue_id=None):
        return SessionRecord.model_validate(session_docs(session_id, start_time, miles, venue_id))
    return _make


class FakeContentStore:
    """Answers the listing queries from canned data and records every call."""

    def __init__(
        self,
        sessions=None,
        categories=None,
        booked_ids=None,
        venue_name=None,
        preferences=None,
    ):
        self.sessions = sessions or []
        self.categories = categories or []
        self.booked_ids = booked_ids or []
        self.venue_name = venue_name
        self.preferences = preferences
        self.calls = []

    async def fetch(self, query, params=None, cache_ttl=None):
        self.calls.append((query, params or {}))
        if query == USER_PREFERENCES_QUERY:
            return self.preferences
        if query in (FILTERED_SESSIONS_QUERY, SEARCH_SESSIONS_QUERY):
            return self.sessions
        if query == CATEGORIES_QUERY:
            return self.categories
        if query == USER_BOOKED_SESSION_IDS_QUERY:
            return self.booked_ids
        if query == VENUE_NAME_BY_ID_QUERY:
            return {"name": self.venue_name} if self.venue_name else None
        raise AssertionError(f"unexpected query: {query}")

    def queries(self):
        return [query for query, _ in self.calls]

    def params_for(self, query):
        return next(params for q, params in self.calls if q == query)


@pytest.fixture
def fake_content_store():
    return FakeContentStore


@pytest.fixture
def session_docs():
    """Factory for raw session documents as the sessions queries return them."""
    def _make(session_id, start_time="2025-03-01T09:00:00Z", miles=1.0, venue_id=None, venue_name=None):
        venue = (
            venue_doc(venue_id or f"venue-{session_id}", miles, venue_name)
            if miles is not None else None
        )
        return session_doc(session_id, start_time, venue)
    return _make


@pytest.fixture
def user_location():
    return USER_LAT, USER_LNG


@pytest.fixture
def default_preferences():
    return {"location": {"lat": USER_LAT, "lng": USER_LNG}, "searchRadius": 4}
