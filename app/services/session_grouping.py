"""Day grouping and venue extraction for distance-filtered sessions."""
from datetime import datetime, tzinfo
from typing import Iterable, Sequence, Union
from zoneinfo import ZoneInfo

from app.schemas.classes import DayGroup, SessionWithDistance, Venue


def day_key(start_time: datetime, tz: Union[str, tzinfo] = "UTC") -> str:
    """Calendar day of ``start_time`` as YYYY-MM-DD in ``tz``.

    Naive datetimes are taken to already be in the display zone.
    """
    if start_time.tzinfo is not None:
        zone = ZoneInfo(tz) if isinstance(tz, str) else tz
        start_time = start_time.astimezone(zone)
    return start_time.strftime("%Y-%m-%d")


def group_sessions_by_day(
    sessions: Iterable[SessionWithDistance],
    tz: Union[str, tzinfo] = "UTC",
) -> dict[str, list[SessionWithDistance]]:
    """
    Bucket sessions by calendar day.

    Keys follow the order in which each day first appears in ``sessions``
    and are not re-sorted by date. Within a day, sessions keep their input
    order.
    """
    grouped: dict[str, list[SessionWithDistance]] = {}
    for session in sessions:
        # start_time is always set after the distance filter
        grouped.setdefault(day_key(session.start_time, tz), []).append(session)
    return grouped


def to_day_groups(grouped: dict[str, list[SessionWithDistance]]) -> list[DayGroup]:
    return [DayGroup(date=date, sessions=items) for date, items in grouped.items()]


def extract_venues(sessions: Sequence[SessionWithDistance]) -> list[Venue]:
    """Distinct venues in first-seen order, deduplicated by venue id."""
    seen: set[str] = set()
    venues: list[Venue] = []
    for session in sessions:
        venue = session.venue
        if venue is None or venue.id in seen:
            continue
        seen.add(venue.id)
        venues.append(venue)
    return venues
