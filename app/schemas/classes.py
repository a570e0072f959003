"""
Class listing schemas: venues, sessions and the composed classes page.

Records arriving from the content store use its field names (``_id``,
``startTime``); responses are serialized with snake_case field names.
"""
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.config.settings import DistanceUnit


class Coordinate(BaseModel):
    """A latitude/longitude pair in decimal degrees."""
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class BoundingBox(BaseModel):
    """Axis-aligned lat/lng rectangle used as a query prefilter."""
    model_config = ConfigDict(frozen=True)

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return (
            self.min_lat <= lat <= self.max_lat
            and self.min_lng <= lng <= self.max_lng
        )


class CategoryRef(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: str


class Category(CategoryRef):
    slug: Optional[str] = None


class Activity(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: Optional[str] = None
    instructor: Optional[str] = None
    duration: Optional[int] = None
    tier_level: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("tierLevel", "tier_level")
    )
    category: Optional[CategoryRef] = None


class Venue(BaseModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    name: Optional[str] = None
    location: Optional[Coordinate] = None


class SessionRecord(BaseModel):
    """A scheduled class occurrence as returned by the sessions queries."""
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    start_time: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("startTime", "start_time")
    )
    max_capacity: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("maxCapacity", "max_capacity")
    )
    status: Optional[str] = None
    activity: Optional[Activity] = None
    venue: Optional[Venue] = None


class SessionWithDistance(SessionRecord):
    """Session annotated with its distance from the user, in the search unit."""
    distance: float


class DayGroup(BaseModel):
    date: str
    sessions: list[SessionWithDistance]


class UserPreferences(BaseModel):
    location: Optional[Coordinate] = None
    search_radius: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("searchRadius", "search_radius")
    )


class ClassFilters(BaseModel):
    """Listing filters parsed from the query string."""
    search_query: Optional[str] = None
    venue_id: Optional[str] = None
    category_ids: list[str] = []
    tier_levels: list[str] = []

    @property
    def active_filter_count(self) -> int:
        return (1 if self.venue_id else 0) + len(self.category_ids) + len(self.tier_levels)


class SearchArea(BaseModel):
    center: Coordinate
    radius: float
    unit: DistanceUnit
    bounding_box: BoundingBox


class ClassesPage(BaseModel):
    """Everything the classes listing needs to render."""
    day_groups: list[DayGroup]
    venues: list[Venue]
    categories: list[Category]
    booked_session_ids: list[str]
    venue_name: Optional[str] = None
    active_filter_count: int = 0
    search_query: Optional[str] = None
    search_area: SearchArea
    total_sessions: int = 0
