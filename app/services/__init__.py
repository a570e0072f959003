# Business logic services

from .content_client import ContentStoreClient, create_write_client
from .distance import filter_sessions_by_distance, get_bounding_box, haversine_distance
from .session_grouping import extract_venues, group_sessions_by_day
from .preferences_service import PreferencesService
from .classes_service import ClassesService

__all__ = [
    'ContentStoreClient',
    'create_write_client',
    'get_bounding_box',
    'haversine_distance',
    'filter_sessions_by_distance',
    'group_sessions_by_day',
    'extract_venues',
    'PreferencesService',
    'ClassesService',
]
