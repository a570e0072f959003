"""
Preferences Service - loads a user's stored search area
"""
import logging
from typing import Optional

from app.core.exceptions import InvalidLocationError, OnboardingRequiredError
from app.core.validation import (
    ValidationError,
    validate_latitude,
    validate_longitude,
    validate_radius,
)
from app.schemas.classes import Coordinate, UserPreferences
from app.services.content_client import ContentStoreClient
from app.services.queries import USER_PREFERENCES_QUERY

logger = logging.getLogger(__name__)


class PreferencesService:
    """Reads user preferences from the content store"""

    def __init__(
        self,
        content: ContentStoreClient,
        max_radius: float = 100.0,
        onboarding_path: str = "/onboarding",
    ):
        self.content = content
        self.max_radius = max_radius
        self.onboarding_path = onboarding_path

    async def get_user_preferences(self, user_id: Optional[str]) -> Optional[UserPreferences]:
        """
        Get the stored preferences for a user

        Args:
            user_id: Auth provider user ID, or None for anonymous requests

        Returns:
            UserPreferences or None when the user has no profile
        """
        if not user_id:
            return None

        data = await self.content.fetch(USER_PREFERENCES_QUERY, {"clerkId": user_id})
        if not data:
            return None
        return UserPreferences.model_validate(data)

    def require_search_area(self, prefs: Optional[UserPreferences]) -> tuple[Coordinate, float]:
        """
        Return (location, radius) or fail when the user must finish onboarding.

        Raises:
            OnboardingRequiredError: Location or radius is missing
            InvalidLocationError: Stored values are out of range
        """
        missing = []
        if prefs is None or prefs.location is None:
            missing.append("location")
        if prefs is None or not prefs.search_radius:
            missing.append("search_radius")
        if missing:
            raise OnboardingRequiredError(missing, redirect_to=self.onboarding_path)

        try:
            validate_latitude(prefs.location.lat)
            validate_longitude(prefs.location.lng)
            validate_radius(prefs.search_radius, self.max_radius)
        except ValidationError as e:
            logger.warning(f"Stored search area rejected: {e}")
            raise InvalidLocationError(
                str(e),
                details={
                    "lat": prefs.location.lat,
                    "lng": prefs.location.lng,
                    "search_radius": prefs.search_radius,
                },
            ) from e

        return prefs.location, prefs.search_radius
