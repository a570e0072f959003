"""
Input validation utilities for search parameters
"""
from typing import Optional


class ValidationError(Exception):
    """Custom validation error"""
    pass


def validate_latitude(lat: float) -> float:
    """
    Validate latitude coordinate

    Args:
        lat: Latitude value

    Returns:
        Validated latitude

    Raises:
        ValidationError: If latitude is out of range
    """
    if not -90.0 <= lat <= 90.0:
        raise ValidationError(f"Latitude {lat} out of range (must be between -90 and 90)")

    return lat


def validate_longitude(lon: float) -> float:
    """
    Validate longitude coordinate

    Args:
        lon: Longitude value

    Returns:
        Validated longitude

    Raises:
        ValidationError: If longitude is out of range
    """
    if not -180.0 <= lon <= 180.0:
        raise ValidationError(f"Longitude {lon} out of range (must be between -180 and 180)")

    return lon


def validate_radius(radius: float, max_radius: float = 100.0) -> float:
    """
    Validate search radius (in the configured distance unit)

    Args:
        radius: Search radius
        max_radius: Maximum allowed radius

    Returns:
        Validated radius

    Raises:
        ValidationError: If radius is invalid
    """
    if radius <= 0:
        raise ValidationError("Radius must be positive")

    if radius > max_radius:
        raise ValidationError(f"Radius {radius} cannot exceed {max_radius}")

    return radius


def parse_multi_value(raw: Optional[str]) -> list[str]:
    """Split a comma-separated query parameter, dropping empty items."""
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]
