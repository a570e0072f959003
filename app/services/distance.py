"""
Geographic helpers for the classes listing.

The listing narrows sessions in two steps. ``get_bounding_box`` produces a
cheap rectangular prefilter that the content store applies server-side;
``filter_sessions_by_distance`` then enforces the true circular radius with
the haversine formula and orders what is left by distance.
"""
import logging
import math
from typing import Iterable

from app.config.settings import DistanceUnit
from app.schemas.classes import BoundingBox, SessionRecord, SessionWithDistance

logger = logging.getLogger(__name__)

# Mean Earth radius per unit
EARTH_RADIUS = {
    DistanceUnit.MILES: 3958.8,
    DistanceUnit.KILOMETERS: 6371.0,
}

# Floor for cos(latitude) so the longitude span stays finite at the poles
COS_LAT_EPSILON = 1e-12


def degrees_per_unit(unit: DistanceUnit = DistanceUnit.MILES) -> float:
    """Degrees of latitude spanned by one distance unit (~1/69 for miles)."""
    return 180.0 / (math.pi * EARTH_RADIUS[unit])


def haversine_distance(
    lat1: float,
    lng1: float,
    lat2: float,
    lng2: float,
    unit: DistanceUnit = DistanceUnit.MILES,
) -> float:
    """Great-circle distance between two points, in ``unit``."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi, dlam = math.radians(lat2 - lat1), math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    # out-of-range coordinates can push a outside [0, 1]
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS[unit] * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def get_bounding_box(
    lat: float,
    lng: float,
    radius: float,
    unit: DistanceUnit = DistanceUnit.MILES,
) -> BoundingBox:
    """
    Rectangle that fully contains the circle of ``radius`` around (lat, lng).

    The latitude delta is the radius converted at a constant degrees-per-unit
    rate. The longitude delta grows as meridians converge away from the
    equator: asin(sin(d) / cos(lat)), which is d / cos(lat) for small
    radii and never smaller. When the circle reaches a pole, or the box
    would wrap across the antimeridian, longitude widens to the full range.

    Args:
        lat: Centre latitude in degrees
        lng: Centre longitude in degrees
        radius: Search radius in ``unit``
        unit: Distance unit of ``radius``

    Returns:
        BoundingBox with latitudes clamped to [-90, 90] and
        longitudes within [-180, 180]
    """
    radius = max(radius, 0.0)
    lat_delta = radius * degrees_per_unit(unit)
    min_lat = lat - lat_delta
    max_lat = lat + lat_delta

    if max_lat >= 90.0 or min_lat <= -90.0:
        return BoundingBox(
            min_lat=max(min_lat, -90.0),
            max_lat=min(max_lat, 90.0),
            min_lng=-180.0,
            max_lng=180.0,
        )

    angular = radius / EARTH_RADIUS[unit]
    cos_lat = max(math.cos(math.radians(lat)), COS_LAT_EPSILON)
    ratio = math.sin(min(angular, math.pi / 2)) / cos_lat
    if ratio >= 1.0:
        min_lng, max_lng = -180.0, 180.0
    else:
        lng_delta = math.degrees(math.asin(ratio))
        min_lng, max_lng = lng - lng_delta, lng + lng_delta
        if min_lng < -180.0 or max_lng > 180.0:
            min_lng, max_lng = -180.0, 180.0

    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)


def filter_sessions_by_distance(
    sessions: Iterable[SessionRecord],
    user_lat: float,
    user_lng: float,
    radius: float,
    unit: DistanceUnit = DistanceUnit.MILES,
) -> list[SessionWithDistance]:
    """
    Keep sessions whose venue lies within ``radius`` of the user.

    Sessions without a start time, a venue, or a venue location cannot be
    placed and are dropped. The result is sorted by distance ascending;
    equal distances keep their input order.
    """
    kept: list[SessionWithDistance] = []
    skipped = 0
    for session in sessions:
        if session.start_time is None or session.venue is None or session.venue.location is None:
            skipped += 1
            continue

        location = session.venue.location
        distance = haversine_distance(user_lat, user_lng, location.lat, location.lng, unit)
        if distance <= radius:
            kept.append(SessionWithDistance.model_validate(
                {**session.model_dump(exclude={"distance"}), "distance": distance}
            ))

    logger.debug(
        f"Distance filter kept {len(kept)} sessions within {radius} {unit.value}",
        extra={"kept": len(kept), "skipped_unplaceable": skipped},
    )
    return sorted(kept, key=lambda s: s.distance)
