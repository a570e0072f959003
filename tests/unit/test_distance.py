"""
Unit tests for the bounding box prefilter and the haversine distance filter
"""
import math

import pytest
from pydantic import ValidationError

from app.config.settings import DistanceUnit
from app.services.distance import (
    EARTH_RADIUS,
    degrees_per_unit,
    filter_sessions_by_distance,
    get_bounding_box,
    haversine_distance,
)


def destination(lat, lng, bearing_deg, distance, unit=DistanceUnit.MILES):
    """Point reached travelling ``distance`` from (lat, lng) along a great circle."""
    d = distance / EARTH_RADIUS[unit]
    phi1, lam1, theta = math.radians(lat), math.radians(lng), math.radians(bearing_deg)
    phi2 = math.asin(math.sin(phi1) * math.cos(d) + math.cos(phi1) * math.sin(d) * math.cos(theta))
    lam2 = lam1 + math.atan2(
        math.sin(theta) * math.sin(d) * math.cos(phi1),
        math.cos(d) - math.sin(phi1) * math.sin(phi2),
    )
    lng2 = (math.degrees(lam2) + 540) % 360 - 180
    return math.degrees(phi2), lng2


class TestHaversine:
    """Great-circle distance"""

    def test_zero_distance(self):
        assert haversine_distance(30.0, -97.0, 30.0, -97.0) == 0.0

    def test_one_degree_of_latitude(self):
        dist = haversine_distance(0.0, 0.0, 1.0, 0.0)
        assert dist == pytest.approx(69.09, abs=0.01)

    def test_kilometers(self):
        dist = haversine_distance(0.0, 0.0, 1.0, 0.0, DistanceUnit.KILOMETERS)
        assert dist == pytest.approx(111.19, abs=0.01)

    def test_known_city_pair(self):
        # Austin to Dallas is roughly 182 miles as the crow flies
        dist = haversine_distance(30.2672, -97.7431, 32.7767, -96.7970)
        assert 175 < dist < 190

    def test_symmetric(self):
        a = haversine_distance(51.5, -0.12, 48.85, 2.35)
        b = haversine_distance(48.85, 2.35, 51.5, -0.12)
        assert a == pytest.approx(b)

    def test_out_of_range_coordinates_do_not_raise(self):
        dist = haversine_distance(95.0, 200.0, -120.0, -400.0)
        assert math.isfinite(dist)
        assert dist >= 0


class TestBoundingBox:
    """Rectangular prefilter around the search circle"""

    def test_latitude_delta_uses_constant_degrees_per_mile(self):
        box = get_bounding_box(30.0, -97.0, 10)
        delta = 10 * degrees_per_unit(DistanceUnit.MILES)
        assert box.min_lat == pytest.approx(30.0 - delta)
        assert box.max_lat == pytest.approx(30.0 + delta)
        assert delta == pytest.approx(10 / 69.09, rel=1e-3)

    def test_longitude_widens_away_from_equator(self):
        equator = get_bounding_box(0.0, 0.0, 25)
        north = get_bounding_box(60.0, 0.0, 25)
        equator_span = equator.max_lng - equator.min_lng
        north_span = north.max_lng - north.min_lng
        # cos(60) = 0.5
        assert north_span == pytest.approx(2 * equator_span, rel=1e-3)

    @pytest.mark.parametrize("lat,lng", [
        (0.0, 0.0),
        (30.2672, -97.7431),
        (-33.87, 151.21),
        (64.14, -21.94),
        (78.22, 15.65),
        (-85.0, 45.0),
    ])
    @pytest.mark.parametrize("radius", [0.5, 5, 25, 100, 500])
    def test_contains_every_point_within_radius(self, lat, lng, radius):
        box = get_bounding_box(lat, lng, radius)
        for bearing in range(0, 360, 15):
            for fraction in (0.5, 0.999):
                p_lat, p_lng = destination(lat, lng, bearing, radius * fraction)
                assert haversine_distance(lat, lng, p_lat, p_lng) <= radius
                assert box.contains(p_lat, p_lng), (bearing, fraction, p_lat, p_lng, box)

    def test_near_pole_span_stays_finite(self):
        box = get_bounding_box(89.0, 10.0, 50)
        for value in (box.min_lat, box.max_lat, box.min_lng, box.max_lng):
            assert math.isfinite(value)
        assert -180.0 <= box.min_lng < box.max_lng <= 180.0
        assert box.max_lat <= 90.0

    def test_circle_reaching_pole_covers_all_longitudes(self):
        box = get_bounding_box(89.8, 10.0, 50)
        assert box.max_lat == 90.0
        assert (box.min_lng, box.max_lng) == (-180.0, 180.0)

    def test_exact_pole(self):
        box = get_bounding_box(90.0, 0.0, 10)
        assert box.max_lat == 90.0
        assert (box.min_lng, box.max_lng) == (-180.0, 180.0)

    def test_antimeridian_widens_to_full_range(self):
        box = get_bounding_box(0.0, 179.9, 20)
        assert (box.min_lng, box.max_lng) == (-180.0, 180.0)

    def test_zero_radius_is_degenerate_box(self):
        box = get_bounding_box(30.0, -97.0, 0)
        assert box.min_lat == box.max_lat == 30.0
        assert box.min_lng == box.max_lng == -97.0

    def test_box_is_immutable(self):
        box = get_bounding_box(30.0, -97.0, 5)
        with pytest.raises(ValidationError):
            box.min_lat = 0.0


class TestFilterSessionsByDistance:
    """Precise radius filter"""

    def test_drops_outside_and_sorts_by_distance(self, make_session, user_location):
        sessions = [
            make_session("three", miles=3),
            make_session("one", miles=1),
            make_session("five", miles=5),
        ]
        result = filter_sessions_by_distance(sessions, *user_location, radius=4)
        assert [s.id for s in result] == ["one", "three"]
        assert result[0].distance == pytest.approx(1.0, abs=0.01)
        assert result[1].distance == pytest.approx(3.0, abs=0.01)

    def test_equal_distances_keep_input_order(self, make_session, user_location):
        sessions = [
            make_session("b", miles=2, venue_id="shared"),
            make_session("a", miles=2, venue_id="shared"),
            make_session("near", miles=1),
            make_session("c", miles=2, venue_id="shared"),
        ]
        result = filter_sessions_by_distance(sessions, *user_location, radius=10)
        assert [s.id for s in result] == ["near", "b", "a", "c"]

    def test_excludes_sessions_without_start_time_or_venue(self, make_session, user_location):
        sessions = [
            make_session("no-start", start_time=None),
            make_session("no-venue", miles=None),
            make_session("ok"),
        ]
        result = filter_sessions_by_distance(sessions, *user_location, radius=10)
        assert [s.id for s in result] == ["ok"]

    def test_excludes_venue_without_location(self, make_session, user_location):
        session = make_session("unplaced")
        session.venue.location = None
        assert filter_sessions_by_distance([session], *user_location, radius=10) == []

    def test_output_is_subset_within_radius(self, make_session, user_location):
        sessions = [make_session(f"s{i}", miles=i * 0.7) for i in range(12)]
        radius = 4.2
        result = filter_sessions_by_distance(sessions, *user_location, radius=radius)
        input_ids = {s.id for s in sessions}
        for s in result:
            assert s.id in input_ids
            location = s.venue.location
            assert haversine_distance(*user_location, location.lat, location.lng) <= radius + 1e-6
        distances = [s.distance for s in result]
        assert distances == sorted(distances)

    def test_does_not_mutate_input(self, make_session, user_location):
        sessions = [make_session("far", miles=3), make_session("near", miles=1)]
        filter_sessions_by_distance(sessions, *user_location, radius=10)
        assert [s.id for s in sessions] == ["far", "near"]
        assert not hasattr(sessions[0], "distance")

    def test_empty_input(self, user_location):
        assert filter_sessions_by_distance([], *user_location, radius=5) == []

    def test_kilometers(self, make_session, user_location):
        # 3 miles is ~4.8 km
        sessions = [make_session("three-miles", miles=3)]
        assert filter_sessions_by_distance(
            sessions, *user_location, radius=4, unit=DistanceUnit.KILOMETERS
        ) == []
        kept = filter_sessions_by_distance(
            sessions, *user_location, radius=5, unit=DistanceUnit.KILOMETERS
        )
        assert kept[0].distance == pytest.approx(4.83, abs=0.01)
