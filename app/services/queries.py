"""GROQ queries used by the classes listing."""

# Shared projection for session cards; venue location feeds the distance filter
SESSION_PROJECTION = """{
  _id,
  startTime,
  maxCapacity,
  status,
  "activity": activity->{
    _id,
    name,
    instructor,
    duration,
    tierLevel,
    "category": category->{_id, name}
  },
  "venue": venue->{
    _id,
    name,
    "location": select(
      defined(address.lat) && defined(address.lng) => {"lat": address.lat, "lng": address.lng},
      null
    )
  }
}"""

# Bounding box prefilter applied against the referenced venue's address
_IN_BOUNDING_BOX = """
  && venue->address.lat >= $minLat && venue->address.lat <= $maxLat
  && venue->address.lng >= $minLng && venue->address.lng <= $maxLng"""

FILTERED_SESSIONS_QUERY = (
    """*[
  _type == "classSession"
  && startTime > now()
  && status == "scheduled"
  && ($venueId == "" || venue._ref == $venueId)
  && (count($categoryIds) == 0 || activity->category._ref in $categoryIds)
  && (count($tierLevels) == 0 || activity->tierLevel in $tierLevels)"""
    + _IN_BOUNDING_BOX
    + """
] | order(startTime asc) """
    + SESSION_PROJECTION
)

SEARCH_SESSIONS_QUERY = (
    """*[
  _type == "classSession"
  && startTime > now()
  && status == "scheduled"
  && (
    activity->name match $searchTerm
    || activity->instructor match $searchTerm
    || activity->category->name match $searchTerm
  )"""
    + _IN_BOUNDING_BOX
    + """
] | order(startTime asc) """
    + SESSION_PROJECTION
)

CATEGORIES_QUERY = """*[_type == "category"] | order(name asc) {
  _id,
  name,
  "slug": slug.current
}"""

VENUE_NAME_BY_ID_QUERY = """*[_type == "venue" && _id == $venueId][0]{ name }"""

USER_BOOKED_SESSION_IDS_QUERY = """*[
  _type == "booking"
  && user->clerkId == $clerkId
  && status == "confirmed"
].classSession._ref"""

USER_PREFERENCES_QUERY = """*[_type == "userProfile" && clerkId == $clerkId][0]{
  "location": select(
    defined(location.lat) && defined(location.lng) => {"lat": location.lat, "lng": location.lng},
    null
  ),
  searchRadius
}"""
