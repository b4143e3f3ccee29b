"""
Geographic helpers for candidate matching.

Two stages with different roles:

- ``bounding_box`` is a cheap, deliberately loose rectangular prefilter
  (flat-earth approximation) pushed down to the database query.
- ``haversine_distance`` is the exact great-circle distance used for the
  authoritative radius check.
"""

import math
from dataclasses import dataclass
from typing import Optional

from renfort.utils.constants import EARTH_RADIUS_KM, KM_PER_DEGREE, MIN_COS_LATITUDE


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    @classmethod
    def from_coordinates(
        cls, latitude: Optional[float], longitude: Optional[float]
    ) -> Optional["GeoPoint"]:
        """Build a point, or None when either coordinate is missing."""
        if latitude is None or longitude is None:
            return None
        return cls(latitude=latitude, longitude=longitude)


@dataclass(frozen=True)
class BoundingBox:
    """Latitude/longitude ranges, inclusive on both ends."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


def bounding_box(center: GeoPoint, radius_km: float) -> BoundingBox:
    """
    Compute a rectangle enclosing the circle of ``radius_km`` around ``center``.

    One degree of latitude is taken as 111 km; a degree of longitude shrinks
    with cos(latitude), clamped so the box stays finite near the poles.
    """
    lat_delta = radius_km / KM_PER_DEGREE
    safe_cos = max(math.cos(math.radians(center.latitude)), MIN_COS_LATITUDE)
    lng_delta = radius_km / (KM_PER_DEGREE * safe_cos)

    return BoundingBox(
        min_lat=max(-90.0, center.latitude - lat_delta),
        max_lat=min(90.0, center.latitude + lat_delta),
        min_lng=max(-180.0, center.longitude - lng_delta),
        max_lng=min(180.0, center.longitude + lng_delta),
    )


def haversine_distance(
    point1: Optional[GeoPoint], point2: Optional[GeoPoint]
) -> float:
    """
    Great-circle distance in kilometers.

    Returns ``math.inf`` when either point is missing so the candidate
    always falls outside any search radius.
    """
    if point1 is None or point2 is None:
        return math.inf

    lat1_rad = math.radians(point1.latitude)
    lat2_rad = math.radians(point2.latitude)
    delta_lat = math.radians(point2.latitude - point1.latitude)
    delta_lng = math.radians(point2.longitude - point1.longitude)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c
