import math
from typing import Optional, Tuple

EARTH_RADIUS = 6371000  # метры


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return distance in meters between two lat/lon points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS * c


def bounding_box(
    lng: float, lat: float, radius: float
) -> Tuple[float, float, Optional[float]]:
    """
    Грубая рамка вокруг точки для предварительного отбора в SQL.

    Returns:
        (min_lat, max_lat, lng_delta); lng_delta равен None, когда круг
        захватывает полюс и ограничивать долготу нельзя.
    """
    angular = radius / EARTH_RADIUS
    lat_delta = math.degrees(angular)
    min_lat, max_lat = lat - lat_delta, lat + lat_delta
    if min_lat <= -90 or max_lat >= 90:
        return max(min_lat, -90.0), min(max_lat, 90.0), None

    ratio = math.sin(angular) / math.cos(math.radians(lat))
    if ratio >= 1:
        return min_lat, max_lat, None
    return min_lat, max_lat, math.degrees(math.asin(ratio))
