import math
from typing import Iterable, List, Optional

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two lat/long points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def within_radius(
    businesses: Iterable,
    latitude: float,
    longitude: float,
    radius_km: float,
) -> List:
    """Keep businesses with both coordinates set whose distance is <= radius_km."""
    return [
        business for business in businesses
        if business.latitude is not None
        and business.longitude is not None
        and haversine_km(latitude, longitude, business.latitude, business.longitude) <= radius_km
    ]


def geo_filter_requested(latitude: Optional[float], longitude: Optional[float], radius_km: Optional[float]) -> bool:
    return latitude is not None and longitude is not None and radius_km is not None
