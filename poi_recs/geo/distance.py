from __future__ import annotations

import math

import numpy as np
from sklearn.metrics.pairwise import haversine_distances

EARTH_RADIUS_METERS = 6_371_000.0


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two lat/lng points (haversine)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    a = min(1.0, a)
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distances_from(lat: float, lng: float, points: np.ndarray) -> np.ndarray:
    """Distances in meters from one point to every row of an (n, 2) lat/lng array."""
    if len(points) == 0:
        return np.empty(0)
    origin = np.radians([[lat, lng]])
    return haversine_distances(origin, np.radians(points))[0] * EARTH_RADIUS_METERS
