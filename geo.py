from typing import Sequence, Tuple
from math import radians, sin, cos, sqrt, atan2, inf

EARTH_RADIUS_M = 6371000.0
NOT_FOUND = -1

LatLon = Tuple[float, float]


def haversine_m(a: LatLon, b: LatLon) -> float:
    lat1, lon1 = a
    lat2, lon2 = b
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)
    rlat1 = radians(lat1)
    rlat2 = radians(lat2)
    a_ = sin(dlat / 2) ** 2 + cos(rlat1) * cos(rlat2) * sin(dlon / 2) ** 2
    c = 2 * atan2(sqrt(a_), sqrt(1 - a_))
    return EARTH_RADIUS_M * c


def nearest_distance_to_route(point: LatLon, route: Sequence[LatLon]) -> float:
    """Distance in meters from `point` to the closest waypoint of `route`.

    The route is treated as a set of discrete waypoints, not as line segments,
    so the result overestimates the true point-to-polyline distance between
    sparse waypoints. An empty route gives inf.
    """
    best = inf
    for waypoint in route:
        d = haversine_m(point, waypoint)
        if d < best:
            best = d
    return best


def nearest_waypoint_index(point: LatLon, route: Sequence[LatLon]) -> int:
    # strict < keeps the first waypoint on ties
    best_idx = NOT_FOUND
    best = inf
    for idx, waypoint in enumerate(route):
        d = haversine_m(point, waypoint)
        if d < best:
            best = d
            best_idx = idx
    return best_idx
