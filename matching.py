import logging
from datetime import datetime, timedelta, timezone
from math import isfinite
from typing import Iterable, List, Optional, Tuple

import config
from geo import NOT_FOUND, LatLon, haversine_m, nearest_distance_to_route, nearest_waypoint_index
from models import MatchResult, RideOffer, RideRequest, as_utc

logger = logging.getLogger(__name__)

# one minute of detour weighs as much as two kilometers of combined walking
DETOUR_MINUTE_WEIGHT = 2.0
WALK_KM_WEIGHT = 1.0


def is_forward_order(pickup_index: int, dropoff_index: int) -> bool:
    return pickup_index != NOT_FOUND and dropoff_index != NOT_FOUND and pickup_index < dropoff_index


def estimate_detour_meters(offer: RideOffer, pickup: LatLon, dropoff: LatLon) -> float:
    # straight-line legs between the offer's endpoints only; the route polyline is not used
    direct = haversine_m(offer.departure, offer.destination)
    to_pickup = haversine_m(offer.departure, pickup)
    between_stops = haversine_m(pickup, dropoff)
    to_dest = haversine_m(dropoff, offer.destination)
    return to_pickup + between_stops + to_dest - direct


def detour_meters_to_minutes(meters: float, speed_kph: float = config.AVG_SPEED_KPH) -> float:
    meters_per_minute = speed_kph * 1000 / 60
    return meters / meters_per_minute


def departure_window(request: RideRequest, now: datetime) -> Tuple[datetime, datetime]:
    """Inclusive (start, end) window an offer must depart in to serve `request`.

    Immediate requests get the tight ride-now tolerance, scheduled ones the
    wider one. A request without a departure time is centred on `now`.
    """
    margin = config.RIDE_NOW_WINDOW_MINUTES if request.ride_now else config.SCHEDULED_WINDOW_MINUTES
    requested = request.departure_time if request.departure_time is not None else now
    tolerance = timedelta(minutes=margin)
    return requested - tolerance, requested + tolerance


def _score_offer(offer: RideOffer, request: RideRequest, window: Tuple[datetime, datetime]) -> Optional[float]:
    if offer.free_seats <= 0:
        logger.debug("offer %s rejected: no free seats", offer.id)
        return None

    window_start, window_end = window
    if offer.departure_time < window_start or offer.departure_time > window_end:
        logger.debug("offer %s rejected: departs %s outside window", offer.id, offer.departure_time)
        return None

    pickup_distance = nearest_distance_to_route(request.origin, offer.route)
    dropoff_distance = nearest_distance_to_route(request.destination, offer.route)
    if pickup_distance > request.max_walk_meters or dropoff_distance > request.max_walk_meters:
        logger.debug("offer %s rejected: walk %.0fm/%.0fm", offer.id, pickup_distance, dropoff_distance)
        return None

    pickup_idx = nearest_waypoint_index(request.origin, offer.route)
    dropoff_idx = nearest_waypoint_index(request.destination, offer.route)
    if not is_forward_order(pickup_idx, dropoff_idx):
        logger.debug("offer %s rejected: pickup %d not before dropoff %d", offer.id, pickup_idx, dropoff_idx)
        return None

    detour_meters = estimate_detour_meters(offer, request.origin, request.destination)
    detour_minutes = detour_meters_to_minutes(detour_meters)
    if not isfinite(detour_minutes):
        logger.debug("offer %s rejected: detour not computable", offer.id)
        return None
    if detour_minutes > offer.max_detour_minutes or detour_minutes > config.MAX_DETOUR_MINUTES:
        logger.debug("offer %s rejected: detour %.1f min", offer.id, detour_minutes)
        return None
    if detour_meters < 0:
        # TODO: decide whether negative detours should be clamped to zero once real route data is available
        logger.debug("offer %s has negative detour %.1fm", offer.id, detour_meters)

    return detour_minutes * DETOUR_MINUTE_WEIGHT + WALK_KM_WEIGHT * (pickup_distance + dropoff_distance) / 1000


def find_matches(offers: Iterable[RideOffer], request: RideRequest, now: Optional[datetime] = None) -> List[MatchResult]:
    """Rank the offers that can serve `request`, best (lowest score) first.

    Each offer goes through capacity, departure window, walking distance,
    direction and detour filters in that order. Malformed offers are dropped
    rather than raising, so one bad entry never affects the others.
    Pass `now` explicitly for deterministic results.
    """
    now = datetime.now(timezone.utc) if now is None else as_utc(now)
    window = departure_window(request, now)

    results = []
    considered = 0
    for offer in offers:
        considered += 1
        try:
            score = _score_offer(offer, request, window)
        except (ValueError, TypeError) as exc:
            logger.warning("offer %s skipped: %s", offer.id, exc)
            continue
        if score is not None:
            results.append(MatchResult(offer=offer, score=score))

    results.sort(key=lambda m: m.score)
    logger.info("matched %d of %d offers for request %s", len(results), considered, request.id)
    return results


def best_match(offers: Iterable[RideOffer], request: RideRequest, now: Optional[datetime] = None) -> Optional[MatchResult]:
    matches = find_matches(offers, request, now)
    return matches[0] if matches else None
