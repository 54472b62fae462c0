"""Demo offers and rider request around central Paris.
Run: python sample_data.py
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from models import Coordinate, RideOffer, RideRequest
from matching import find_matches


def demo_offers(now: datetime) -> List[RideOffer]:
    return [
        RideOffer(
            id="DRIVER-1",
            departure=Coordinate(48.8566, 2.3522),
            destination=Coordinate(48.8566, 2.4),
            departure_time=now + timedelta(minutes=5),
            max_detour_minutes=5,
            free_seats=2,
            route=[
                Coordinate(48.8566, 2.3522),
                Coordinate(48.8567, 2.36),
                Coordinate(48.8568, 2.38),
                Coordinate(48.8566, 2.4),
            ],
        ),
        RideOffer(
            id="DRIVER-2",
            departure=Coordinate(48.86, 2.33),
            destination=Coordinate(48.86, 2.42),
            departure_time=now + timedelta(minutes=10),
            max_detour_minutes=5,
            free_seats=1,
            route=[
                Coordinate(48.86, 2.33),
                Coordinate(48.861, 2.36),
                Coordinate(48.862, 2.39),
                Coordinate(48.86, 2.42),
            ],
        ),
    ]


def demo_request(now: datetime) -> RideRequest:
    return RideRequest(
        id="RIDER-1",
        origin=Coordinate(48.8567, 2.355),
        destination=Coordinate(48.8566, 2.398),
        departure_time=now + timedelta(minutes=3),
        max_walk_meters=500,
        ride_now=True,
    )


def demo(now: Optional[datetime] = None) -> Tuple[List[RideOffer], RideRequest, datetime]:
    if now is None:
        now = datetime.now(timezone.utc)
    return demo_offers(now), demo_request(now), now


def demo_payload(now: Optional[datetime] = None) -> dict:
    """JSON body for POST /match built from the demo data."""
    offers, request, now = demo(now)
    return {
        "now": now.isoformat(),
        "offers": [o.as_json() for o in offers],
        "request": request.as_json(),
    }


if __name__ == "__main__":
    offers, request, now = demo()
    for match in find_matches(offers, request, now):
        print(match.offer.id, round(match.score, 3))
