from typing import List, NamedTuple, Optional
from sqlmodel import SQLModel
from pydantic import field_validator
from datetime import datetime, timezone


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # naive timestamps are read as UTC so every comparison is offset-aware
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Coordinate(NamedTuple):
    lat: float
    lon: float

    def as_json(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}


class RideOffer(SQLModel):
    """A driver's published trip. `route` runs from departure to destination."""
    id: str
    departure: Coordinate
    destination: Coordinate
    departure_time: datetime
    max_detour_minutes: float
    free_seats: int
    route: List[Coordinate]

    @field_validator("departure_time")
    @classmethod
    def _utc_departure(cls, v):
        return as_utc(v)

    def as_json(self) -> dict:
        return {
            "id": self.id,
            "departure": self.departure.as_json(),
            "destination": self.destination.as_json(),
            "departure_time": self.departure_time.isoformat(),
            "max_detour_minutes": self.max_detour_minutes,
            "free_seats": self.free_seats,
            "route": [c.as_json() for c in self.route],
        }


class RideRequest(SQLModel):
    id: Optional[str] = None
    origin: Coordinate
    destination: Coordinate
    departure_time: Optional[datetime] = None  # None means "at the matcher's now"
    max_walk_meters: float
    ride_now: bool = False

    @field_validator("departure_time")
    @classmethod
    def _utc_departure(cls, v):
        return as_utc(v)

    def as_json(self) -> dict:
        return {
            "id": self.id,
            "origin": self.origin.as_json(),
            "destination": self.destination.as_json(),
            "departure_time": self.departure_time.isoformat() if self.departure_time else None,
            "max_walk_meters": self.max_walk_meters,
            "ride_now": self.ride_now,
        }


class MatchResult(NamedTuple):
    offer: RideOffer
    score: float  # lower is better
