import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

import config
from matching import best_match, find_matches
from models import Coordinate, MatchResult, RideOffer, RideRequest, as_utc
from sample_data import demo

logger = logging.getLogger(__name__)


class PayloadError(ValueError):
    pass


def parse_coordinate(value) -> Coordinate:
    """Accept {"lat": .., "lon": ..} or [lat, lon]."""
    if isinstance(value, dict):
        if "lat" not in value or "lon" not in value:
            raise PayloadError("coordinate needs lat and lon")
        return Coordinate(float(value["lat"]), float(value["lon"]))
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return Coordinate(float(value[0]), float(value[1]))
    raise PayloadError(f"invalid coordinate {value!r}")


def parse_offer(payload: dict) -> RideOffer:
    required = ["id", "departure", "destination", "departure_time", "max_detour_minutes", "free_seats", "route"]
    for k in required:
        if k not in payload:
            raise PayloadError(f"offer missing {k}")
    return RideOffer(
        id=str(payload["id"]),
        departure=parse_coordinate(payload["departure"]),
        destination=parse_coordinate(payload["destination"]),
        departure_time=payload["departure_time"],
        max_detour_minutes=payload["max_detour_minutes"],
        free_seats=payload["free_seats"],
        route=[parse_coordinate(c) for c in payload["route"]],
    )


def parse_request(payload: dict) -> RideRequest:
    required = ["origin", "destination", "max_walk_meters"]
    for k in required:
        if k not in payload:
            raise PayloadError(f"request missing {k}")
    return RideRequest(
        id=payload.get("id"),
        origin=parse_coordinate(payload["origin"]),
        destination=parse_coordinate(payload["destination"]),
        departure_time=payload.get("departure_time"),
        max_walk_meters=payload["max_walk_meters"],
        ride_now=payload.get("ride_now", False),
    )


def match_json(match: MatchResult) -> dict:
    return {
        "offer_id": match.offer.id,
        "score": match.score,
        "offer": match.offer.as_json(),
    }


async def read_match_input(request: Request):
    try:
        payload = await request.json()
    except json.JSONDecodeError:
        raise PayloadError("body is not valid JSON")
    if not isinstance(payload, dict):
        raise PayloadError("body must be an object")
    for k in ("offers", "request"):
        if k not in payload:
            raise PayloadError(f"missing {k}")
    if not isinstance(payload["offers"], list):
        raise PayloadError("offers must be a list")
    offers = [parse_offer(o) for o in payload["offers"]]
    ride_request = parse_request(payload["request"])
    now = None
    if payload.get("now") is not None:
        try:
            now = as_utc(datetime.fromisoformat(payload["now"]))
        except (TypeError, ValueError):
            raise PayloadError(f"invalid now {payload['now']!r}")
    return offers, ride_request, now


def bad_request(exc: Exception) -> JSONResponse:
    if isinstance(exc, ValidationError):
        message = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())
    else:
        message = str(exc)
    logger.info("rejected payload: %s", message)
    return JSONResponse({"error": message}, status_code=400)


async def match(request: Request):
    try:
        offers, ride_request, now = await read_match_input(request)
    except (ValueError, TypeError) as exc:
        return bad_request(exc)
    matches = find_matches(offers, ride_request, now)
    return JSONResponse({"matches": [match_json(m) for m in matches]})


async def match_best(request: Request):
    try:
        offers, ride_request, now = await read_match_input(request)
    except (ValueError, TypeError) as exc:
        return bad_request(exc)
    best = best_match(offers, ride_request, now)
    if best is None:
        return JSONResponse({"error": "no match"}, status_code=404)
    return JSONResponse({"match": match_json(best)})


async def run_demo(request: Request):
    offers, ride_request, now = demo()
    matches = find_matches(offers, ride_request, now)
    return JSONResponse({
        "now": now.isoformat(),
        "request_id": ride_request.id,
        "matches": [match_json(m) for m in matches],
    })


async def health(request: Request):
    return JSONResponse({"status": "ok"})


@asynccontextmanager
async def lifespan(app):
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    yield


routes = [
    Route("/match", match, methods=["POST"]),
    Route("/match/best", match_best, methods=["POST"]),
    Route("/demo", run_demo, methods=["GET"]),
    Route("/health", health, methods=["GET"]),
]

app = Starlette(debug=config.DEBUG, routes=routes, lifespan=lifespan)
