"""Ride endpoints of the Caronae API.

Every function takes the transport and returns the *undecoded* records
(already checked for the expected container shape), except where the
response is a single scalar answer.  Turning records into models and
reconciling them with the local store is the service's job.

Endpoints:
  - GET    /ride/all
  - GET    /user/{id}/offeredRides
  - GET    /ride/getMyActiveRides
  - GET    /ride/getRidesHistory
  - POST   /ride/listFiltered
  - GET    /ride/getRequesters/{id}
  - POST   /ride
  - POST   /ride/finishRide
  - POST   /ride/leaveRide
  - DELETE /ride/allFromRoutine/{id}
  - POST   /ride/requestJoin
  - POST   /ride/answerJoinRequest
  - GET    /ride/validateDuplicate
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, tzinfo
from typing import Any

from pydantic import ValidationError

from pycaronae._api._common import expect_list, expect_object
from pycaronae._constants import (
    ACTIVE_RIDES_PATH,
    ALL_RIDES_PATH,
    ANSWER_JOIN_REQUEST_PATH,
    CREATE_RIDE_PATH,
    DELETE_ROUTINE_PATH,
    FINISH_RIDE_PATH,
    LEAVE_RIDE_PATH,
    NEIGHBORHOOD_SEPARATOR,
    OFFERED_RIDES_PATH,
    REQUEST_JOIN_PATH,
    REQUESTERS_PATH,
    RIDES_HISTORY_PATH,
    SEARCH_DATE_FORMAT,
    SEARCH_RIDES_PATH,
    SEARCH_TIME_FORMAT,
    VALIDATE_DATE_FORMAT,
    VALIDATE_DUPLICATE_PATH,
    VALIDATE_TIME_FORMAT,
)
from pycaronae._transport import Transport
from pycaronae.exceptions import CaronaeDecodeError
from pycaronae.models.ride import Ride
from pycaronae.models.validation import RideDateValidation


async def fetch_all_rides(transport: Transport) -> list[Any]:
    body = await transport.get(ALL_RIDES_PATH)
    return expect_list(ALL_RIDES_PATH, body)


async def fetch_offered_rides(transport: Transport, user_id: int) -> list[Any]:
    """Rides the user offers as driver; the list is wrapped in ``{"rides": [...]}``."""
    path = OFFERED_RIDES_PATH.format(user_id=user_id)
    body = await transport.get(path)
    return expect_list(path, body, key="rides")


async def fetch_active_rides(transport: Transport) -> list[Any]:
    body = await transport.get(ACTIVE_RIDES_PATH)
    return expect_list(ACTIVE_RIDES_PATH, body)


async def fetch_rides_history(transport: Transport) -> list[Any]:
    body = await transport.get(RIDES_HISTORY_PATH)
    return expect_list(RIDES_HISTORY_PATH, body)


def build_search_params(
    center: str,
    neighborhoods: Sequence[str],
    date: datetime,
    going: bool,
    zone: tzinfo,
) -> dict[str, Any]:
    """Build the ``/ride/listFiltered`` filter.

    The date is split into separate date and time components rendered in
    the service's time zone.
    """
    local = date.astimezone(zone) if date.tzinfo is not None else date
    return {
        "center": center,
        "location": NEIGHBORHOOD_SEPARATOR.join(neighborhoods),
        "date": local.strftime(SEARCH_DATE_FORMAT),
        "time": local.strftime(SEARCH_TIME_FORMAT),
        "go": going,
    }


async def search_rides(transport: Transport, params: dict[str, Any]) -> list[Any]:
    body = await transport.post(SEARCH_RIDES_PATH, params)
    return expect_list(SEARCH_RIDES_PATH, body)


async def fetch_requesters(transport: Transport, ride_id: int) -> list[Any]:
    path = REQUESTERS_PATH.format(ride_id=ride_id)
    body = await transport.get(path)
    return expect_list(path, body)


async def create_ride(transport: Transport, ride: Ride, zone: tzinfo) -> list[Any]:
    """Create a ride (or a routine); the remote answers with every ride created."""
    body = await transport.post(CREATE_RIDE_PATH, ride.to_payload(zone))
    return expect_list(CREATE_RIDE_PATH, body)


async def finish_ride(transport: Transport, ride_id: int) -> None:
    await transport.post(FINISH_RIDE_PATH, {"rideId": ride_id})


async def leave_ride(transport: Transport, ride_id: int) -> None:
    await transport.post(LEAVE_RIDE_PATH, {"rideId": ride_id})


async def delete_routine(transport: Transport, routine_id: int) -> None:
    await transport.delete(DELETE_ROUTINE_PATH.format(routine_id=routine_id))


async def request_join(transport: Transport, ride_id: int) -> None:
    await transport.post(REQUEST_JOIN_PATH, {"rideId": ride_id})


async def answer_join_request(transport: Transport, ride_id: int, user_id: int, accepted: bool) -> None:
    params = {
        "rideId": ride_id,
        "userId": user_id,
        "accepted": accepted,
    }
    await transport.post(ANSWER_JOIN_REQUEST_PATH, params)


async def validate_duplicate(transport: Transport, ride: Ride, zone: tzinfo) -> RideDateValidation:
    """Ask the remote whether *ride*'s date/direction clashes with another ride."""
    local = ride.date.astimezone(zone)
    params = {
        "date": local.strftime(VALIDATE_DATE_FORMAT),
        "time": local.strftime(VALIDATE_TIME_FORMAT),
        "going": ride.going,
    }
    body = expect_object(VALIDATE_DUPLICATE_PATH, await transport.get(VALIDATE_DUPLICATE_PATH, params))
    try:
        return RideDateValidation.model_validate(body)
    except ValidationError as exc:
        raise CaronaeDecodeError(
            f"{VALIDATE_DUPLICATE_PATH} response missing valid/status: {exc.errors(include_url=False)}",
            endpoint=VALIDATE_DUPLICATE_PATH,
        ) from exc
