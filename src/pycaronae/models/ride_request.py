"""Join-request marker model."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pycaronae.models._base import CaronaeBaseModel


class RideRequest(CaronaeBaseModel):
    """Local marker that the current user asked to join ride ``id``.

    Its presence in the store is the only local signal of a pending
    request.  There is at most one per ride.
    """

    id: int = Field(validation_alias=AliasChoices("id", "ride_id", "rideId"))
