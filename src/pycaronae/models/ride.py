"""Ride model."""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo
from typing import Any

from pydantic import AliasChoices, Field, ValidationInfo, field_validator, model_validator

from pycaronae._constants import RIDE_DATE_FORMAT, RIDE_TIME_FORMAT
from pycaronae.models._base import CaronaeBaseModel, context_zone, parse_caronae_datetime
from pycaronae.models.user import User


class Ride(CaronaeBaseModel):
    """A single scheduled trip offered by a driver.

    The remote sends the schedule either as an ISO ``date`` or as the
    split ``mydate`` / ``mytime`` pair; both end up in :attr:`date` as a
    tz-aware UTC datetime.  ``is_active`` is local state only and is
    never sent back to the remote.
    """

    id: int
    """Primary key, assigned by the remote service."""
    date: datetime
    driver: User | None = None
    riders: list[User] = Field(default_factory=list)
    routine_id: int | None = Field(default=None, validation_alias=AliasChoices("routine_id", "routineId"))
    """Groups the rides of a recurring offer."""
    is_active: bool = Field(default=False, validation_alias=AliasChoices("is_active", "isActive"))
    going: bool = True
    """``True`` when heading to the hub, ``False`` when leaving it."""
    region: str = Field(default="", validation_alias=AliasChoices("myzone", "region"))
    neighborhood: str = ""
    place: str = ""
    route: str = ""
    hub: str = ""
    slots: int | None = None
    description: str = ""
    week_days: str | None = None
    repeats_until: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _combine_split_date(cls, values: Any) -> Any:
        if not isinstance(values, dict) or values.get("date") or not values.get("mydate"):
            return values
        merged = dict(values)
        time_part = merged.get("mytime") or "00:00:00"
        merged["date"] = f"{merged['mydate']}T{time_part}"
        return merged

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any, info: ValidationInfo) -> datetime:
        return parse_caronae_datetime(value, context_zone(info))

    def is_in_the_future(self, now: datetime) -> bool:
        return self.date > now

    def with_driver(self, driver: User) -> Ride:
        return self.model_copy(update={"driver": driver})

    def with_active(self, is_active: bool) -> Ride:
        return self.model_copy(update={"is_active": is_active})

    def with_rider(self, rider: User) -> Ride:
        """Return a copy with *rider* in :attr:`riders` (replacing a stale copy)."""
        riders = [existing for existing in self.riders if existing.id != rider.id]
        riders.append(rider)
        return self.model_copy(update={"riders": riders})

    def to_payload(self, zone: tzinfo = UTC) -> dict[str, Any]:
        """Serialize the fields the remote accepts when creating a ride."""
        local = self.date.astimezone(zone)
        payload: dict[str, Any] = {
            "myzone": self.region,
            "neighborhood": self.neighborhood,
            "place": self.place,
            "route": self.route,
            "hub": self.hub,
            "slots": self.slots,
            "description": self.description,
            "going": self.going,
            "mydate": local.strftime(RIDE_DATE_FORMAT),
            "mytime": local.strftime(RIDE_TIME_FORMAT),
            "week_days": self.week_days,
            "repeats_until": self.repeats_until,
        }
        return {key: value for key, value in payload.items() if value is not None}
