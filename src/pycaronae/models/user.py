"""User model."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pycaronae.models._base import CaronaeBaseModel


class User(CaronaeBaseModel):
    """A Caronae user: a driver, a rider, or someone asking to join a ride.

    Users are shared between rides.  The local store keeps a single
    record per ``id`` and resolves ``Ride.driver`` / ``Ride.riders`` to
    it.
    """

    id: int
    """Unique user identifier assigned by the remote service."""
    name: str = ""
    profile: str = ""
    """Affiliation with the university (e.g. ``"Aluno"``)."""
    course: str = ""
    phone_number: str | None = Field(default=None, validation_alias=AliasChoices("phone_number", "phoneNumber"))
    email: str | None = None
    location: str = ""
    car_owner: bool = Field(default=False, validation_alias=AliasChoices("car_owner", "carOwner"))
    car_model: str | None = Field(default=None, validation_alias=AliasChoices("car_model", "carModel"))
    car_color: str | None = Field(default=None, validation_alias=AliasChoices("car_color", "carColor"))
    car_plate: str | None = Field(default=None, validation_alias=AliasChoices("car_plate", "carPlate"))
    profile_pic_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("profile_pic_url", "profilePicUrl"),
    )
    facebook_id: str | None = Field(default=None, validation_alias=AliasChoices("face_id", "facebook_id", "facebookId"))
