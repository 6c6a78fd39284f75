"""Data models for Caronae records."""

from pycaronae.models._base import CaronaeBaseModel, parse_caronae_datetime
from pycaronae.models.ride import Ride
from pycaronae.models.ride_request import RideRequest
from pycaronae.models.user import User
from pycaronae.models.validation import RideDateValidation

__all__ = [
    "CaronaeBaseModel",
    "Ride",
    "RideDateValidation",
    "RideRequest",
    "User",
    "parse_caronae_datetime",
]
