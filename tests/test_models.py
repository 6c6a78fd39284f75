"""Tests for ride/user model parsing."""

from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from pycaronae.models.ride import Ride
from pycaronae.models.ride_request import RideRequest
from pycaronae.models.user import User
from pycaronae.models.validation import RideDateValidation

SAO_PAULO = ZoneInfo("America/Sao_Paulo")


class TestRide:
    SAMPLE_PAYLOAD: dict = {
        "id": 101,
        "myzone": "Zona Sul",
        "neighborhood": "Botafogo",
        "going": 1,
        "place": "Praia de Botafogo",
        "route": "Aterro",
        "routine_id": 12,
        "hub": "CT",
        "slots": 3,
        "description": "",
        "week_days": "1,3,5",
        "repeats_until": "2026-06-30",
        "mydate": "2026-03-12",
        "mytime": "07:30:00",
        "driver": {"id": 7, "name": "Maria", "car_model": "Gol", "phone_number": None},
        "riders": [{"id": 8, "name": "Ana"}],
        "unexpected": "ignored",
    }

    def test_parses_split_date_in_context_zone(self) -> None:
        ride = Ride.model_validate(self.SAMPLE_PAYLOAD, context={"tz": SAO_PAULO})

        assert ride.date == datetime(2026, 3, 12, 10, 30, tzinfo=UTC)
        assert ride.region == "Zona Sul"
        assert ride.routine_id == 12
        assert ride.going is True
        assert ride.is_active is False
        assert ride.driver == User(id=7, name="Maria", car_model="Gol")
        assert [rider.id for rider in ride.riders] == [8]

    def test_naive_dates_default_to_utc(self) -> None:
        ride = Ride.model_validate({"id": 1, "mydate": "2026-03-12", "mytime": "07:30:00"})
        assert ride.date == datetime(2026, 3, 12, 7, 30, tzinfo=UTC)

    def test_iso_date_with_offset(self) -> None:
        ride = Ride.model_validate({"id": 1, "date": "2026-03-12T07:30:00-03:00"})
        assert ride.date == datetime(2026, 3, 12, 10, 30, tzinfo=UTC)

    def test_missing_date_fails(self) -> None:
        with pytest.raises(ValidationError):
            Ride.model_validate({"id": 1})

    def test_missing_id_fails(self) -> None:
        with pytest.raises(ValidationError):
            Ride.model_validate({"date": "2026-03-12T07:30:00"})

    def test_is_frozen(self) -> None:
        ride = Ride.model_validate(self.SAMPLE_PAYLOAD)
        with pytest.raises(ValidationError):
            ride.description = "changed"  # type: ignore[misc]

    def test_with_rider_replaces_stale_copy(self) -> None:
        ride = Ride.model_validate(self.SAMPLE_PAYLOAD)
        updated = ride.with_rider(User(id=8, name="Ana Maria")).with_rider(User(id=9))

        assert [(rider.id, rider.name) for rider in updated.riders] == [(8, "Ana Maria"), (9, "")]
        assert [rider.id for rider in ride.riders] == [8]

    def test_to_payload_renders_local_date(self) -> None:
        ride = Ride.model_validate(self.SAMPLE_PAYLOAD, context={"tz": SAO_PAULO}).with_active(True)

        payload = ride.to_payload(SAO_PAULO)

        assert payload["mydate"] == "2026-03-12"
        assert payload["mytime"] == "07:30:00"
        assert payload["myzone"] == "Zona Sul"
        assert payload["going"] is True
        assert "is_active" not in payload
        assert "driver" not in payload


class TestUserAndRequest:
    def test_user_accepts_camel_case(self) -> None:
        user = User.model_validate({"id": 3, "phoneNumber": "2199", "carOwner": True, "profilePicUrl": "http://x"})
        assert user.phone_number == "2199"
        assert user.car_owner is True
        assert user.profile_pic_url == "http://x"

    def test_ride_request_aliases(self) -> None:
        assert RideRequest.model_validate({"rideId": 4}) == RideRequest(id=4)


class TestRideDateValidation:
    def test_requires_strict_types(self) -> None:
        with pytest.raises(ValidationError):
            RideDateValidation.model_validate({"valid": "true", "status": "valid"})

    def test_parses_answer(self) -> None:
        result = RideDateValidation.model_validate({"valid": True, "status": "valid", "extra": 1})
        assert result.valid is True
        assert result.status == "valid"
