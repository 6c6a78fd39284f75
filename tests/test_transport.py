from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest

from pycaronae._transport import HttpTransport
from pycaronae.config import CaronaeConfig
from pycaronae.exceptions import CaronaeTransportError


@dataclass
class _FakeResponse:
    status: int
    body: str

    async def text(self) -> str:
        return self.body

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class FakeHttpSession:
    status: int = 200
    body: str = "[]"
    error: Exception | None = None
    requests: list[dict[str, Any]] = field(default_factory=list)

    def request(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return _FakeResponse(self.status, self.body)


def _transport(session: FakeHttpSession) -> HttpTransport:
    config = CaronaeConfig(token="tok-123", base_url="https://api.example.test")
    return HttpTransport(config, session)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_get_sends_token_and_query_params() -> None:
    session = FakeHttpSession(body='{"valid": true, "status": "ok"}')

    result = await _transport(session).get("/ride/validateDuplicate", {"date": "12/03/2026", "going": False})

    assert result == {"valid": True, "status": "ok"}
    request = session.requests[0]
    assert request["method"] == "GET"
    assert request["url"] == "https://api.example.test/ride/validateDuplicate"
    assert request["params"] == {"date": "12/03/2026", "going": "0"}
    assert request["json"] is None
    assert request["headers"]["token"] == "tok-123"


@pytest.mark.asyncio
async def test_post_sends_json_body() -> None:
    session = FakeHttpSession(body="")

    result = await _transport(session).post("/ride/requestJoin", {"rideId": 4})

    assert result is None
    assert session.requests[0]["json"] == {"rideId": 4}
    assert session.requests[0]["params"] is None


@pytest.mark.asyncio
async def test_non_2xx_is_transport_error() -> None:
    session = FakeHttpSession(status=401, body='{"error": "unauthorized"}')

    with pytest.raises(CaronaeTransportError) as exc_info:
        await _transport(session).delete("/ride/allFromRoutine/9")

    assert exc_info.value.status_code == 401
    assert exc_info.value.endpoint == "/ride/allFromRoutine/9"


@pytest.mark.asyncio
async def test_client_error_is_wrapped() -> None:
    session = FakeHttpSession(error=aiohttp.ClientConnectionError("connection refused"))

    with pytest.raises(CaronaeTransportError) as exc_info:
        await _transport(session).get("/ride/all")

    assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)


@pytest.mark.asyncio
async def test_invalid_json_is_transport_error() -> None:
    session = FakeHttpSession(body="<html>maintenance</html>")

    with pytest.raises(CaronaeTransportError, match="Invalid JSON"):
        await _transport(session).get("/ride/all")
