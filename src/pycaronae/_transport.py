"""HTTP transport for the Caronae ride API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pycaronae._redact import redact_for_log
from pycaronae.config import CaronaeConfig
from pycaronae.exceptions import CaronaeTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    Every method returns the decoded JSON body or raises
    :class:`CaronaeTransportError`.
    """

    async def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        ...

    async def post(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        ...

    async def delete(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        ...


def _query_params(params: Mapping[str, Any] | None) -> dict[str, str] | None:
    """Render params for a query string (aiohttp rejects bools and None)."""
    if not params:
        return None
    rendered: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            rendered[key] = "1" if value else "0"
        else:
            rendered[key] = str(value)
    return rendered


class HttpTransport:
    """JSON-over-HTTP transport authenticated with the user's API token."""

    def __init__(self, config: CaronaeConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }
        if self._config.token:
            headers["token"] = self._config.token
        return headers

    async def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("GET", path, query=_query_params(params))

    async def post(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("POST", path, body=dict(params) if params else {})

    async def delete(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return await self._request("DELETE", path, query=_query_params(params))

    async def _request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self._config.base_url}{path}"
        _logger.debug("%s %s query=%s body=%s", method, url, query, redact_for_log(body))

        try:
            async with self._http.request(
                method,
                url,
                params=query,
                json=body,
                headers=self._headers(),
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise CaronaeTransportError(
                        f"HTTP {resp.status} from {path}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=path,
                    )
        except CaronaeTransportError:
            raise
        except TimeoutError as exc:
            raise CaronaeTransportError(f"Request to {path} timed out", endpoint=path) from exc
        except aiohttp.ClientError as exc:
            raise CaronaeTransportError(
                f"Request to {path} failed: {exc}",
                endpoint=path,
            ) from exc

        if not text.strip():
            return None

        try:
            result = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CaronaeTransportError(
                f"Invalid JSON from {path}: {text[:200]}",
                status_code=resp.status,
                endpoint=path,
            ) from exc

        _logger.debug("%s %s -> %s", method, path, redact_for_log(result))
        return result
