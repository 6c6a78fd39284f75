"""Client configuration for pycaronae."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pycaronae._constants import BASE_URL, DEFAULT_TIME_ZONE, USER_AGENT
from pycaronae.exceptions import CaronaeConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class CaronaeConfig:
    """Client configuration.

    Parameters
    ----------
    token : str
        API token of the signed-in user, sent as the ``token`` header.
    base_url : str
        API base URL.
    user_agent : str
        ``User-Agent`` header value.
    time_zone : str
        IANA time zone used when rendering ride dates for the remote
        service (search filters, duplicate validation, ride creation).
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    store_path : Path or None
        JSON file backing the local ride cache.  ``None`` keeps the
        cache in memory only.
    mqtt_enabled : bool
        Subscribe to ride chat topics over MQTT.
    mqtt_host : str
        Chat broker host.
    mqtt_port : int
        Chat broker port.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    mqtt_topic_prefix : str
        Chat topics are ``{prefix}/{ride_id}``.
    """

    token: str = ""
    base_url: str = BASE_URL
    user_agent: str = USER_AGENT
    time_zone: str = DEFAULT_TIME_ZONE
    request_timeout: float = 30.0
    store_path: Path | None = None
    mqtt_enabled: bool = False
    mqtt_host: str = "chat.caronae.com.br"
    mqtt_port: int = 8883
    mqtt_keepalive: int = 120
    mqtt_topic_prefix: str = "rides"

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise CaronaeConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        try:
            ZoneInfo(self.time_zone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise CaronaeConfigError(f"Unknown time zone: {self.time_zone!r}") from exc

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)

    @classmethod
    def from_env(cls, **overrides: Any) -> CaronaeConfig:
        """Create configuration from ``CARONAE_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CARONAE_TOKEN": "token",
            "CARONAE_BASE_URL": "base_url",
            "CARONAE_USER_AGENT": "user_agent",
            "CARONAE_TIME_ZONE": "time_zone",
            "CARONAE_MQTT_HOST": "mqtt_host",
            "CARONAE_MQTT_TOPIC_PREFIX": "mqtt_topic_prefix",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("CARONAE_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        store_env = env.get("CARONAE_STORE_PATH")
        if store_env and "store_path" not in overrides:
            config_kwargs["store_path"] = Path(store_env).expanduser()

        if "mqtt_enabled" not in overrides:
            config_kwargs["mqtt_enabled"] = _env_bool(env.get("CARONAE_MQTT_ENABLED"), False)

        port_env = env.get("CARONAE_MQTT_PORT")
        if port_env is not None and "mqtt_port" not in overrides:
            config_kwargs["mqtt_port"] = int(port_env)

        keepalive_env = env.get("CARONAE_MQTT_KEEPALIVE")
        if keepalive_env is not None and "mqtt_keepalive" not in overrides:
            config_kwargs["mqtt_keepalive"] = int(keepalive_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
