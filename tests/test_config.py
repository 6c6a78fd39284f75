from __future__ import annotations

from pathlib import Path

import pytest

from pycaronae.config import CaronaeConfig
from pycaronae.exceptions import CaronaeConfigError


def test_from_env_reads_caronae_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARONAE_TOKEN", "secret-token")
    monkeypatch.setenv("CARONAE_BASE_URL", "https://api.example.test")
    monkeypatch.setenv("CARONAE_REQUEST_TIMEOUT", "5")
    monkeypatch.setenv("CARONAE_STORE_PATH", "/tmp/caronae/rides.json")
    monkeypatch.setenv("CARONAE_MQTT_ENABLED", "yes")
    monkeypatch.setenv("CARONAE_MQTT_PORT", "1883")

    config = CaronaeConfig.from_env()

    assert config.token == "secret-token"
    assert config.base_url == "https://api.example.test"
    assert config.request_timeout == 5.0
    assert config.store_path == Path("/tmp/caronae/rides.json")
    assert config.mqtt_enabled is True
    assert config.mqtt_port == 1883


def test_explicit_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARONAE_TOKEN", "from-env")
    monkeypatch.setenv("CARONAE_MQTT_ENABLED", "1")

    config = CaronaeConfig.from_env(token="explicit", mqtt_enabled=False)

    assert config.token == "explicit"
    assert config.mqtt_enabled is False


def test_unknown_time_zone_is_rejected() -> None:
    with pytest.raises(CaronaeConfigError):
        CaronaeConfig(time_zone="Mars/Olympus_Mons")


def test_non_positive_timeout_is_rejected() -> None:
    with pytest.raises(CaronaeConfigError):
        CaronaeConfig(request_timeout=0)
