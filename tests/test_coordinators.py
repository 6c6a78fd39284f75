from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from types import SimpleNamespace

import pytest

from pycaronae import _mqtt as mqtt_module
from pycaronae._mqtt import (
    ChatEvent,
    ChatMqttRuntime,
    MqttBootstrap,
    chat_topic,
    decode_chat_payload,
    parse_chat_topic,
)
from pycaronae.config import CaronaeConfig
from pycaronae.coordinators import (
    InMemoryNotificationCenter,
    MqttChatCoordinator,
    NotificationKind,
    call_best_effort,
)
from pycaronae.exceptions import CaronaeError


class TestNotificationCenter:
    def test_clear_by_kind_keeps_other_kinds(self) -> None:
        center = InMemoryNotificationCenter()
        center.add(1, NotificationKind.CHAT)
        center.add(1, NotificationKind.CHAT)
        center.add(1, NotificationKind.RIDE_JOIN_REQUEST)

        center.clear(1, NotificationKind.RIDE_JOIN_REQUEST)

        assert center.pending(1) == 2
        assert center.pending(1, NotificationKind.RIDE_JOIN_REQUEST) == 0

    def test_clear_all_kinds(self) -> None:
        center = InMemoryNotificationCenter()
        center.add(1, NotificationKind.CHAT)
        center.add(2, NotificationKind.RIDE_FINISHED)

        center.clear(1)

        assert center.rides_with_pending() == [2]

    def test_clearing_unknown_ride_is_noop(self) -> None:
        center = InMemoryNotificationCenter()
        center.clear(99, NotificationKind.CHAT)
        assert center.rides_with_pending() == []


def test_call_best_effort_logs_and_swallows(caplog: pytest.LogCaptureFixture) -> None:
    def boom(_ride_id: int) -> None:
        raise RuntimeError("broker unreachable")

    with caplog.at_level("WARNING", logger="pycaronae.coordinators"):
        call_best_effort("chat.subscribe", boom, 5)

    assert "chat.subscribe(5,) failed" in caplog.text


class TestChatTopics:
    def test_topic_round_trip(self) -> None:
        assert chat_topic("rides", 12) == "rides/12"
        assert parse_chat_topic("rides", "rides/12") == 12

    def test_foreign_topics_are_ignored(self) -> None:
        assert parse_chat_topic("rides", "other/12") is None
        assert parse_chat_topic("rides", "rides/abc") is None

    def test_non_object_payload_is_rejected(self) -> None:
        with pytest.raises(CaronaeError):
            decode_chat_payload(b"[1, 2]")


@dataclass
class _FakeRuntime:
    subscribed: list[int] = field(default_factory=list)
    unsubscribed: list[int] = field(default_factory=list)
    started_with: MqttBootstrap | None = None

    def subscribe(self, ride_id: int) -> None:
        self.subscribed.append(ride_id)

    def unsubscribe(self, ride_id: int) -> None:
        self.unsubscribed.append(ride_id)

    def start(self, bootstrap: MqttBootstrap) -> None:
        self.started_with = bootstrap

    def stop(self) -> None:
        return None


@pytest.mark.asyncio
async def test_mqtt_chat_coordinator_delegates_and_records_messages() -> None:
    config = CaronaeConfig(token="tok", mqtt_enabled=True, mqtt_topic_prefix="chat")
    runtime = _FakeRuntime()
    center = InMemoryNotificationCenter()
    received: list[ChatEvent] = []
    coordinator = MqttChatCoordinator(
        config,
        loop=asyncio.get_running_loop(),
        notifications=center,
        on_message=received.append,
        runtime=runtime,  # type: ignore[arg-type]
    )

    await coordinator.start(7)
    coordinator.subscribe(3)
    coordinator.unsubscribe(3)
    event = ChatEvent(ride_id=3, topic="chat/3", payload={"message": "oi"})
    coordinator._on_event(event)  # noqa: SLF001

    assert runtime.started_with is not None
    assert runtime.started_with.client_id == "caronae_7"
    assert runtime.started_with.topic_prefix == "chat"
    assert runtime.subscribed == [3]
    assert runtime.unsubscribed == [3]
    assert center.pending(3, NotificationKind.CHAT) == 1
    assert received == [event]


class _EagerMqttClient:
    """paho client stand-in whose connect callback fires inside ``connect``."""

    def __init__(self, **_kwargs: object) -> None:
        self.on_connect = None
        self.on_message = None
        self.on_disconnect = None
        self.topics: list[str] = []
        self.during_connect: list = []

    def enable_logger(self, _logger: object) -> None:
        return None

    def username_pw_set(self, _username: str, _password: str) -> None:
        return None

    def tls_set(self) -> None:
        return None

    def connect(self, _host: str, _port: int, keepalive: int = 60) -> None:
        self.on_connect(self, None, None, SimpleNamespace(value=0), None)
        for callback in self.during_connect:
            callback()

    def loop_start(self) -> None:
        return None

    def loop_stop(self) -> None:
        return None

    def disconnect(self) -> None:
        return None

    def subscribe(self, topic: str, qos: int = 0) -> None:
        self.topics.append(topic)

    def unsubscribe(self, topic: str) -> None:
        self.topics.remove(topic)


@pytest.mark.asyncio
async def test_subscribe_right_after_early_connect_reaches_broker(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[_EagerMqttClient] = []
    runtime = ChatMqttRuntime(loop=asyncio.get_running_loop(), on_event=lambda _event: None)

    def make_client(**kwargs: object) -> _EagerMqttClient:
        client = _EagerMqttClient(**kwargs)
        client.during_connect.append(lambda: runtime.subscribe(9))
        created.append(client)
        return client

    monkeypatch.setattr(mqtt_module.mqtt, "Client", make_client)
    runtime.subscribe(4)

    runtime.start(
        MqttBootstrap(
            broker_host="broker",
            broker_port=8883,
            client_id="caronae_1",
            username="",
            password="",
            topic_prefix="rides",
        )
    )

    assert created[0].topics == ["rides/4", "rides/9"]
    assert runtime.is_running
    runtime.stop()
    assert not runtime.is_running
