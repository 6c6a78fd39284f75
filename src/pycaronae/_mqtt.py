"""Internal MQTT runtime for ride chat topics."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt

from pycaronae.exceptions import CaronaeError


@dataclass(frozen=True)
class MqttBootstrap:
    """Broker data required to connect to the chat broker."""

    broker_host: str
    broker_port: int
    client_id: str
    username: str
    password: str
    topic_prefix: str
    use_tls: bool = True


@dataclass(frozen=True)
class ChatEvent:
    """A message received on a ride chat topic."""

    ride_id: int
    topic: str
    payload: dict[str, Any]


def chat_topic(prefix: str, ride_id: int) -> str:
    return f"{prefix}/{ride_id}"


def parse_chat_topic(prefix: str, topic: str) -> int | None:
    """Return the ride id of a ``{prefix}/{ride_id}`` topic, or ``None``."""
    head, _, tail = topic.rpartition("/")
    if head != prefix or not tail.isdigit():
        return None
    return int(tail)


def decode_chat_payload(payload: bytes) -> dict[str, Any]:
    parsed = json.loads(payload.decode("utf-8"))
    if not isinstance(parsed, dict):
        raise CaronaeError("Chat payload is not a JSON object")
    return parsed


class ChatMqttRuntime:
    """Threaded paho-mqtt runtime that emits chat events onto an asyncio loop.

    The set of subscribed ride ids is kept locally so a reconnect
    resubscribes every topic.  ``subscribe``/``unsubscribe`` may be called
    before ``start`` or while disconnected.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        on_event: Callable[[ChatEvent], None],
        keepalive: int = 120,
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._on_event = on_event
        self._keepalive = keepalive
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False
        self._connected = False
        self._prefix = ""
        self._ride_ids: set[int] = set()
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        """Whether the MQTT runtime is actively running."""
        return self._running

    @property
    def subscribed_ride_ids(self) -> frozenset[int]:
        with self._lock:
            return frozenset(self._ride_ids)

    def subscribe(self, ride_id: int) -> None:
        with self._lock:
            self._ride_ids.add(ride_id)
            client = self._client if self._connected else None
        if client is not None:
            topic = chat_topic(self._prefix, ride_id)
            self._logger.debug("MQTT subscribing topic=%s", topic)
            client.subscribe(topic, qos=1)

    def unsubscribe(self, ride_id: int) -> None:
        with self._lock:
            self._ride_ids.discard(ride_id)
            client = self._client if self._connected else None
        if client is not None:
            topic = chat_topic(self._prefix, ride_id)
            self._logger.debug("MQTT unsubscribing topic=%s", topic)
            client.unsubscribe(topic)

    def start(self, bootstrap: MqttBootstrap) -> None:
        """Connect and subscribe every known ride topic."""
        self.stop()
        self._logger.debug(
            "MQTT runtime start requested host=%s port=%s client_id=%s",
            bootstrap.broker_host,
            bootstrap.broker_port,
            bootstrap.client_id,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=bootstrap.client_id,
            protocol=mqtt.MQTTv5,
        )
        client.enable_logger(self._logger)
        if bootstrap.username:
            client.username_pw_set(bootstrap.username, bootstrap.password)
        if bootstrap.use_tls:
            client.tls_set()

        self._prefix = bootstrap.topic_prefix

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected successfully reason=%s", reason_code)
            with self._lock:
                self._connected = True
                ride_ids = sorted(self._ride_ids)
            for ride_id in ride_ids:
                c.subscribe(chat_topic(self._prefix, ride_id), qos=1)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            try:
                ride_id = parse_chat_topic(self._prefix, msg.topic)
                if ride_id is None:
                    self._logger.debug("Ignoring message on unexpected topic=%s", msg.topic)
                    return
                event = ChatEvent(ride_id=ride_id, topic=msg.topic, payload=decode_chat_payload(msg.payload))
                self._loop.call_soon_threadsafe(self._on_event, event)
            except Exception:
                self._logger.debug("MQTT payload parse failure", exc_info=True)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            with self._lock:
                self._connected = False
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        with self._lock:
            self._client = client
        try:
            client.connect(bootstrap.broker_host, bootstrap.broker_port, keepalive=self._keepalive)
            client.loop_start()
        except Exception:
            with self._lock:
                self._client = None
            raise

        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect current MQTT client if running."""
        with self._lock:
            client = self._client
            self._client = None
            self._connected = False
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
