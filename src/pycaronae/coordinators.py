"""Side-effect coordinators keyed by ride identifier.

The reconciliation service drives two subsystems whose state must follow
the local store: chat-topic subscriptions and pending notifications.
Calls into them are fire-and-forget; :func:`call_best_effort` is the
single place where their failures are swallowed and logged.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Protocol

from pycaronae._mqtt import ChatEvent, ChatMqttRuntime, MqttBootstrap
from pycaronae.config import CaronaeConfig

_logger = logging.getLogger(__name__)


class NotificationKind(StrEnum):
    CHAT = "chat"
    RIDE_JOIN_REQUEST = "ride_join_request"
    RIDE_JOIN_REQUEST_ACCEPTED = "ride_join_request_accepted"
    RIDE_CANCELED = "ride_canceled"
    RIDE_FINISHED = "ride_finished"


class ChatCoordinator(Protocol):
    def subscribe(self, ride_id: int) -> None:
        ...

    def unsubscribe(self, ride_id: int) -> None:
        ...


class NotificationCoordinator(Protocol):
    def clear(self, ride_id: int, kind: NotificationKind | None = None) -> None:
        ...


def call_best_effort(label: str, fn: Callable[..., Any], *args: Any) -> None:
    """Call a coordinator; failures are logged, never raised."""
    try:
        fn(*args)
    except Exception:
        _logger.warning("%s%r failed", label, args, exc_info=True)


class NullChatCoordinator:
    """Chat coordinator used when chat is disabled."""

    def subscribe(self, ride_id: int) -> None:
        _logger.debug("Chat disabled; not subscribing ride=%s", ride_id)

    def unsubscribe(self, ride_id: int) -> None:
        _logger.debug("Chat disabled; not unsubscribing ride=%s", ride_id)


class InMemoryNotificationCenter:
    """Pending notification counts per ride and kind."""

    def __init__(self) -> None:
        self._pending: dict[int, dict[NotificationKind, int]] = {}

    def add(self, ride_id: int, kind: NotificationKind) -> None:
        by_kind = self._pending.setdefault(ride_id, {})
        by_kind[kind] = by_kind.get(kind, 0) + 1

    def clear(self, ride_id: int, kind: NotificationKind | None = None) -> None:
        """Clear every notification of *ride_id*, or only those of *kind*."""
        if kind is None:
            self._pending.pop(ride_id, None)
            return
        by_kind = self._pending.get(ride_id)
        if by_kind is None:
            return
        by_kind.pop(kind, None)
        if not by_kind:
            del self._pending[ride_id]

    def pending(self, ride_id: int, kind: NotificationKind | None = None) -> int:
        by_kind = self._pending.get(ride_id, {})
        if kind is None:
            return sum(by_kind.values())
        return by_kind.get(kind, 0)

    def rides_with_pending(self) -> list[int]:
        return sorted(self._pending)


class MqttChatCoordinator:
    """Chat subscriptions backed by MQTT topics ``{prefix}/{ride_id}``.

    Incoming chat messages are recorded as ``chat`` notifications of the
    ride they belong to.
    """

    def __init__(
        self,
        config: CaronaeConfig,
        *,
        loop: asyncio.AbstractEventLoop,
        notifications: InMemoryNotificationCenter | None = None,
        on_message: Callable[[ChatEvent], None] | None = None,
        runtime: ChatMqttRuntime | None = None,
    ) -> None:
        self._config = config
        self._loop = loop
        self._notifications = notifications
        self._on_message_cb = on_message
        self._runtime = runtime or ChatMqttRuntime(
            loop=loop,
            on_event=self._on_event,
            keepalive=config.mqtt_keepalive,
            logger=_logger,
        )

    @property
    def runtime(self) -> ChatMqttRuntime:
        return self._runtime

    def bootstrap(self, user_id: int | None) -> MqttBootstrap:
        client_id = f"caronae_{user_id}" if user_id is not None else "caronae_anonymous"
        return MqttBootstrap(
            broker_host=self._config.mqtt_host,
            broker_port=self._config.mqtt_port,
            client_id=client_id,
            username=str(user_id) if user_id is not None else "",
            password=self._config.token,
            topic_prefix=self._config.mqtt_topic_prefix,
        )

    async def start(self, user_id: int | None) -> None:
        """Best-effort startup (failures must not break the REST flow)."""
        try:
            await self._loop.run_in_executor(None, self._runtime.start, self.bootstrap(user_id))
        except Exception:
            _logger.warning("MQTT chat runtime start failed", exc_info=True)

    async def stop(self) -> None:
        try:
            await self._loop.run_in_executor(None, self._runtime.stop)
        except Exception:
            _logger.debug("MQTT chat runtime stop failed", exc_info=True)

    def subscribe(self, ride_id: int) -> None:
        self._runtime.subscribe(ride_id)

    def unsubscribe(self, ride_id: int) -> None:
        self._runtime.unsubscribe(ride_id)

    def _on_event(self, event: ChatEvent) -> None:
        if self._notifications is not None:
            self._notifications.add(event.ride_id, NotificationKind.CHAT)
        if self._on_message_cb is not None:
            try:
                self._on_message_cb(event)
            except Exception:
                _logger.debug("on_message callback failed", exc_info=True)
