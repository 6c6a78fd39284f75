"""High-level async client wiring the ride service to its collaborators."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from pycaronae._transport import HttpTransport
from pycaronae.config import CaronaeConfig
from pycaronae.coordinators import (
    ChatCoordinator,
    InMemoryNotificationCenter,
    MqttChatCoordinator,
    NotificationCoordinator,
    NullChatCoordinator,
)
from pycaronae.exceptions import CaronaeError
from pycaronae.identity import CurrentUserProvider, StaticCurrentUser
from pycaronae.models.user import User
from pycaronae.service import RideService
from pycaronae.store.base import LocalStore
from pycaronae.store.file import JsonFileStore
from pycaronae.store.memory import MemoryStore

_logger = logging.getLogger(__name__)


class CaronaeClient:
    """Async client for the Caronae ride API with a local ride cache.

    Usage::

        async with CaronaeClient(config, current_user=me) as client:
            await client.rides.update_offered_rides()
            active = await client.rides.get_active_rides()

    Collaborators not passed in are built from *config*: a
    :class:`JsonFileStore` when ``config.store_path`` is set (a
    :class:`MemoryStore` otherwise), an in-memory notification center,
    and an MQTT chat coordinator when ``config.mqtt_enabled``.
    """

    def __init__(
        self,
        config: CaronaeConfig,
        *,
        current_user: User | CurrentUserProvider | None = None,
        session: aiohttp.ClientSession | None = None,
        store: LocalStore | None = None,
        chat: ChatCoordinator | None = None,
        notifications: NotificationCoordinator | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        if current_user is None or isinstance(current_user, User):
            self._identity: CurrentUserProvider = StaticCurrentUser(current_user)
        else:
            self._identity = current_user
        if store is None:
            store = JsonFileStore(config.store_path) if config.store_path is not None else MemoryStore()
        self._store = store
        self._notifications = notifications if notifications is not None else InMemoryNotificationCenter()
        self._chat = chat
        self._mqtt_chat: MqttChatCoordinator | None = None
        self._rides: RideService | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CaronaeClient:
        loop = asyncio.get_running_loop()
        if isinstance(self._store, MemoryStore):
            await self._store.open()
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        transport = HttpTransport(self._config, self._http_session)

        chat = self._chat
        if chat is None:
            if self._config.mqtt_enabled:
                pending = self._notifications if isinstance(self._notifications, InMemoryNotificationCenter) else None
                self._mqtt_chat = MqttChatCoordinator(self._config, loop=loop, notifications=pending)
                user = self._identity.get_current_user()
                await self._mqtt_chat.start(user.id if user is not None else None)
                chat = self._mqtt_chat
            else:
                chat = NullChatCoordinator()

        self._rides = RideService(
            transport,
            self._store,
            chat,
            self._notifications,
            self._identity,
            config=self._config,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._mqtt_chat is not None:
            await self._mqtt_chat.stop()
            self._mqtt_chat = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._rides = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def rides(self) -> RideService:
        if self._rides is None:
            raise CaronaeError("Client not initialized. Use 'async with CaronaeClient(...) as client:'")
        return self._rides

    @property
    def store(self) -> LocalStore:
        return self._store

    @property
    def notifications(self) -> NotificationCoordinator:
        return self._notifications
