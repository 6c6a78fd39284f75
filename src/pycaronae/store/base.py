"""Structural interfaces of the local store."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, TypeVar

from pycaronae.models.ride import Ride
from pycaronae.models.ride_request import RideRequest
from pycaronae.models.user import User

Entity = Ride | RideRequest | User
TEntity = TypeVar("TEntity", Ride, RideRequest, User)
CommitHook = Callable[[], Any]

#: Record types the store knows about, in the order they are persisted.
ENTITY_TYPES: tuple[type[Ride] | type[RideRequest] | type[User], ...] = (User, Ride, RideRequest)


class StoreTransaction(Protocol):
    """Write scope handed out by :meth:`LocalStore.transaction`.

    Reads see the transaction's own uncommitted writes.
    """

    def get(self, model: type[TEntity], entity_id: int) -> TEntity | None:
        ...

    def query(self, model: type[TEntity], predicate: Callable[[TEntity], bool] | None = None) -> list[TEntity]:
        ...

    def upsert(self, entities: Iterable[Entity]) -> None:
        ...

    def delete(self, entities: Iterable[Entity]) -> None:
        ...

    def delete_where(self, model: type[TEntity], predicate: Callable[[TEntity], bool]) -> list[TEntity]:
        ...

    def on_commit(self, hook: CommitHook) -> None:
        ...


class LocalStore(Protocol):
    """Typed get/query over stored records plus all-or-nothing write scopes."""

    def transaction(self) -> AbstractAsyncContextManager[StoreTransaction]:
        ...

    def get(self, model: type[TEntity], entity_id: int) -> TEntity | None:
        ...

    def query(self, model: type[TEntity], predicate: Callable[[TEntity], bool] | None = None) -> list[TEntity]:
        ...
