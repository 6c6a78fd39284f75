"""Transactional in-memory store.

Records are frozen pydantic models, so a transaction only has to copy
the per-type dictionaries to get a private working set: committing
swaps the working set in, aborting drops it.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable, Iterable
from typing import Any

from pycaronae.exceptions import CaronaeStoreError
from pycaronae.models.ride import Ride
from pycaronae.models.user import User
from pycaronae.store.base import ENTITY_TYPES, CommitHook, Entity, TEntity

_logger = logging.getLogger(__name__)

Tables = dict[type, dict[int, Any]]


def empty_tables() -> Tables:
    return {model: {} for model in ENTITY_TYPES}


def _copy_tables(tables: Tables) -> Tables:
    return {model: dict(rows) for model, rows in tables.items()}


def _table(tables: Tables, model: type) -> dict[int, Any]:
    try:
        return tables[model]
    except KeyError:
        raise TypeError(f"{model.__name__} is not a stored record type") from None


def _resolve(tables: Tables, record: Any) -> Any:
    """Point a ride's driver/riders at the shared User records."""
    if not isinstance(record, Ride):
        return record
    users = tables[User]
    driver = record.driver
    if driver is not None:
        driver = users.get(driver.id, driver)
    riders = [users.get(rider.id, rider) for rider in record.riders]
    if driver is record.driver and all(a is b for a, b in zip(riders, record.riders, strict=True)):
        return record
    return record.model_copy(update={"driver": driver, "riders": riders})


def read_one(tables: Tables, model: type[TEntity], entity_id: int) -> TEntity | None:
    record = _table(tables, model).get(entity_id)
    return None if record is None else _resolve(tables, record)


def read_many(
    tables: Tables,
    model: type[TEntity],
    predicate: Callable[[TEntity], bool] | None = None,
) -> list[TEntity]:
    rows = _table(tables, model)
    result: list[TEntity] = []
    for entity_id in sorted(rows):
        record = _resolve(tables, rows[entity_id])
        if predicate is None or predicate(record):
            result.append(record)
    return result


def run_commit_hooks(hooks: list[CommitHook]) -> None:
    """Run post-commit hooks in order; a failing hook never stops the others."""
    for hook in hooks:
        try:
            hook()
        except Exception:
            _logger.warning("Post-commit hook %r failed", hook, exc_info=True)


class MemoryTransaction:
    """Private working copy of the store tables."""

    def __init__(self, tables: Tables) -> None:
        self.tables = tables
        self.hooks: list[CommitHook] = []

    def get(self, model: type[TEntity], entity_id: int) -> TEntity | None:
        return read_one(self.tables, model, entity_id)

    def query(self, model: type[TEntity], predicate: Callable[[TEntity], bool] | None = None) -> list[TEntity]:
        return read_many(self.tables, model, predicate)

    def upsert(self, entities: Iterable[Entity]) -> None:
        """Insert or fully replace records by identifier.

        A ride's driver and riders are upserted as Users too.
        """
        for entity in entities:
            if isinstance(entity, Ride):
                users = self.tables[User]
                if entity.driver is not None:
                    users[entity.driver.id] = entity.driver
                for rider in entity.riders:
                    users[rider.id] = rider
            _table(self.tables, type(entity))[entity.id] = entity

    def delete(self, entities: Iterable[Entity]) -> None:
        for entity in entities:
            _table(self.tables, type(entity)).pop(entity.id, None)

    def delete_where(self, model: type[TEntity], predicate: Callable[[TEntity], bool]) -> list[TEntity]:
        doomed = read_many(self.tables, model, predicate)
        self.delete(doomed)
        return doomed

    def on_commit(self, hook: CommitHook) -> None:
        self.hooks.append(hook)


class MemoryStore:
    """In-process store with serialized, all-or-nothing transactions.

    Usage::

        async with store.transaction() as tx:
            tx.upsert(rides)
            tx.on_commit(lambda: chat.subscribe(ride.id))
    """

    def __init__(self) -> None:
        self._tables: Tables = empty_tables()
        self._lock = asyncio.Lock()

    def _load(self) -> Tables:
        """Return the committed tables, loading them first if needed."""
        return self._tables

    async def _persist(self, tables: Tables) -> None:
        """Make *tables* durable before they become the committed state."""

    async def open(self) -> None:
        """Load the committed tables without blocking the event loop."""

    def get(self, model: type[TEntity], entity_id: int) -> TEntity | None:
        return read_one(self._load(), model, entity_id)

    def query(self, model: type[TEntity], predicate: Callable[[TEntity], bool] | None = None) -> list[TEntity]:
        return read_many(self._load(), model, predicate)

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[MemoryTransaction]:
        await self.open()
        async with self._lock:
            tx = MemoryTransaction(_copy_tables(self._load()))
            yield tx
            try:
                await self._persist(tx.tables)
            except CaronaeStoreError:
                raise
            except Exception as exc:
                raise CaronaeStoreError(f"Failed to commit local store transaction: {exc}") from exc
            self._tables = tx.tables
        run_commit_hooks(tx.hooks)
