"""Ride reconciliation service.

Each public coroutine covers one ride use case and follows the same
pipeline::

    remote fetch/mutate -> decode -> local store transaction -> coordinators

A failure at any stage stops the later ones:

* transport and decode errors are raised before the store or any
  coordinator is touched;
* a store error is raised and the side effects that were meant to follow
  the transaction are skipped (they are registered as post-commit hooks);
* coordinator failures are logged and never reach the caller;
* a record that is missing locally after a successful remote mutation is
  logged as a warning and the call still succeeds, since the remote state
  is authoritative.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, tzinfo
from functools import partial
from operator import attrgetter

from pycaronae._api import rides as _rides_api
from pycaronae._api._common import decode_each
from pycaronae._transport import Transport
from pycaronae.config import CaronaeConfig
from pycaronae.coordinators import (
    ChatCoordinator,
    NotificationCoordinator,
    NotificationKind,
    call_best_effort,
)
from pycaronae.exceptions import CaronaeNotAuthenticatedError, CaronaeStoreError
from pycaronae.identity import CurrentUserProvider
from pycaronae.models.ride import Ride
from pycaronae.models.ride_request import RideRequest
from pycaronae.models.user import User
from pycaronae.models.validation import RideDateValidation
from pycaronae.store.base import LocalStore, StoreTransaction

_logger = logging.getLogger(__name__)

_by_date = attrgetter("date")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RideService:
    """Keeps the local ride cache and its dependent subsystems in sync with the remote.

    All collaborators are injected; the service holds no global state.

    Usage::

        service = RideService(transport, store, chat, notifications, identity)
        rides = await service.get_active_rides()
    """

    def __init__(
        self,
        transport: Transport,
        store: LocalStore,
        chat: ChatCoordinator,
        notifications: NotificationCoordinator,
        identity: CurrentUserProvider,
        *,
        config: CaronaeConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transport = transport
        self._store = store
        self._chat = chat
        self._notifications = notifications
        self._identity = identity
        self._zone: tzinfo = config.zone if config is not None else UTC
        self._clock = clock

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _decode_rides(self, items: list[object]) -> list[Ride]:
        return decode_each(Ride, items, context={"tz": self._zone})

    def _require_current_user(self) -> User:
        user = self._identity.get_current_user()
        if user is None:
            raise CaronaeNotAuthenticatedError("No current user registered")
        return user

    def _release_ride(self, ride_id: int) -> None:
        """Drop the chat subscription and every notification of a ride."""
        call_best_effort("chat.unsubscribe", self._chat.unsubscribe, ride_id)
        call_best_effort("notifications.clear", self._notifications.clear, ride_id)

    async def _remove_ride_locally(self, ride_id: int, action: str) -> None:
        async with self._store.transaction() as tx:
            ride = tx.get(Ride, ride_id)
            if ride is None:
                _logger.warning("Ride %d not found locally after %s", ride_id, action)
                return
            tx.delete([ride])
            tx.delete_where(RideRequest, lambda request: request.id == ride_id)
            tx.on_commit(partial(self._release_ride, ride_id))

    def _subscribe_after_commit(self, tx: StoreTransaction, rides: Sequence[Ride]) -> None:
        for ride in rides:
            tx.on_commit(partial(call_best_effort, "chat.subscribe", self._chat.subscribe, ride.id))

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def get_all_rides(self) -> list[Ride]:
        """Every upcoming ride, soonest first.  Rides not strictly in the future are skipped."""
        items = await _rides_api.fetch_all_rides(self._transport)
        now = self._clock()
        rides = [ride for ride in self._decode_rides(items) if ride.is_in_the_future(now)]
        return sorted(rides, key=_by_date)

    def get_offered_rides(self) -> list[Ride]:
        """Rides the current user drives, read from the local store only."""
        user = self._require_current_user()
        rides = self._store.query(Ride, lambda ride: ride.driver is not None and ride.driver.id == user.id)
        return sorted(rides, key=_by_date)

    async def get_active_rides(self) -> list[Ride]:
        """Fetch the user's active rides and make them the only active ones locally.

        Clearing the previous active set and storing the new one happen in
        one transaction.  Join requests for rides that are now active are
        dropped: the request was accepted.
        """
        items = await _rides_api.fetch_active_rides(self._transport)
        rides = [ride.with_active(True) for ride in self._decode_rides(items)]
        active_ids = {ride.id for ride in rides}

        async with self._store.transaction() as tx:
            stale = tx.query(Ride, lambda ride: ride.is_active)
            tx.upsert(ride.with_active(False) for ride in stale)
            tx.upsert(rides)
            tx.delete_where(RideRequest, lambda request: request.id in active_ids)

        return sorted(rides, key=_by_date)

    async def get_rides_history(self) -> list[Ride]:
        """Past rides of the user, newest first."""
        items = await _rides_api.fetch_rides_history(self._transport)
        return sorted(self._decode_rides(items), key=_by_date, reverse=True)

    async def search_rides(
        self,
        center: str,
        neighborhoods: Sequence[str],
        date: datetime,
        going: bool,
    ) -> list[Ride]:
        """Search rides around *date*.  Results are transient and never stored."""
        params = _rides_api.build_search_params(center, neighborhoods, date, going, self._zone)
        items = await _rides_api.search_rides(self._transport, params)
        return sorted(self._decode_rides(items), key=_by_date)

    async def get_requesters_for_ride(self, ride_id: int) -> list[User]:
        """Users waiting for an answer on *ride_id*.

        Viewing the list clears the ride's join-request notifications.
        """
        items = await _rides_api.fetch_requesters(self._transport, ride_id)
        call_best_effort(
            "notifications.clear",
            self._notifications.clear,
            ride_id,
            NotificationKind.RIDE_JOIN_REQUEST,
        )
        return decode_each(User, items)

    # ------------------------------------------------------------------
    # Offering
    # ------------------------------------------------------------------

    async def update_offered_rides(self) -> list[Ride]:
        """Refresh the rides the current user offers and subscribe to their chats.

        The current user is forced as driver of every ride: local
        attribution wins over whatever the payload says.  Chat
        subscriptions are only issued once the rides are committed.
        """
        user = self._require_current_user()
        items = await _rides_api.fetch_offered_rides(self._transport, user.id)
        rides = [ride.with_driver(user) for ride in self._decode_rides(items)]

        async with self._store.transaction() as tx:
            tx.upsert(rides)
            self._subscribe_after_commit(tx, rides)

        return rides

    async def create_ride(self, ride: Ride) -> list[Ride]:
        """Offer *ride*; a routine yields several rides, all stored with the current user as driver."""
        user = self._require_current_user()
        items = await _rides_api.create_ride(self._transport, ride, self._zone)
        rides = [created.with_driver(user) for created in self._decode_rides(items)]

        async with self._store.transaction() as tx:
            tx.upsert(rides)

        return rides

    async def finish_ride(self, ride_id: int) -> None:
        await _rides_api.finish_ride(self._transport, ride_id)
        await self._remove_ride_locally(ride_id, "finishing it")

    async def leave_ride(self, ride_id: int) -> None:
        await _rides_api.leave_ride(self._transport, ride_id)
        await self._remove_ride_locally(ride_id, "leaving it")

    async def delete_routine(self, routine_id: int) -> None:
        """Delete every ride of a routine remotely, then locally.

        Coordinators are driven from the rides found before the delete.
        """
        await _rides_api.delete_routine(self._transport, routine_id)

        async with self._store.transaction() as tx:
            rides = tx.query(Ride, lambda ride: ride.routine_id == routine_id)
            if not rides:
                _logger.info("No local rides found for routine %d", routine_id)
                return

            for ride in rides:
                self._release_ride(ride.id)

            ride_ids = {ride.id for ride in rides}
            tx.delete(rides)
            tx.delete_where(RideRequest, lambda request: request.id in ride_ids)

    # ------------------------------------------------------------------
    # Joining
    # ------------------------------------------------------------------

    async def request_join_on_ride(self, ride_id: int) -> None:
        await _rides_api.request_join(self._transport, ride_id)
        async with self._store.transaction() as tx:
            tx.upsert([RideRequest(id=ride_id)])

    def has_requested_to_join_ride(self, ride_id: int) -> bool:
        """Whether a join request for *ride_id* is pending locally.  Never hits the network."""
        try:
            return self._store.get(RideRequest, ride_id) is not None
        except CaronaeStoreError:
            _logger.warning("Local store unavailable; assuming no join request for ride %d", ride_id, exc_info=True)
            return False

    async def answer_request_on_ride(self, ride_id: int, user: User, accepted: bool) -> None:
        """Send the driver's decision on *user*'s join request.

        The requester is stored and added to the ride's riders whatever the
        decision; *accepted* only goes to the server.
        """
        # TODO: skip the rider append on decline once product confirms the intended behaviour.
        await _rides_api.answer_join_request(self._transport, ride_id, user.id, accepted)

        async with self._store.transaction() as tx:
            tx.upsert([user])
            ride = tx.get(Ride, ride_id)
            if ride is None:
                _logger.warning("Ride %d not found locally after answering user %d", ride_id, user.id)
                return
            tx.upsert([ride.with_rider(user)])

    async def validate_ride_date(self, ride: Ride) -> RideDateValidation:
        """Check *ride*'s date and direction against the user's other rides.  No local state."""
        return await _rides_api.validate_duplicate(self._transport, ride, self._zone)
