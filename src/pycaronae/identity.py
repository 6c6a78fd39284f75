"""Current user resolution."""

from __future__ import annotations

from typing import Protocol

from pycaronae.models.user import User


class CurrentUserProvider(Protocol):
    def get_current_user(self) -> User | None:
        ...


class StaticCurrentUser:
    """Provider for a user known up front (e.g. restored from app settings)."""

    def __init__(self, user: User | None = None) -> None:
        self._user = user

    def get_current_user(self) -> User | None:
        return self._user

    def set_current_user(self, user: User | None) -> None:
        self._user = user
