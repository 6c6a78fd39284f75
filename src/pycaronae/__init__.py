"""pycaronae - Async client and local ride cache for the Caronae ride-sharing API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pycaronae")
except PackageNotFoundError:
    __version__ = "0+local"
from pycaronae.client import CaronaeClient
from pycaronae.config import CaronaeConfig
from pycaronae.coordinators import (
    ChatCoordinator,
    InMemoryNotificationCenter,
    MqttChatCoordinator,
    NotificationCoordinator,
    NotificationKind,
    NullChatCoordinator,
)
from pycaronae.exceptions import (
    CaronaeConfigError,
    CaronaeDecodeError,
    CaronaeError,
    CaronaeNotAuthenticatedError,
    CaronaeStoreError,
    CaronaeTransportError,
)
from pycaronae.identity import CurrentUserProvider, StaticCurrentUser
from pycaronae.models import Ride, RideDateValidation, RideRequest, User
from pycaronae.service import RideService
from pycaronae.store import JsonFileStore, LocalStore, MemoryStore

__all__ = [
    "__version__",
    "CaronaeClient",
    "CaronaeConfig",
    "CaronaeConfigError",
    "CaronaeDecodeError",
    "CaronaeError",
    "CaronaeNotAuthenticatedError",
    "CaronaeStoreError",
    "CaronaeTransportError",
    "ChatCoordinator",
    "CurrentUserProvider",
    "InMemoryNotificationCenter",
    "JsonFileStore",
    "LocalStore",
    "MemoryStore",
    "MqttChatCoordinator",
    "NotificationCoordinator",
    "NotificationKind",
    "NullChatCoordinator",
    "Ride",
    "RideDateValidation",
    "RideRequest",
    "RideService",
    "StaticCurrentUser",
    "User",
]
