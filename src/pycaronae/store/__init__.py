"""Local store layer.

This package is the persistent cache of rides, join requests and users.
All writes go through a transaction that fully applies or fully
discards; the reconciliation service never touches the tables directly.
"""

from pycaronae.store.base import CommitHook, LocalStore, StoreTransaction
from pycaronae.store.file import JsonFileStore
from pycaronae.store.memory import MemoryStore

__all__ = [
    "CommitHook",
    "JsonFileStore",
    "LocalStore",
    "MemoryStore",
    "StoreTransaction",
]
