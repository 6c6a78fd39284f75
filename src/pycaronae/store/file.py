"""JSON-file backed store.

Same semantics as :class:`MemoryStore`; the committed tables are also
written to a JSON file on every commit and read back on first use.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pycaronae.exceptions import CaronaeStoreError
from pycaronae.models.ride import Ride
from pycaronae.models.ride_request import RideRequest
from pycaronae.models.user import User
from pycaronae.store.memory import MemoryStore, Tables, empty_tables

_logger = logging.getLogger(__name__)

_FORMAT_VERSION = 1

_SECTION_NAMES: dict[type, str] = {
    User: "users",
    Ride: "rides",
    RideRequest: "ride_requests",
}


def _dump_tables(tables: Tables) -> str:
    document: dict[str, Any] = {"version": _FORMAT_VERSION}
    for model, section in _SECTION_NAMES.items():
        document[section] = [record.model_dump(mode="json") for _, record in sorted(tables[model].items())]
    return json.dumps(document, ensure_ascii=False, separators=(",", ":"))


def _parse_tables(text: str) -> Tables:
    document = json.loads(text)
    if not isinstance(document, dict):
        raise ValueError("store document is not an object")
    version = document.get("version")
    if version != _FORMAT_VERSION:
        raise ValueError(f"unsupported store format version: {version!r}")
    tables = empty_tables()
    for model, section in _SECTION_NAMES.items():
        for item in document.get(section) or []:
            record = model.model_validate(item)
            tables[model][record.id] = record
    return tables


class JsonFileStore(MemoryStore):
    """Store persisted to a single JSON file.

    Commits write a temporary file next to *path* and atomically replace
    it, so a crash never leaves a half-written cache behind.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__()
        self._path = Path(path)
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    async def open(self) -> None:
        """Read the file in an executor.

        ``get``/``query`` before ``open`` (or a first transaction) still work,
        but read the file synchronously on the calling thread.
        """
        if self._loaded:
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._load)

    def _load(self) -> Tables:
        if self._loaded:
            return self._tables
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            _logger.debug("No local store at %s; starting empty", self._path)
            text = None
        except OSError as exc:
            raise CaronaeStoreError(f"Cannot open local store {self._path}: {exc}") from exc

        if text is not None:
            try:
                self._tables = _parse_tables(text)
            except (ValueError, ValidationError) as exc:
                raise CaronaeStoreError(f"Local store {self._path} is corrupt: {exc}") from exc
        self._loaded = True
        return self._tables

    async def _persist(self, tables: Tables) -> None:
        text = _dump_tables(tables)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._write_atomic, text)
        except OSError as exc:
            raise CaronaeStoreError(f"Cannot write local store {self._path}: {exc}") from exc

    def _write_atomic(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.replace(tmp_name, self._path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
