"""Shared helpers for Caronae endpoint modules.

This module centralizes the response handling every endpoint repeats:
- checking that a body has the expected shape
- decoding a batch of records leniently

It is internal to pycaronae and may change at any time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pycaronae.exceptions import CaronaeDecodeError

_logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=BaseModel)


def expect_list(endpoint: str, body: Any, *, key: str | None = None) -> list[Any]:
    """Return *body* (or ``body[key]``) when it is a list of records.

    Raises :class:`CaronaeDecodeError` otherwise, so callers never see a
    bare ``None`` for a malformed response.
    """
    value = body
    if key is not None:
        if not isinstance(body, dict):
            raise CaronaeDecodeError(f"{endpoint} response is not an object", endpoint=endpoint)
        value = body.get(key)
    if not isinstance(value, list):
        where = f"'{key}' in " if key is not None else ""
        raise CaronaeDecodeError(f"{where}{endpoint} response is not a list", endpoint=endpoint)
    return value


def expect_object(endpoint: str, body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise CaronaeDecodeError(f"{endpoint} response is not an object", endpoint=endpoint)
    return body


def decode_each(
    model: type[TModel],
    items: Iterable[Any],
    *,
    context: dict[str, Any] | None = None,
) -> list[TModel]:
    """Validate each item, silently dropping the ones that do not decode."""
    decoded: list[TModel] = []
    for item in items:
        try:
            decoded.append(model.model_validate(item, context=context))
        except ValidationError as exc:
            _logger.debug("Dropping undecodable %s record: %s", model.__name__, exc.errors(include_url=False))
    return decoded
