"""Helpers for safe debug logging.

Request and response bodies carry personal data (phone numbers, emails)
and the API token.  This module redacts those fields before they are
emitted in DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "token",
        "authorization",
        "cookie",
        "password",
        "email",
        "phone_number",
        "phonenumber",
        "facebook_id",
        "facebookid",
    }
)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in _SENSITIVE_VALUE_KEYS:
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        # Long ride lists are common; keep the log line bounded.
        items = list(value)
        head = [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in items[:50]]
        if len(items) > 50:
            head.append(f"<{len(items) - 50} more>")
        return head

    return repr(value)
