"""Ceremony identifiers, timestamps and ledger entry formatting.

Both the ledger and the badge store stamp their records with the same ID
scheme, so the helpers live here rather than in either store.  Nothing in
this module touches the filesystem.

ID format
---------
::

    ceremony_<base36 epoch milliseconds>_<5 random base36 characters>

The timestamp component makes IDs sort roughly chronologically; the random
suffix separates records created within the same millisecond.  Collisions
are possible in principle and accepted as negligible.

Details values
--------------
Entry ``details`` map string keys to scalars only (``str``, ``int``,
``float``, ``bool`` or ``None``) so the serialised ledger stays flat and
deterministic.  :func:`format_entry` rejects anything else.
"""

from __future__ import annotations

import secrets
import time
from datetime import UTC, datetime
from typing import Any, TypeAlias

Scalar: TypeAlias = str | int | float | bool | None
Details: TypeAlias = dict[str, Scalar]

_BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
_SUFFIX_LENGTH = 5
_SCALAR_TYPES = (str, int, float, bool, type(None))


def to_base36(value: int) -> str:
    """Render a non-negative integer in lowercase base 36."""
    if value < 0:
        raise ValueError("to_base36: value must be non-negative.")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def new_event_id(now_ms: int | None = None) -> str:
    """Return a fresh ceremony ID.

    Args:
        now_ms: Epoch milliseconds to embed.  Defaults to the current time.
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"ceremony_{to_base36(now_ms)}_{suffix}"


def iso_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp used for ``created`` fields and grant records."""
    return (now or datetime.now(UTC)).isoformat()


def ceremonial_timestamp(now: datetime | None = None) -> str:
    """Human-readable UTC timestamp, e.g. ``"October 18, 2026, 02:05 PM UTC"``."""
    now = (now or datetime.now(UTC)).astimezone(UTC)
    return f"{now:%B} {now.day}, {now:%Y}, {now:%I:%M %p} UTC"


def validate_details(details: dict[str, Any]) -> Details:
    """Return a copy of ``details`` after checking every value is a scalar.

    Raises:
        ValueError: If a key is not a string or a value is not a scalar.
    """
    checked: Details = {}
    for key, value in details.items():
        if not isinstance(key, str):
            raise ValueError(f"details keys must be strings, got {key!r}.")
        if not isinstance(value, _SCALAR_TYPES):
            raise ValueError(
                f"details[{key!r}] must be a str, number, bool or None, "
                f"got {type(value).__name__}."
            )
        checked[key] = value
    return checked


def format_entry(event_type: str, details: dict[str, Any]) -> dict[str, Any]:
    """Build the ``{id, type, timestamp, details}`` record appended to the ledger.

    Raises:
        ValueError: If ``event_type`` is blank or ``details`` holds non-scalars.
    """
    if not event_type or not event_type.strip():
        raise ValueError("format_entry: event_type must be a non-empty string.")
    return {
        "id": new_event_id(),
        "type": event_type,
        "timestamp": ceremonial_timestamp(),
        "details": validate_details(details),
    }
