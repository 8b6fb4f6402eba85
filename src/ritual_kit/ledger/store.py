"""JSON ledger store for ceremonial events.

Overview
--------
The ledger is a single JSON document recording every ceremony the kit has
performed, in the order it was performed, together with running counters::

    {
      "shrine": "Basilica Gate of Kypria LLC",
      "created": "2026-10-18T14:05:11.402311+00:00",
      "entries": [
        {
          "id": "ceremony_mgw3k2a1_x9q2p",
          "type": "role_grant",
          "timestamp": "October 18, 2026, 02:05 PM UTC",
          "details": {"role": "keeper", "recipient": "u1", "granter": "u2"}
        }
      ],
      "statistics": {
        "total_ceremonies": 1,
        "roles_granted": 1,
        "badges_affixed": 0
      }
    }

``entries`` is append-only.  ``total_ceremonies`` always equals the number of
entries; ``roles_granted`` and ``badges_affixed`` count the ``role_grant`` and
``badge_affix`` entries respectively.  Other event types are allowed and only
contribute to ``total_ceremonies``.

Write path
----------
:meth:`LedgerStore.log_event` is the only write path for entries.  Each call
runs a full load-modify-store cycle; nothing is cached between calls.
There is no cross-process locking (see :mod:`ritual_kit.documents`).

Failure isolation
-----------------
``log_event`` reports storage failures by returning ``False`` after logging
at ERROR level.  Read operations let :exc:`~ritual_kit.errors.StorageIOError`
propagate to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ritual_kit.documents import read_document, write_document
from ritual_kit.errors import RitualOperationContext, StorageIOError
from ritual_kit.recorder import Details, format_entry, iso_timestamp

logger = logging.getLogger(__name__)

ROLE_GRANT = "role_grant"
BADGE_AFFIX = "badge_affix"

# Event type -> statistics counter incremented alongside total_ceremonies.
_TYPE_COUNTERS = {
    ROLE_GRANT: "roles_granted",
    BADGE_AFFIX: "badges_affixed",
}

DEFAULT_RECENT_LIMIT = 10


# ── Record types ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LedgerEntry:
    """One ceremonial event as stored in ``entries``.

    Attributes:
        id: Ceremony ID (``ceremony_<base36 ms>_<suffix>``).
        type: Event kind, e.g. ``"role_grant"`` or ``"badge_affix"``.
        timestamp: Human-readable UTC timestamp.
        details: Event-specific scalar fields (role, recipient, granter, ...).
    """

    id: str
    type: str
    timestamp: str
    details: Details

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> LedgerEntry:
        return cls(
            id=str(raw.get("id", "")),
            type=str(raw.get("type", "")),
            timestamp=str(raw.get("timestamp", "")),
            details=dict(raw.get("details") or {}),
        )


@dataclass(frozen=True)
class LedgerStatistics:
    """Counters and shrine metadata returned by :meth:`LedgerStore.statistics_snapshot`."""

    shrine: str
    created: str
    total_ceremonies: int
    roles_granted: int
    badges_affixed: int


# ── Store ─────────────────────────────────────────────────────────────────────


class LedgerStore:
    """Append-only ceremonial ledger backed by one JSON file.

    Args:
        path: Location of the ledger document.
        shrine: Display label written into a newly created ledger.
    """

    def __init__(self, path: Path, *, shrine: str) -> None:
        self.path = Path(path)
        self.shrine = shrine

    def initialize(self) -> bool:
        """Create an empty ledger if none exists at :attr:`path`.

        Idempotent: an existing ledger is never touched.

        Returns:
            ``True`` if a new ledger was written, ``False`` if one already existed.

        Raises:
            StorageIOError: If the new ledger cannot be written.
        """
        if self.path.exists():
            return False

        initial = {
            "shrine": self.shrine,
            "created": iso_timestamp(),
            "entries": [],
            "statistics": {
                "total_ceremonies": 0,
                "roles_granted": 0,
                "badges_affixed": 0,
            },
        }
        write_document(self.path, initial, operation="ledger.initialize")
        logger.info("Ceremonial ledger initialized at %s", self.path)
        return True

    def log_event(self, event_type: str, details: dict[str, Any]) -> bool:
        """Append one ceremonial event and update the counters.

        Args:
            event_type: Event kind.  ``role_grant`` and ``badge_affix`` also
                bump their dedicated counters.
            details: Scalar-valued event fields.

        Returns:
            ``True`` once the ledger has been written, ``False`` if reading or
            writing the ledger failed.  Failures are logged, never retried.

        Raises:
            ValueError: If ``event_type`` is blank or ``details`` holds a
                non-scalar value.
        """
        entry = format_entry(event_type, details)

        try:
            self.initialize()
            ledger = self._load("ledger.log_event")

            ledger["entries"].append(entry)
            statistics = ledger["statistics"]
            counter = _TYPE_COUNTERS.get(event_type)
            if counter is not None:
                statistics[counter] = int(statistics.get(counter, 0)) + 1
            statistics["total_ceremonies"] = int(statistics.get("total_ceremonies", 0)) + 1

            write_document(self.path, ledger, operation="ledger.log_event")
        except StorageIOError as exc:
            logger.error("Failed to log ceremonial event %r: %s", event_type, exc)
            return False

        logger.info("Logged ceremonial event: %s (ID: %s)", event_type, entry["id"])
        return True

    def read_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[LedgerEntry]:
        """Return up to ``limit`` entries, newest first.

        A missing ledger or a non-positive ``limit`` yields an empty list.

        Raises:
            StorageIOError: If the ledger exists but cannot be read.
        """
        if limit <= 0 or not self.path.exists():
            return []
        entries = self._load("ledger.read_recent")["entries"]
        return [LedgerEntry.from_dict(raw) for raw in reversed(entries[-limit:])]

    def statistics_snapshot(self) -> LedgerStatistics | None:
        """Return the current counters, or ``None`` when no ledger exists yet.

        Raises:
            StorageIOError: If the ledger exists but cannot be read.
        """
        if not self.path.exists():
            return None
        ledger = self._load("ledger.statistics_snapshot")
        statistics = ledger["statistics"]
        return LedgerStatistics(
            shrine=str(ledger.get("shrine", "")),
            created=str(ledger.get("created", "")),
            total_ceremonies=int(statistics.get("total_ceremonies", 0)),
            roles_granted=int(statistics.get("roles_granted", 0)),
            badges_affixed=int(statistics.get("badges_affixed", 0)),
        )

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _load(self, operation: str) -> dict[str, Any]:
        """Read the ledger and check its top-level shape."""
        ledger = read_document(self.path, operation=operation)
        if not isinstance(ledger.get("entries"), list):
            raise StorageIOError(
                context=RitualOperationContext(operation, f"{self.path} has no 'entries' list")
            )
        if not isinstance(ledger.get("statistics"), dict):
            raise StorageIOError(
                context=RitualOperationContext(
                    operation, f"{self.path} has no 'statistics' object"
                )
            )
        return ledger
