"""Badge catalog store: one JSON document per badge.

Each badge lives at ``<badges_dir>/<name>.json`` and embeds its own grant
history::

    {
      "name": "keeper-crest",
      "title": "Keeper Crest",
      "description": "Sacred mark of the shrine keeper",
      "color": "#FFD700",
      "created": "2026-10-18T14:05:11.402311+00:00",
      "ceremonies": [
        {
          "id": "ceremony_mgw3k2a1_x9q2p",
          "userId": "u1",
          "grantedBy": "u2",
          "timestamp": "2026-10-18T14:06:40.118204+00:00",
          "ceremony": "role_grant_keeper"
        }
      ]
    }

Badge names are filename-derived slugs and act as the identity key.  Grant
records are append-only.  Every affix is also forwarded to the ledger as a
``badge_affix`` event.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ritual_kit.documents import read_document, write_document
from ritual_kit.errors import NotFoundError, RitualOperationContext, StorageIOError
from ritual_kit.ledger import BADGE_AFFIX, LedgerStore
from ritual_kit.recorder import Scalar, iso_timestamp, new_event_id, validate_details

logger = logging.getLogger(__name__)

#: Badge names double as filenames, so only plain slugs are accepted.
_SLUG_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")

#: Seeded by :meth:`BadgeStore.initialize` when the file is absent.
BADGE_TEMPLATES: tuple[dict[str, str], ...] = (
    {
        "name": "initiate-seal",
        "title": "Initiate Seal",
        "description": "Mark of the newly inducted shrine member",
        "color": "#45B7D1",
    },
    {
        "name": "keeper-crest",
        "title": "Keeper Crest",
        "description": "Sacred mark of the shrine keeper",
        "color": "#FFD700",
    },
    {
        "name": "herald-mark",
        "title": "Herald Mark",
        "description": "Symbol of the ceremonial announcer",
        "color": "#FF6B35",
    },
    {
        "name": "cycle-seal",
        "title": "Cycle Completion Seal",
        "description": "Commemorates the completion of a ceremonial cycle",
        "color": "#9B59B6",
    },
)


@dataclass(frozen=True)
class GrantRecord:
    """One affixing of a badge to a user."""

    id: str
    user_id: str
    granted_by: str
    timestamp: str
    ceremony: Scalar = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> GrantRecord:
        return cls(
            id=str(raw.get("id", "")),
            user_id=str(raw.get("userId", "")),
            granted_by=str(raw.get("grantedBy", "")),
            timestamp=str(raw.get("timestamp", "")),
            ceremony=raw.get("ceremony"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "grantedBy": self.granted_by,
            "timestamp": self.timestamp,
            "ceremony": self.ceremony,
        }


@dataclass(frozen=True)
class BadgeDocument:
    """A badge definition together with its grant history."""

    name: str
    title: str
    description: str
    color: str
    created: str
    ceremonies: tuple[GrantRecord, ...] = field(default_factory=tuple)

    @property
    def grant_count(self) -> int:
        return len(self.ceremonies)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> BadgeDocument:
        return cls(
            name=str(raw.get("name", "")),
            title=str(raw.get("title", "")),
            description=str(raw.get("description", "")),
            color=str(raw.get("color", "")),
            created=str(raw.get("created", "")),
            ceremonies=tuple(GrantRecord.from_dict(c) for c in raw.get("ceremonies") or []),
        )


@dataclass(frozen=True)
class UserBadge:
    """A badge held by one user, with only that user's grant records."""

    badge: BadgeDocument
    ceremonies: tuple[GrantRecord, ...]


class BadgeStore:
    """Directory of badge documents.

    Args:
        directory: Folder holding ``<name>.json`` badge files.
        ledger: Ledger receiving a ``badge_affix`` event for every affix.
    """

    def __init__(self, directory: Path, *, ledger: LedgerStore) -> None:
        self.directory = Path(directory)
        self.ledger = ledger

    def initialize(self) -> list[str]:
        """Create the badge directory and seed any missing templates.

        Existing badge files are never overwritten.

        Returns:
            Names of the templates written by this call.
        """
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(
                context=RitualOperationContext(
                    "badges.initialize", f"cannot create {self.directory}: {exc}"
                ),
                cause=exc,
            ) from exc
        seeded = []
        for template in BADGE_TEMPLATES:
            path = self._badge_path(template["name"])
            if path.exists():
                continue
            write_document(
                path,
                {**template, "created": iso_timestamp(), "ceremonies": []},
                operation="badges.initialize",
            )
            seeded.append(template["name"])
        if seeded:
            logger.info("Seeded badge templates: %s", ", ".join(seeded))
        return seeded

    def exists(self, badge_name: str) -> bool:
        """True if a badge document named ``badge_name`` is present."""
        return bool(_SLUG_RE.fullmatch(badge_name)) and self._badge_path(badge_name).is_file()

    def get_badge(self, badge_name: str) -> BadgeDocument:
        """Return the badge document named ``badge_name``.

        Raises:
            NotFoundError: If no such badge exists.
        """
        if not self.exists(badge_name):
            raise NotFoundError(
                context=RitualOperationContext(
                    "badges.get_badge", f"badge {badge_name!r} does not exist"
                )
            )
        return BadgeDocument.from_dict(
            read_document(self._badge_path(badge_name), operation="badges.get_badge")
        )

    def list_badges(self) -> list[BadgeDocument]:
        """Every badge whose file name is a valid slug, sorted by file name.

        Other ``*.json`` files in the directory are skipped, since
        :meth:`affix_badge` could never address them.
        """
        return [
            BadgeDocument.from_dict(read_document(path, operation="badges.list_badges"))
            for path in self._badge_files()
        ]

    def affix_badge(
        self,
        user_id: str,
        badge_name: str,
        granted_by: str,
        ceremony: Scalar = None,
    ) -> bool:
        """Append a grant record to ``badge_name`` and log it to the ledger.

        Args:
            user_id: Recipient.
            badge_name: Slug of an existing badge.
            granted_by: Granter.
            ceremony: Optional scalar label for the occasion.

        Returns:
            ``True`` if both the badge and the ledger were written; ``False``
            if the grant was stored but the ledger write failed.

        Raises:
            NotFoundError: If no such badge exists.  Nothing is written.
            StorageIOError: If the badge document cannot be read or written.
        """
        if not self.exists(badge_name):
            raise NotFoundError(
                context=RitualOperationContext(
                    "badges.affix_badge", f"badge {badge_name!r} does not exist"
                )
            )
        validate_details({"ceremony": ceremony})

        path = self._badge_path(badge_name)
        badge = read_document(path, operation="badges.affix_badge")
        record = GrantRecord(
            id=new_event_id(),
            user_id=user_id,
            granted_by=granted_by,
            timestamp=iso_timestamp(),
            ceremony=ceremony,
        )
        ceremonies = badge.get("ceremonies")
        if not isinstance(ceremonies, list):
            ceremonies = badge["ceremonies"] = []
        ceremonies.append(record.to_dict())
        write_document(path, badge, operation="badges.affix_badge")

        logged = self.ledger.log_event(
            BADGE_AFFIX,
            {
                "badge": badge_name,
                "recipient": user_id,
                "granter": granted_by,
                "ceremony": ceremony,
            },
        )
        logger.info("Badge %r affixed to user %s", badge.get("title", badge_name), user_id)
        return logged

    def badges_for_user(self, user_id: str) -> list[UserBadge]:
        """Badges held by ``user_id``, each with only that user's grant records.

        Badges the user has never received are left out entirely.
        """
        held = []
        for badge in self.list_badges():
            matching = tuple(c for c in badge.ceremonies if c.user_id == user_id)
            if matching:
                held.append(UserBadge(badge=badge, ceremonies=matching))
        return held

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _badge_path(self, badge_name: str) -> Path:
        return self.directory / f"{badge_name}.json"

    def _badge_files(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(
            p
            for p in self.directory.glob("*.json")
            if p.is_file() and _SLUG_RE.fullmatch(p.stem)
        )
