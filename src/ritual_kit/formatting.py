"""
Console formatting helpers for the ritual command-line tools.

Pure functions only: each takes plain values or store records and returns
strings, so the CLI can print them and tests can assert on them.
"""

from __future__ import annotations

import json
from datetime import datetime

from ritual_kit.badges import BadgeDocument, UserBadge
from ritual_kit.ledger import LedgerEntry, LedgerStatistics
from ritual_kit.roles import RoleDefinition

BANNER_WIDTH = 60


def ceremonial_banner(title: str, width: int = BANNER_WIDTH) -> str:
    """Return a three-line double-ruled box with ``title`` centred inside."""
    border = "═" * width
    return "\n".join(
        [
            f"╔{border}╗",
            f"║{title.center(width)}║",
            f"╚{border}╝",
        ]
    )


def format_date(iso_value: str) -> str:
    """Render an ISO-8601 timestamp as ``M/D/YYYY``; unparseable input is returned as-is."""
    try:
        parsed = datetime.fromisoformat(iso_value)
    except (TypeError, ValueError):
        return iso_value
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def format_statistics(stats: LedgerStatistics) -> str:
    return "\n".join(
        [
            ceremonial_banner("CEREMONIAL STATISTICS"),
            f"Shrine: {stats.shrine}",
            f"Total Ceremonies: {stats.total_ceremonies}",
            f"Roles Granted: {stats.roles_granted}",
            f"Badges Affixed: {stats.badges_affixed}",
            f"Ledger Created: {format_date(stats.created)}",
        ]
    )


def format_entry_line(entry: LedgerEntry) -> str:
    """One ledger entry as ``[timestamp] type: {details}``."""
    details = json.dumps(entry.details, ensure_ascii=False, separators=(",", ":"))
    return f"[{entry.timestamp}] {entry.type}: {details}"


def format_recent(entries: list[LedgerEntry]) -> str:
    lines = [ceremonial_banner("RECENT ACTIVITIES")]
    lines.extend(format_entry_line(entry) for entry in entries)
    return "\n".join(lines)


def format_badge_list(badges: list[BadgeDocument]) -> str:
    lines = [ceremonial_banner("AVAILABLE BADGES")]
    for badge in badges:
        lines.extend(
            [
                f"🏆 {badge.title} ({badge.name})",
                f"   {badge.description}",
                f"   Ceremonies: {badge.grant_count}",
                "",
            ]
        )
    return "\n".join(lines)


def format_user_badges(user_id: str, held: list[UserBadge]) -> str:
    lines = [ceremonial_banner(f"BADGES FOR USER {user_id}")]
    if not held:
        lines.append("No badges found for this user.")
        return "\n".join(lines)

    for item in held:
        lines.append(f"🏆 {item.badge.title}")
        lines.append(f"   {item.badge.description}")
        lines.append(f"   Earned: {len(item.ceremonies)} time(s)")
        for record in item.ceremonies:
            lines.append(f"   - {format_date(record.timestamp)} by {record.granted_by}")
        lines.append("")
    return "\n".join(lines)


def format_role_list(roles: list[RoleDefinition]) -> str:
    lines = [ceremonial_banner("AVAILABLE CEREMONIAL ROLES")]
    for role in roles:
        lines.extend(
            [
                f"👑 {role.name} ({role.key})",
                f"   {role.description}",
                f"   Level: {role.level} | Color: {role.color or '-'}",
                f"   Permissions: {', '.join(role.permissions)}",
                "",
            ]
        )
    return "\n".join(lines)
