"""Badge package: catalog of badges and their grant histories."""

from ritual_kit.badges.store import (
    BADGE_TEMPLATES,
    BadgeDocument,
    BadgeStore,
    GrantRecord,
    UserBadge,
)

__all__ = [
    "BADGE_TEMPLATES",
    "BadgeDocument",
    "BadgeStore",
    "GrantRecord",
    "UserBadge",
]
