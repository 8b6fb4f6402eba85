"""Role catalog: YAML loader and typed role definitions.

The role catalog is a declarative description of the ceremonial roles a
shrine can grant.  It lives in ``config/roles.yaml`` by default and is only
ever read by the kit::

    roles:
      keeper:
        name: Shrine Keeper
        description: Guardian of the shrine's sacred records
        color: "#FFD700"
        level: 3
        permissions: [grant_roles, affix_badges]

Design notes:
- A missing field takes an empty default (``name`` falls back to the
  catalog key).  Present fields are only checked where a later Discord call
  depends on them: ``color`` must be a six-digit hex string and ``level``
  must be an integer.
- :func:`load_role_catalog` raises :exc:`~ritual_kit.errors.ConfigError` when
  the file is missing or malformed, and :meth:`RoleCatalog.get` raises
  :exc:`~ritual_kit.errors.NotFoundError` for an unknown key.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ritual_kit.errors import ConfigError, NotFoundError, RitualOperationContext

#: Six hex digits, with or without a leading ``#``.
_HEX_COLOR_RE = re.compile(r"#?[0-9A-Fa-f]{6}")


@dataclass(frozen=True)
class RoleDefinition:
    """One grantable role.

    Attributes:
        key:         Catalog key used on the command line (e.g. ``"keeper"``).
        name:        Display name, also the Discord role name.
        description: Shown in listings and announcements.
        color:       Hex colour string such as ``"#FFD700"``, or ``None``.
        level:       Informational rank.
        permissions: Free-form permission labels.
    """

    key: str
    name: str
    description: str = ""
    color: str | None = None
    level: int = 0
    permissions: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RoleCatalog:
    """All roles declared in the catalog file, keyed by catalog key."""

    path: Path
    roles: dict[str, RoleDefinition]

    def get(self, key: str) -> RoleDefinition:
        """Return the role for ``key``.

        Raises:
            NotFoundError: If the catalog has no such role.
        """
        role = self.roles.get(key)
        if role is None:
            raise NotFoundError(
                context=RitualOperationContext(
                    "roles.get", f"role {key!r} not found in {self.path.name}"
                )
            )
        return role

    def __iter__(self):
        return iter(self.roles.values())

    def __len__(self) -> int:
        return len(self.roles)


def load_role_catalog(path: Path) -> RoleCatalog:
    """Load ``path`` and return the :class:`RoleCatalog` it declares.

    Raises:
        ConfigError: If the file does not exist, cannot be parsed, lacks a
                     top-level ``roles`` mapping, or declares a role with a
                     non-hex ``color`` or non-integer ``level``.
    """
    if not path.exists():
        raise ConfigError(
            context=RitualOperationContext("roles.load_catalog", f"role catalog not found: {path}")
        )

    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(
            context=RitualOperationContext("roles.load_catalog", f"cannot load {path}: {exc}"),
            cause=exc,
        ) from exc

    if not isinstance(raw, dict) or not isinstance(raw.get("roles"), dict):
        raise ConfigError(
            context=RitualOperationContext(
                "roles.load_catalog", f"{path.name}: missing required mapping 'roles'"
            )
        )

    roles = {
        str(key): _parse_role(str(key), entry or {})
        for key, entry in raw["roles"].items()
    }
    return RoleCatalog(path=path, roles=roles)


def _parse_role(key: str, raw: Any) -> RoleDefinition:
    """Build a :class:`RoleDefinition` from one catalog entry."""
    if not isinstance(raw, dict):
        raise _invalid(f"roles.{key} must be a mapping")

    color = raw.get("color")
    if color is not None:
        color = str(color)
        if not _HEX_COLOR_RE.fullmatch(color):
            raise _invalid(f"roles.{key}.color must be a hex colour like '#FFD700'")

    try:
        level = int(raw.get("level") or 0)
    except (TypeError, ValueError) as exc:
        raise _invalid(f"roles.{key}.level must be an integer", exc) from exc

    permissions = raw.get("permissions") or []
    if isinstance(permissions, str):
        permissions = [permissions]
    return RoleDefinition(
        key=key,
        name=str(raw.get("name") or key),
        description=str(raw.get("description") or ""),
        color=color,
        level=level,
        permissions=tuple(str(p) for p in permissions),
    )


def _invalid(details: str, cause: Exception | None = None) -> ConfigError:
    return ConfigError(context=RitualOperationContext("roles.load_catalog", details), cause=cause)
