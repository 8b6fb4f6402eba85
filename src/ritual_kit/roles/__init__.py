"""Roles package: role catalog and the role-grant ceremony."""

from ritual_kit.roles.catalog import RoleCatalog, RoleDefinition, load_role_catalog
from ritual_kit.roles.granter import GrantOutcome, RoleGranter, announcement_text

__all__ = [
    "GrantOutcome",
    "RoleCatalog",
    "RoleDefinition",
    "RoleGranter",
    "announcement_text",
    "load_role_catalog",
]
