"""
Role-grant ceremony.

A ceremony grants one catalog role to one member:

    1. Resolve the role in the catalog and check any requested badge exists.
       Missing configuration, roles or badges abort here, before any write.
    2. Assign the Discord role when a client is connected, creating the role
       in the guild first if needed.  Failures are logged and recorded as
       ``discord_success = False``; they never abort the ceremony.
    3. Record a ``role_grant`` entry in the ledger.
    4. Affix the requested badge, labelled ``role_grant_<role>``.
    5. Post an announcement to the requested text channel when connected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ritual_kit.context import RitualContext
from ritual_kit.errors import NotFoundError, RemoteError, RitualOperationContext
from ritual_kit.ledger import ROLE_GRANT
from ritual_kit.roles.catalog import RoleCatalog, RoleDefinition, load_role_catalog

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GrantOutcome:
    """
    Result of one role-grant ceremony.

    Attributes:
        success: True when the ceremony was recorded in the ledger.
        role: The catalog role that was granted.
        discord_success: Remote assignment outcome; ``None`` when no Discord
            call was attempted (offline, or no guild given).
        badge_affixed: Badge outcome; ``None`` when no badge was requested.
        announced: True when the announcement was posted.
    """

    success: bool
    role: RoleDefinition
    discord_success: bool | None = None
    badge_affixed: bool | None = None
    announced: bool = False


class RoleGranter:
    """Conducts role-grant ceremonies within one :class:`RitualContext`."""

    def __init__(self, ctx: RitualContext) -> None:
        self.ctx = ctx

    def load_catalog(self) -> RoleCatalog:
        return load_role_catalog(self.ctx.config.paths.roles_path)

    def list_roles(self) -> list[RoleDefinition]:
        """All catalog roles, in file order.

        Raises:
            ConfigError: If the catalog cannot be loaded.
        """
        return list(self.load_catalog())

    def grant_role(
        self,
        guild_id: str | None,
        user_id: str,
        role_name: str,
        granted_by: str,
        *,
        badge: str | None = None,
        announce_channel: str | None = None,
    ) -> GrantOutcome:
        """Grant ``role_name`` to ``user_id`` with full ceremony.

        Args:
            guild_id: Discord guild.  Without one the grant is only recorded.
            user_id: Recipient.
            role_name: Catalog key of the role.
            granted_by: Granter.
            badge: Optional badge to affix alongside the role.
            announce_channel: Optional text channel name for the announcement.

        Raises:
            ConfigError: If the role catalog is missing or malformed.
            NotFoundError: If the role or the requested badge does not exist.
        """
        role = self.load_catalog().get(role_name)
        if badge and not self.ctx.badges.exists(badge):
            raise NotFoundError(
                context=RitualOperationContext(
                    "roles.grant_role", f"badge {badge!r} does not exist"
                )
            )
        logger.info("Beginning role grant ceremony for %s (%s)", role.name, role.description)

        discord_success: bool | None = None
        if self.ctx.online and guild_id:
            discord_success = self._assign_discord_role(guild_id, user_id, role)
        else:
            logger.info("Discord offline - role grant recorded ceremonially only")

        recorded = self.ctx.ledger.log_event(
            ROLE_GRANT,
            {
                "role": role_name,
                "recipient": user_id,
                "granter": granted_by,
                "guild": guild_id,
                "discord_success": discord_success,
                "badge": badge,
                "announce_channel": announce_channel,
            },
        )

        badge_affixed: bool | None = None
        if badge:
            badge_affixed = self.ctx.badges.affix_badge(
                user_id, badge, granted_by, f"role_grant_{role_name}"
            )

        announced = False
        if announce_channel and guild_id and self.ctx.online:
            announced = self._announce(guild_id, announce_channel, user_id, granted_by, role)

        if recorded:
            logger.info("Role grant ceremony completed successfully")
        return GrantOutcome(
            success=recorded,
            role=role,
            discord_success=discord_success,
            badge_affixed=badge_affixed,
            announced=announced,
        )

    def _assign_discord_role(self, guild_id: str, user_id: str, role: RoleDefinition) -> bool:
        """Find or create the guild role and add it to the member."""
        client = self.ctx.discord
        assert client is not None
        try:
            client.fetch_guild(guild_id)
            member = client.fetch_member(guild_id, user_id)

            discord_role = client.find_role(guild_id, role.name)
            if discord_role is None:
                discord_role = client.create_role(
                    guild_id,
                    role.name,
                    color=role.color,
                    reason=f"Ceremonial role creation: {role.description}",
                )
                logger.info("Created Discord role: %s", role.name)

            client.add_member_role(
                guild_id, user_id, str(discord_role["id"]), reason="Ceremonial role grant"
            )
        except (RemoteError, KeyError, TypeError) as exc:
            logger.warning("Discord role assignment failed: %s", exc)
            return False

        member_name = (member.get("user") or {}).get("username", user_id)
        logger.info("Discord role assigned to %s", member_name)
        return True

    def _announce(
        self,
        guild_id: str,
        channel_name: str,
        user_id: str,
        granted_by: str,
        role: RoleDefinition,
    ) -> bool:
        """Post the ceremonial announcement; failures are logged only."""
        client = self.ctx.discord
        assert client is not None
        try:
            channel = client.find_text_channel(guild_id, channel_name)
            if channel is None:
                logger.warning("Announcement channel %r not found", channel_name)
                return False
            client.send_message(str(channel["id"]), announcement_text(user_id, granted_by, role))
        except (RemoteError, KeyError, TypeError) as exc:
            logger.warning("Failed to send announcement: %s", exc)
            return False
        return True


def announcement_text(user_id: str, granted_by: str, role: RoleDefinition) -> str:
    """Markdown announcement posted after a grant."""
    return (
        "🎭 **Ceremonial Announcement**\n\n"
        f"<@{user_id}> has been granted the role of **{role.name}**\n"
        f"*{role.description}*\n\n"
        f"Ceremony conducted by <@{granted_by}>"
    )
