"""Minimal Discord REST v10 client used by the role-grant ceremony.

Only the calls a ceremony needs are implemented: identify the bot, look up a
guild and member, find or create a role, assign it, find a text channel and
post a message.

Every failed call raises :exc:`~ritual_kit.errors.RemoteError` carrying the
operation name and the HTTP status (``None`` for network errors).  Nothing is
retried, including ``429 Too Many Requests``; callers decide whether a
failure matters.  Response bodies are never logged because error payloads
can echo request headers.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from ritual_kit.errors import RemoteError, RitualOperationContext

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://discord.com/api/v10"
USER_AGENT = "DiscordBot (ritual-kit, 0.1.0)"

# Channel type 0 is GUILD_TEXT in the Discord API.
_TEXT_CHANNEL = 0


def hex_to_int(hex_color: str | None) -> int:
    """Convert a colour like ``'#FFD700'`` to Discord's integer form (0 if unset)."""
    if not hex_color:
        return 0
    return int(hex_color.lstrip("#"), 16)


class DiscordClient:
    """Bot-token REST client bound to one :class:`requests.Session`.

    Args:
        token: Bot token, sent as ``Authorization: Bot <token>``.
        api_base: API root, without trailing slash.
        timeout: Per-request timeout in seconds.
        session: Optional pre-built session (tests inject a mock).
    """

    def __init__(
        self,
        token: str,
        *,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bot {token}",
                "User-Agent": USER_AGENT,
            }
        )
        self.user: dict[str, Any] | None = None

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    @property
    def is_connected(self) -> bool:
        return self.user is not None

    @property
    def user_tag(self) -> str:
        """``username#discriminator`` (or bare username) of the connected bot."""
        if self.user is None:
            return ""
        username = self.user.get("username", "")
        discriminator = self.user.get("discriminator")
        if discriminator and discriminator != "0":
            return f"{username}#{discriminator}"
        return username

    def connect(self) -> dict[str, Any]:
        """Verify the token by fetching the bot's own user object."""
        self.user = self._request("GET", "/users/@me", operation="discord.connect")
        logger.info("Connected to Discord as %s", self.user_tag)
        return self.user

    def close(self) -> None:
        self.session.close()
        self.user = None

    # ── Guilds and members ────────────────────────────────────────────────────

    def fetch_guild(self, guild_id: str) -> dict[str, Any]:
        return self._request("GET", f"/guilds/{guild_id}", operation="discord.fetch_guild")

    def fetch_member(self, guild_id: str, user_id: str) -> dict[str, Any]:
        return self._request(
            "GET", f"/guilds/{guild_id}/members/{user_id}", operation="discord.fetch_member"
        )

    # ── Roles ─────────────────────────────────────────────────────────────────

    def list_roles(self, guild_id: str) -> list[dict[str, Any]]:
        return self._request("GET", f"/guilds/{guild_id}/roles", operation="discord.list_roles")

    def find_role(self, guild_id: str, name: str) -> dict[str, Any] | None:
        """Return the guild role whose display name is ``name``, if any."""
        for role in self.list_roles(guild_id):
            if role.get("name") == name:
                return role
        return None

    def create_role(
        self,
        guild_id: str,
        name: str,
        *,
        color: str | None = None,
        reason: str | None = None,
    ) -> dict[str, Any]:
        return self._request(
            "POST",
            f"/guilds/{guild_id}/roles",
            operation="discord.create_role",
            json={"name": name, "color": hex_to_int(color)},
            headers=_audit_reason(reason),
        )

    def add_member_role(
        self, guild_id: str, user_id: str, role_id: str, *, reason: str | None = None
    ) -> None:
        self._request(
            "PUT",
            f"/guilds/{guild_id}/members/{user_id}/roles/{role_id}",
            operation="discord.add_member_role",
            headers=_audit_reason(reason),
        )

    # ── Channels and messages ─────────────────────────────────────────────────

    def find_text_channel(self, guild_id: str, name: str) -> dict[str, Any] | None:
        """Return the guild text channel named ``name``, if any."""
        channels = self._request(
            "GET", f"/guilds/{guild_id}/channels", operation="discord.list_channels"
        )
        for channel in channels:
            if channel.get("type") == _TEXT_CHANNEL and channel.get("name") == name:
                return channel
        return None

    def send_message(self, channel_id: str, content: str) -> dict[str, Any]:
        return self._request(
            "POST",
            f"/channels/{channel_id}/messages",
            operation="discord.send_message",
            json={"content": content},
        )

    # ── Transport ─────────────────────────────────────────────────────────────

    def _request(self, method: str, path: str, *, operation: str, **kwargs) -> Any:
        """Perform one API call and return its decoded JSON body.

        ``204 No Content`` returns ``None``.

        Raises:
            RemoteError: On network failure, any non-2xx status, or an
                undecodable body.
        """
        url = f"{self.api_base}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise RemoteError(
                context=RitualOperationContext(operation, f"{method} {path} failed: {exc}"),
                cause=exc,
            ) from exc

        if response.status_code == 204:
            return None
        if not 200 <= response.status_code < 300:
            raise RemoteError(
                context=RitualOperationContext(
                    operation, f"{method} {path} returned HTTP {response.status_code}"
                ),
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError(
                context=RitualOperationContext(operation, f"{method} {path} returned invalid JSON"),
                status_code=response.status_code,
                cause=exc,
            ) from exc


def _audit_reason(reason: str | None) -> dict[str, str]:
    """Discord's audit-log reason header, omitted when there is no reason."""
    if not reason:
        return {}
    # Header values must be latin-1; Discord expects URL-encoded text here.
    return {"X-Audit-Log-Reason": quote(reason, safe=" ")}
