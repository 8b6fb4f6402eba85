"""Explicit per-run context for ritual operations.

A :class:`RitualContext` bundles everything a ceremony touches: the
configuration it was built from, the ledger and badge stores, and the
Discord client when one is available.  It is created by :func:`open_context`
and closed when the ``with`` block exits::

    with open_context() as ctx:
        RoleGranter(ctx).grant_role(guild_id, user_id, "keeper", granted_by)

Tests build a context from a config whose paths point at ``tmp_path`` and
inject a mocked :class:`~ritual_kit.discord.DiscordClient`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from ritual_kit import config as kit_config
from ritual_kit.badges import BadgeStore
from ritual_kit.config import KitConfig
from ritual_kit.discord import DiscordClient
from ritual_kit.errors import RemoteError
from ritual_kit.ledger import LedgerStore

logger = logging.getLogger(__name__)


@dataclass
class RitualContext:
    """Stores and collaborators shared by the operations of one run.

    Attributes:
        config: Configuration the context was built from.
        ledger: Ceremonial ledger.
        badges: Badge catalog, forwarding affixes to ``ledger``.
        discord: Connected Discord client, or ``None`` when running offline.
    """

    config: KitConfig
    ledger: LedgerStore
    badges: BadgeStore
    discord: DiscordClient | None = None

    @property
    def online(self) -> bool:
        return self.discord is not None and self.discord.is_connected


def build_stores(cfg: KitConfig) -> tuple[LedgerStore, BadgeStore]:
    """Construct the ledger and badge stores described by ``cfg``."""
    ledger = LedgerStore(cfg.paths.ledger_path, shrine=cfg.shrine.name)
    badges = BadgeStore(cfg.paths.badges_path, ledger=ledger)
    return ledger, badges


@contextmanager
def open_context(
    cfg: KitConfig | None = None,
    *,
    discord_client: DiscordClient | None = None,
    connect: bool = True,
) -> Iterator[RitualContext]:
    """Open a :class:`RitualContext` and close its Discord session on exit.

    Args:
        cfg: Configuration to use.  Defaults to the module-level singleton
             read at call time, so ``use_test_paths`` redirections apply.
        discord_client: Client to use instead of building one from the token.
        connect: When ``False`` no Discord client is built or connected,
                 even if a token is configured.

    A configured token whose ``connect()`` fails is logged and the context
    continues offline.
    """
    if cfg is None:
        cfg = kit_config.config

    ledger, badges = build_stores(cfg)

    client = discord_client
    if client is None and connect and cfg.discord.enabled:
        client = DiscordClient(
            cfg.discord.token,
            api_base=cfg.discord.api_base,
            timeout=cfg.discord.timeout_seconds,
        )

    if client is not None and connect and not client.is_connected:
        try:
            client.connect()
        except RemoteError as exc:
            logger.warning("Discord connection failed, continuing offline: %s", exc)

    ctx = RitualContext(config=cfg, ledger=ledger, badges=badges, discord=client)
    try:
        yield ctx
    finally:
        if client is not None:
            client.close()
            logger.debug("Discord session closed")
