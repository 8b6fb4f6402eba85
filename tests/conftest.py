"""
Shared pytest fixtures for the ritual kit test suite.

This module provides fixtures that are automatically available to all test files:
- A KitConfig whose documents live under ``tmp_path``
- Ledger and badge stores built from that config
- A role catalog written into ``tmp_path``
- An offline RitualContext and a mocked Discord client

Every fixture is function-scoped so tests never share documents.
"""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import Mock

import pytest

from ritual_kit.badges import BadgeStore
from ritual_kit.config import KitConfig
from ritual_kit.context import RitualContext, build_stores
from ritual_kit.discord import DiscordClient
from ritual_kit.ledger import LedgerStore
from tests.constants import TEST_ROLE_ID, TEST_ROLES_YAML

# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def roles_file(tmp_path: Path) -> Path:
    """Write the shared test role catalog and return its path."""
    path = tmp_path / "config" / "roles.yaml"
    path.parent.mkdir(parents=True)
    path.write_text(TEST_ROLES_YAML, encoding="utf-8")
    return path


@pytest.fixture(scope="function")
def kit_config(tmp_path: Path, roles_file: Path) -> KitConfig:
    """
    Create a KitConfig pointing every document at ``tmp_path``.

    No Discord token is configured, so contexts built from it run offline.
    """
    cfg = KitConfig()
    cfg.paths.data_dir = str(tmp_path / "data")
    cfg.paths.ledger_file = str(tmp_path / "data" / "ritual-ledger.json")
    cfg.paths.badges_dir = str(tmp_path / "badges")
    cfg.paths.roles_file = str(roles_file)
    cfg.shrine.name = "Test Shrine"
    cfg.discord.token = ""
    return cfg


# ============================================================================
# STORE FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def ledger(kit_config: KitConfig) -> LedgerStore:
    """Ledger store backed by a not-yet-created file under ``tmp_path``."""
    return LedgerStore(kit_config.paths.ledger_path, shrine=kit_config.shrine.name)


@pytest.fixture(scope="function")
def badge_store(ledger: LedgerStore, kit_config: KitConfig) -> BadgeStore:
    """Badge store sharing the ``ledger`` fixture, with templates seeded."""
    store = BadgeStore(kit_config.paths.badges_path, ledger=ledger)
    store.initialize()
    return store


@pytest.fixture(scope="function")
def offline_context(kit_config: KitConfig) -> RitualContext:
    """RitualContext with no Discord client."""
    ledger, badges = build_stores(kit_config)
    badges.initialize()
    return RitualContext(config=kit_config, ledger=ledger, badges=badges)


# ============================================================================
# DISCORD FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def mock_discord() -> Mock:
    """
    Mock DiscordClient that behaves as connected and succeeds by default.

    Tests override individual methods' ``return_value`` or ``side_effect``.
    """
    client = Mock(spec=DiscordClient)
    client.is_connected = True
    client.user_tag = "RitualBot#0001"
    client.fetch_guild.return_value = {"id": "guild", "name": "Test Guild"}
    client.fetch_member.return_value = {"user": {"id": "member", "username": "pilgrim"}}
    client.find_role.return_value = {"id": TEST_ROLE_ID, "name": "Shrine Keeper"}
    client.create_role.return_value = {"id": TEST_ROLE_ID, "name": "Shrine Keeper"}
    client.add_member_role.return_value = None
    client.find_text_channel.return_value = None
    return client


@pytest.fixture(scope="function")
def online_context(kit_config: KitConfig, mock_discord: Mock) -> Generator[RitualContext, None, None]:
    """RitualContext wired to ``mock_discord``."""
    ledger, badges = build_stores(kit_config)
    badges.initialize()
    yield RitualContext(config=kit_config, ledger=ledger, badges=badges, discord=mock_discord)
