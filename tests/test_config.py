"""Tests for ritual_kit.config: INI loading, environment overrides and helpers."""

import configparser
import logging
from pathlib import Path

import pytest

from ritual_kit import config as kit_config
from ritual_kit.config import (
    PROJECT_ROOT,
    KitConfig,
    LoggingSettings,
    _load_from_ini,
    configure_logging,
    get_config_status,
    load_config,
    use_test_paths,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep ambient RITUAL_* / DISCORD_TOKEN variables out of these tests."""
    for name in (
        "RITUAL_DATA_DIR",
        "RITUAL_LEDGER_FILE",
        "RITUAL_BADGES_DIR",
        "RITUAL_ROLES_FILE",
        "RITUAL_SHRINE_NAME",
        "DISCORD_TOKEN",
        "RITUAL_DISCORD_API_BASE",
        "RITUAL_DISCORD_TIMEOUT",
        "RITUAL_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    # A developer's .env must not leak into load_config() here.
    monkeypatch.setattr(kit_config, "ENV_FILE", PROJECT_ROOT / "does-not-exist.env")


# ============================================================================
# DEFAULTS
# ============================================================================


@pytest.mark.unit
def test_defaults():
    cfg = KitConfig()

    assert cfg.paths.ledger_file == "data/ritual-ledger.json"
    assert cfg.paths.badges_dir == "badges"
    assert cfg.shrine.name == "Basilica Gate of Kypria LLC"
    assert cfg.discord.token == ""
    assert cfg.discord.enabled is False
    assert cfg.logging.level == "INFO"


@pytest.mark.unit
def test_relative_paths_resolve_against_project_root():
    cfg = KitConfig()
    assert cfg.paths.ledger_path == PROJECT_ROOT / "data" / "ritual-ledger.json"
    assert cfg.paths.roles_path == PROJECT_ROOT / "config" / "roles.yaml"


@pytest.mark.unit
def test_absolute_paths_are_kept(tmp_path):
    cfg = KitConfig()
    cfg.paths.badges_dir = str(tmp_path / "badges")
    assert cfg.paths.badges_path == tmp_path / "badges"


@pytest.mark.unit
def test_discord_enabled_ignores_whitespace_token():
    cfg = KitConfig()
    cfg.discord.token = "   "
    assert cfg.discord.enabled is False
    cfg.discord.token = "abc"
    assert cfg.discord.enabled is True


# ============================================================================
# INI LOADING
# ============================================================================


@pytest.mark.unit
def test_ini_overrides():
    """Every section of kit.ini maps onto its settings dataclass."""
    parser = configparser.ConfigParser()
    parser.read_dict(
        {
            "paths": {
                "data_dir": "/srv/ritual/data",
                "ledger_file": "/srv/ritual/data/ledger.json",
                "badges_dir": "/srv/ritual/badges",
                "roles_file": "/srv/ritual/roles.yaml",
            },
            "shrine": {"name": "Northern Shrine"},
            "discord": {
                "api_base": "https://discord.test/api/v10",
                "timeout_seconds": "2.5",
            },
            "logging": {"level": "debug", "format": "detailed"},
        }
    )

    cfg = KitConfig()
    _load_from_ini(parser, cfg)

    assert cfg.paths.ledger_path == Path("/srv/ritual/data/ledger.json")
    assert cfg.paths.roles_file == "/srv/ritual/roles.yaml"
    assert cfg.shrine.name == "Northern Shrine"
    assert cfg.discord.api_base == "https://discord.test/api/v10"
    assert cfg.discord.timeout_seconds == 2.5
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.format == "detailed"


@pytest.mark.unit
def test_ini_unknown_log_format_is_ignored():
    parser = configparser.ConfigParser()
    parser.read_dict({"logging": {"format": "fancy"}})

    cfg = KitConfig()
    _load_from_ini(parser, cfg)

    assert cfg.logging.format == "simple"


@pytest.mark.unit
def test_example_ini_is_valid():
    """The shipped example config parses and keeps the default document layout."""
    parser = configparser.ConfigParser()
    parser.read(PROJECT_ROOT / "config" / "kit.example.ini", encoding="utf-8")

    cfg = KitConfig()
    _load_from_ini(parser, cfg)

    assert cfg.paths.ledger_file == "data/ritual-ledger.json"
    assert cfg.discord.token == ""


# ============================================================================
# ENVIRONMENT OVERRIDES
# ============================================================================


@pytest.mark.unit
def test_path_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("RITUAL_LEDGER_FILE", str(tmp_path / "ledger.json"))
    monkeypatch.setenv("RITUAL_BADGES_DIR", str(tmp_path / "badges"))
    monkeypatch.setenv("RITUAL_ROLES_FILE", str(tmp_path / "roles.yaml"))

    cfg = load_config()

    assert cfg.paths.ledger_path == tmp_path / "ledger.json"
    assert cfg.paths.badges_path == tmp_path / "badges"
    assert cfg.paths.roles_path == tmp_path / "roles.yaml"


@pytest.mark.unit
def test_shrine_and_logging_env_overrides(monkeypatch):
    monkeypatch.setenv("RITUAL_SHRINE_NAME", "Env Shrine")
    monkeypatch.setenv("RITUAL_LOG_LEVEL", "warning")

    cfg = load_config()

    assert cfg.shrine.name == "Env Shrine"
    assert cfg.logging.level == "WARNING"


@pytest.mark.unit
def test_discord_env_overrides(monkeypatch):
    monkeypatch.setenv("DISCORD_TOKEN", "env-token")
    monkeypatch.setenv("RITUAL_DISCORD_API_BASE", "https://discord.test/api")
    monkeypatch.setenv("RITUAL_DISCORD_TIMEOUT", "3")

    cfg = load_config()

    assert cfg.discord.token == "env-token"
    assert cfg.discord.enabled is True
    assert cfg.discord.api_base == "https://discord.test/api"
    assert cfg.discord.timeout_seconds == 3.0


@pytest.mark.unit
def test_dotenv_file_supplies_unset_variables(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("RITUAL_SHRINE_NAME=Dotenv Shrine\n", encoding="utf-8")
    monkeypatch.setattr(kit_config, "ENV_FILE", env_file)
    # load_dotenv writes into os.environ; register the key so monkeypatch restores it.
    monkeypatch.setenv("RITUAL_SHRINE_NAME", "")
    monkeypatch.delenv("RITUAL_SHRINE_NAME")

    cfg = load_config()

    assert cfg.shrine.name == "Dotenv Shrine"


@pytest.mark.unit
def test_dotenv_never_overrides_process_environment(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("RITUAL_SHRINE_NAME=Dotenv Shrine\n", encoding="utf-8")
    monkeypatch.setattr(kit_config, "ENV_FILE", env_file)
    monkeypatch.setenv("RITUAL_SHRINE_NAME", "Process Shrine")

    assert load_config().shrine.name == "Process Shrine"


# ============================================================================
# HELPERS
# ============================================================================


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
def test_configure_logging_sets_root_level(restore_root_logger):
    configure_logging(LoggingSettings(level="DEBUG", format="detailed"))
    assert logging.getLogger().level == logging.DEBUG

    configure_logging(LoggingSettings(level="NOT-A-LEVEL"))
    assert logging.getLogger().level == logging.INFO


@pytest.mark.unit
def test_get_config_status_keys():
    status = get_config_status()
    assert set(status) == {
        "config_file_exists",
        "config_file_path",
        "using_example",
        "discord_enabled",
        "ledger_path",
        "badges_path",
        "roles_path",
    }


@pytest.mark.unit
def test_use_test_paths_redirects_and_restores(tmp_path):
    original_ledger = kit_config.config.paths.ledger_file
    original_roles = kit_config.config.paths.roles_file

    with use_test_paths(tmp_path, roles_file=tmp_path / "roles.yaml") as root:
        assert root == tmp_path
        assert kit_config.config.paths.ledger_path == tmp_path / "data" / "ritual-ledger.json"
        assert kit_config.config.paths.badges_path == tmp_path / "badges"
        assert kit_config.config.paths.roles_path == tmp_path / "roles.yaml"

    assert kit_config.config.paths.ledger_file == original_ledger
    assert kit_config.config.paths.roles_file == original_roles
