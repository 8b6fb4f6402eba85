"""
Ritual kit configuration management.

This module handles loading and accessing kit configuration from multiple sources
with a clear priority order:

    1. Environment variables (highest priority) - including a project ``.env`` file
    2. Config file (config/kit.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The KitConfig
dataclass provides typed access to all settings.

Usage:
    from ritual_kit.config import config

    # Access settings
    print(config.paths.ledger_path)
    print(config.shrine.name)
    print(config.discord.enabled)

Environment Variable Mapping:
    RITUAL_DATA_DIR          -> paths.data_dir
    RITUAL_LEDGER_FILE       -> paths.ledger_file
    RITUAL_BADGES_DIR        -> paths.badges_dir
    RITUAL_ROLES_FILE        -> paths.roles_file
    RITUAL_SHRINE_NAME       -> shrine.name
    DISCORD_TOKEN            -> discord.token
    RITUAL_DISCORD_API_BASE  -> discord.api_base
    RITUAL_DISCORD_TIMEOUT   -> discord.timeout_seconds
    RITUAL_LOG_LEVEL         -> logging.level
"""

import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, data/, badges/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "kit.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "kit.example.ini"
ENV_FILE = PROJECT_ROOT / ".env"


def _resolve(path: str) -> Path:
    """Resolve a configured path against the project root when relative."""
    p = Path(path)
    if p.is_absolute():
        return p
    return PROJECT_ROOT / p


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class PathSettings:
    """Where the kit keeps its documents."""

    data_dir: str = "data"
    ledger_file: str = "data/ritual-ledger.json"
    badges_dir: str = "badges"
    roles_file: str = "config/roles.yaml"

    @property
    def data_path(self) -> Path:
        """Get absolute path to the data directory."""
        return _resolve(self.data_dir)

    @property
    def ledger_path(self) -> Path:
        """Get absolute path to the ledger document."""
        return _resolve(self.ledger_file)

    @property
    def badges_path(self) -> Path:
        """Get absolute path to the badge directory."""
        return _resolve(self.badges_dir)

    @property
    def roles_path(self) -> Path:
        """Get absolute path to the role catalog."""
        return _resolve(self.roles_file)


@dataclass
class ShrineSettings:
    """Display metadata for this deployment."""

    name: str = "Basilica Gate of Kypria LLC"


@dataclass
class DiscordSettings:
    """Discord REST API configuration."""

    token: str = ""
    api_base: str = "https://discord.com/api/v10"
    timeout_seconds: float = 10.0

    @property
    def enabled(self) -> bool:
        """A bot token is configured; without one ceremonies run offline."""
        return bool(self.token.strip())


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "simple"


@dataclass
class KitConfig:
    """
    Complete kit configuration.

    This is the main configuration object that aggregates all settings sections.
    Access via the module-level `config` singleton.
    """

    paths: PathSettings = field(default_factory=PathSettings)
    shrine: ShrineSettings = field(default_factory=ShrineSettings)
    discord: DiscordSettings = field(default_factory=DiscordSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _load_from_ini(parser: configparser.ConfigParser, cfg: KitConfig) -> None:
    """Load configuration from parsed INI file into KitConfig."""
    # Paths section
    if parser.has_section("paths"):
        for option in ("data_dir", "ledger_file", "badges_dir", "roles_file"):
            if parser.has_option("paths", option):
                setattr(cfg.paths, option, parser.get("paths", option))

    # Shrine section
    if parser.has_section("shrine"):
        if parser.has_option("shrine", "name"):
            cfg.shrine.name = parser.get("shrine", "name")

    # Discord section
    if parser.has_section("discord"):
        if parser.has_option("discord", "token"):
            cfg.discord.token = parser.get("discord", "token")
        if parser.has_option("discord", "api_base"):
            cfg.discord.api_base = parser.get("discord", "api_base")
        if parser.has_option("discord", "timeout_seconds"):
            cfg.discord.timeout_seconds = parser.getfloat("discord", "timeout_seconds")

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed"):
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: KitConfig) -> None:
    """Apply environment variable overrides to configuration."""
    # Path settings
    if env_data := os.getenv("RITUAL_DATA_DIR"):
        cfg.paths.data_dir = env_data
    if env_ledger := os.getenv("RITUAL_LEDGER_FILE"):
        cfg.paths.ledger_file = env_ledger
    if env_badges := os.getenv("RITUAL_BADGES_DIR"):
        cfg.paths.badges_dir = env_badges
    if env_roles := os.getenv("RITUAL_ROLES_FILE"):
        cfg.paths.roles_file = env_roles

    # Shrine settings
    if env_shrine := os.getenv("RITUAL_SHRINE_NAME"):
        cfg.shrine.name = env_shrine

    # Discord settings
    if env_token := os.getenv("DISCORD_TOKEN"):
        cfg.discord.token = env_token
    if env_api := os.getenv("RITUAL_DISCORD_API_BASE"):
        cfg.discord.api_base = env_api
    if env_timeout := os.getenv("RITUAL_DISCORD_TIMEOUT"):
        cfg.discord.timeout_seconds = float(env_timeout)

    # Logging settings
    if env_log := os.getenv("RITUAL_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()


def load_config() -> KitConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables (a project-root ``.env`` fills in unset ones)
        2. config/kit.ini
        3. config/kit.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        KitConfig: Fully populated configuration object.
    """
    cfg = KitConfig()

    # Determine which config file to use
    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")
        _load_from_ini(parser, cfg)

    # .env never overrides variables already present in the process environment
    if ENV_FILE.exists():
        load_dotenv(ENV_FILE, override=False)

    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "KitConfig":
    """
    Reload configuration from disk and environment.

    This updates the module-level `config` singleton.

    Returns:
        KitConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

# Load configuration once at module import time
config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

_LOG_FORMATS = {
    "simple": "%(message)s",
    "detailed": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
}


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Install a root stderr handler using the configured level and format.

    Called once by each command-line entry point.  Library code only ever
    calls ``logging.getLogger(__name__)``.
    """
    settings = settings or config.logging
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=_LOG_FORMATS[settings.format], force=True)


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "discord_enabled": config.discord.enabled,
        "ledger_path": str(config.paths.ledger_path),
        "badges_path": str(config.paths.badges_path),
        "roles_path": str(config.paths.roles_path),
    }


# =============================================================================
# TEST HELPERS
# =============================================================================


class use_test_paths:
    """
    Context manager redirecting every kit document into a scratch directory.

    Usage:
        from ritual_kit.config import use_test_paths

        def test_something(tmp_path):
            with use_test_paths(tmp_path):
                # Ledger and badges live under tmp_path
                ...

    The role catalog path is left alone unless ``roles_file`` is given.

    Args:
        root: Directory that will hold ``data/`` and ``badges/``.
        roles_file: Optional role catalog path to use instead of the configured one.
    """

    def __init__(self, root: Path | str, roles_file: Path | str | None = None):
        self.root = Path(root)
        self.roles_file = roles_file
        self.original: PathSettings | None = None

    def __enter__(self) -> Path:
        """Point path settings at the scratch directory."""
        self.original = PathSettings(
            data_dir=config.paths.data_dir,
            ledger_file=config.paths.ledger_file,
            badges_dir=config.paths.badges_dir,
            roles_file=config.paths.roles_file,
        )
        config.paths.data_dir = str(self.root / "data")
        config.paths.ledger_file = str(self.root / "data" / "ritual-ledger.json")
        config.paths.badges_dir = str(self.root / "badges")
        if self.roles_file is not None:
            config.paths.roles_file = str(self.roles_file)
        return self.root

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Restore original path settings."""
        if self.original is not None:
            config.paths = self.original
        return None
