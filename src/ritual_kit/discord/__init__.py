"""Discord package: REST client for the chat platform."""

from ritual_kit.discord.client import DiscordClient, hex_to_int

__all__ = ["DiscordClient", "hex_to_int"]
