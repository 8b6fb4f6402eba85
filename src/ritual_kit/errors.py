"""Typed exceptions for ritual operations.

Every failure the kit reports is one of four kinds:

- :exc:`ConfigError`: required configuration or a role catalog is missing.
- :exc:`NotFoundError`: a referenced badge or role does not exist.
- :exc:`StorageIOError`: a JSON document could not be read, parsed or written.
- :exc:`RemoteError`: a Discord API call failed.

Structural failures (the first three) propagate to the command-line entry
point, which reports them and exits non-zero.  Remote failures are caught by
the ceremony flow and downgraded to a status flag on the ledger entry.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RitualOperationContext:
    """Structured operation metadata carried by ritual exceptions.

    Attributes:
        operation: Stable operation identifier (for example
            ``"ledger.log_event"``).
        details: Optional human-readable context for logs and debugging.
    """

    operation: str
    details: str | None = None


class RitualError(RuntimeError):
    """Base exception for ritual-kit failures.

    Args:
        context: Structured operation metadata.
        cause: Optional underlying exception.
    """

    def __init__(
        self,
        *,
        context: RitualOperationContext,
        cause: Exception | None = None,
    ) -> None:
        message = context.operation
        if context.details:
            message = f"{message}: {context.details}"
        super().__init__(message)
        self.context = context
        self.cause = cause


class ConfigError(RitualError):
    """Required configuration or role catalog missing or unreadable."""


class NotFoundError(RitualError):
    """Referenced badge or role does not exist."""


class StorageIOError(RitualError):
    """Filesystem read/write or JSON parse failure on a ritual document."""


class RemoteError(RitualError):
    """Discord API call failure (network, permission, not-found, rate limit).

    Args:
        context: Structured operation metadata.
        status_code: HTTP status returned by the API, or ``None`` when the
            request never produced a response.
        cause: Optional underlying exception.
    """

    def __init__(
        self,
        *,
        context: RitualOperationContext,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(context=context, cause=cause)
        self.status_code = status_code
