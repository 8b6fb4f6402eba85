"""Ledger package: append-only JSON record of every ceremony.

Public surface
--------------
- :class:`LedgerStore`: initialize, log, read back and summarise the ledger.
- :class:`LedgerEntry`: one recorded ceremony.
- :class:`LedgerStatistics`: counters and shrine metadata.

Usage example
-------------
::

    from ritual_kit.ledger import LedgerStore

    ledger = LedgerStore(config.paths.ledger_path, shrine=config.shrine.name)
    if not ledger.log_event("role_grant", {"role": "keeper", "recipient": "u1"}):
        logger.warning("Ledger write failed; ceremony not recorded.")
"""

from ritual_kit.ledger.store import (
    BADGE_AFFIX,
    ROLE_GRANT,
    LedgerEntry,
    LedgerStatistics,
    LedgerStore,
)

__all__ = [
    "BADGE_AFFIX",
    "ROLE_GRANT",
    "LedgerEntry",
    "LedgerStatistics",
    "LedgerStore",
]
