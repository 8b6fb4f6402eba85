"""Role-Grant Ritual Kit: ceremonial bookkeeping for Discord communities.

Three small command-line tools grant Discord roles, affix badges (JSON
records) and append every ceremony to a JSON ledger.  Each operation reads
its JSON document, mutates it and writes it back in full.

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
The single source of truth is the ``version`` field in ``pyproject.toml``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("ritual-kit")
except PackageNotFoundError:
    __version__ = "0.1.0"
