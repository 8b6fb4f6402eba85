"""Whole-document JSON persistence shared by the ledger and badge stores.

Every ritual document is read and written in full: load, mutate in memory,
write the complete document back.  Writes are pretty-printed with two-space
indents, UTF-8 and a trailing newline.

No locking is performed.  Two processes running a load-modify-store cycle on
the same document concurrently can lose one of the updates; this is a known
limitation of the file format, not something this module tries to hide.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ritual_kit.errors import RitualOperationContext, StorageIOError

logger = logging.getLogger(__name__)


def read_document(path: Path, *, operation: str) -> dict[str, Any]:
    """Load a JSON object from ``path``.

    Args:
        path: Document to read.
        operation: Operation identifier recorded on any raised error.

    Returns:
        The parsed JSON object.

    Raises:
        StorageIOError: If the file cannot be read, is not valid JSON, or does
            not hold a JSON object at the top level.
    """
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except OSError as exc:
        raise StorageIOError(
            context=RitualOperationContext(operation, f"cannot read {path}: {exc}"),
            cause=exc,
        ) from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise StorageIOError(
            context=RitualOperationContext(operation, f"{path} is not valid JSON: {exc}"),
            cause=exc,
        ) from exc

    if not isinstance(payload, dict):
        raise StorageIOError(
            context=RitualOperationContext(operation, f"{path} does not hold a JSON object")
        )
    return payload


def write_document(path: Path, payload: dict[str, Any], *, operation: str) -> None:
    """Write ``payload`` to ``path`` as pretty-printed JSON.

    Parent directories are created as needed.

    Raises:
        StorageIOError: If the directory or file cannot be written, or the
            payload is not JSON-serialisable.
    """
    try:
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as exc:
        raise StorageIOError(
            context=RitualOperationContext(operation, f"cannot serialise {path.name}: {exc}"),
            cause=exc,
        ) from exc

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise StorageIOError(
            context=RitualOperationContext(operation, f"cannot write {path}: {exc}"),
            cause=exc,
        ) from exc

    logger.debug("documents: wrote %s (%d bytes)", path.name, len(text))
