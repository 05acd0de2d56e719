"""File-backed state store mapping task fingerprints to processing records.

Every public operation runs under the LockManager.  ``get`` and ``put`` load
and rewrite the whole document inside a single lock hold, which is O(n) per
update: simple, and fine at the scale of a few thousand records.
"""

from __future__ import annotations

import errno
import json
import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from src.errors import StateDiskFullError, StateIOError, StatePermissionError
from src.state.lock import LockManager
from src.state.models import ProcessingRecord

logger = logging.getLogger(__name__)

StateMap = dict[str, ProcessingRecord]


def write_json_atomic(path: Path, data: Any) -> None:
    """Write ``data`` as JSON to a temp file beside ``path``, then replace ``path``.

    The previous file is left untouched if any step fails.

    Raises:
        StateDiskFullError: no space left on device.
        StatePermissionError: the directory or file is not writable.
        StateIOError: any other OS error.
    """
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        if exc.errno == errno.ENOSPC:
            raise StateDiskFullError(f"No space left on device for {path}") from exc
        if exc.errno in (errno.EACCES, errno.EPERM):
            raise StatePermissionError(f"Permission denied writing to {path}: {exc}") from exc
        raise StateIOError(f"Failed to write {path}: {exc}") from exc
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass


class StateStore:
    """TTL-pruned, size-monitored fingerprint → ProcessingRecord mapping."""

    def __init__(
        self,
        state_path: Path | str,
        lock: LockManager,
        ttl_days: int = 30,
        max_size_mb: float = 10.0,
    ) -> None:
        self.state_path = Path(state_path)
        self.lock = lock
        self.ttl = timedelta(days=ttl_days)
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)

    # -- helpers (caller must hold the lock) --------------------------------

    def _evict_expired(self, state: StateMap) -> StateMap:
        cutoff = datetime.now(timezone.utc) - self.ttl
        cleaned = {fp: rec for fp, rec in state.items() if rec.processed_at > cutoff}
        removed = len(state) - len(cleaned)
        if removed:
            logger.info("Cleaned up %d old state entries", removed)
        return cleaned

    def _check_size(self) -> None:
        size = self.state_path.stat().st_size
        if size > self.max_size_bytes:
            logger.warning(
                "State file size (%.2fMB) exceeds recommended limit (%.2fMB)",
                size / (1024 * 1024),
                self.max_size_bytes / (1024 * 1024),
            )

    def _read(self) -> StateMap:
        try:
            raw_text = self.state_path.read_text(encoding="utf-8")
            self._check_size()
        except FileNotFoundError:
            return {}
        except PermissionError as exc:
            raise StatePermissionError(
                f"Permission denied accessing state file: {exc}"
            ) from exc
        except UnicodeDecodeError:
            logger.warning(
                "State file %s is not valid UTF-8, starting with empty state", self.state_path
            )
            return {}
        except OSError as exc:
            raise StateIOError(f"Failed to read state file: {exc}") from exc

        try:
            document = json.loads(raw_text)
        except json.JSONDecodeError:
            logger.warning("State file contains invalid JSON, starting with empty state")
            return {}
        if not isinstance(document, dict):
            logger.warning("State file root is not an object, starting with empty state")
            return {}

        state: StateMap = {}
        for fingerprint, entry in document.items():
            try:
                state[fingerprint] = ProcessingRecord.from_dict(entry)
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("Dropping malformed state entry %s", fingerprint)
        return self._evict_expired(state)

    def _write(self, state: StateMap) -> None:
        cleaned = self._evict_expired(state)
        write_json_atomic(self.state_path, {fp: rec.to_dict() for fp, rec in cleaned.items()})

    # -- public API ---------------------------------------------------------

    async def load(self) -> StateMap:
        """Read the document and return it with expired entries evicted."""
        async with self.lock.hold():
            return self._read()

    async def save(self, state: StateMap) -> None:
        """Evict expired entries and atomically rewrite the document."""
        async with self.lock.hold():
            self._write(state)

    async def get(self, fingerprint: str) -> ProcessingRecord | None:
        async with self.lock.hold():
            return self._read().get(fingerprint)

    async def put(self, fingerprint: str, record: ProcessingRecord) -> None:
        """Insert ``record`` under ``fingerprint`` in one load/mutate/save cycle."""
        async with self.lock.hold():
            state = self._read()
            state[fingerprint] = record
            self._write(state)
