"""File-based exclusive lock guarding the persisted state document.

A lock is held while its marker file exists.  The marker is created with
``O_CREAT | O_EXCL`` so only one acquirer can win; its mtime is the staleness
clock used to reclaim markers left behind by a crashed holder.  Suitable for a
single-instance deployment only.
"""

from __future__ import annotations

import asyncio
import logging
import os
import secrets
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from src.errors import LockTimeout, StateIOError

logger = logging.getLogger(__name__)


class LockManager:
    """Cooperative mutex over a lock file with timeout and stale-lock recovery."""

    def __init__(
        self,
        lock_path: Path | str,
        timeout: float = 10.0,
        stale_after: float = 30.0,
        poll_interval: float = 0.1,
    ) -> None:
        self.lock_path = Path(lock_path)
        self.timeout = timeout
        self.stale_after = stale_after
        self.poll_interval = poll_interval

    def _try_create(self) -> bool:
        try:
            fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        except OSError as exc:
            raise StateIOError(f"Cannot create lock file {self.lock_path}: {exc}") from exc
        try:
            os.write(fd, f"{os.getpid()}:{secrets.token_hex(8)}".encode("utf-8"))
        except OSError as exc:
            # An empty marker would block other writers until it goes stale
            self.lock_path.unlink(missing_ok=True)
            raise StateIOError(f"Cannot write lock file {self.lock_path}: {exc}") from exc
        finally:
            os.close(fd)
        return True

    def _reclaim_if_stale(self) -> bool:
        """Remove the marker if it is older than ``stale_after``.

        Returns True when the caller should retry immediately (marker reclaimed
        or already gone), False when the lock is legitimately held.
        """
        try:
            age = time.time() - self.lock_path.stat().st_mtime
        except FileNotFoundError:
            return True
        except OSError as exc:
            raise StateIOError(f"Cannot inspect lock file {self.lock_path}: {exc}") from exc

        if age <= self.stale_after:
            return False

        logger.warning("Reclaiming stale lock %s (age %.1fs)", self.lock_path, age)
        try:
            self.lock_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StateIOError(f"Cannot remove stale lock {self.lock_path}: {exc}") from exc
        return True

    async def acquire(self, timeout: float | None = None) -> None:
        """Acquire the lock, polling until ``timeout`` seconds have elapsed.

        Raises:
            LockTimeout: the lock stayed held (and fresh) for the whole timeout.
            StateIOError: the lock file could not be created or inspected.
        """
        limit = self.timeout if timeout is None else timeout
        deadline = time.monotonic() + limit

        while True:
            if self._try_create():
                return
            if self._reclaim_if_stale():
                continue
            if time.monotonic() >= deadline:
                raise LockTimeout(f"Could not acquire lock within {limit:g} seconds")
            await asyncio.sleep(self.poll_interval)

    def release(self) -> None:
        """Remove the marker.  A missing marker is not an error."""
        try:
            self.lock_path.unlink()
        except FileNotFoundError:
            pass

    def is_held(self) -> bool:
        return self.lock_path.exists()

    @asynccontextmanager
    async def hold(self, timeout: float | None = None) -> AsyncIterator[None]:
        """Hold the lock for the duration of the ``async with`` block."""
        await self.acquire(timeout)
        try:
            yield
        finally:
            self.release()
