"""Shared fixtures: a tmp_path-backed lock and state store."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.state.lock import LockManager
from src.state.store import StateStore


@pytest.fixture
def lock(tmp_path: Path) -> LockManager:
    return LockManager(tmp_path / "state.lock", timeout=1.0, stale_after=30.0, poll_interval=0.01)


@pytest.fixture
def store(tmp_path: Path, lock: LockManager) -> StateStore:
    return StateStore(tmp_path / "state.json", lock, ttl_days=30, max_size_mb=10)
