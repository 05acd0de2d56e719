"""Tests for Settings, PipelineConfig, backend enums, and pipeline wiring."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.categorization.categorizer import ClaudeCategorizer
from src.categorization.keywords import KeywordCategorizer
from src.config import Settings
from src.pipeline.factory import build_pipeline
from src.pipeline_config import (
    DEFAULT_DEPARTMENT,
    CategorizerBackend,
    Department,
    PipelineConfig,
    TrackerBackend,
)
from src.tracker.local import LocalTaskTracker
from src.tracker.zoho import ZohoSprintsTracker

# ---------------------------------------------------------------------------
# Enum tests
# ---------------------------------------------------------------------------


class TestDepartment:
    def test_values(self) -> None:
        assert [d.value for d in Department] == ["Design", "Procurement", "Production"]

    def test_default_is_production(self) -> None:
        assert DEFAULT_DEPARTMENT is Department.PRODUCTION

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            Department("Marketing")

    def test_is_str_subclass(self) -> None:
        """Enum values behave as plain strings for JSON serialization."""
        assert isinstance(Department.DESIGN, str)


class TestBackends:
    def test_from_string(self) -> None:
        assert CategorizerBackend("keywords") is CategorizerBackend.KEYWORDS
        assert TrackerBackend("local") is TrackerBackend.LOCAL

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            TrackerBackend("jira")


# ---------------------------------------------------------------------------
# Settings / PipelineConfig tests
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.api_port == 3000
        assert s.state_ttl_days == 30
        assert s.max_state_size_mb == 10.0
        assert s.lock_timeout_seconds == 10.0
        assert s.lock_stale_seconds == 30.0

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STATE_TTL_DAYS", "7")
        monkeypatch.setenv("TRACKER_BACKEND", "local")
        monkeypatch.setenv("ZOHO_TEAM_ID", "team-42")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.state_ttl_days == 7
        assert s.tracker_backend == "local"
        assert s.zoho_team_id == "team-42"


class TestPipelineConfig:
    def test_defaults(self) -> None:
        cfg = PipelineConfig()
        assert cfg.state_ttl_days == 30
        assert cfg.categorizer_backend is CategorizerBackend.CLAUDE
        assert cfg.tracker_backend is TrackerBackend.ZOHO

    def test_from_settings(self, tmp_path: Path) -> None:
        s = Settings(
            _env_file=None,  # type: ignore[call-arg]
            state_file=tmp_path / "s.json",
            lock_timeout_seconds=2.5,
            categorizer_backend="keywords",
        )
        cfg = PipelineConfig.from_settings(s)
        assert cfg.state_file == tmp_path / "s.json"
        assert cfg.lock_timeout_seconds == 2.5
        assert cfg.categorizer_backend is CategorizerBackend.KEYWORDS

    def test_immutable(self) -> None:
        cfg = PipelineConfig()
        with pytest.raises(AttributeError):
            cfg.state_ttl_days = 1  # type: ignore[misc]

    def test_unknown_backend_rejected(self) -> None:
        s = Settings(_env_file=None, tracker_backend="jira")  # type: ignore[call-arg]
        with pytest.raises(ValueError):
            PipelineConfig.from_settings(s)


class TestBuildPipeline:
    def test_default_backends(self, tmp_path: Path) -> None:
        s = Settings(
            _env_file=None,  # type: ignore[call-arg]
            state_file=tmp_path / "s.json",
            lock_file=tmp_path / "s.lock",
        )
        pipeline = build_pipeline(s)
        assert isinstance(pipeline.categorizer, ClaudeCategorizer)
        assert isinstance(pipeline.tracker, ZohoSprintsTracker)
        assert pipeline.store.state_path == tmp_path / "s.json"
        assert pipeline.store.lock.lock_path == tmp_path / "s.lock"

    def test_offline_backends(self, tmp_path: Path) -> None:
        s = Settings(
            _env_file=None,  # type: ignore[call-arg]
            categorizer_backend="keywords",
            tracker_backend="local",
            local_tasks_file=tmp_path / "tasks.json",
        )
        pipeline = build_pipeline(s)
        assert isinstance(pipeline.categorizer, KeywordCategorizer)
        assert isinstance(pipeline.tracker, LocalTaskTracker)
        assert pipeline.tracker.tasks_file == tmp_path / "tasks.json"
