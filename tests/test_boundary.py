"""Tests for validation of raw collaborator responses."""

from __future__ import annotations

import logging

import pytest

from src.categorization.models import CategorizedItem
from src.errors import AIServiceError, TrackerServiceError
from src.pipeline.boundary import validate_categorized, validate_tracker_results
from src.pipeline_config import Department

INPUTS = ["Nutrition formulation", "Label design"]


class TestValidateCategorized:
    def test_valid_response(self) -> None:
        raw = [
            {"task": "Nutrition formulation", "department": "Production"},
            {"task": "Label design", "department": "Design"},
        ]
        assert validate_categorized(raw, INPUTS) == [
            CategorizedItem("Nutrition formulation", Department.PRODUCTION),
            CategorizedItem("Label design", Department.DESIGN),
        ]

    def test_unknown_department_remapped_to_production(self) -> None:
        raw = [
            {"task": "Nutrition formulation", "department": "Marketing"},
            {"task": "Label design", "department": "Design"},
        ]
        items = validate_categorized(raw, INPUTS)
        assert items[0].department is Department.PRODUCTION

    def test_drifted_task_text_replaced_by_input(self) -> None:
        raw = [
            {"task": "Nutritional formulation work", "department": "Production"},
            {"task": "  Label design ", "department": "Design"},
        ]
        items = validate_categorized(raw, INPUTS)
        assert [i.task for i in items] == INPUTS

    def test_cosmetic_echo_uses_input_text(self, caplog: pytest.LogCaptureFixture) -> None:
        raw = [
            {"task": "\"Nutrition formulation\"", "department": "Production"},
            {"task": "Label design\n", "department": "Design"},
        ]
        with caplog.at_level(logging.WARNING):
            items = validate_categorized(raw, INPUTS)
        assert [i.task for i in items] == INPUTS
        assert "Task mismatch" not in caplog.text

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "Production",
            {"task": "Label design"},
            [{"task": "Label design", "department": "Design"}],
            [{"task": "Nutrition formulation", "department": "Production"}, "Design"],
            [{"task": "Nutrition formulation"}, {"task": "Label design", "department": "Design"}],
            [{"department": "Production"}, {"task": "Label design", "department": "Design"}],
        ],
    )
    def test_non_conforming_shape_fails_batch(self, raw: object) -> None:
        with pytest.raises(AIServiceError):
            validate_categorized(raw, INPUTS)


class TestValidateTrackerResults:
    ITEMS = [
        CategorizedItem("Nutrition formulation", Department.PRODUCTION),
        CategorizedItem("Label design", Department.DESIGN),
    ]

    def test_valid_response(self) -> None:
        raw = [
            {"success": True, "task": "Nutrition formulation", "taskId": 1001},
            {"success": False, "task": "Label design", "error": "Zoho rate limit exceeded"},
        ]
        results = validate_tracker_results(raw, self.ITEMS)
        assert results[0].success is True
        assert results[0].task_id == "1001"
        assert results[1].success is False
        assert results[1].error == "Zoho rate limit exceeded"
        assert results[1].task_id is None

    def test_length_mismatch(self) -> None:
        with pytest.raises(TrackerServiceError) as exc_info:
            validate_tracker_results([{"success": True, "task": "Label design"}], self.ITEMS)
        assert "does not match" in exc_info.value.details

    @pytest.mark.parametrize(
        "entry",
        [
            "ok",
            {"task": "Label design"},
            {"success": "yes", "task": "Label design"},
            {"success": True},
            {"success": True, "task": "Label design", "taskId": ["x"]},
        ],
    )
    def test_non_conforming_entry(self, entry: object) -> None:
        raw = [{"success": True, "task": "Nutrition formulation"}, entry]
        with pytest.raises(TrackerServiceError):
            validate_tracker_results(raw, self.ITEMS)

    def test_result_serialization(self) -> None:
        raw = [
            {"success": True, "task": "Nutrition formulation", "taskId": "A1"},
            {"success": False, "task": "Label design", "error": "boom"},
        ]
        results = validate_tracker_results(raw, self.ITEMS)
        assert results[0].to_dict() == {"success": True, "task": "Nutrition formulation", "taskId": "A1"}
        assert results[1].to_dict() == {"success": False, "task": "Label design", "error": "boom"}
