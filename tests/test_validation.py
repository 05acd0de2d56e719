"""Tests for request sanitization and validation."""

from __future__ import annotations

import pytest

from src.errors import ValidationError
from src.validation.validator import (
    clean_text,
    sanitize,
    validate_action_item,
    validate_request,
)


class TestSanitize:
    def test_trims_and_strips_html(self) -> None:
        assert sanitize('  <b>Label "design"</b> & more  ', 100) == "bLabel design/b  more"

    def test_strips_control_characters(self) -> None:
        assert sanitize("Final\x00 cost\x1f calc\x7f", 100) == "Final cost calc"

    def test_clean_text_is_idempotent(self) -> None:
        text = "<  Nutrition formulation \t"
        assert clean_text(clean_text(text)) == clean_text(text) == "Nutrition formulation"

    def test_empty_after_sanitization(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            sanitize("  <>&  ", 100)
        assert exc_info.value.kind == "empty_input"

    def test_too_long(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            sanitize("x" * 11, 10)
        assert exc_info.value.kind == "too_long"

    def test_length_checked_after_stripping(self) -> None:
        assert sanitize("<<<abcdefghij>>>", 10) == "abcdefghij"

    def test_non_string(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            sanitize(42, 10)
        assert exc_info.value.kind == "not_a_string"


class TestValidateActionItem:
    def test_minimum_length(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_action_item("ab")
        assert exc_info.value.kind == "too_short"

    def test_maximum_length(self) -> None:
        assert validate_action_item("x" * 500) == "x" * 500
        with pytest.raises(ValidationError):
            validate_action_item("x" * 501)


class TestValidateRequest:
    def test_valid_request(self) -> None:
        request = validate_request(
            {
                "meetingName": " Product Development Meeting ",
                "actionItems": ["Label design", " Commercial costing"],
            }
        )
        assert request.meeting_name == "Product Development Meeting"
        assert request.action_items == ("Label design", "Commercial costing")

    def test_body_must_be_object(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_request(["Label design"])
        assert exc_info.value.kind == "not_an_object"

    def test_missing_meeting_name(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"actionItems": ["Label design"]})
        assert exc_info.value.field == "meetingName"
        assert exc_info.value.kind == "missing_field"

    def test_meeting_name_too_long(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"meetingName": "m" * 201, "actionItems": ["Label design"]})
        assert exc_info.value.kind == "too_long"

    def test_action_items_must_be_list(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"meetingName": "Sync", "actionItems": "Label design"})
        assert exc_info.value.kind == "not_an_array"

    def test_empty_action_items(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"meetingName": "Sync", "actionItems": []})
        assert exc_info.value.kind == "empty_list"

    def test_too_many_action_items(self) -> None:
        items = [f"Task number {i}" for i in range(51)]
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"meetingName": "Sync", "actionItems": items})
        assert exc_info.value.kind == "too_many_items"

    def test_fifty_items_allowed(self) -> None:
        items = [f"Task number {i}" for i in range(50)]
        assert len(validate_request({"meetingName": "Sync", "actionItems": items}).action_items) == 50

    def test_item_error_is_field_scoped(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"meetingName": "Sync", "actionItems": ["Label design", "ab"]})
        assert exc_info.value.field == "actionItems[1]"
        assert exc_info.value.kind == "too_short"
        assert "index 1" in exc_info.value.message

    def test_duplicates_after_sanitization_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"meetingName": "Sync", "actionItems": ["Label design", " <Label design> "]})
        assert exc_info.value.kind == "duplicate_items"
