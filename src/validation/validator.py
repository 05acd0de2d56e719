"""Request sanitization and validation for the webhook endpoint."""

from __future__ import annotations

import re
from typing import Any

from src.errors import ValidationError
from src.validation.models import WebhookRequest

MAX_MEETING_NAME_LENGTH = 200
MAX_ACTION_ITEM_LENGTH = 500
MIN_ACTION_ITEM_LENGTH = 3
MAX_ACTION_ITEMS = 50

# HTML-significant characters and ASCII control characters (incl. DEL)
_HTML_CHARS = re.compile(r"[<>\"'&]")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def clean_text(text: str) -> str:
    """Strip HTML-significant and control characters, then trim whitespace.

    Characters are removed before trimming so the result is stable under
    repeated application.
    """
    return _CONTROL_CHARS.sub("", _HTML_CHARS.sub("", text)).strip()


def sanitize(text: Any, max_length: int, *, field: str | None = None) -> str:
    """Clean ``text`` and enforce that it is non-empty and at most ``max_length`` chars.

    Raises:
        ValidationError: ``not_a_string``, ``empty_input`` or ``too_long``.
    """
    if not isinstance(text, str):
        raise ValidationError("Input must be a string", field=field, kind="not_a_string")

    sanitized = clean_text(text)
    if not sanitized:
        raise ValidationError(
            "Input cannot be empty after sanitization", field=field, kind="empty_input"
        )
    if len(sanitized) > max_length:
        raise ValidationError(
            f"Input exceeds maximum length of {max_length} characters",
            field=field,
            kind="too_long",
        )
    return sanitized


def validate_action_item(item: Any, *, field: str | None = None) -> str:
    sanitized = sanitize(item, MAX_ACTION_ITEM_LENGTH, field=field)
    if len(sanitized) < MIN_ACTION_ITEM_LENGTH:
        raise ValidationError(
            f"Action item must be at least {MIN_ACTION_ITEM_LENGTH} characters long",
            field=field,
            kind="too_short",
        )
    return sanitized


def validate_request(body: Any) -> WebhookRequest:
    """Validate a raw webhook body and return the normalized request.

    Args:
        body: Decoded JSON body, expected ``{"meetingName": str, "actionItems": [str]}``.

    Returns:
        A WebhookRequest with sanitized meeting name and action items.

    Raises:
        ValidationError: on the first problem found, scoped to the offending field.
    """
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object", kind="not_an_object")

    meeting_name = body.get("meetingName")
    if not meeting_name:
        raise ValidationError("meetingName is required", field="meetingName", kind="missing_field")
    sanitized_name = sanitize(meeting_name, MAX_MEETING_NAME_LENGTH, field="meetingName")

    action_items = body.get("actionItems")
    if not isinstance(action_items, list):
        raise ValidationError(
            "actionItems must be an array", field="actionItems", kind="not_an_array"
        )
    if not action_items:
        raise ValidationError(
            "actionItems array cannot be empty", field="actionItems", kind="empty_list"
        )
    if len(action_items) > MAX_ACTION_ITEMS:
        raise ValidationError(
            f"Maximum {MAX_ACTION_ITEMS} action items allowed per request",
            field="actionItems",
            kind="too_many_items",
        )

    sanitized_items: list[str] = []
    for i, item in enumerate(action_items):
        field = f"actionItems[{i}]"
        try:
            sanitized_items.append(validate_action_item(item, field=field))
        except ValidationError as exc:
            raise ValidationError(
                f"Action item at index {i}: {exc.message}", field=field, kind=exc.kind
            ) from exc

    if len(set(sanitized_items)) != len(sanitized_items):
        raise ValidationError(
            "Duplicate action items are not allowed",
            field="actionItems",
            kind="duplicate_items",
        )

    return WebhookRequest(meeting_name=sanitized_name, action_items=tuple(sanitized_items))
