"""Normalized request model produced by the validator."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WebhookRequest:
    """A validated webhook payload with sanitized, unique action items."""

    meeting_name: str
    action_items: tuple[str, ...]
