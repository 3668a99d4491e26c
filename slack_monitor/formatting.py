"""Notification text and message filtering helpers."""

from __future__ import annotations

from slack_monitor.models import MESSAGE_KIND, Message

DEFAULT_PREVIEW_CHARS = 500
_ELLIPSIS = "..."


def truncate_preview(text: str, limit: int = DEFAULT_PREVIEW_CHARS) -> str:
    """Cap text at ``limit`` characters, ending in an ellipsis when cut."""

    if limit <= len(_ELLIPSIS):
        raise ValueError(f"Preview limit must exceed {len(_ELLIPSIS)} characters, got {limit}")
    if len(text) > limit:
        return text[: limit - len(_ELLIPSIS)] + _ELLIPSIS
    return text


def format_notification(display_name: str, text: str, limit: int = DEFAULT_PREVIEW_CHARS) -> str:
    return f"DM from {display_name}: {truncate_preview(text, limit)}"


def is_notifiable(message: Message, self_user_id: str) -> bool:
    """Return True for ordinary messages sent by someone other than us."""

    if not message.user:
        return False
    if message.kind != MESSAGE_KIND:
        return False
    return message.user != self_user_id
