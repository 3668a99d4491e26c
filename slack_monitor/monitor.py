"""Cycle engine: one sweep over every DM conversation."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from slack_monitor.chat.base import ChatError, ChatSource
from slack_monitor.formatting import DEFAULT_PREVIEW_CHARS, format_notification, is_notifiable
from slack_monitor.markers import format_marker, later_marker
from slack_monitor.models import Conversation, SweepResult, WatermarkState
from slack_monitor.notify.base import Notifier
from slack_monitor.state import WatermarkStore

LOGGER = logging.getLogger(__name__)


class CycleEngine:
    """Checks conversations for new messages and forwards them to the notifier.

    The engine owns the in-memory watermark map. Only one sweep may run at a
    time; the scheduler guarantees this by awaiting each sweep before waiting
    for the next one.
    """

    def __init__(
        self,
        chat: ChatSource,
        notifier: Notifier,
        store: WatermarkStore,
        self_user_id: str,
        state: WatermarkState | None = None,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._chat = chat
        self._notifier = notifier
        self._store = store
        self._self_user_id = self_user_id
        self._state = state if state is not None else WatermarkState()
        self._preview_chars = preview_chars
        self._clock = clock

    @property
    def state(self) -> WatermarkState:
        return self._state

    async def run_sweep(self, stop_event: asyncio.Event | None = None) -> SweepResult:
        """Run one sweep and persist watermarks. Never raises on partial failure."""

        result = SweepResult()
        started = time.monotonic()

        try:
            conversations = await self._chat.list_conversations()
        except ChatError as exc:
            LOGGER.warning("Failed to list conversations: %s", exc)
            result.aborted = True
            result.persisted = self.persist()
            return result

        result.conversations = len(conversations)
        LOGGER.info("Checking %d DM conversation(s)", len(conversations))

        for conversation in conversations:
            if stop_event is not None and stop_event.is_set():
                result.cancelled = True
                LOGGER.info(
                    "Sweep cancelled after %d of %d conversation(s)",
                    result.checked + result.failed,
                    len(conversations),
                )
                break
            try:
                result.notified += await self._check_conversation(conversation)
            except ChatError as exc:
                result.failed += 1
                LOGGER.warning("Failed to fetch history for conversation %s: %s", conversation.id, exc)
                continue
            except Exception:  # noqa: BLE001
                result.failed += 1
                LOGGER.exception("Unexpected error checking conversation %s", conversation.id)
                continue
            result.checked += 1

        result.persisted = self.persist()
        LOGGER.info(
            "Check cycle completed in %dms (%d checked, %d failed, %d new message(s))",
            int((time.monotonic() - started) * 1000),
            result.checked,
            result.failed,
            result.notified,
        )
        return result

    def persist(self) -> bool:
        """Write the full watermark map; failures are logged, not raised."""

        try:
            self._store.save(self._state)
        except OSError as exc:
            LOGGER.warning("Failed to save state to %s: %s", self._store.path, exc)
            return False
        LOGGER.info("State saved (%d conversations tracked)", len(self._state))
        return True

    async def _check_conversation(self, conversation: Conversation) -> int:
        previous = self._state.get(conversation.id)
        marker = previous
        if marker is None:
            # First contact: start from now so existing history is never replayed.
            marker = self._now_marker()
            self._state.last_checked[conversation.id] = marker

        messages = await self._chat.fetch_history_since(conversation.id, marker)

        processed = 0
        for message in reversed(messages):
            if not is_notifiable(message, self._self_user_id):
                continue
            display_name = await self._display_name(message.user)
            text = format_notification(display_name, message.text, self._preview_chars)
            try:
                await self._notifier.notify(text)
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning("Failed to send notification for conversation %s: %s", conversation.id, exc)
            processed += 1
            self._advance(conversation.id, message.ts)

        if processed == 0 and previous is not None:
            self._advance(conversation.id, self._now_marker())
        return processed

    async def _display_name(self, user_id: str) -> str:
        try:
            user = await self._chat.resolve_user(user_id)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Failed to resolve user %s, using raw ID: %s", user_id, exc)
            return user_id
        return user.display_name

    def _advance(self, conversation_id: str, marker: str) -> None:
        try:
            self._state.last_checked[conversation_id] = later_marker(self._state.get(conversation_id), marker)
        except ValueError as exc:
            LOGGER.warning("Keeping watermark for conversation %s: %s", conversation_id, exc)

    def _now_marker(self) -> str:
        return format_marker(self._clock())
