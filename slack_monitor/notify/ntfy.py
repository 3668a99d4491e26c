"""ntfy implementation of Notifier."""

from __future__ import annotations

import logging
import time
from typing import Callable

import httpx

from slack_monitor.notify.base import NotificationError, Notifier

_LOGGER = logging.getLogger(__name__)

NTFY_BASE_URL = "https://ntfy.sh"
DEFAULT_MIN_INTERVAL_SECONDS = 2.0
_TIMEOUT_SECONDS = 10.0


class NtfyNotifier(Notifier):
    """Posts alerts to an ntfy topic, at most one per minimum interval."""

    def __init__(
        self,
        topic: str,
        base_url: str = NTFY_BASE_URL,
        min_interval_seconds: float = DEFAULT_MIN_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._topic = topic
        self._base_url = base_url.rstrip("/")
        self._min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._last_sent: float | None = None

    @property
    def topic(self) -> str:
        return self._topic

    async def notify(self, text: str) -> None:
        if self._last_sent is not None and self._clock() - self._last_sent < self._min_interval_seconds:
            _LOGGER.info("Rate limiting: skipping notification")
            return

        try:
            async with httpx.AsyncClient(timeout=_TIMEOUT_SECONDS) as client:
                response = await client.post(
                    f"{self._base_url}/{self._topic}",
                    content=text.encode("utf-8"),
                    headers={"Title": "Slack Monitor", "Priority": "default"},
                )
        except httpx.HTTPError as exc:
            raise NotificationError(f"Failed to send notification: {exc}") from exc

        if response.status_code != 200:
            raise NotificationError(f"ntfy returned status {response.status_code}: {response.text}")

        self._last_sent = self._clock()
        _LOGGER.info("Notification sent: %s", text)
