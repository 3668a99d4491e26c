"""Notifier interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class NotificationError(RuntimeError):
    """Delivery to the push relay failed."""


class Notifier(ABC):
    """Push alert sink. Implementations rate-limit themselves."""

    @abstractmethod
    async def notify(self, text: str) -> None:
        """Deliver one alert, or drop it when rate limited."""
