"""Chat source interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from slack_monitor.models import Conversation, Message, User


class ChatError(RuntimeError):
    """Base error raised by chat sources."""


class AuthError(ChatError):
    """Credentials were rejected."""


class TransportError(ChatError):
    """Network or API failure talking to the chat service."""


class ChatSource(ABC):
    """Abstract chat service used by the cycle engine."""

    @abstractmethod
    async def authenticate(self) -> str:
        """Validate credentials and return the caller's own user ID."""

    @abstractmethod
    async def list_conversations(self) -> list[Conversation]:
        """Return all direct-message conversations."""

    @abstractmethod
    async def fetch_history_since(self, conversation_id: str, marker: str) -> list[Message]:
        """Return messages newer than ``marker``, newest first."""

    @abstractmethod
    async def resolve_user(self, user_id: str) -> User:
        """Look up a user's profile."""
