"""Core domain models used across layers."""

from __future__ import annotations

from dataclasses import dataclass, field

MESSAGE_KIND = "message"


@dataclass(frozen=True, slots=True)
class Conversation:
    """Direct-message channel between the authenticated user and one counterpart."""

    id: str
    user: str


@dataclass(frozen=True, slots=True)
class Message:
    """Message normalized by chat sources for the cycle engine."""

    ts: str
    user: str
    text: str
    kind: str = MESSAGE_KIND


@dataclass(frozen=True, slots=True)
class User:
    """Chat user as returned by user lookup."""

    id: str
    name: str = ""
    real_name: str = ""

    @property
    def display_name(self) -> str:
        return self.real_name or self.name or self.id


@dataclass(slots=True)
class WatermarkState:
    """Last processed marker per conversation."""

    last_checked: dict[str, str] = field(default_factory=dict)

    def get(self, conversation_id: str) -> str | None:
        return self.last_checked.get(conversation_id)

    def __len__(self) -> int:
        return len(self.last_checked)


@dataclass(slots=True)
class SweepResult:
    """Aggregate outcome of one sweep over all conversations."""

    conversations: int = 0
    checked: int = 0
    failed: int = 0
    notified: int = 0
    cancelled: bool = False
    aborted: bool = False
    persisted: bool = False
