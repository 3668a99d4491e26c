"""Slack Web API implementation of ChatSource.

Authenticates the way the Slack web client does: the ``xoxc`` token travels
as the ``token`` parameter and the ``xoxd`` token as the ``d`` cookie, next
to a ``d-s`` cookie holding a recent unix time.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from slack_monitor.chat.base import AuthError, ChatSource, TransportError
from slack_monitor.models import MESSAGE_KIND, Conversation, Message, User

_LOGGER = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api"
CONVERSATION_LIMIT = 500
MESSAGE_LIMIT = 100

_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36"
)


class SlackClient(ChatSource):
    """Chat source reading DMs through the Slack Web API."""

    def __init__(
        self,
        xoxc_token: str,
        xoxd_token: str,
        base_url: str = SLACK_API_URL,
        request_timeout_seconds: float = 30.0,
    ) -> None:
        self._xoxc_token = xoxc_token
        self._xoxd_token = xoxd_token
        self._base_url = base_url.rstrip("/")
        self._request_timeout_seconds = request_timeout_seconds
        self._authenticated_user_id = ""

    @property
    def authenticated_user_id(self) -> str:
        return self._authenticated_user_id

    async def authenticate(self) -> str:
        try:
            data = await self._request("POST", "auth.test", {"token": self._xoxc_token})
        except TransportError as exc:
            raise AuthError(str(exc)) from exc
        if not data.get("ok"):
            raise AuthError(f"Slack authentication failed: {data.get('error', 'unknown error')}")

        user_id = str(data.get("user_id") or "")
        if not user_id:
            raise AuthError("Slack authentication returned no user_id")
        _LOGGER.info(
            "Authenticated as %s (%s) in workspace %s",
            data.get("user"),
            user_id,
            data.get("team"),
        )
        self._authenticated_user_id = user_id
        return user_id

    async def list_conversations(self) -> list[Conversation]:
        data = await self._call(
            "conversations.list",
            {"types": "im", "exclude_archived": "true", "limit": str(CONVERSATION_LIMIT)},
        )
        return [
            Conversation(id=str(channel["id"]), user=str(channel.get("user") or ""))
            for channel in data.get("channels") or []
            if isinstance(channel, dict) and channel.get("id")
        ]

    async def fetch_history_since(self, conversation_id: str, marker: str) -> list[Message]:
        params = {"channel": conversation_id, "limit": str(MESSAGE_LIMIT)}
        if marker:
            params["oldest"] = marker
        data = await self._call("conversations.history", params)
        return [
            Message(
                ts=str(item.get("ts") or ""),
                user=str(item.get("user") or ""),
                text=str(item.get("text") or ""),
                kind=str(item.get("type") or MESSAGE_KIND),
            )
            for item in data.get("messages") or []
            if isinstance(item, dict)
        ]

    async def resolve_user(self, user_id: str) -> User:
        data = await self._call("users.info", {"user": user_id})
        user = data.get("user") or {}
        return User(
            id=str(user.get("id") or user_id),
            name=str(user.get("name") or ""),
            real_name=str(user.get("real_name") or ""),
        )

    async def _call(self, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        data = await self._request("GET", endpoint, {**params, "token": self._xoxc_token})
        if not data.get("ok"):
            raise TransportError(f"Slack API error on {endpoint}: {data.get('error', 'unknown error')}")
        return data

    async def _request(self, method: str, endpoint: str, params: dict[str, str]) -> dict[str, Any]:
        cookies = {"d": self._xoxd_token, "d-s": str(int(time.time()) - 10)}
        timeout = httpx.Timeout(self._request_timeout_seconds)
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=timeout,
                cookies=cookies,
                headers={"User-Agent": _USER_AGENT},
            ) as client:
                if method == "GET":
                    response = await client.get(f"/{endpoint}", params=params)
                else:
                    response = await client.post(f"/{endpoint}", data=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"Request to {endpoint} failed: {exc}") from exc

        if response.status_code != 200:
            raise TransportError(f"Slack API returned status {response.status_code}: {response.text}")
        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError(f"Failed to parse {endpoint} response: {exc}") from exc
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected {endpoint} response shape")
        return data
