"""Tests for SlackClient."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from slack_monitor.chat.base import AuthError, TransportError
from slack_monitor.chat.slack import SlackClient
from slack_monitor.models import Conversation, Message, User


def _mock_response(data: dict, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = data
    resp.text = str(data)
    return resp


def _mock_client(response: MagicMock) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client.get = AsyncMock(return_value=response)
    mock_client.post = AsyncMock(return_value=response)
    return mock_client


def _client() -> SlackClient:
    return SlackClient(xoxc_token="xoxc-123", xoxd_token="xoxd-456")


@pytest.mark.asyncio
async def test_authenticate_returns_user_id_and_sends_stealth_credentials():
    payload = {"ok": True, "user": "alice", "user_id": "U_SELF", "team": "Acme"}
    mock_client = _mock_client(_mock_response(payload))

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client) as factory:
        client = _client()
        user_id = await client.authenticate()

    assert user_id == "U_SELF"
    assert client.authenticated_user_id == "U_SELF"
    assert mock_client.post.call_args.args[0] == "/auth.test"
    assert mock_client.post.call_args.kwargs["data"] == {"token": "xoxc-123"}
    cookies = factory.call_args.kwargs["cookies"]
    assert cookies["d"] == "xoxd-456"
    assert int(cookies["d-s"]) > 0
    assert "Mozilla" in factory.call_args.kwargs["headers"]["User-Agent"]


@pytest.mark.asyncio
async def test_authenticate_rejected_raises_auth_error():
    mock_client = _mock_client(_mock_response({"ok": False, "error": "invalid_auth"}))

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(AuthError, match="invalid_auth"):
            await _client().authenticate()


@pytest.mark.asyncio
async def test_authenticate_transport_failure_raises_auth_error():
    mock_client = _mock_client(_mock_response({}, status_code=500))

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(AuthError):
            await _client().authenticate()


@pytest.mark.asyncio
async def test_list_conversations_requests_open_dms():
    payload = {
        "ok": True,
        "channels": [{"id": "D1", "user": "U2"}, {"id": "D2", "user": "U3", "is_user_deleted": True}],
    }
    mock_client = _mock_client(_mock_response(payload))

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client):
        conversations = await _client().list_conversations()

    assert conversations == [Conversation(id="D1", user="U2"), Conversation(id="D2", user="U3")]
    assert mock_client.get.call_args.args[0] == "/conversations.list"
    params = mock_client.get.call_args.kwargs["params"]
    assert params["types"] == "im"
    assert params["exclude_archived"] == "true"
    assert params["limit"] == "500"
    assert params["token"] == "xoxc-123"


@pytest.mark.asyncio
async def test_fetch_history_maps_messages_in_api_order():
    payload = {
        "ok": True,
        "messages": [
            {"type": "message", "user": "U2", "text": "hi", "ts": "105.000000"},
            {"type": "message", "subtype": "bot_message", "text": "beep", "ts": "104.000000"},
            {"type": "message", "user": "U2", "text": "yo", "ts": "103.000000"},
        ],
    }
    mock_client = _mock_client(_mock_response(payload))

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client):
        messages = await _client().fetch_history_since("D1", "100.000000")

    assert messages == [
        Message(ts="105.000000", user="U2", text="hi"),
        Message(ts="104.000000", user="", text="beep"),
        Message(ts="103.000000", user="U2", text="yo"),
    ]
    params = mock_client.get.call_args.kwargs["params"]
    assert params["channel"] == "D1"
    assert params["oldest"] == "100.000000"
    assert params["limit"] == "100"


@pytest.mark.asyncio
async def test_fetch_history_omits_empty_oldest():
    mock_client = _mock_client(_mock_response({"ok": True, "messages": []}))

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client):
        await _client().fetch_history_since("D1", "")

    assert "oldest" not in mock_client.get.call_args.kwargs["params"]


@pytest.mark.asyncio
async def test_api_error_raises_transport_error():
    mock_client = _mock_client(_mock_response({"ok": False, "error": "channel_not_found"}))

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(TransportError, match="channel_not_found"):
            await _client().fetch_history_since("D1", "1.0")


@pytest.mark.asyncio
async def test_non_200_raises_transport_error():
    mock_client = _mock_client(_mock_response({}, status_code=429))

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(TransportError, match="429"):
            await _client().list_conversations()


@pytest.mark.asyncio
async def test_network_error_raises_transport_error():
    mock_client = _mock_client(_mock_response({}))
    mock_client.get = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(TransportError):
            await _client().list_conversations()


@pytest.mark.asyncio
async def test_bad_json_raises_transport_error():
    response = _mock_response({})
    response.json.side_effect = ValueError("Expecting value")
    mock_client = _mock_client(response)

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client):
        with pytest.raises(TransportError):
            await _client().list_conversations()


@pytest.mark.asyncio
async def test_resolve_user_returns_profile():
    payload = {"ok": True, "user": {"id": "U2", "name": "bob", "real_name": "Bob Smith"}}
    mock_client = _mock_client(_mock_response(payload))

    with patch("slack_monitor.chat.slack.httpx.AsyncClient", return_value=mock_client):
        user = await _client().resolve_user("U2")

    assert user == User(id="U2", name="bob", real_name="Bob Smith")
    assert user.display_name == "Bob Smith"
    assert mock_client.get.call_args.kwargs["params"]["user"] == "U2"


def test_display_name_falls_back_to_handle_then_id():
    assert User(id="U2", name="bob").display_name == "bob"
    assert User(id="U2").display_name == "U2"
