from __future__ import annotations

import asyncio

import httpx
import pytest

from ferry_client_sdk.chat import ChatSessionAdapter
from ferry_client_sdk.clients.chat_client import ChatClient, parse_server_message
from ferry_client_sdk.config import ClientConfig
from ferry_client_sdk.http_client import HttpClient
from ferry_client_sdk.models import ConversationKey
from ferry_client_sdk.subscriptions import CallbackSubscription, PollingSubscription

BASE_URL = "https://api.example.com"


def _row(message_id: str, minute: int) -> dict:
    return {"_id": message_id, "sender": "Admin", "message": message_id, "timestamp": f"2026-03-01T10:{minute:02d}:00Z"}


def _adapter(handler) -> ChatSessionAdapter:
    http = HttpClient(ClientConfig(env_name="test", api_base_url=BASE_URL), transport=httpx.MockTransport(handler))
    return ChatSessionAdapter(
        chat_client=ChatClient(http=http),
        key=ConversationKey(local_id="u1", remote_id="admin"),
        local_sender="Ann",
    )


def test_interval_must_be_positive() -> None:
    with pytest.raises(ValueError):
        PollingSubscription(_adapter(lambda request: httpx.Response(200, json=[])), interval_seconds=0)


def test_poll_once_feeds_only_new_messages() -> None:
    pages = [[_row("m1", 1)], [_row("m1", 1), _row("m2", 2)], [_row("m1", 1), _row("m2", 2)]]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=pages.pop(0))

    async def scenario() -> None:
        adapter = _adapter(handler)
        await adapter.load()
        subscription = PollingSubscription(adapter, interval_seconds=1)
        added = await subscription.poll_once()
        assert [message.id for message in added] == ["m2"]
        assert await subscription.poll_once() == []
        assert [message.id for message in adapter.messages] == ["m1", "m2"]

    asyncio.run(scenario())


def test_poll_failure_is_counted_and_log_left_alone() -> None:
    responses = [httpx.Response(200, json=[_row("m1", 1)]), httpx.Response(500, json={})]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    async def scenario() -> None:
        adapter = _adapter(handler)
        await adapter.load()
        subscription = PollingSubscription(adapter, interval_seconds=1)
        assert await subscription.poll_once() == []
        assert subscription.failures == 1
        assert [message.id for message in adapter.messages] == ["m1"]

    asyncio.run(scenario())


def test_start_and_stop_polling_loop() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        return httpx.Response(200, json=[_row(f"m{len(calls)}", len(calls))])

    async def scenario() -> ChatSessionAdapter:
        adapter = _adapter(handler)
        await adapter.load()
        subscription = PollingSubscription(adapter, interval_seconds=0.01)
        subscription.start()
        assert subscription.running
        await asyncio.sleep(0.05)
        await subscription.stop()
        assert not subscription.running
        return adapter

    adapter = asyncio.run(scenario())
    assert len(calls) >= 2
    assert len(adapter.messages) >= 2


def test_callback_subscription_routes_pushes_through_receive() -> None:
    events: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    async def scenario() -> ChatSessionAdapter:
        adapter = _adapter(handler)
        await adapter.load()
        handlers = []

        async def connect(push):
            handlers.append(push)
            events.append("connect")

            async def disconnect() -> None:
                events.append("disconnect")

            return disconnect

        subscription = CallbackSubscription(adapter, connect)
        subscription.start()
        await asyncio.sleep(0)
        handlers[0]([parse_server_message(_row("m9", 9), "Ann")])
        await subscription.stop()
        return adapter

    adapter = asyncio.run(scenario())
    assert events == ["connect", "disconnect"]
    assert [message.id for message in adapter.messages] == ["m9"]


def test_undated_message_is_not_duplicated_by_polling() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"sender": "Admin", "message": "Boarding now"}])

    async def scenario() -> ChatSessionAdapter:
        adapter = _adapter(handler)
        await adapter.load()
        subscription = PollingSubscription(adapter, interval_seconds=1)
        assert await subscription.poll_once() == []
        assert await subscription.poll_once() == []
        return adapter

    adapter = asyncio.run(scenario())
    assert [message.body for message in adapter.messages] == ["Boarding now"]
