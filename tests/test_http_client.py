from __future__ import annotations

import asyncio

import httpx
import pytest

from ferry_client_sdk.config import ClientConfig
from ferry_client_sdk.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ProtocolError,
    ServerError,
    TransportError,
)
from ferry_client_sdk.http_client import HttpClient
from ferry_client_sdk.models import Session
from ferry_client_sdk.roles import CanonicalRole
from ferry_client_sdk.session import ApiSession
from ferry_client_sdk.session_store import MemoryStorage
from ferry_client_sdk.ui_errors import AUTH_MESSAGE, to_user_facing_error

BASE_URL = "https://api.example.com"
CONFIG = ClientConfig(env_name="test", api_base_url=BASE_URL)


def _request(handler, path: str = "/inventory/items", **kwargs):
    async def scenario():
        async with HttpClient(CONFIG, transport=httpx.MockTransport(handler)) as http:
            return await http.request("GET", path, **kwargs), http

    return asyncio.run(scenario())


def test_success_returns_parsed_json_and_records_operation() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Accept"] == "application/json"
        assert str(request.url) == f"{BASE_URL}/inventory/items"
        return httpx.Response(200, json=[{"item_name": "Rope"}])

    payload, http = _request(handler, module="inventory", operation="list_items")

    assert payload == [{"item_name": "Rope"}]
    assert http.last_operation.module == "inventory"
    assert http.last_operation.result == "success"
    assert http.last_operation.status_code == 200


def test_empty_body_is_none() -> None:
    payload, _ = _request(lambda request: httpx.Response(204))
    assert payload is None


@pytest.mark.parametrize(
    ("status", "error_type"),
    [(401, AuthenticationError), (403, AuthenticationError), (404, NotFoundError), (409, ConflictError), (503, ServerError)],
)
def test_status_codes_map_to_error_types(status: int, error_type: type) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"code": "X", "message": "nope"})

    with pytest.raises(error_type) as excinfo:
        _request(handler)
    assert excinfo.value.status_code == status
    assert excinfo.value.message == "nope"


def test_invalid_json_is_protocol_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"{oops", headers={"content-type": "application/json"})

    with pytest.raises(ProtocolError) as excinfo:
        _request(handler)
    assert excinfo.value.code == "INVALID_JSON"


def test_timeout_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(TransportError) as excinfo:
        _request(handler)
    assert excinfo.value.code == "TIMEOUT_ERROR"


def test_unauthorized_protected_call_clears_session() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization", ""))
        return httpx.Response(401, json={"message": "Token expired"})

    storage = MemoryStorage()

    async def scenario() -> ApiSession:
        async with ApiSession(CONFIG, storage=storage, transport=httpx.MockTransport(handler)) as api:
            api.session_store.set(Session(canonical_role=CanonicalRole.INVENTORY, token="inv-1"))
            with pytest.raises(AuthenticationError):
                await api.inventory_client().list_items()
            return api

    api = asyncio.run(scenario())
    assert seen == ["Bearer inv-1"]
    assert api.current is None
    assert storage.items == {}


def test_unauthorized_call_without_backend_message_shows_sign_in_text() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={})

    async def scenario() -> AuthenticationError:
        async with ApiSession(CONFIG, storage=MemoryStorage(), transport=httpx.MockTransport(handler)) as api:
            api.session_store.set(Session(canonical_role=CanonicalRole.INVENTORY, token="inv-1"))
            with pytest.raises(AuthenticationError) as excinfo:
                await api.inventory_client().list_items()
            return excinfo.value

    error = to_user_facing_error(asyncio.run(scenario()))
    assert error.message == AUTH_MESSAGE
    assert error.technical_details == "HTTP_ERROR (HTTP 401)"
