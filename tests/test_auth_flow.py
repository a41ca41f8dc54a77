from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from ferry_client_sdk.auth_flow import LoginOrchestrator
from ferry_client_sdk.clients.auth import AuthClient
from ferry_client_sdk.config import ClientConfig
from ferry_client_sdk.exceptions import (
    AuthenticationError,
    ProtocolError,
    TransportError,
    UnknownRoleError,
    ValidationError,
)
from ferry_client_sdk.http_client import HttpClient
from ferry_client_sdk.models import Session
from ferry_client_sdk.roles import CanonicalRole, LoginChannel, NavigationTarget, TokenScope
from ferry_client_sdk.session_store import MemoryStorage, SessionStore

BASE_URL = "https://api.example.com"


def _orchestrator(handler) -> tuple[LoginOrchestrator, SessionStore, MemoryStorage]:
    config = ClientConfig(env_name="test", api_base_url=BASE_URL)
    http = HttpClient(config, transport=httpx.MockTransport(handler))
    storage = MemoryStorage()
    store = SessionStore(storage=storage)
    return LoginOrchestrator(auth_client=AuthClient(http=http, session_store=store), session_store=store), store, storage


def test_staff_login_persists_staff_token_and_routes_home() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"token": "abc", "user": {"full_name": "Jo", "role": "operating"}})

    orchestrator, store, storage = _orchestrator(handler)
    target = asyncio.run(orchestrator.login(LoginChannel.STAFF, "ops@x.com", "secret1"))

    assert target is NavigationTarget.STAFF_HOME
    assert requests[0].url == httpx.URL(f"{BASE_URL}/staff/login")
    assert json.loads(requests[0].content) == {"email": "ops@x.com", "password": "secret1"}
    session = store.get()
    assert session is not None
    assert session.canonical_role is CanonicalRole.STAFF
    assert session.token_scope is TokenScope.STAFF
    assert session.display_name == "Jo"
    assert storage.get_item("staffToken") == "abc"
    assert storage.get_item("token") is None
    assert storage.get_item("role") == "staff"


def test_passenger_login_uses_standard_token_slot() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token": "t-1", "user": {"_id": 7, "name": "Ann", "role": "user"}})

    orchestrator, store, storage = _orchestrator(handler)
    target = asyncio.run(orchestrator.login(LoginChannel.PASSENGER, "ann@x.com", "pw"))

    assert target is NavigationTarget.PASSENGER_HOME
    assert storage.get_item("token") == "t-1"
    assert storage.get_item("staffToken") is None
    session = store.get()
    assert session.display_name == "Ann"
    assert session.user_id == "7"


def test_category_drives_role_for_supplier_accounts() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token": "t", "user": {"name": "Acme", "category": "supplier"}})

    orchestrator, _, _ = _orchestrator(handler)
    assert asyncio.run(orchestrator.login(LoginChannel.SUPPLIER, "s@x.com", "pw")) is NavigationTarget.SUPPLIER_HOME


@pytest.mark.parametrize(("email", "password"), [("a@x.com", ""), ("", "pw"), ("  ", "pw"), ("a@x.com", "   ")])
def test_blank_credentials_never_reach_the_network(email: str, password: str) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    orchestrator, _, _ = _orchestrator(handler)
    with pytest.raises(ValidationError, match="Please enter both email and password"):
        asyncio.run(orchestrator.login(LoginChannel.PASSENGER, email, password))
    assert calls == []


def test_html_response_is_a_protocol_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad gateway</html>", headers={"content-type": "text/html"})

    orchestrator, store, _ = _orchestrator(handler)
    with pytest.raises(ProtocolError) as excinfo:
        asyncio.run(orchestrator.login(LoginChannel.PASSENGER, "a@x.com", "pw"))
    assert "text/html" in excinfo.value.message
    assert store.get() is None


def test_rejected_credentials_carry_backend_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "Wrong password"})

    orchestrator, _, _ = _orchestrator(handler)
    with pytest.raises(AuthenticationError) as excinfo:
        asyncio.run(orchestrator.login(LoginChannel.FINANCE, "f@x.com", "pw"))
    assert excinfo.value.message == "Wrong password"
    assert excinfo.value.status_code == 401


def test_error_without_message_uses_generic_text() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={})

    orchestrator, _, _ = _orchestrator(handler)
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        asyncio.run(orchestrator.login(LoginChannel.PASSENGER, "a@x.com", "pw"))


@pytest.mark.parametrize(
    "body",
    [
        {"user": {"role": "user"}},
        {"token": "abc"},
        {"token": "", "user": {"role": "user"}},
        {"message": "Account locked"},
    ],
)
def test_success_status_without_token_or_user_is_rejected(body: dict) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=body)

    orchestrator, store, _ = _orchestrator(handler)
    with pytest.raises(AuthenticationError) as excinfo:
        asyncio.run(orchestrator.login(LoginChannel.PASSENGER, "a@x.com", "pw"))
    assert excinfo.value.message == body.get("message", "Invalid credentials")
    assert store.get() is None


def test_unreachable_backend_is_a_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    orchestrator, _, _ = _orchestrator(handler)
    with pytest.raises(TransportError) as excinfo:
        asyncio.run(orchestrator.login(LoginChannel.PASSENGER, "a@x.com", "pw"))
    assert excinfo.value.code == "NETWORK_ERROR"


def test_unknown_role_does_not_create_a_session() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token": "abc", "user": {"role": "captain"}})

    orchestrator, store, _ = _orchestrator(handler)
    with pytest.raises(UnknownRoleError) as excinfo:
        asyncio.run(orchestrator.login(LoginChannel.STAFF, "a@x.com", "pw"))
    assert excinfo.value.raw_role == "captain"
    assert store.get() is None


def test_failed_login_leaves_existing_session_untouched() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "nope"})

    orchestrator, store, _ = _orchestrator(handler)
    store.set(Session(canonical_role=CanonicalRole.FINANCE, token="old", user={"name": "Fin"}))

    with pytest.raises(AuthenticationError):
        asyncio.run(orchestrator.login(LoginChannel.FINANCE, "f@x.com", "bad"))

    assert store.get().token == "old"


def test_logout_clears_every_slot() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token": "abc", "user": {"role": "admin"}})

    orchestrator, store, storage = _orchestrator(handler)
    assert asyncio.run(orchestrator.login(LoginChannel.PASSENGER, "a@x.com", "pw")) is NavigationTarget.ADMIN_HOME

    orchestrator.logout()

    assert store.get() is None
    assert storage.items == {}
