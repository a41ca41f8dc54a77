from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..exceptions import ProtocolError
from ..http_client import HttpClient
from ..session_store import SessionStore


@dataclass
class BaseClient:
    http: HttpClient
    session_store: SessionStore = field(default_factory=SessionStore)
    module: str = "api"

    def _auth_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        session = self.session_store.get()
        if session is not None:
            headers["Authorization"] = f"Bearer {session.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs: Any):
        headers = kwargs.pop("headers", {})
        merged = {**self._auth_headers(), **headers}
        kwargs.setdefault("module", self.module)
        return await self.http.request(method, path, headers=merged, **kwargs)


def expect_list(payload: Any, operation: str, envelope_key: str | None = None) -> list[Any]:
    """Accept a bare JSON array, or an object carrying the array under ``envelope_key``."""
    if envelope_key and isinstance(payload, dict):
        payload = payload.get(envelope_key)
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ProtocolError(
            code="UNEXPECTED_SHAPE",
            message=f"Expected {operation} response to be a JSON array",
            raw_payload=payload,
        )
    return payload


def expect_object(payload: Any, operation: str) -> dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ProtocolError(
            code="UNEXPECTED_SHAPE",
            message=f"Expected {operation} response to be a JSON object",
            raw_payload=payload,
        )
    return payload
