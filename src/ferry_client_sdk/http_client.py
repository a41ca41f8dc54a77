from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import urljoin

import httpx

from .config import ClientConfig
from .error_mapper import map_error
from .exceptions import AuthenticationError, ProtocolError, TransportError
from .logging_utils import get_logger, log_action

AuthErrorHandler = Callable[[AuthenticationError], None]
JsonPayload = dict[str, Any] | list[Any] | None

logger = get_logger(__name__)


@dataclass
class LastOperation:
    module: str
    operation: str
    duration_ms: int
    result: str
    status_code: int | None = None


def _is_json_content_type(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


@dataclass
class HttpClient:
    """Async JSON client for the booking backend.

    Nothing is retried here: every failure ends the call and is raised to the
    caller, which decides whether to offer a manual retry.
    """

    config: ClientConfig
    transport: httpx.AsyncBaseTransport | None = None
    client: httpx.AsyncClient | None = None
    last_operation: LastOperation | None = None
    _auth_error_handlers: list[AuthErrorHandler] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=self.config.timeout_seconds,
                verify=self.config.verify_ssl,
                transport=self.transport,
            )

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()

    def register_auth_error_handler(self, handler: AuthErrorHandler) -> None:
        self._auth_error_handlers.append(handler)

    def _build_url(self, path: str) -> str:
        base = self.config.api_base_url.rstrip("/") + "/"
        return urljoin(base, path.lstrip("/"))

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        module: str = "unknown",
        operation: str = "unknown",
        notify_auth_errors: bool = True,
    ) -> JsonPayload:
        if self.client is None:
            raise RuntimeError("HTTP client not initialized")
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        normalized_method = method.upper()
        url = self._build_url(path)
        started = time.monotonic()
        try:
            response = await self.client.request(
                normalized_method,
                url,
                headers=request_headers,
                json=json_body,
                params=params,
            )
        except httpx.TimeoutException as exc:
            self._record_operation(module, operation, started, "error", None)
            raise TransportError(
                code="TIMEOUT_ERROR",
                message="The server took too long to respond",
                details={"type": type(exc).__name__},
            ) from exc
        except httpx.TransportError as exc:
            self._record_operation(module, operation, started, "error", None)
            raise TransportError(
                code="NETWORK_ERROR",
                message=str(exc) or "Could not reach the server",
                details={"type": type(exc).__name__},
            ) from exc

        try:
            payload = self._parse_body(response)
        except ProtocolError:
            self._record_operation(module, operation, started, "error", response.status_code)
            log_action(
                logger,
                module,
                operation,
                "protocol_error",
                level=logging.WARNING,
                status_code=response.status_code,
                content_type=response.headers.get("content-type"),
            )
            raise

        if response.is_success:
            self._record_operation(module, operation, started, "success", response.status_code)
            return payload

        self._record_operation(module, operation, started, "error", response.status_code)
        error = map_error(response.status_code, payload if isinstance(payload, Mapping) else None)
        if isinstance(error, AuthenticationError) and notify_auth_errors:
            for handler in list(self._auth_error_handlers):
                handler(error)
        raise error

    @staticmethod
    def _parse_body(response: httpx.Response) -> JsonPayload:
        if not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        if not _is_json_content_type(content_type):
            raise ProtocolError(
                code="UNEXPECTED_CONTENT_TYPE",
                message=f"Unexpected response format: {content_type or 'none'}",
                status_code=response.status_code,
                raw_payload=response.text[:500],
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError(
                code="INVALID_JSON",
                message="Response body is not valid JSON",
                status_code=response.status_code,
                raw_payload=response.text[:500],
            ) from exc

    def _record_operation(
        self,
        module: str,
        operation: str,
        started: float,
        result: str,
        status_code: int | None,
    ) -> None:
        self.last_operation = LastOperation(
            module=module,
            operation=operation,
            duration_ms=int((time.monotonic() - started) * 1000),
            result=result,
            status_code=status_code,
        )
