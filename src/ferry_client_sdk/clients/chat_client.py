from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ApiError, ProtocolError
from ..idempotency import idempotency_headers
from ..models import ChatMessage, ChatSender, ConversationKey
from .base import BaseClient, expect_list, expect_object

CHAT_PATH = "/api/chat"


def _synthetic_id(sender: str, timestamp: Any, body: str) -> str:
    digest = hashlib.sha1(f"{sender}|{timestamp}|{body}".encode("utf-8")).hexdigest()
    return f"srv-{digest[:16]}"


def parse_server_message(payload: Any, local_sender: str) -> ChatMessage:
    """Build a ChatMessage from the backend's message shape.

    The backend uses ``_id``/``id`` and ``message``/``body`` interchangeably.
    Messages without an id get a stable synthetic one so repeated fetches
    still de-duplicate.
    """
    if not isinstance(payload, Mapping):
        raise ProtocolError(code="UNEXPECTED_SHAPE", message="Chat message must be a JSON object", raw_payload=payload)
    sender_label = str(payload.get("sender") or "")
    body = payload.get("body")
    if body is None:
        body = payload.get("message")
    body = "" if body is None else str(body)
    raw_timestamp = payload.get("timestamp") or payload.get("createdAt")
    raw_id = payload.get("_id") or payload.get("id")
    # The synthetic id hashes the raw timestamp so an undated message keeps its id across fetches.
    message_id = str(raw_id) if raw_id not in (None, "") else _synthetic_id(sender_label, raw_timestamp, body)
    timestamp = raw_timestamp or datetime.now(timezone.utc)
    is_local = bool(local_sender) and sender_label.lower() == local_sender.lower()
    try:
        return ChatMessage(
            id=message_id,
            sender=ChatSender.LOCAL_USER if is_local else ChatSender.REMOTE_PARTY,
            body=body,
            timestamp=timestamp,
            client_message_id=payload.get("clientMessageId") or payload.get("client_message_id"),
            sender_label=sender_label or None,
        )
    except PydanticValidationError as exc:
        raise ProtocolError(
            code="UNEXPECTED_SHAPE",
            message="Chat message has an unreadable timestamp",
            raw_payload=dict(payload),
        ) from exc


def _raise_if_rejected(payload: Any, fallback: str) -> None:
    if isinstance(payload, Mapping) and payload.get("success") is False:
        raise ApiError(
            code="REQUEST_REJECTED",
            message=str(payload.get("message") or fallback),
            status_code=200,
            raw_payload=dict(payload),
        )


def _unwrap_echo(payload: Any) -> Mapping[str, Any] | None:
    """Find the persisted message in a send response; only echoes with an id count."""
    if not isinstance(payload, Mapping):
        return None
    candidate: Any = payload
    data = payload.get("data")
    if isinstance(data, Mapping):
        candidate = data.get("userMessage") if isinstance(data.get("userMessage"), Mapping) else data
    elif isinstance(payload.get("message"), Mapping):
        candidate = payload["message"]
    if candidate.get("_id") or candidate.get("id"):
        return candidate
    return None


@dataclass
class ChatClient(BaseClient):
    module: str = "chat"

    async def history(self, key: ConversationKey, local_sender: str) -> list[ChatMessage]:
        payload = await self._request("GET", f"{CHAT_PATH}/messages/{key.path}", operation="history")
        _raise_if_rejected(payload, "Failed to load messages.")
        rows = expect_list(payload, "chat history", "messages" if isinstance(payload, dict) else None)
        return [parse_server_message(row, local_sender) for row in rows]

    async def send(
        self,
        key: ConversationKey,
        body: str,
        sender: str,
        client_message_id: str,
    ) -> ChatMessage | None:
        """Send one message; returns the persisted copy when the backend echoes it."""
        payload = await self._request(
            "POST",
            f"{CHAT_PATH}/send-message",
            json_body={
                "conversationKey": key.path,
                "body": body,
                "sender": sender,
                "clientMessageId": client_message_id,
            },
            headers=idempotency_headers(client_message_id),
            operation="send",
        )
        _raise_if_rejected(payload, "Message not sent. Try again.")
        echo = _unwrap_echo(expect_object(payload, "chat send"))
        if echo is None:
            return None
        message = parse_server_message(echo, sender)
        if message.client_message_id is None:
            message = message.model_copy(update={"client_message_id": client_message_id})
        return message
