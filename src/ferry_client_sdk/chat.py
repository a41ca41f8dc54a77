from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Iterable

from .clients.chat_client import ChatClient
from .exceptions import ApiError, ChatStateError, ValidationError
from .idempotency import new_client_message_id
from .logging_utils import get_logger, log_action
from .models import ChatMessage, ChatSender, ConversationKey, DeliveryStatus
from .ui_errors import UserFacingError, to_user_facing_error

logger = get_logger(__name__)

ErrorListener = Callable[[UserFacingError], None]
ChangeListener = Callable[[list[ChatMessage]], None]


class ChatState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    SENDING = "sending"
    ERRORED = "errored"


@dataclass(frozen=True)
class SendOutcome:
    message: ChatMessage
    delivered: bool
    error: UserFacingError | None = None


class ChatSessionAdapter:
    """Local message log for one two-party conversation.

    ``load`` and ``send`` are serialized by one lock, so a reload never
    overwrites an optimistic append and a send never lands in a log that is
    about to be replaced. Messages from a push or poll transport go through
    ``receive`` and are only ever appended.
    """

    def __init__(
        self,
        chat_client: ChatClient,
        key: ConversationKey,
        local_sender: str,
        max_length: int = 1000,
        on_error: ErrorListener | None = None,
        on_change: ChangeListener | None = None,
    ) -> None:
        self.chat_client = chat_client
        self.key = key
        self.local_sender = local_sender
        self.max_length = max_length
        self.on_error = on_error
        self.on_change = on_change
        self.state = ChatState.UNINITIALIZED
        self.last_error: UserFacingError | None = None
        self._messages: list[ChatMessage] = []
        self._ids: set[str] = set()
        self._lock = asyncio.Lock()
        self._received_during_load: list[ChatMessage] | None = None

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    async def load(self) -> bool:
        """Fetch the full history and rebuild the log; False when it failed."""
        async with self._lock:
            previous = self.state
            if not self.key.local_id or not self.local_sender:
                self.state = ChatState.ERRORED
                self._report(ChatStateError("No user found. Please login again."))
                return False

            self.state = ChatState.LOADING
            self._received_during_load = []
            try:
                history = await self.chat_client.history(self.key, self.local_sender)
            except ApiError as exc:
                # Keep a stale log rather than wiping it.
                self.state = ChatState.READY if previous is ChatState.READY else ChatState.ERRORED
                self._report(exc)
                return False
            finally:
                late = self._received_during_load or []
                self._received_during_load = None

            self._rebuild(history, late)
            self.state = ChatState.READY
            self.last_error = None
            log_action(logger, "chat", "load", "success", conversation=str(self.key), count=len(self._messages))
            self._notify_change()
            return True

    async def send(self, body: str) -> SendOutcome:
        text = (body or "").strip()
        if not text:
            raise ValidationError.single("body", "Message cannot be empty.")
        if len(text) > self.max_length:
            raise ValidationError.single("body", f"Message cannot be longer than {self.max_length} characters.")

        async with self._lock:
            return await self._send_locked(text)

    async def resend(self, message_id: str) -> SendOutcome:
        """Send a failed message again; the failed copy is replaced by the new attempt."""
        async with self._lock:
            self._require_ready()
            failed = self._find(message_id)
            if failed is None or failed.delivery is not DeliveryStatus.FAILED:
                raise ChatStateError("Only failed messages can be resent.")
            self._remove(message_id)
            return await self._send_locked(failed.body)

    async def _send_locked(self, text: str) -> SendOutcome:
        self._require_ready()
        client_id = new_client_message_id()
        placeholder = ChatMessage(
            id=client_id,
            sender=ChatSender.LOCAL_USER,
            body=text,
            timestamp=datetime.now(timezone.utc),
            delivery=DeliveryStatus.PENDING,
            client_message_id=client_id,
            sender_label=self.local_sender,
        )
        self._append(placeholder)
        self._notify_change()
        self.state = ChatState.SENDING
        try:
            echo = await self.chat_client.send(self.key, text, self.local_sender, client_id)
        except ApiError as exc:
            # The optimistic copy stays in the log so the user can resend it.
            failed = self._update(client_id, delivery=DeliveryStatus.FAILED)
            error = self._report(exc)
            self._notify_change()
            return SendOutcome(message=failed, delivered=False, error=error)
        finally:
            self.state = ChatState.READY

        confirmed = self._confirm(client_id, echo)
        log_action(logger, "chat", "send", "success", conversation=str(self.key))
        self._notify_change()
        return SendOutcome(message=confirmed, delivered=True)

    def receive(self, incoming: Iterable[ChatMessage]) -> list[ChatMessage]:
        """Append messages from the push/poll transport that are not in the log yet."""
        added: list[ChatMessage] = []
        for message in sorted(incoming, key=lambda item: item.timestamp):
            if message.id in self._ids:
                continue
            if self._received_during_load is not None:
                self._received_during_load.append(message)
            pending = self._find_by_client_id(message.client_message_id)
            if pending is not None:
                self._update(
                    pending.id,
                    id=message.id,
                    timestamp=message.timestamp,
                    delivery=DeliveryStatus.CONFIRMED,
                )
                continue
            self._append(message)
            added.append(message)
        if added:
            self._notify_change()
        return added

    def _rebuild(self, history: list[ChatMessage], late: list[ChatMessage]) -> None:
        server = sorted([*history, *late], key=lambda item: item.timestamp)
        server_client_ids = {item.client_message_id for item in server if item.client_message_id}
        unsent = [
            item
            for item in self._messages
            if item.delivery is not DeliveryStatus.CONFIRMED and item.client_message_id not in server_client_ids
        ]
        self._messages = []
        self._ids = set()
        for item in [*server, *unsent]:
            if item.id not in self._ids:
                self._append(item)

    def _confirm(self, client_id: str, echo: ChatMessage | None) -> ChatMessage:
        if echo is None:
            return self._update(client_id, delivery=DeliveryStatus.CONFIRMED)
        if echo.id in self._ids:
            # A push delivered the server copy first.
            self._remove(client_id)
            return self._find(echo.id) or echo
        return self._update(
            client_id,
            id=echo.id,
            timestamp=echo.timestamp,
            delivery=DeliveryStatus.CONFIRMED,
        )

    def _require_ready(self) -> None:
        if self.state is not ChatState.READY:
            raise ChatStateError(f"Conversation is {self.state.value}; load it before sending.")

    def _append(self, message: ChatMessage) -> None:
        self._messages.append(message)
        self._ids.add(message.id)

    def _find(self, message_id: str) -> ChatMessage | None:
        return next((item for item in self._messages if item.id == message_id), None)

    def _find_by_client_id(self, client_id: str | None) -> ChatMessage | None:
        if not client_id:
            return None
        return next(
            (
                item
                for item in self._messages
                if item.client_message_id == client_id and item.delivery is not DeliveryStatus.CONFIRMED
            ),
            None,
        )

    def _update(self, message_id: str, **changes: object) -> ChatMessage:
        for index, item in enumerate(self._messages):
            if item.id == message_id:
                updated = item.model_copy(update=changes)
                self._messages[index] = updated
                self._ids.discard(message_id)
                self._ids.add(updated.id)
                return updated
        raise KeyError(message_id)

    def _remove(self, message_id: str) -> None:
        self._messages = [item for item in self._messages if item.id != message_id]
        self._ids.discard(message_id)

    def _report(self, exc: Exception) -> UserFacingError:
        error = to_user_facing_error(exc, module="chat")
        self.last_error = error
        log_action(
            logger,
            "chat",
            "error",
            type(exc).__name__,
            level=logging.WARNING,
            conversation=str(self.key),
            state=self.state.value,
        )
        if self.on_error is not None:
            self.on_error(error)
        return error

    def _notify_change(self) -> None:
        if self.on_change is not None:
            self.on_change(self.messages)
