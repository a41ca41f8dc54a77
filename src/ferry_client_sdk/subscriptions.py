from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Protocol

from .chat import ChatSessionAdapter
from .exceptions import ApiError
from .logging_utils import get_logger, log_action
from .models import ChatMessage

logger = get_logger(__name__)


class ConversationSubscription(Protocol):
    def start(self) -> None: ...

    async def stop(self) -> None: ...


class PollingSubscription:
    """Re-fetches a conversation on a fixed interval and feeds new messages to the adapter."""

    def __init__(self, adapter: ChatSessionAdapter, interval_seconds: float = 3.0) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.adapter = adapter
        self.interval_seconds = interval_seconds
        self.failures = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def poll_once(self) -> list[ChatMessage]:
        adapter = self.adapter
        try:
            history = await adapter.chat_client.history(adapter.key, adapter.local_sender)
        except ApiError as exc:
            # A missed poll is retried on the next tick; only log it.
            self.failures += 1
            log_action(
                logger,
                "chat",
                "poll",
                type(exc).__name__,
                level=logging.WARNING,
                conversation=str(adapter.key),
                failures=self.failures,
            )
            return []
        self.failures = 0
        return adapter.receive(history)

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval_seconds)


PushHandler = Callable[[Iterable[ChatMessage]], None]
Connect = Callable[[PushHandler], Awaitable[Callable[[], Awaitable[None]]]]


class CallbackSubscription:
    """Adapts a push transport: ``connect`` registers a handler and returns a disconnect coroutine."""

    def __init__(self, adapter: ChatSessionAdapter, connect: Connect) -> None:
        self.adapter = adapter
        self._connect = connect
        self._disconnect: Callable[[], Awaitable[None]] | None = None
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._open())

    async def _open(self) -> None:
        self._disconnect = await self._connect(self.adapter.receive)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            await task
        disconnect, self._disconnect = self._disconnect, None
        if disconnect is not None:
            await disconnect()
