from __future__ import annotations

from dataclasses import dataclass, field

import httpx

from .auth_flow import LoginOrchestrator
from .chat import ChangeListener, ChatSessionAdapter, ErrorListener
from .clients.auth import AuthClient
from .clients.chat_client import ChatClient
from .clients.ferry_crew_client import FerryCrewClient
from .clients.finance_client import FinanceClient
from .clients.inventory_client import InventoryClient
from .clients.passenger_client import PassengerClient
from .clients.supplier_client import SupplierClient
from .config import ClientConfig
from .exceptions import AuthenticationError
from .http_client import HttpClient
from .logging_utils import get_logger, log_action
from .models import ConversationKey, Session
from .session_store import JsonFileStorage, KeyValueStorage, SessionStore
from .subscriptions import PollingSubscription

logger = get_logger(__name__)


@dataclass
class ApiSession:
    """Wires one process's HTTP client, session store, clients and chat adapters together."""

    config: ClientConfig
    storage: KeyValueStorage | None = None
    transport: httpx.AsyncBaseTransport | None = None
    session_store: SessionStore = field(init=False)
    http: HttpClient = field(init=False)

    def __post_init__(self) -> None:
        storage = self.storage if self.storage is not None else JsonFileStorage(app_name=self.config.storage_app_name)
        self.session_store = SessionStore(storage=storage)
        self.http = HttpClient(config=self.config, transport=self.transport)
        self.http.register_auth_error_handler(self._on_auth_failure)

    async def __aenter__(self) -> "ApiSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.http.aclose()

    @property
    def current(self) -> Session | None:
        return self.session_store.get()

    def login_orchestrator(self) -> LoginOrchestrator:
        auth = AuthClient(http=self.http, session_store=self.session_store, module="auth")
        return LoginOrchestrator(auth_client=auth, session_store=self.session_store)

    def inventory_client(self) -> InventoryClient:
        return InventoryClient(http=self.http, session_store=self.session_store)

    def chat_client(self) -> ChatClient:
        return ChatClient(http=self.http, session_store=self.session_store)

    def ferry_crew_client(self) -> FerryCrewClient:
        return FerryCrewClient(http=self.http, session_store=self.session_store)

    def finance_client(self) -> FinanceClient:
        return FinanceClient(http=self.http, session_store=self.session_store)

    def passenger_client(self) -> PassengerClient:
        return PassengerClient(http=self.http, session_store=self.session_store)

    def supplier_client(self) -> SupplierClient:
        return SupplierClient(http=self.http, session_store=self.session_store)

    def chat_adapter(
        self,
        remote_id: str,
        local_sender: str,
        local_id: str | None = None,
        on_error: ErrorListener | None = None,
        on_change: ChangeListener | None = None,
    ) -> ChatSessionAdapter:
        """Adapter for a conversation with ``remote_id``; the local identity defaults to the logged-in user."""
        if local_id is None:
            session = self.current
            local_id = session.user_id if session else None
        return ChatSessionAdapter(
            chat_client=self.chat_client(),
            key=ConversationKey(local_id=local_id or "", remote_id=remote_id),
            local_sender=local_sender,
            max_length=self.config.chat_max_length,
            on_error=on_error,
            on_change=on_change,
        )

    def polling_subscription(self, adapter: ChatSessionAdapter) -> PollingSubscription:
        return PollingSubscription(adapter, interval_seconds=self.config.chat_poll_seconds)

    def _on_auth_failure(self, error: AuthenticationError) -> None:
        session = self.session_store.get()
        self.session_store.clear()
        log_action(
            logger,
            "session",
            "clear",
            "auth_failure",
            role=session.canonical_role.value if session else None,
            status_code=error.status_code,
        )
