from .auth_flow import LoginOrchestrator
from .chat import ChatSessionAdapter, ChatState, SendOutcome
from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    AuthenticationError,
    ChatStateError,
    ProtocolError,
    ReconciliationWarning,
    TransportError,
    UnknownRoleError,
    ValidationError,
    ValidationIssue,
)
from .http_client import HttpClient
from .inventory import classify_stock, filter_rows, merge_and_classify
from .models import (
    ChatMessage,
    ChatSender,
    ConversationKey,
    DeliveryStatus,
    InventoryLineItem,
    InventoryMergedRow,
    Session,
    StockStatus,
)
from .roles import (
    CanonicalRole,
    LoginChannel,
    NavigationTarget,
    TokenScope,
    home_for_role,
    resolve_role,
    token_scope_for_role,
)
from .session import ApiSession
from .session_store import JsonFileStorage, MemoryStorage, SessionStore
from .subscriptions import CallbackSubscription, PollingSubscription
from .ui_errors import UserFacingError, to_user_facing_error

__all__ = [
    "ApiError",
    "ApiSession",
    "AuthenticationError",
    "CallbackSubscription",
    "CanonicalRole",
    "ChatMessage",
    "ChatSender",
    "ChatSessionAdapter",
    "ChatState",
    "ChatStateError",
    "ClientConfig",
    "ConfigError",
    "ConversationKey",
    "DeliveryStatus",
    "HttpClient",
    "InventoryLineItem",
    "InventoryMergedRow",
    "JsonFileStorage",
    "LoginChannel",
    "LoginOrchestrator",
    "MemoryStorage",
    "NavigationTarget",
    "PollingSubscription",
    "ProtocolError",
    "ReconciliationWarning",
    "SendOutcome",
    "Session",
    "SessionStore",
    "StockStatus",
    "TokenScope",
    "TransportError",
    "UnknownRoleError",
    "UserFacingError",
    "ValidationError",
    "ValidationIssue",
    "classify_stock",
    "filter_rows",
    "home_for_role",
    "load_config",
    "merge_and_classify",
    "resolve_role",
    "to_user_facing_error",
    "token_scope_for_role",
]
