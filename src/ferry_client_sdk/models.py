from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, List

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from .roles import CanonicalRole, TokenScope, token_scope_for_role


def _id_to_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


IdStr = Annotated[str, BeforeValidator(_id_to_str)]


class LoginUser(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: IdStr | None = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    full_name: str | None = None
    name: str | None = None
    email: str | None = None
    role: str | None = None
    category: str | None = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.name or ""


class LoginResponse(BaseModel):
    token: str = Field(min_length=1)
    user: LoginUser
    message: str | None = None


class Session(BaseModel):
    raw_role: str | None = None
    canonical_role: CanonicalRole
    token: str
    display_name: str = ""
    user: dict[str, Any] = Field(default_factory=dict)

    @property
    def token_scope(self) -> TokenScope:
        return token_scope_for_role(self.canonical_role)

    @property
    def user_id(self) -> str | None:
        value = self.user.get("_id") or self.user.get("id")
        return str(value) if value not in (None, "") else None


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class InventoryLineItem(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    item_id: IdStr | None = Field(default=None, validation_alias=AliasChoices("_id", "id", "item_id"))
    item_name: str = Field(min_length=1)
    current_stock: float = Field(default=0, ge=0)
    reorder_level: float = Field(default=0, ge=0)
    unit: str = ""

    @field_validator("current_stock", "reorder_level", mode="before")
    @classmethod
    def _null_quantity_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("unit", mode="before")
    @classmethod
    def _null_unit_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class InventoryMergedRow(BaseModel):
    item_name: str
    current_stock: float
    reorder_level: float
    unit: str = ""
    stock_status: StockStatus
    item_id: IdStr | None = None
    source_ids: List[str] = Field(default_factory=list)


class Supplier(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: IdStr = Field(validation_alias=AliasChoices("_id", "id"))
    name: str | None = None
    email: str | None = None


class Delivery(BaseModel):
    model_config = ConfigDict(extra="allow")

    order_id: IdStr
    item_name: str | None = None
    quantity: float | None = None
    delivery_status: str | None = None
    received_at: str | None = None


class Booking(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: IdStr = Field(validation_alias=AliasChoices("_id", "id"))
    booking_type: str | None = None
    route: str | None = None
    status: str | None = None
    payment_status: str | None = None
    ferry: str | None = None


class Ferry(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: IdStr = Field(validation_alias=AliasChoices("_id", "id"))
    name: str | None = None
    capacity: int | None = None


class ChatSender(str, Enum):
    LOCAL_USER = "local_user"
    REMOTE_PARTY = "remote_party"


class DeliveryStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    FAILED = "failed"


class ChatMessage(BaseModel):
    id: IdStr
    sender: ChatSender
    body: str
    timestamp: datetime
    delivery: DeliveryStatus = DeliveryStatus.CONFIRMED
    client_message_id: str | None = None
    sender_label: str | None = None

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


@dataclass(frozen=True)
class ConversationKey:
    """A two-party conversation: the local identity and the remote party or category."""

    local_id: str
    remote_id: str

    @property
    def path(self) -> str:
        return f"{self.local_id}/{self.remote_id}"

    def __str__(self) -> str:
        return self.path


class SupplyOrder(BaseModel):
    """A supply order as the supplier sees it."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: IdStr = Field(validation_alias=AliasChoices("_id", "id"))
    item_name: str | None = None
    quantity: float | None = None
    status: str | None = None
    amount: float | None = None
    payment_status: str | None = None
