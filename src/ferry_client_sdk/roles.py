from __future__ import annotations

from enum import Enum

from .exceptions import UnknownRoleError


class CanonicalRole(str, Enum):
    PASSENGER = "passenger"
    ADMIN = "admin"
    STAFF = "staff"
    FINANCE = "finance"
    INVENTORY = "inventory"
    SUPPLIER = "supplier"


class TokenScope(str, Enum):
    STANDARD = "token"
    STAFF = "staffToken"


class NavigationTarget(str, Enum):
    ADMIN_HOME = "AdminHome"
    STAFF_HOME = "StaffHome"
    FINANCE_HOME = "FinanceHome"
    INVENTORY_HOME = "InventoryHome"
    PASSENGER_HOME = "PassengerHome"
    SUPPLIER_HOME = "SupplierHome"


class LoginChannel(str, Enum):
    """Login form the user picked; the value is the label the backend knows it by."""

    PASSENGER = "user"
    SUPPLIER = "supplier"
    INVENTORY = "inventory"
    FINANCE = "finance"
    STAFF = "staff"

    @property
    def login_path(self) -> str:
        return LOGIN_PATHS[self]

    def next(self) -> "LoginChannel":
        members = list(LoginChannel)
        return members[(members.index(self) + 1) % len(members)]


LOGIN_PATHS: dict[LoginChannel, str] = {
    LoginChannel.PASSENGER: "/users/login",
    LoginChannel.SUPPLIER: "/suppliers/login",
    LoginChannel.INVENTORY: "/inventory/login",
    LoginChannel.FINANCE: "/finance/login",
    LoginChannel.STAFF: "/staff/login",
}

ROLE_ALIASES = {
    "operating": CanonicalRole.STAFF.value,
    "user": CanonicalRole.PASSENGER.value,
}

HOME_BY_ROLE: dict[CanonicalRole, NavigationTarget] = {
    CanonicalRole.ADMIN: NavigationTarget.ADMIN_HOME,
    CanonicalRole.STAFF: NavigationTarget.STAFF_HOME,
    CanonicalRole.FINANCE: NavigationTarget.FINANCE_HOME,
    CanonicalRole.INVENTORY: NavigationTarget.INVENTORY_HOME,
    CanonicalRole.PASSENGER: NavigationTarget.PASSENGER_HOME,
    CanonicalRole.SUPPLIER: NavigationTarget.SUPPLIER_HOME,
}

if set(HOME_BY_ROLE) != set(CanonicalRole):
    raise RuntimeError("Every canonical role needs a home destination")


def _first_present(*values: str | None) -> str | None:
    for value in values:
        if value is not None and value.strip():
            return value
    return None


def resolve_role(
    raw_role: str | None,
    raw_category: str | None,
    channel: LoginChannel,
) -> CanonicalRole:
    """Normalize the role signals of a login response into one canonical role.

    The first non-empty of ``raw_role``, ``raw_category`` and the channel label
    wins. ``operating`` and ``user`` are legacy names for staff and passenger.
    Anything else must name a canonical role, otherwise ``UnknownRoleError``.
    """
    raw = _first_present(raw_role, raw_category) or channel.value
    normalized = raw.strip().lower()
    normalized = ROLE_ALIASES.get(normalized, normalized)
    try:
        return CanonicalRole(normalized)
    except ValueError:
        raise UnknownRoleError(raw) from None


def home_for_role(role: CanonicalRole) -> NavigationTarget:
    return HOME_BY_ROLE[role]


def token_scope_for_role(role: CanonicalRole) -> TokenScope:
    if role is CanonicalRole.STAFF:
        return TokenScope.STAFF
    return TokenScope.STANDARD
