from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from platformdirs import user_data_dir

from .models import Session
from .roles import CanonicalRole, TokenScope

TOKEN_KEY = TokenScope.STANDARD.value
STAFF_TOKEN_KEY = TokenScope.STAFF.value
ROLE_KEY = "role"
USER_KEY = "user"
SESSION_KEYS = (TOKEN_KEY, STAFF_TOKEN_KEY, ROLE_KEY, USER_KEY)


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


@dataclass
class MemoryStorage:
    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@dataclass
class JsonFileStorage:
    """Key-value storage kept as one JSON object in the user data directory."""

    app_name: str = "ferry-client"
    filename: str = "storage.json"
    directory: Path | None = None

    def _path(self) -> Path:
        base = self.directory or Path(user_data_dir(self.app_name, "FerryClient"))
        base.mkdir(parents=True, exist_ok=True)
        return base / self.filename

    def _read(self) -> dict[str, str]:
        path = self._path()
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError:
            path.unlink()
            return {}
        if not isinstance(data, dict):
            path.unlink()
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        path = self._path()
        path.write_text(json.dumps(data, indent=2))
        try:
            path.chmod(0o600)
        except OSError:
            pass

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


@dataclass
class SessionStore:
    """Current authenticated identity, persisted through a key-value storage.

    Only the login flow writes it; logout and authentication failures clear it.
    """

    storage: KeyValueStorage = field(default_factory=MemoryStorage)

    def get(self) -> Session | None:
        raw_role = self.storage.get_item(ROLE_KEY)
        if not raw_role:
            return None
        try:
            role = CanonicalRole(raw_role)
        except ValueError:
            return None
        slot = STAFF_TOKEN_KEY if role is CanonicalRole.STAFF else TOKEN_KEY
        token = self.storage.get_item(slot)
        if not token:
            return None
        user = self._load_user()
        return Session(
            raw_role=user.get("role") or user.get("category"),
            canonical_role=role,
            token=token,
            display_name=str(user.get("full_name") or user.get("name") or ""),
            user=user,
        )

    def set(self, session: Session) -> None:
        slot = session.token_scope.value
        other = STAFF_TOKEN_KEY if slot == TOKEN_KEY else TOKEN_KEY
        self.storage.set_item(slot, session.token)
        self.storage.remove_item(other)
        self.storage.set_item(ROLE_KEY, session.canonical_role.value)
        self.storage.set_item(USER_KEY, json.dumps(session.user))

    def clear(self) -> None:
        for key in SESSION_KEYS:
            self.storage.remove_item(key)

    def _load_user(self) -> dict:
        raw = self.storage.get_item(USER_KEY)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return data if isinstance(data, dict) else {}
