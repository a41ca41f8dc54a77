from __future__ import annotations

from ..roles import LoginChannel
from .base import BaseClient


class AuthClient(BaseClient):
    async def login(self, channel: LoginChannel, email: str, password: str):
        payload = {"email": email, "password": password}
        return await self.http.request(
            "POST",
            channel.login_path,
            json_body=payload,
            module="auth",
            operation=f"login.{channel.value}",
            notify_auth_errors=False,
        )
