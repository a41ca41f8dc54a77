from __future__ import annotations

import uuid

LOCAL_ID_PREFIX = "local-"


def new_client_message_id() -> str:
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4()}"


def idempotency_headers(client_message_id: str) -> dict[str, str]:
    return {"Idempotency-Key": client_message_id}
