"""Tenants (organisations) the current token has been granted access to."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from xero_client.dates import parse_optional_datetime
from xero_client.endpoints import Api, custom_url
from xero_client.executor import RequestExecutor

ENTITY = "Connection"


@dataclass(frozen=True, slots=True)
class Connection:
    id: uuid.UUID
    tenant_id: uuid.UUID
    tenant_type: str
    tenant_name: str | None = None
    auth_event_id: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Connection:
        auth_event = data.get("authEventId")
        return cls(
            id=uuid.UUID(data["id"]),
            tenant_id=uuid.UUID(data["tenantId"]),
            tenant_type=data["tenantType"],
            tenant_name=data.get("tenantName"),
            auth_event_id=uuid.UUID(auth_event) if auth_event else None,
            created_at=parse_optional_datetime(data.get("createdDateUtc"), "createdDateUtc"),
            updated_at=parse_optional_datetime(data.get("updatedDateUtc"), "updatedDateUtc"),
        )


def _decode_connections(payload: Any) -> list[Connection]:
    if not isinstance(payload, list):
        raise TypeError("connections response is not a JSON array")
    return [Connection.from_dict(item) for item in payload]


class ConnectionsResource:
    """``GET /connections`` and ``DELETE /connections/{id}``."""

    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor

    async def list(self) -> list[Connection]:
        resp = await self._executor.execute(
            "GET",
            custom_url(Api.CONNECTIONS),
            decode=_decode_connections,
            entity=ENTITY,
        )
        return resp.data or []

    async def disconnect(self, connection_id: uuid.UUID | str) -> None:
        """Revoke the app's access to one tenant."""
        await self._executor.execute(
            "DELETE",
            custom_url(Api.CONNECTIONS, connection_id),
            entity=ENTITY,
        )
