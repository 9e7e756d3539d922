"""Chart of accounts (accounting API)."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from xero_client.dates import parse_optional_datetime
from xero_client.endpoints import Endpoint, ResourceKind
from xero_client.executor import RequestExecutor
from xero_client.resources.base import (
    ListParameters,
    create_entity,
    get_entity,
    list_entities,
    update_entity,
)

ENVELOPE = "Accounts"


@dataclass(frozen=True, slots=True)
class Account:
    account_id: uuid.UUID
    name: str
    code: str | None = None
    type: str | None = None
    status: str | None = None
    tax_type: str | None = None
    enable_payments: bool = False
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Account:
        return cls(
            account_id=uuid.UUID(data["AccountID"]),
            name=data["Name"],
            code=data.get("Code"),
            type=data.get("Type"),
            status=data.get("Status"),
            tax_type=data.get("TaxType"),
            enable_payments=bool(data.get("EnablePaymentsToAccount", False)),
            updated_at=parse_optional_datetime(data.get("UpdatedDateUTC"), "UpdatedDateUTC"),
        )


class AccountsResource:
    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor
        self._endpoint = Endpoint(ResourceKind.ACCOUNTS)

    async def list(self, params: ListParameters | None = None) -> list[Account]:
        return await list_entities(self._executor, self._endpoint, ENVELOPE, Account.from_dict, params=params)

    async def get(self, account_id: uuid.UUID | str) -> Account:
        return await get_entity(self._executor, self._endpoint.with_id(account_id), ENVELOPE, Account.from_dict)

    async def create(self, account: Mapping[str, Any]) -> Account:
        return await create_entity(self._executor, self._endpoint, ENVELOPE, Account.from_dict, account)

    async def update(self, account_id: uuid.UUID | str, changes: Mapping[str, Any]) -> Account:
        return await update_entity(
            self._executor, self._endpoint.with_id(account_id), ENVELOPE, Account.from_dict, changes
        )

    async def archive(self, account_id: uuid.UUID | str) -> Account:
        return await self.update(account_id, {"Status": "ARCHIVED"})
