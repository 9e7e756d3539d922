"""Sales and purchase invoices (accounting API), including attachments."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Sequence

from xero_client.attachments import Attachment, list_attachments, upload_attachment
from xero_client.dates import parse_optional_date, parse_optional_datetime
from xero_client.endpoints import Endpoint, ResourceKind
from xero_client.executor import RequestExecutor
from xero_client.resources.base import (
    ListParameters,
    create_entities,
    get_entity,
    list_entities,
    update_entity,
)

ENVELOPE = "Invoices"


def _decimal(value: Any) -> Decimal | None:
    # str() first so binary floats from the JSON parser keep their printed value
    return Decimal(str(value)) if value is not None else None


@dataclass(frozen=True, slots=True)
class Invoice:
    invoice_id: uuid.UUID
    type: str
    status: str | None = None
    invoice_number: str | None = None
    reference: str | None = None
    contact_name: str | None = None
    invoice_date: date | None = None
    due_date: date | None = None
    currency_code: str | None = None
    total: Decimal | None = None
    amount_due: Decimal | None = None
    has_attachments: bool = False
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Invoice:
        contact = data.get("Contact") or {}
        return cls(
            invoice_id=uuid.UUID(data["InvoiceID"]),
            type=data["Type"],
            status=data.get("Status"),
            invoice_number=data.get("InvoiceNumber"),
            reference=data.get("Reference"),
            contact_name=contact.get("Name"),
            invoice_date=parse_optional_date(data.get("Date"), "Date"),
            due_date=parse_optional_date(data.get("DueDate"), "DueDate"),
            currency_code=data.get("CurrencyCode"),
            total=_decimal(data.get("Total")),
            amount_due=_decimal(data.get("AmountDue")),
            has_attachments=bool(data.get("HasAttachments", False)),
            updated_at=parse_optional_datetime(data.get("UpdatedDateUTC"), "UpdatedDateUTC"),
        )


class InvoicesResource:
    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor
        self._endpoint = Endpoint(ResourceKind.INVOICES)

    async def list(self, params: ListParameters | None = None) -> list[Invoice]:
        return await list_entities(self._executor, self._endpoint, ENVELOPE, Invoice.from_dict, params=params)

    async def get(self, invoice_id: uuid.UUID | str) -> Invoice:
        return await get_entity(self._executor, self._endpoint.with_id(invoice_id), ENVELOPE, Invoice.from_dict)

    async def create(self, invoices: Sequence[Mapping[str, Any]]) -> list[Invoice]:
        return await create_entities(self._executor, self._endpoint, ENVELOPE, Invoice.from_dict, invoices)

    async def update(self, invoice_id: uuid.UUID | str, changes: Mapping[str, Any]) -> Invoice:
        return await update_entity(
            self._executor, self._endpoint.with_id(invoice_id), ENVELOPE, Invoice.from_dict, changes
        )

    async def void(self, invoice_id: uuid.UUID | str) -> Invoice:
        return await self.update(invoice_id, {"Status": "VOIDED"})

    async def attach(
        self,
        invoice_id: uuid.UUID | str,
        filename: str,
        content: bytes,
        *,
        include_online: bool = False,
        replace: bool = False,
    ) -> Attachment:
        """Upload a file to the invoice; ``replace`` overwrites a same-named one."""
        uploaded = await upload_attachment(
            self._executor,
            self._endpoint.with_id(invoice_id),
            filename,
            content,
            method="POST" if replace else "PUT",
            include_online=include_online,
        )
        return uploaded[0]

    async def attachments(self, invoice_id: uuid.UUID | str) -> list[Attachment]:
        return await list_attachments(self._executor, self._endpoint.with_id(invoice_id))
