"""Typed endpoint addressing.

Maps ``{resource kind, optional id, optional sub-path}`` to an absolute URL.
The API base (accounting, payroll, connections) is chosen by the kind, so
resource modules never hard-code hosts.  Pure functions, no I/O, no state:
the same input always yields the same URL.

>>> endpoint_url(ResourceKind.INVOICES, "243216c5-369e-4056-ac67-05388f86dc81", "Attachments")
'https://api.xero.com/api.xro/2.0/Invoices/243216c5-369e-4056-ac67-05388f86dc81/Attachments'
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from xero_client.errors import InvalidEndpointError


class Api(Enum):
    ACCOUNTING = "https://api.xero.com/api.xro/2.0"
    PAYROLL = "https://api.xero.com/payroll.xro/1.0"
    CONNECTIONS = "https://api.xero.com/connections"

    @property
    def base_url(self) -> str:
        return self.value


class ResourceKind(Enum):
    """Collection path, owning API and display name of each resource."""

    # accounting
    ACCOUNTS = ("Accounts", Api.ACCOUNTING, "Account")
    BANK_TRANSACTIONS = ("BankTransactions", Api.ACCOUNTING, "BankTransaction")
    CONTACTS = ("Contacts", Api.ACCOUNTING, "Contact")
    CREDIT_NOTES = ("CreditNotes", Api.ACCOUNTING, "CreditNote")
    INVOICES = ("Invoices", Api.ACCOUNTING, "Invoice")
    ITEMS = ("Items", Api.ACCOUNTING, "Item")
    MANUAL_JOURNALS = ("ManualJournals", Api.ACCOUNTING, "ManualJournal")
    ORGANISATION = ("Organisation", Api.ACCOUNTING, "Organisation")
    PAYMENTS = ("Payments", Api.ACCOUNTING, "Payment")
    PURCHASE_ORDERS = ("PurchaseOrders", Api.ACCOUNTING, "PurchaseOrder")
    QUOTES = ("Quotes", Api.ACCOUNTING, "Quote")
    TAX_RATES = ("TaxRates", Api.ACCOUNTING, "TaxRate")
    TRACKING_CATEGORIES = ("TrackingCategories", Api.ACCOUNTING, "TrackingCategory")
    # payroll
    EMPLOYEES = ("Employees", Api.PAYROLL, "Employee")
    LEAVE_APPLICATIONS = ("LeaveApplications", Api.PAYROLL, "LeaveApplication")
    PAY_ITEMS = ("PayItems", Api.PAYROLL, "PayItem")
    PAYROLL_CALENDARS = ("PayrollCalendars", Api.PAYROLL, "PayrollCalendar")
    TIMESHEETS = ("Timesheets", Api.PAYROLL, "Timesheet")

    def __init__(self, path: str, api: Api, entity_name: str) -> None:
        self.path = path
        self.api = api
        self.entity_name = entity_name


def _encode_segments(segments: tuple[object, ...] | list[object]) -> list[str]:
    encoded: list[str] = []
    for raw in segments:
        seg = str(raw)
        if not seg or "/" in seg or seg in (".", ".."):
            raise InvalidEndpointError(f"invalid path segment {seg!r}")
        encoded.append(quote(seg, safe=""))
    return encoded


def custom_url(api: Api, *segments: object) -> str:
    """Absolute URL of ``segments`` under *api*'s base."""
    base = api.base_url
    return "/".join([base, *_encode_segments(segments)])


def endpoint_url(kind: ResourceKind, id: uuid.UUID | str | None = None, *segments: object) -> str:  # noqa: A002
    """Absolute URL of a collection, an entity, or a sub-path of an entity."""
    parts: list[object] = [kind.path]
    if id is not None:
        parts.append(id)
    parts.extend(segments)
    return custom_url(kind.api, *parts)


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Descriptor handed by resource modules to the executor."""

    kind: ResourceKind
    id: uuid.UUID | str | None = None
    segments: tuple[str, ...] = ()

    @property
    def url(self) -> str:
        return endpoint_url(self.kind, self.id, *self.segments)

    @property
    def entity_name(self) -> str:
        return self.kind.entity_name

    def with_id(self, id: uuid.UUID | str) -> Endpoint:  # noqa: A002
        return Endpoint(self.kind, id, self.segments)

    def child(self, *segments: str) -> Endpoint:
        return Endpoint(self.kind, self.id, self.segments + tuple(segments))
