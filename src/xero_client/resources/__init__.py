"""Typed collaborators for individual API resources.

Each module pairs a frozen entity record (``from_dict`` decoder) with a
resource class that routes every call through the session's
:class:`~xero_client.executor.RequestExecutor`.
"""

from xero_client.resources.accounts import Account, AccountsResource
from xero_client.resources.base import ListParameters
from xero_client.resources.connections import Connection, ConnectionsResource
from xero_client.resources.employees import Employee, EmployeesResource
from xero_client.resources.invoices import Invoice, InvoicesResource
from xero_client.resources.timesheets import Timesheet, TimesheetLine, TimesheetsResource

__all__ = [
    "Account",
    "AccountsResource",
    "Connection",
    "ConnectionsResource",
    "Employee",
    "EmployeesResource",
    "Invoice",
    "InvoicesResource",
    "ListParameters",
    "Timesheet",
    "TimesheetLine",
    "TimesheetsResource",
]
