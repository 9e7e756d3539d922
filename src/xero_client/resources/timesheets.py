"""Payroll timesheets.

Payroll dates still arrive in the legacy ``/Date(ms+zzzz)/`` form; the
decoders in :mod:`xero_client.dates` accept both encodings.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Sequence

from xero_client.dates import parse_optional_datetime, parse_xero_date
from xero_client.endpoints import Endpoint, ResourceKind
from xero_client.executor import RequestExecutor
from xero_client.resources.base import (
    ListParameters,
    create_entities,
    get_entity,
    list_entities,
    update_entity,
)

ENVELOPE = "Timesheets"


@dataclass(frozen=True, slots=True)
class TimesheetLine:
    earnings_rate_id: uuid.UUID
    units: tuple[Decimal, ...] = ()
    tracking_item_id: uuid.UUID | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TimesheetLine:
        tracking = data.get("TrackingItemID")
        return cls(
            earnings_rate_id=uuid.UUID(data["EarningsRateID"]),
            units=tuple(Decimal(str(u)) for u in data.get("NumberOfUnits") or ()),
            tracking_item_id=uuid.UUID(tracking) if tracking else None,
        )


@dataclass(frozen=True, slots=True)
class Timesheet:
    timesheet_id: uuid.UUID
    employee_id: uuid.UUID
    start_date: date
    end_date: date
    status: str | None = None
    hours: Decimal | None = None
    lines: tuple[TimesheetLine, ...] = field(default_factory=tuple)
    updated_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Timesheet:
        hours = data.get("Hours")
        return cls(
            timesheet_id=uuid.UUID(data["TimesheetID"]),
            employee_id=uuid.UUID(data["EmployeeID"]),
            start_date=parse_xero_date(data["StartDate"], "StartDate"),
            end_date=parse_xero_date(data["EndDate"], "EndDate"),
            status=data.get("Status"),
            hours=Decimal(str(hours)) if hours is not None else None,
            lines=tuple(TimesheetLine.from_dict(line) for line in data.get("TimesheetLines") or ()),
            updated_at=parse_optional_datetime(data.get("UpdatedDateUTC"), "UpdatedDateUTC"),
        )


class TimesheetsResource:
    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor
        self._endpoint = Endpoint(ResourceKind.TIMESHEETS)

    async def list(self, params: ListParameters | None = None) -> list[Timesheet]:
        return await list_entities(self._executor, self._endpoint, ENVELOPE, Timesheet.from_dict, params=params)

    async def get(self, timesheet_id: uuid.UUID | str) -> Timesheet:
        return await get_entity(self._executor, self._endpoint.with_id(timesheet_id), ENVELOPE, Timesheet.from_dict)

    async def create(self, timesheets: Sequence[Mapping[str, Any]]) -> list[Timesheet]:
        return await create_entities(
            self._executor, self._endpoint, ENVELOPE, Timesheet.from_dict, timesheets, method="POST"
        )

    async def update(self, timesheet_id: uuid.UUID | str, changes: Mapping[str, Any]) -> Timesheet:
        return await update_entity(
            self._executor, self._endpoint.with_id(timesheet_id), ENVELOPE, Timesheet.from_dict, changes
        )

    async def approve(self, timesheet_id: uuid.UUID | str) -> Timesheet:
        return await self.update(timesheet_id, {"TimesheetID": str(timesheet_id), "Status": "APPROVED"})
