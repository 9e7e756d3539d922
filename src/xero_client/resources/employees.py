"""Payroll employees."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Sequence

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

ENVELOPE = "Employees"


@dataclass(frozen=True, slots=True)
class Employee:
    employee_id: uuid.UUID
    first_name: str
    last_name: str
    status: str | None = None
    email: str | None = None
    date_of_birth: date | None = None
    start_date: date | None = None
    termination_date: date | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Employee:
        return cls(
            employee_id=uuid.UUID(data["EmployeeID"]),
            first_name=data["FirstName"],
            last_name=data["LastName"],
            status=data.get("Status"),
            email=data.get("Email"),
            date_of_birth=parse_optional_date(data.get("DateOfBirth"), "DateOfBirth"),
            start_date=parse_optional_date(data.get("StartDate"), "StartDate"),
            termination_date=parse_optional_date(data.get("TerminationDate"), "TerminationDate"),
            updated_at=parse_optional_datetime(data.get("UpdatedDateUTC"), "UpdatedDateUTC"),
        )


class EmployeesResource:
    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor
        self._endpoint = Endpoint(ResourceKind.EMPLOYEES)

    async def list(self, params: ListParameters | None = None) -> list[Employee]:
        return await list_entities(self._executor, self._endpoint, ENVELOPE, Employee.from_dict, params=params)

    async def get(self, employee_id: uuid.UUID | str) -> Employee:
        return await get_entity(self._executor, self._endpoint.with_id(employee_id), ENVELOPE, Employee.from_dict)

    async def create(self, employees: Sequence[Mapping[str, Any]]) -> list[Employee]:
        return await create_entities(
            self._executor, self._endpoint, ENVELOPE, Employee.from_dict, employees, method="POST"
        )

    async def update(self, employee_id: uuid.UUID | str, changes: Mapping[str, Any]) -> Employee:
        return await update_entity(
            self._executor, self._endpoint.with_id(employee_id), ENVELOPE, Employee.from_dict, changes
        )
