"""Payroll collaborators and connection discovery against the fake provider."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest

from tests.fakes import TENANT_ID, FakeXero
from xero_client.auth.models import TokenState
from xero_client.errors import NotFoundError
from xero_client.session import Session

EMPLOYEE_ID = "cdfb8371-0b21-4b8a-8903-1024df6c391e"
TIMESHEET_ID = "049765fc-4506-48fb-bf88-3578dec0ec47"
EARNINGS_RATE_ID = "ab874dfb-ab09-4c91-954e-43acf6fc23b4"
OTHER_TENANT = "9a6b2f0e-3c44-4d2b-8f1e-7d5c3b2a1f00"

TIMESHEET = {
    "TimesheetID": TIMESHEET_ID,
    "EmployeeID": EMPLOYEE_ID,
    "StartDate": "/Date(1573171200000+0000)/",
    "EndDate": "/Date(1573689600000+0000)/",
    "Status": "DRAFT",
    "Hours": 24.0,
    "TimesheetLines": [{"EarningsRateID": EARNINGS_RATE_ID, "NumberOfUnits": [8.0, 8.0, 8.0, 0, 0, 0, 0]}],
    "UpdatedDateUTC": "/Date(1573755038314+0000)/",
}
EMPLOYEE = {
    "EmployeeID": EMPLOYEE_ID,
    "FirstName": "Jack",
    "LastName": "Sparrow",
    "Status": "ACTIVE",
    "Email": "jack@example.com",
    "DateOfBirth": "/Date(321523200000+0000)/",
    "StartDate": "2019-11-08T00:00:00",
}


def _connection(tenant_id: str, name: str) -> dict:
    return {
        "id": str(uuid.uuid4()),
        "authEventId": str(uuid.uuid4()),
        "tenantId": tenant_id,
        "tenantType": "ORGANISATION",
        "tenantName": name,
        "createdDateUtc": "2024-01-05T10:00:00.1234567",
        "updatedDateUtc": "2024-01-05T10:00:00.1234567",
    }


@pytest.fixture
def session(http, fake_xero: FakeXero, cred, clock) -> Session:
    fake_xero.valid_tokens.add("seed-token")
    token = TokenState(access_token="seed-token", expires_at=clock() + 1800, obtained_at=clock())
    return Session.from_token(cred, token, http=http, clock=clock)


# --------------------------------------------------------------------------- #
# Timesheets                                                                  #
# --------------------------------------------------------------------------- #
@pytest.mark.anyio
async def test_list_timesheets_decodes_legacy_dates(session: Session, fake_xero: FakeXero) -> None:
    fake_xero.respond("GET", "/payroll.xro/1.0/Timesheets", body={"Timesheets": [TIMESHEET]})

    (timesheet,) = await session.timesheets.list()

    assert timesheet.timesheet_id == uuid.UUID(TIMESHEET_ID)
    assert timesheet.start_date == date(2019, 11, 8)
    assert timesheet.end_date == date(2019, 11, 14)
    assert timesheet.hours == Decimal("24.0")
    assert timesheet.lines[0].earnings_rate_id == uuid.UUID(EARNINGS_RATE_ID)
    assert sum(timesheet.lines[0].units) == Decimal("24")


@pytest.mark.anyio
async def test_create_timesheet_uses_post(session: Session, fake_xero: FakeXero) -> None:
    fake_xero.respond("POST", "/payroll.xro/1.0/Timesheets", body={"Timesheets": [TIMESHEET]})
    payload = {"EmployeeID": EMPLOYEE_ID, "StartDate": "2019-11-08", "EndDate": "2019-11-14"}

    created = await session.timesheets.create([payload])

    assert len(created) == 1
    assert fake_xero.api_calls[0].method == "POST"
    assert fake_xero.api_calls[0].json() == {"Timesheets": [payload]}


@pytest.mark.anyio
async def test_approve_timesheet(session: Session, fake_xero: FakeXero) -> None:
    fake_xero.respond(
        "POST", f"/payroll.xro/1.0/Timesheets/{TIMESHEET_ID}", body={"Timesheets": [{**TIMESHEET, "Status": "APPROVED"}]}
    )
    approved = await session.timesheets.approve(TIMESHEET_ID)
    assert approved.status == "APPROVED"


# --------------------------------------------------------------------------- #
# Employees                                                                   #
# --------------------------------------------------------------------------- #
@pytest.mark.anyio
async def test_get_employee(session: Session, fake_xero: FakeXero) -> None:
    fake_xero.respond("GET", f"/payroll.xro/1.0/Employees/{EMPLOYEE_ID}", body={"Employees": [EMPLOYEE]})

    employee = await session.employees.get(EMPLOYEE_ID)

    assert employee.full_name == "Jack Sparrow"
    assert employee.date_of_birth == date(1980, 3, 10)
    assert employee.start_date == date(2019, 11, 8)
    assert employee.termination_date is None


@pytest.mark.anyio
async def test_missing_employee_is_not_found(session: Session, fake_xero: FakeXero) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        await session.employees.get(EMPLOYEE_ID)
    assert excinfo.value.status_code == 404
    assert excinfo.value.entity == "Employee"


# --------------------------------------------------------------------------- #
# Connections / tenant selection                                              #
# --------------------------------------------------------------------------- #
@pytest.mark.anyio
async def test_connections_and_select_tenant(session: Session, fake_xero: FakeXero) -> None:
    fake_xero.respond(
        "GET", "/connections", body=[_connection(TENANT_ID, "Demo Company"), _connection(OTHER_TENANT, "Other")]
    )

    connections = await session.connections()
    assert [c.tenant_name for c in connections] == ["Demo Company", "Other"]
    assert connections[0].created_at is not None

    chosen = await session.select_tenant(OTHER_TENANT)
    assert chosen.tenant_name == "Other"
    assert session.tenant_id == uuid.UUID(OTHER_TENANT)

    first = await session.select_tenant()
    assert session.tenant_id == first.tenant_id == uuid.UUID(TENANT_ID)

    with pytest.raises(NotFoundError):
        await session.select_tenant(uuid.uuid4())
    assert session.tenant_id == uuid.UUID(TENANT_ID)
