"""Shared fixtures: the fake provider, a manual clock and an HTTP client bound to it."""

from __future__ import annotations

import httpx
import pytest

from tests.fakes import CLIENT_ID, CLIENT_SECRET, FakeXero
from xero_client.auth.clock import ManualClock
from xero_client.auth.models import Credential


def pytest_addoption(parser):
    """Add integration option to pytest."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run live tests against the real provider",
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless explicitly requested."""
    if not config.getoption("--integration", default=False):
        skip_live = pytest.mark.skip(reason="Need --integration option to run")
        for item in items:
            if "live" in item.keywords:
                item.add_marker(skip_live)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(1_700_000_000.0)


@pytest.fixture
def cred() -> Credential:
    return Credential(CLIENT_ID, CLIENT_SECRET)


@pytest.fixture
def fake_xero() -> FakeXero:
    return FakeXero()


@pytest.fixture
async def http(fake_xero: FakeXero):
    """Async HTTP client bound to the fake provider."""
    transport = httpx.ASGITransport(app=fake_xero.app)
    async with httpx.AsyncClient(transport=transport) as client:
        yield client
