"""Unit tests for TenantContext."""

from __future__ import annotations

import threading
import uuid

import pytest

from xero_client.tenant import TENANT_HEADER, TenantContext

TENANT = "6b1e1c3a-8f54-4a7e-9d3c-2c1f0b7e9a10"


def test_unset_tenant_has_no_header() -> None:
    ctx = TenantContext()
    assert ctx.get() is None
    assert ctx.header() == {}


def test_set_accepts_string_and_uuid() -> None:
    ctx = TenantContext(TENANT)
    assert ctx.get() == uuid.UUID(TENANT)
    assert ctx.header() == {TENANT_HEADER: TENANT}

    other = uuid.uuid4()
    ctx.set(other)
    assert ctx.header() == {"xero-tenant-id": str(other)}

    ctx.clear()
    assert ctx.get() is None


def test_malformed_tenant_rejected_and_previous_kept() -> None:
    ctx = TenantContext(TENANT)
    with pytest.raises(ValueError):
        ctx.set("not-a-uuid")
    assert ctx.get() == uuid.UUID(TENANT)


def test_concurrent_writers_leave_a_valid_value() -> None:
    ctx = TenantContext()
    ids = [uuid.uuid4() for _ in range(8)]

    def _writer(value: uuid.UUID) -> None:
        for _ in range(200):
            ctx.set(value)
            assert ctx.get() in ids

    threads = [threading.Thread(target=_writer, args=(v,)) for v in ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert ctx.get() in ids
