"""Tenant (organisation) selection attached to every request."""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Final

_LOG = logging.getLogger("xero-client.tenant")

TENANT_HEADER: Final[str] = "xero-tenant-id"


def _coerce(tenant_id: uuid.UUID | str | None) -> uuid.UUID | None:
    if tenant_id is None or isinstance(tenant_id, uuid.UUID):
        return tenant_id
    try:
        return uuid.UUID(str(tenant_id))
    except ValueError:
        raise ValueError(f"tenant_id is not a valid UUID: {tenant_id!r}") from None


class TenantContext:
    """Lock-guarded tenant id, independent of the token lifecycle.

    Setting the tenant is a local mutation only; the provider validates the
    tenant on the next request.
    """

    def __init__(self, tenant_id: uuid.UUID | str | None = None) -> None:
        self._lock = threading.Lock()
        self._tenant_id = _coerce(tenant_id)

    def get(self) -> uuid.UUID | None:
        with self._lock:
            return self._tenant_id

    def set(self, tenant_id: uuid.UUID | str | None) -> None:
        value = _coerce(tenant_id)
        with self._lock:
            self._tenant_id = value
        _LOG.debug("Tenant set to %s", value)

    def clear(self) -> None:
        self.set(None)

    def header(self) -> dict[str, str]:
        """Return the tenant header for the current tenant (empty when unset)."""
        tenant_id = self.get()
        return {TENANT_HEADER: str(tenant_id)} if tenant_id else {}
