"""Logger adapter that only lets a fixed set of context fields through.

Records produced through :func:`get_client_logger` carry at most these
fields, all of them safe to ship to a log aggregator:

- ``session_id``     - Short random identifier of the owning Session
- ``tenant_id``      - Organisation the request is scoped to
- ``entity``         - Resource name (``Invoice``, ``Timesheet``...)
- ``correlation_id`` - Caller supplied identifier, if any

Access tokens, refresh tokens and client secrets must go through
:func:`mask_sensitive` before they reach a log call.

Usage
-----
>>> from xero_client.log_utils import get_client_logger
>>> log = get_client_logger(
...     base_logger_name="xero-client.executor",
...     session_id="3f2a9c",
...     tenant_id="6b1e...",
... )
>>> log.info("GET Invoices")
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping


def mask_sensitive(value: str | None, keep: int = 4) -> str:
    """Return the first *keep* characters of *value* followed by ``****``."""
    if not value:
        return "<none>"
    return f"{value[:keep]}****"


class _ClientLoggerAdapter(logging.LoggerAdapter):
    """Inject whitelisted request context into log records."""

    extra_keys = ("session_id", "tenant_id", "entity", "correlation_id")

    def __init__(self, logger: logging.Logger, extra: Mapping[str, Any] | None = None):
        extra_clean: MutableMapping[str, Any] = {}
        for k in self.extra_keys:
            if extra and extra.get(k) is not None:
                extra_clean[k] = str(extra[k])
        super().__init__(logger, extra_clean)

    def process(self, msg: str, kwargs: MutableMapping[str, Any]):
        if kwargs.get("extra") is None:
            kwargs["extra"] = {}
        # call-site extras win
        for k, v in self.extra.items():
            kwargs["extra"].setdefault(k, v)
        return msg, kwargs

    def bind(self, **context: Any) -> _ClientLoggerAdapter:
        """Return a new adapter with *context* merged over the current one."""
        merged = {**self.extra, **{k: v for k, v in context.items() if v is not None}}
        return _ClientLoggerAdapter(self.logger, merged)


def get_client_logger(
    *,
    base_logger_name: str = "xero-client",
    session_id: str | None = None,
    tenant_id: str | None = None,
    entity: str | None = None,
    correlation_id: str | None = None,
) -> _ClientLoggerAdapter:
    """Return a LoggerAdapter pre-filled with request context."""
    logger = logging.getLogger(base_logger_name)
    return _ClientLoggerAdapter(
        logger,
        {
            "session_id": session_id,
            "tenant_id": tenant_id,
            "entity": entity,
            "correlation_id": correlation_id,
        },
    )
