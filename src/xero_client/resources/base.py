"""Generic list / get / create / update helpers shared by resource modules.

The accounting and payroll APIs wrap entities in an envelope keyed by the
collection name (``{"Invoices": [...]}``), both for reads and for the echo of
a mutation.  A single-entity operation whose envelope comes back empty raises
:class:`~xero_client.errors.NotFoundError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Sequence, TypeVar

from xero_client.endpoints import Endpoint
from xero_client.errors import NotFoundError
from xero_client.executor import RequestExecutor

T = TypeVar("T")
EntityDecoder = Callable[[Mapping[str, Any]], T]

IF_MODIFIED_SINCE = "If-Modified-Since"


@dataclass(frozen=True, slots=True)
class ListParameters:
    """Filtering and paging shared by every list operation.

    ``where`` and ``order`` are passed verbatim in the provider's filter
    syntax, e.g. ``where='Status=="AUTHORISED"'``.
    """

    where: str | None = None
    order: str | None = None
    page: int | None = None
    modified_after: datetime | None = None

    def __post_init__(self) -> None:
        if self.page is not None and self.page < 1:
            raise ValueError("page numbers start at 1")

    def query(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if self.where:
            params["where"] = self.where
        if self.order:
            params["order"] = self.order
        if self.page is not None:
            params["page"] = self.page
        return params

    def headers(self) -> dict[str, str]:
        if self.modified_after is None:
            return {}
        when = self.modified_after
        if when.tzinfo is not None:
            when = when.astimezone(timezone.utc)
        return {IF_MODIFIED_SINCE: when.strftime("%Y-%m-%dT%H:%M:%S")}


def envelope_items(payload: Any, key: str) -> list[Any]:
    """Return the list stored under *key*; ``KeyError`` / ``TypeError`` on mismatch."""
    if not isinstance(payload, Mapping):
        raise TypeError(f"expected a JSON object holding {key!r}")
    items = payload[key]
    if items is None:
        return []
    if not isinstance(items, list):
        raise TypeError(f"{key!r} is not a list")
    return items


def envelope_decoder(key: str, decode: EntityDecoder[T]) -> Callable[[Any], list[T]]:
    def _decode(payload: Any) -> list[T]:
        return [decode(item) for item in envelope_items(payload, key)]

    return _decode


async def list_entities(
    executor: RequestExecutor,
    endpoint: Endpoint,
    key: str,
    decode: EntityDecoder[T],
    *,
    params: ListParameters | None = None,
) -> list[T]:
    params = params or ListParameters()
    resp = await executor.execute(
        "GET",
        endpoint.url,
        decode=envelope_decoder(key, decode),
        entity=endpoint.entity_name,
        params=params.query(),
        headers=params.headers(),
    )
    return resp.data or []


async def get_entity(
    executor: RequestExecutor,
    endpoint: Endpoint,
    key: str,
    decode: EntityDecoder[T],
) -> T:
    resp = await executor.execute(
        "GET",
        endpoint.url,
        decode=envelope_decoder(key, decode),
        entity=endpoint.entity_name,
    )
    return _single(resp.data, endpoint, resp.status_code)


async def create_entities(
    executor: RequestExecutor,
    endpoint: Endpoint,
    key: str,
    decode: EntityDecoder[T],
    entities: Sequence[Mapping[str, Any]],
    *,
    method: str = "PUT",
) -> list[T]:
    """Create one or more entities and return the provider's echo.

    The accounting API creates with ``PUT``; payroll creates with ``POST``.
    """
    if not entities:
        raise ValueError(f"no {key} to create")
    resp = await executor.execute(
        method,
        endpoint.url,
        decode=envelope_decoder(key, decode),
        entity=endpoint.entity_name,
        json={key: [dict(e) for e in entities]},
    )
    return resp.data or []


async def create_entity(
    executor: RequestExecutor,
    endpoint: Endpoint,
    key: str,
    decode: EntityDecoder[T],
    entity: Mapping[str, Any],
    *,
    method: str = "PUT",
) -> T:
    resp = await executor.execute(
        method,
        endpoint.url,
        decode=envelope_decoder(key, decode),
        entity=endpoint.entity_name,
        json={key: [dict(entity)]},
    )
    return _single(resp.data, endpoint, resp.status_code)


async def update_entity(
    executor: RequestExecutor,
    endpoint: Endpoint,
    key: str,
    decode: EntityDecoder[T],
    changes: Mapping[str, Any],
) -> T:
    """``POST`` changes to the entity addressed by *endpoint*."""
    resp = await executor.execute(
        "POST",
        endpoint.url,
        decode=envelope_decoder(key, decode),
        entity=endpoint.entity_name,
        json={key: [dict(changes)]},
    )
    return _single(resp.data, endpoint, resp.status_code)


def _single(items: list[T] | None, endpoint: Endpoint, status_code: int) -> T:
    if not items:
        raise NotFoundError(entity=endpoint.entity_name, url=endpoint.url, status_code=status_code)
    return items[0]
