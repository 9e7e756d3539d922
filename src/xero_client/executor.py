"""Request execution pipeline shared by every resource module.

:meth:`RequestExecutor.execute` is the single chokepoint for API calls:

1. proactive refresh through the :class:`AutoRefreshPolicy` (auto-refresh only)
2. bearer + tenant headers, JSON or raw-bytes body, verbatim query params
3. transport failure -> :class:`NetworkError`, never retried
4. 2xx -> body decoded by the caller's decoder (:class:`DecodeError` on mismatch)
5. 401 -> refresh and retry exactly once (auto-refresh only)
6. anything else -> :func:`~xero_client.classifier.classify`
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, TypeVar

import httpx

from xero_client.auth.policy import AutoRefreshPolicy
from xero_client.classifier import classify, remaining_limits
from xero_client.dates import DateParseError
from xero_client.errors import DecodeError, InvalidEndpointError, NetworkError, body_preview
from xero_client.log_utils import get_client_logger
from xero_client.tenant import TenantContext

T = TypeVar("T")
Decoder = Callable[[Any], T]

JSON_CONTENT_TYPE = "application/json"
OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """Decoded body plus the response metadata callers may need."""

    data: T
    status_code: int
    headers: httpx.Headers
    url: str

    @property
    def rate_limits(self) -> dict[str, int]:
        """Remaining day / minute / app-minute quota reported by the provider."""
        return remaining_limits(self.headers)


def _clean_params(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    cleaned = {k: v for k, v in params.items() if v is not None}
    return cleaned or None


class RequestExecutor:
    """Builds, sends and interprets authenticated API requests."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        policy: AutoRefreshPolicy,
        tenant: TenantContext,
        *,
        session_id: str | None = None,
    ) -> None:
        self._http = http
        self._policy = policy
        self._tenant = tenant
        self._log = get_client_logger(base_logger_name="xero-client.executor", session_id=session_id)

    @property
    def auto_refresh(self) -> bool:
        return self._policy.auto_refresh

    def _build_headers(
        self,
        access_token: str,
        *,
        body_type: str | None,
        content_length: int | None,
        extra: Mapping[str, str] | None,
    ) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": JSON_CONTENT_TYPE,
            **self._tenant.header(),
        }
        if body_type:
            headers["Content-Type"] = body_type
        if content_length is not None:
            headers["Content-Length"] = str(content_length)
        if extra:
            headers.update(extra)
        return headers

    async def execute(
        self,
        method: str,
        url: str,
        *,
        decode: Decoder[T] | None = None,
        entity: str | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        content: bytes | None = None,
        content_type: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse[T]:
        """Send one API request and return the decoded response.

        Args:
            method: HTTP verb.
            url: Absolute URL, usually from :mod:`xero_client.endpoints`.
            decode: Callable turning the parsed JSON body into the typed result.
            entity: Display name used in 404 / decode errors.
            params: Query parameters, attached verbatim (``None`` values dropped).
            json: JSON-serialisable entity payload.
            content: Raw bytes (attachments); sent with *content_type*.
            content_type: Explicit content type for *content*.
            headers: Extra headers (e.g. ``If-Modified-Since``).

        Raises:
            AuthError: Proactive or 401-triggered refresh failed.
            NetworkError: Transport failure.
            DecodeError: 2xx body did not match *decode*.
            XeroError: Any classified provider error.
        """
        if json is not None and content is not None:
            raise ValueError("pass either json or content, not both")
        method = method.upper()
        entity_name = entity or "Resource"
        log = self._log.bind(entity=entity, tenant_id=self._tenant.get())

        if json is not None:
            body_type, content_length = JSON_CONTENT_TYPE, None
        elif content is not None:
            body_type, content_length = content_type or OCTET_STREAM, len(content)
        else:
            body_type, content_length = None, None

        if self.auto_refresh:
            await self._policy.ensure_valid_token()

        query = _clean_params(params)
        attempt = 0
        while True:
            attempt += 1
            access_token = self._policy.access_token
            request_headers = self._build_headers(
                access_token,
                body_type=body_type,
                content_length=content_length,
                extra=headers,
            )
            started = time.monotonic()
            try:
                resp = await self._http.request(
                    method,
                    url,
                    params=query,
                    json=json,
                    content=content,
                    headers=request_headers,
                )
            except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
                raise InvalidEndpointError(f"Cannot request {url!r}: {exc}") from exc
            except httpx.TransportError as exc:
                log.warning("%s %s failed: %s", method, url, exc)
                raise NetworkError(f"{method} {url} failed: {exc}", method=method, url=url) from exc

            log.debug(
                "%s %s -> %s (%.3fs, attempt %s)",
                method,
                url,
                resp.status_code,
                time.monotonic() - started,
                attempt,
            )

            if resp.is_success:
                return ApiResponse(
                    data=self._decode(resp, method, url, decode, entity_name),
                    status_code=resp.status_code,
                    headers=resp.headers,
                    url=url,
                )

            if resp.status_code == 401 and self.auto_refresh and attempt == 1:
                log.info("%s %s returned 401; refreshing token and retrying once", method, url)
                await self._policy.refresh_after_unauthorized(access_token)
                continue

            error = classify(resp.status_code, resp.content, resp.headers, entity=entity_name, url=url)
            log.warning(
                "%s %s failed with %s (%s): %s",
                method,
                url,
                resp.status_code,
                error.kind,
                body_preview(resp.text),
            )
            raise error

    @staticmethod
    def _decode(
        resp: httpx.Response,
        method: str,
        url: str,
        decode: Decoder[T] | None,
        entity: str,
    ) -> Any:
        if resp.status_code == 204 or not resp.content:
            return None

        def _error(message: str, **context: Any) -> DecodeError:
            return DecodeError(
                message,
                entity_type=entity,
                method=method,
                url=url,
                status_code=resp.status_code,
                response_body=resp.text,
                **context,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise _error(f"{entity} response is not valid JSON") from exc
        if decode is None:
            return payload

        try:
            return decode(payload)
        except DateParseError as exc:
            raise _error(f"Failed to decode {entity} response: {exc}", field=exc.field, raw_value=exc.raw) from exc
        except KeyError as exc:
            field = str(exc.args[0]) if exc.args else None
            raise _error(f"Failed to decode {entity} response: missing {field}", field=field) from exc
        except (TypeError, ValueError) as exc:
            raise _error(f"Failed to decode {entity} response: {exc}") from exc
