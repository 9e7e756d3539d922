"""Map non-2xx provider responses to the exception taxonomy.

:func:`classify` never raises and never loses information: unknown provider
exception types become ``ErrorType.OTHER`` with the raw string preserved, and
bodies that are not a recognised envelope become
:class:`~xero_client.errors.UnexpectedResponseError` carrying the text.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Final, Mapping

import httpx

from xero_client.errors import (
    ApiError,
    ApiErrorResponse,
    ErrorType,
    FieldError,
    ForbiddenError,
    NotFoundError,
    ProblemDetail,
    RateLimitedError,
    RateLimitType,
    UnexpectedResponseError,
    XeroError,
)

_LOG = logging.getLogger("xero-client.classifier")

RATE_LIMIT_PROBLEM_HEADER: Final[str] = "X-Rate-Limit-Problem"
RETRY_AFTER_HEADER: Final[str] = "Retry-After"
REMAINING_HEADERS: Final[dict[str, str]] = {
    "day": "X-DayLimit-Remaining",
    "minute": "X-MinLimit-Remaining",
    "app_minute": "X-AppMinLimit-Remaining",
}


def classify(
    status: int,
    body: str | bytes | None,
    headers: Mapping[str, str] | httpx.Headers | None = None,
    *,
    entity: str | None = None,
    url: str | None = None,
) -> XeroError:
    """Return the exception describing a failed response.

    Parameters
    ----------
    status:
        HTTP status code (non-2xx).
    body:
        Raw response body.
    headers:
        Response headers; used for rate-limit details.
    entity:
        Display name supplied by the calling resource operation, used for 404s.
    url:
        Request URL, attached for diagnostics.
    """
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else (body or "")
    data = _load_json(text)
    hdrs = httpx.Headers(headers or {})

    if status == 404:
        return NotFoundError(
            entity=entity or "Resource",
            url=url or "",
            status_code=status,
            response_body=text or None,
        )
    if status == 403:
        return ForbiddenError(detail=_problem_detail(data), url=url)
    if status == 429:
        return _rate_limited(hdrs, url)
    if status == 401:
        return _unauthorized(data, url)

    if isinstance(data, dict):
        if "Type" in data or "ErrorNumber" in data:
            return ApiError(_api_error_response(data), status_code=status, url=url)
        if isinstance(data.get("problem"), dict):
            return ApiError(_problem_response(data["problem"], status), status_code=status, url=url)

    _LOG.debug("Unrecognised error body status=%s url=%s", status, url)
    return UnexpectedResponseError(status_code=status, response_body=text or None, url=url)


# --------------------------------------------------------------------------- #
# Helpers                                                                     #
# --------------------------------------------------------------------------- #
def _load_json(text: str) -> Any:
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _int_or_none(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _field_error(raw: Any) -> FieldError | None:
    if isinstance(raw, str):
        return FieldError(message=raw)
    if isinstance(raw, dict):
        message = raw.get("Message") or raw.get("message") or raw.get("reason")
        name = raw.get("Field") or raw.get("field") or raw.get("name")
        if message:
            return FieldError(message=str(message), field=str(name) if name else None)
    return None


def _validation_errors(data: Mapping[str, Any]) -> tuple[FieldError, ...]:
    raw_errors: list[Any] = []
    for element in data.get("Elements") or []:
        if isinstance(element, dict):
            raw_errors.extend(element.get("ValidationErrors") or [])
    raw_errors.extend(data.get("ValidationErrors") or [])
    return tuple(e for e in map(_field_error, raw_errors) if e is not None)


def _api_error_response(data: Mapping[str, Any]) -> ApiErrorResponse:
    raw_type = str(data.get("Type") or "")
    return ApiErrorResponse(
        error_type=ErrorType.from_raw(raw_type),
        raw_type=raw_type or ErrorType.OTHER.value,
        message=data.get("Message") or data.get("Detail"),
        error_number=_int_or_none(data.get("ErrorNumber")),
        validation_errors=_validation_errors(data),
    )


def _problem_response(problem: Mapping[str, Any], status: int) -> ApiErrorResponse:
    """Payroll APIs report validation failures as a ``problem`` object."""
    fields = tuple(
        e for e in map(_field_error, problem.get("invalidFields") or []) if e is not None
    )
    raw_type = str(problem.get("type") or "problem")
    if fields or status in (400, 422):
        error_type = ErrorType.VALIDATION
    else:
        error_type = ErrorType.from_raw(raw_type)
    return ApiErrorResponse(
        error_type=error_type,
        raw_type=raw_type,
        message=problem.get("detail") or problem.get("title"),
        error_number=_int_or_none(problem.get("status")),
        validation_errors=fields,
    )


def _problem_detail(data: Any) -> ProblemDetail | None:
    if not isinstance(data, dict):
        return None
    keys = ("Title", "Status", "Detail", "Instance", "Type")
    if not any(k in data for k in keys):
        return None
    return ProblemDetail(
        title=data.get("Title"),
        status=_int_or_none(data.get("Status")),
        detail=data.get("Detail"),
        instance=data.get("Instance"),
        type=data.get("Type"),
    )


def _unauthorized(data: Any, url: str | None) -> ApiError:
    if isinstance(data, dict) and data.get("Type") and "ErrorNumber" in data:
        response = _api_error_response(data)
    else:
        detail = _problem_detail(data)
        response = ApiErrorResponse(
            error_type=ErrorType.UNAUTHORISED,
            raw_type=ErrorType.UNAUTHORISED.value,
            message=(detail.detail or detail.title) if detail else "Unauthorized",
        )
    return ApiError(response, status_code=401, url=url)


def parse_retry_after(raw: str | None) -> float | None:
    """Seconds to wait from a ``Retry-After`` value (delta-seconds or HTTP-date)."""
    if not raw:
        return None
    raw = raw.strip()
    try:
        return max(0.0, float(raw))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def remaining_limits(headers: httpx.Headers) -> dict[str, int]:
    """Remaining-quota headers that are present and numeric."""
    remaining: dict[str, int] = {}
    for key, header in REMAINING_HEADERS.items():
        value = _int_or_none(headers.get(header))
        if value is not None:
            remaining[key] = value
    return remaining


def _rate_limited(headers: httpx.Headers, url: str | None) -> RateLimitedError:
    raw_problem = headers.get(RATE_LIMIT_PROBLEM_HEADER)
    return RateLimitedError(
        limit_type=RateLimitType.from_header(raw_problem),
        retry_after=parse_retry_after(headers.get(RETRY_AFTER_HEADER)),
        url=url,
        raw_problem=raw_problem,
        remaining=remaining_limits(headers),
    )
