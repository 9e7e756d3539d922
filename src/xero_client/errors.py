"""Exception types raised by xero_client.

Only lightweight, **data-carrying** exceptions live here so that callers can
pattern-match on the class and read structured context (status, url, provider
error type, rate-limit window...) without parsing messages.

Hierarchy
---------
XeroError
    NetworkError, DecodeError, ApiError, NotFoundError, ForbiddenError,
    RateLimitedError, UnexpectedResponseError, InvalidEndpointError,
    InvalidFilenameError, AttachmentTooLargeError
    AuthError
        AuthNetworkError, AuthProviderError, AuthDecodeError, AuthUnavailableError

No exception stores an access token, refresh token or client secret.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final

_BODY_PREVIEW_LEN: Final[int] = 500


def body_preview(body: str | bytes | None, limit: int = _BODY_PREVIEW_LEN) -> str | None:
    """Return *body* as text truncated to *limit* characters."""
    if body is None:
        return None
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    return body[:limit] + "..." if len(body) > limit else body


class XeroError(Exception):
    """Base class for every error raised by this library."""

    kind: str = "xero_error"

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serialisable payload **without secrets**."""
        return {"error": self.kind, "message": str(self)}


# --------------------------------------------------------------------------- #
# Transport / decoding                                                        #
# --------------------------------------------------------------------------- #
class NetworkError(XeroError):
    """Transport-level failure (DNS, connect, timeout, reset)."""

    kind = "network"

    def __init__(self, message: str, *, method: str | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.method = method
        self.url = url


class DecodeError(XeroError):
    """A 2xx response body did not match the expected shape."""

    kind = "decode"

    def __init__(
        self,
        message: str,
        *,
        entity_type: str,
        method: str,
        url: str,
        status_code: int,
        response_body: str | None = None,
        field: str | None = None,
        raw_value: str | None = None,
    ) -> None:
        super().__init__(message)
        self.entity_type = entity_type
        self.method = method
        self.url = url
        self.status_code = status_code
        self.response_body = body_preview(response_body)
        self.field = field
        self.raw_value = raw_value

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload.update(
            entity_type=self.entity_type,
            method=self.method,
            url=self.url,
            status_code=self.status_code,
        )
        if self.field is not None:
            payload["field"] = self.field
        return payload


# --------------------------------------------------------------------------- #
# Provider-reported API errors                                                #
# --------------------------------------------------------------------------- #
class ErrorType(str, Enum):
    """Exception type strings reported in the provider's ``Type`` field."""

    VALIDATION = "ValidationException"
    POST_DATA_INVALID = "PostDataInvalidException"
    QUERY_PARSE = "QueryParseException"
    OBJECT_NOT_FOUND = "ObjectNotFoundException"
    ORGANISATION_OFFLINE = "OrganisationOfflineException"
    UNAUTHORISED = "UnauthorisedException"
    NO_DATA_PROCESSED = "NoDataProcessedException"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaTypeException"
    METHOD_NOT_ALLOWED = "MethodNotAllowedException"
    INTERNAL_SERVER = "InternalServerException"
    NOT_IMPLEMENTED = "NotImplementedException"
    NOT_AVAILABLE = "NotAvailableException"
    RATE_LIMIT_EXCEEDED = "RateLimitExceededException"
    SYSTEM_UNAVAILABLE = "SystemUnavailableException"
    OTHER = "Other"

    @classmethod
    def from_raw(cls, raw: str | None) -> ErrorType:
        """Map a raw ``Type`` string to a member; unknown strings become ``OTHER``."""
        if not raw:
            return cls.OTHER
        try:
            return cls(raw)
        except ValueError:
            return cls.OTHER

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: Final[dict[ErrorType, str]] = {
    ErrorType.VALIDATION: "A validation error occurred with the submitted data",
    ErrorType.POST_DATA_INVALID: "The data submitted could not be parsed",
    ErrorType.QUERY_PARSE: "The query string could not be parsed",
    ErrorType.OBJECT_NOT_FOUND: "The requested object could not be found",
    ErrorType.ORGANISATION_OFFLINE: "The organisation is temporarily offline",
    ErrorType.UNAUTHORISED: "The access token is missing, expired or invalid",
    ErrorType.NO_DATA_PROCESSED: "The request did not result in any data being processed",
    ErrorType.UNSUPPORTED_MEDIA_TYPE: "The request content type is not supported",
    ErrorType.METHOD_NOT_ALLOWED: "The HTTP method is not allowed on this endpoint",
    ErrorType.INTERNAL_SERVER: "The provider encountered an internal error",
    ErrorType.NOT_IMPLEMENTED: "The requested operation is not implemented",
    ErrorType.NOT_AVAILABLE: "The API is currently unavailable",
    ErrorType.RATE_LIMIT_EXCEEDED: "An API rate limit was exceeded",
    ErrorType.SYSTEM_UNAVAILABLE: "The provider system is currently unavailable",
    ErrorType.OTHER: "Unrecognised provider error type",
}


@dataclass(frozen=True, slots=True)
class FieldError:
    """One validation message, optionally tied to a field name."""

    message: str
    field: str | None = None


@dataclass(frozen=True, slots=True)
class ApiErrorResponse:
    """Decoded provider error envelope."""

    error_type: ErrorType
    raw_type: str
    message: str | None = None
    error_number: int | None = None
    validation_errors: tuple[FieldError, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        number = self.error_number if self.error_number is not None else "?"
        text = f"Xero API Error ({number}): {self.message or self.raw_type}"
        text += f" [{self.raw_type}: {self.error_type.description}]"
        if self.validation_errors:
            text += " - " + "; ".join(e.message for e in self.validation_errors)
        return text


class ApiError(XeroError):
    """Business error reported by the provider."""

    kind = "api"

    def __init__(
        self,
        response: ApiErrorResponse,
        *,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(str(response))
        self.response = response
        self.status_code = status_code
        self.url = url

    @property
    def error_type(self) -> ErrorType:
        return self.response.error_type

    @property
    def validation_errors(self) -> tuple[FieldError, ...]:
        return self.response.validation_errors

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload.update(
            error_type=self.response.raw_type,
            error_number=self.response.error_number,
            status_code=self.status_code,
        )
        if self.validation_errors:
            payload["validation_errors"] = [e.message for e in self.validation_errors]
        return payload


class NotFoundError(XeroError):
    """Entity missing - either a 404 or an empty mutation/lookup envelope."""

    kind = "not_found"

    def __init__(
        self,
        *,
        entity: str,
        url: str,
        status_code: int,
        response_body: str | None = None,
    ) -> None:
        super().__init__(f"{entity} not found at {url} (status {status_code})")
        self.entity = entity
        self.url = url
        self.status_code = status_code
        self.response_body = body_preview(response_body)


@dataclass(frozen=True, slots=True)
class ProblemDetail:
    """RFC 7807 style body returned by the identity layer on 401/403."""

    title: str | None = None
    status: int | None = None
    detail: str | None = None
    instance: str | None = None
    type: str | None = None


class ForbiddenError(XeroError):
    """The token is valid but not allowed to access the resource / tenant."""

    kind = "forbidden"

    def __init__(self, *, detail: ProblemDetail | None = None, url: str | None = None) -> None:
        reason = (detail.detail or detail.title) if detail else None
        super().__init__(f"Forbidden: {reason}" if reason else "Forbidden")
        self.detail = detail
        self.url = url


class RateLimitType(str, Enum):
    """Value of the ``X-Rate-Limit-Problem`` header."""

    MINUTE = "minute"
    DAILY = "day"
    APP_MINUTE = "appminute"
    CONCURRENT = "concurrent"
    UNKNOWN = "unknown"

    @classmethod
    def from_header(cls, raw: str | None) -> RateLimitType:
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


class RateLimitedError(XeroError):
    """HTTP 429.  No automatic back-off happens; ``retry_after`` is advisory."""

    kind = "rate_limited"

    def __init__(
        self,
        *,
        limit_type: RateLimitType,
        retry_after: float | None = None,
        url: str | None = None,
        raw_problem: str | None = None,
        remaining: dict[str, int] | None = None,
    ) -> None:
        suffix = f", retry after {retry_after:g}s" if retry_after is not None else ""
        super().__init__(f"Rate limit exceeded ({raw_problem or limit_type.value}){suffix}")
        self.limit_type = limit_type
        self.retry_after = retry_after
        self.url = url
        self.raw_problem = raw_problem
        self.remaining = dict(remaining or {})

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload.update(limit_type=self.limit_type.value, retry_after=self.retry_after)
        return payload


class UnexpectedResponseError(XeroError):
    """Non-2xx response whose body is not a recognised error envelope."""

    kind = "unexpected_response"

    def __init__(self, *, status_code: int, response_body: str | None = None, url: str | None = None) -> None:
        super().__init__(f"Unexpected response status {status_code}")
        self.status_code = status_code
        self.response_body = body_preview(response_body)
        self.url = url


# --------------------------------------------------------------------------- #
# Local guard errors (raised before any network call)                         #
# --------------------------------------------------------------------------- #
class InvalidEndpointError(XeroError):
    """An endpoint could not be turned into a valid absolute URL."""

    kind = "invalid_endpoint"


class InvalidFilenameError(XeroError):
    """Attachment filename contains a character the provider rejects."""

    kind = "invalid_filename"

    def __init__(self, filename: str) -> None:
        super().__init__(f"Invalid attachment filename: {filename!r}")
        self.filename = filename


class AttachmentTooLargeError(XeroError):
    """Attachment payload exceeds the provider's upload limit."""

    kind = "attachment_too_large"

    def __init__(self, *, size: int, limit: int) -> None:
        super().__init__(f"Attachment is {size} bytes; the limit is {limit} bytes")
        self.size = size
        self.limit = limit


# --------------------------------------------------------------------------- #
# OAuth grant / refresh failures                                              #
# --------------------------------------------------------------------------- #
class AuthError(XeroError):
    """Grant or refresh exchange against the token endpoint failed."""

    kind = "auth"


class AuthNetworkError(AuthError):
    kind = "auth_network"


class AuthUnavailableError(AuthError):
    """No grant can renew the current token with the credential at hand."""

    kind = "auth_unavailable"


class AuthProviderError(AuthError):
    """Token endpoint answered with a non-2xx status."""

    kind = "auth_provider"

    def __init__(
        self,
        *,
        status_code: int,
        error: str | None = None,
        error_description: str | None = None,
    ) -> None:
        message = f"Token endpoint returned {status_code}"
        if error:
            message += f": {error}"
        if error_description:
            message += f" ({error_description})"
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.error_description = error_description

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload.update(status_code=self.status_code, oauth_error=self.error)
        return payload


class AuthDecodeError(AuthError):
    """Token endpoint returned 2xx with an unusable body."""

    kind = "auth_decode"
