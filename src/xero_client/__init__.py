"""Typed async client for the Xero accounting and payroll APIs.

Sub-modules
-----------
auth
    Credentials, grant exchanges and the auto-refresh policy.
session
    ``Session``: token + tenant + HTTP client + resource collaborators.
executor
    Authenticated request pipeline with the single 401 retry.
classifier
    Maps failed responses to the exception taxonomy in ``errors``.
endpoints
    Resource kinds and URL building.
attachments
    Local upload guards (filename, size) and the upload helper.
config
    Environment driven ``ClientConfig``.
"""

from __future__ import annotations

from .attachments import MAX_ATTACHMENT_BYTES  # noqa: F401
from .auth import (  # noqa: F401
    AuthState,
    Credential,
    ManualClock,
    Scope,
    ScopeArea,
    TokenAcquirer,
    TokenState,
    scope_string,
)
from .config import ClientConfig  # noqa: F401
from .endpoints import Api, Endpoint, ResourceKind, endpoint_url  # noqa: F401
from .errors import (  # noqa: F401
    ApiError,
    AttachmentTooLargeError,
    AuthDecodeError,
    AuthError,
    AuthNetworkError,
    AuthProviderError,
    AuthUnavailableError,
    DecodeError,
    ErrorType,
    ForbiddenError,
    InvalidEndpointError,
    InvalidFilenameError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    RateLimitType,
    UnexpectedResponseError,
    XeroError,
)
from .executor import ApiResponse, RequestExecutor  # noqa: F401
from .resources import ListParameters  # noqa: F401
from .session import Session  # noqa: F401
from .tenant import TenantContext  # noqa: F401

__all__ = [
    "MAX_ATTACHMENT_BYTES",
    # auth
    "AuthState",
    "Credential",
    "ManualClock",
    "Scope",
    "ScopeArea",
    "TokenAcquirer",
    "TokenState",
    "scope_string",
    # config
    "ClientConfig",
    # endpoints
    "Api",
    "Endpoint",
    "ResourceKind",
    "endpoint_url",
    # errors
    "ApiError",
    "AttachmentTooLargeError",
    "AuthDecodeError",
    "AuthError",
    "AuthNetworkError",
    "AuthProviderError",
    "AuthUnavailableError",
    "DecodeError",
    "ErrorType",
    "ForbiddenError",
    "InvalidEndpointError",
    "InvalidFilenameError",
    "NetworkError",
    "NotFoundError",
    "RateLimitedError",
    "RateLimitType",
    "UnexpectedResponseError",
    "XeroError",
    # requests
    "ApiResponse",
    "ListParameters",
    "RequestExecutor",
    "Session",
    "TenantContext",
]
