"""Environment driven client configuration.

Every variable is read with the same prefix (``XERO_`` by default):

``CLIENT_ID`` / ``CLIENT_SECRET``   OAuth client credential
``TENANT_ID``                       organisation selected at start-up
``SCOPES``                          space separated scope tokens
``AUTO_REFRESH``                    truthy flag (``true``, ``1``, ``yes``, ``on``)
``TOKEN_SKEW_SECONDS``              refresh margin before expiry (default 60)
``TIMEOUT_SECONDS``                 HTTP timeout (default 30)
``TOKEN_URL`` / ``AUTHORIZE_URL``   identity endpoints (override for tests)
``CLIENT_AUTH_METHOD``              ``basic`` (default) or ``body``
``REDIRECT_URI``                    authorization-code callback
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Final, Tuple

from xero_client.auth.models import Credential
from xero_client.auth.oauth import XERO_AUTHORIZE_URL, XERO_TOKEN_URL
from xero_client.auth.policy import DEFAULT_SKEW_SECONDS

logger = logging.getLogger("xero-client.config")

_TRUTHY: Final[Tuple[str, ...]] = ("true", "1", "yes", "y", "on")

DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {raw!r}")
    return value


@dataclass(frozen=True, slots=True)
class ClientConfig:
    credential: Credential
    tenant_id: str | None = None
    scopes: str | None = None
    auto_refresh: bool = False
    token_skew_seconds: float = DEFAULT_SKEW_SECONDS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    token_url: str = XERO_TOKEN_URL
    authorize_url: str = XERO_AUTHORIZE_URL
    client_auth_method: str = "basic"
    redirect_uri: str | None = field(default=None)

    @classmethod
    def from_env(cls, prefix: str = "XERO_") -> ClientConfig:
        """Load the configuration from ``{prefix}*`` environment variables.

        Raises
        ------
        ValueError
            When the client id is missing or a numeric / enum value is malformed.
        """
        credential = Credential.from_env(prefix)
        client_auth = (os.getenv(f"{prefix}CLIENT_AUTH_METHOD") or "basic").strip().lower()
        if client_auth not in ("basic", "body"):
            raise ValueError(f"{prefix}CLIENT_AUTH_METHOD must be 'basic' or 'body', got {client_auth!r}")

        config = cls(
            credential=credential,
            tenant_id=os.getenv(f"{prefix}TENANT_ID") or None,
            scopes=os.getenv(f"{prefix}SCOPES") or None,
            auto_refresh=_truthy(os.getenv(f"{prefix}AUTO_REFRESH")),
            token_skew_seconds=_float_env(f"{prefix}TOKEN_SKEW_SECONDS", DEFAULT_SKEW_SECONDS),
            timeout_seconds=_float_env(f"{prefix}TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            token_url=os.getenv(f"{prefix}TOKEN_URL") or XERO_TOKEN_URL,
            authorize_url=os.getenv(f"{prefix}AUTHORIZE_URL") or XERO_AUTHORIZE_URL,
            client_auth_method=client_auth,
            redirect_uri=os.getenv(f"{prefix}REDIRECT_URI") or None,
        )
        logger.debug(
            "Loaded config prefix=%s tenant=%s auto_refresh=%s confidential=%s",
            prefix,
            config.tenant_id,
            config.auto_refresh,
            credential.is_confidential,
        )
        return config
