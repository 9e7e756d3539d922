"""OAuth 2.0 token lifecycle.

Sub-modules
-----------
clock
    Test-friendly time abstraction.
models
    Immutable ``Credential`` and ``TokenState`` records.
pkce
    Proof-Key for Code Exchange helpers.
scopes
    Provider scope tokens and presets.
oauth
    Grant exchanges against the token endpoint.
policy
    Freshness state machine and single-flight refresh.

All public objects are re-exported here for convenience.
"""

from __future__ import annotations

from .clock import Clock, ManualClock, default_clock  # noqa: F401
from .models import Credential, TokenState  # noqa: F401
from .oauth import XERO_AUTHORIZE_URL, XERO_TOKEN_URL, AuthorizeRequest, TokenAcquirer  # noqa: F401
from .pkce import code_challenge_s256, generate_code_verifier, generate_state  # noqa: F401
from .policy import DEFAULT_SKEW_SECONDS, AuthState, AutoRefreshPolicy  # noqa: F401
from .scopes import (  # noqa: F401
    ALL_ACCOUNTING,
    ALL_PAYROLL,
    COMMON_ACCOUNTING_READ,
    OFFLINE_ACCESS,
    Permission,
    Scope,
    ScopeArea,
    scope_string,
)

__all__ = [
    # clock
    "Clock",
    "ManualClock",
    "default_clock",
    # models
    "Credential",
    "TokenState",
    # oauth
    "XERO_AUTHORIZE_URL",
    "XERO_TOKEN_URL",
    "AuthorizeRequest",
    "TokenAcquirer",
    # pkce
    "code_challenge_s256",
    "generate_code_verifier",
    "generate_state",
    # policy
    "DEFAULT_SKEW_SECONDS",
    "AuthState",
    "AutoRefreshPolicy",
    # scopes
    "ALL_ACCOUNTING",
    "ALL_PAYROLL",
    "COMMON_ACCOUNTING_READ",
    "OFFLINE_ACCESS",
    "Permission",
    "Scope",
    "ScopeArea",
    "scope_string",
]
