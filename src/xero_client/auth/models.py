"""Typed, immutable records used by the token lifecycle logic."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Final, Literal, Mapping

from xero_client.auth.clock import Clock, default_clock
from xero_client.errors import AuthDecodeError

# Instant used for invalidated tokens: always in the past.
_EPOCH: Final[float] = 0.0


@dataclass(frozen=True, slots=True)
class Credential:
    """OAuth client identifier and optional secret."""

    client_id: str
    client_secret: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.client_id:
            raise ValueError("client_id must not be empty")

    @property
    def is_confidential(self) -> bool:
        """Return *True* when a client secret is available."""
        return bool(self.client_secret)

    @classmethod
    def from_env(cls, prefix: str = "XERO_") -> Credential:
        """Build from ``{prefix}CLIENT_ID`` / ``{prefix}CLIENT_SECRET``."""
        client_id = os.getenv(f"{prefix}CLIENT_ID")
        if not client_id:
            raise ValueError(f"{prefix}CLIENT_ID not set")
        return cls(client_id=client_id, client_secret=os.getenv(f"{prefix}CLIENT_SECRET") or None)


@dataclass(frozen=True, slots=True)
class TokenState:
    """Snapshot of the current access token.

    Instances are never mutated; a refresh produces a new object that replaces
    the old one as a whole.
    """

    access_token: str = field(repr=False)
    expires_at: float
    obtained_at: float
    refresh_token: str | None = field(default=None, repr=False)
    token_type: Literal["Bearer"] = "Bearer"
    scope: str | None = None
    id_token: str | None = field(default=None, repr=False)
    invalidated: bool = False

    @property
    def ttl(self) -> float:
        """Seconds between *obtained_at* and *expires_at*."""
        return self.expires_at - self.obtained_at

    def seconds_remaining(self, now: float) -> float:
        return self.expires_at - now

    def invalidate(self) -> TokenState:
        """Return the invalidated sentinel derived from this token.

        The access token is kept so stale-token detection can still compare
        against it, the refresh token is kept so a refresh stays possible.
        """
        return replace(self, expires_at=_EPOCH, invalidated=True)

    @classmethod
    def from_token_response(
        cls,
        payload: Mapping[str, Any],
        *,
        clock: Clock = default_clock,
        previous_refresh_token: str | None = None,
    ) -> TokenState:
        """Decode a token endpoint response body.

        Parameters
        ----------
        payload:
            Parsed JSON body of a successful grant.
        clock:
            Time source used for *obtained_at*.
        previous_refresh_token:
            Refresh token to keep when the provider does not rotate it.

        Raises
        ------
        AuthDecodeError
            When ``access_token`` or ``expires_in`` is missing or malformed.
        """
        if not isinstance(payload, Mapping):
            raise AuthDecodeError("Token response is not a JSON object")

        access_token = payload.get("access_token")
        if not access_token or not isinstance(access_token, str):
            raise AuthDecodeError("Token response missing access_token")

        token_type = str(payload.get("token_type") or "Bearer")
        if token_type.lower() != "bearer":
            raise AuthDecodeError(f"Unsupported token_type {token_type!r}")

        try:
            expires_in = float(payload["expires_in"])
        except KeyError:
            raise AuthDecodeError("Token response missing expires_in") from None
        except (TypeError, ValueError):
            raise AuthDecodeError("Token response has a non-numeric expires_in") from None

        obtained_at = clock()
        return cls(
            access_token=access_token,
            expires_at=obtained_at + expires_in,
            obtained_at=obtained_at,
            refresh_token=payload.get("refresh_token") or previous_refresh_token,
            scope=payload.get("scope"),
            id_token=payload.get("id_token"),
        )
