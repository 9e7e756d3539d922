"""Token freshness state machine and single-flight refresh.

States
------
``FRESH``        token valid and outside the skew margin
``NEAR_EXPIRY``  within ``skew_seconds`` of ``expires_at``
``EXPIRED``      ``expires_at`` has passed
``INVALIDATED``  explicitly cleared, or a 401 was received for the cached token

Any state goes back to ``FRESH`` on a successful (re)acquisition.  A failed
refresh keeps the previous token (and therefore its state) and the
:class:`~xero_client.errors.AuthError` reaches the caller.

Concurrency
-----------
One ``asyncio.Lock`` guards the whole read-check-refresh-write sequence.  The
refresh itself runs as a shared task awaited through :func:`asyncio.shield`:
a caller cancelled while waiting does not abort the refresh, and whichever
caller holds the lock next joins the in-flight task instead of starting a
second exchange.

Token, lock and in-flight task live in a :class:`_TokenSlot`.  Policies
created with :meth:`AutoRefreshPolicy.share` use the same slot, so sessions
derived from one another never hold diverging copies of a rotated refresh
token.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

from xero_client.auth.clock import Clock, default_clock
from xero_client.auth.models import TokenState
from xero_client.errors import AuthError

_LOG = logging.getLogger("xero-client.auth.policy")

DEFAULT_SKEW_SECONDS = 60

Refresher = Callable[[TokenState], Awaitable[TokenState]]


class AuthState(str, Enum):
    FRESH = "fresh"
    NEAR_EXPIRY = "near_expiry"
    EXPIRED = "expired"
    INVALIDATED = "invalidated"


class _TokenSlot:
    """Mutable cell shared by every policy of one session lineage."""

    __slots__ = ("token", "lock", "inflight")

    def __init__(self, token: TokenState) -> None:
        self.token = token
        self.lock = asyncio.Lock()
        self.inflight: asyncio.Future[TokenState] | None = None


class AutoRefreshPolicy:
    """Owns the session's :class:`TokenState` and decides when to refresh it."""

    def __init__(
        self,
        token: TokenState,
        *,
        refresher: Refresher,
        auto_refresh: bool,
        skew_seconds: float = DEFAULT_SKEW_SECONDS,
        clock: Clock = default_clock,
    ) -> None:
        if skew_seconds < 0:
            raise ValueError("skew_seconds must be >= 0")
        self._slot = _TokenSlot(token)
        self._refresher = refresher
        self.auto_refresh = auto_refresh
        self.skew_seconds = float(skew_seconds)
        self._clock = clock

    def share(self, *, refresher: Refresher, auto_refresh: bool) -> AutoRefreshPolicy:
        """Return a policy over the same token slot with its own flag and refresher."""
        policy = AutoRefreshPolicy(
            self._slot.token,
            refresher=refresher,
            auto_refresh=auto_refresh,
            skew_seconds=self.skew_seconds,
            clock=self._clock,
        )
        policy._slot = self._slot
        return policy

    # ------------------------------------------------------------------ #
    # Pure reads                                                         #
    # ------------------------------------------------------------------ #
    @property
    def token(self) -> TokenState:
        return self._slot.token

    @property
    def access_token(self) -> str:
        return self._slot.token.access_token

    def state(self) -> AuthState:
        token = self._slot.token
        if token.invalidated:
            return AuthState.INVALIDATED
        now = self._clock()
        if now >= token.expires_at:
            return AuthState.EXPIRED
        if now >= token.expires_at - self.skew_seconds:
            return AuthState.NEAR_EXPIRY
        return AuthState.FRESH

    def is_token_expiring(self) -> bool:
        """Return *True* unless the token is ``FRESH``.  No side effects."""
        return self.state() is not AuthState.FRESH

    # ------------------------------------------------------------------ #
    # Transitions                                                        #
    # ------------------------------------------------------------------ #
    async def ensure_valid_token(self) -> None:
        """Refresh proactively when the token is not fresh.

        A no-op when auto-refresh is disabled; callers in that mode refresh
        manually.
        """
        if not self.auto_refresh:
            return
        async with self._slot.lock:
            state = self.state()
            if state is AuthState.FRESH:
                return
            _LOG.debug("Token %s; refreshing before request", state.value)
            await self._refresh_locked()

    async def refresh_after_unauthorized(self, stale_access_token: str) -> None:
        """Handle a 401 received while sending *stale_access_token*.

        When the cached token is no longer the one that was rejected, a
        concurrent call already replaced it and nothing is refreshed.
        Otherwise the cached token is invalidated and refreshed even if it
        looked fresh: the provider is authoritative.
        """
        async with self._slot.lock:
            current = self._slot.token
            if current.access_token != stale_access_token and not current.invalidated:
                _LOG.debug("401 for a superseded token; reusing the current one")
                return
            self._slot.token = current.invalidate()
            _LOG.info("Access token rejected by provider; forcing refresh")
            await self._refresh_locked()

    async def force_refresh(
        self,
        refresher: Refresher | None = None,
        *,
        seen: TokenState | None = None,
    ) -> TokenState:
        """Refresh under the lock and return the resulting token.

        *refresher* overrides the policy's own exchange for this call only.
        When *seen* is given and the slot no longer holds it, another caller
        refreshed in the meantime and its token is returned as-is instead of
        spending the rotated refresh token a second time.
        """
        async with self._slot.lock:
            current = self._slot.token
            if seen is not None and current is not seen and not current.invalidated:
                _LOG.debug("Token replaced while waiting; skipping refresh")
                return current
            await self._refresh_locked(refresher)
            return self._slot.token

    async def replace_token(self, token: TokenState) -> None:
        """Install a token obtained outside the policy."""
        async with self._slot.lock:
            self._slot.token = token

    def invalidate(self) -> None:
        """Move to ``INVALIDATED`` (test / debug action)."""
        self._slot.token = self._slot.token.invalidate()

    # ---------------- internal helpers --------------------------------- #
    async def _refresh_locked(self, refresher: Refresher | None = None) -> None:
        slot = self._slot
        inflight = slot.inflight
        if inflight is None or inflight.done():
            inflight = asyncio.ensure_future(self._run_refresh(slot.token, refresher or self._refresher))
            inflight.add_done_callback(_retrieve_exception)
            slot.inflight = inflight
        else:
            _LOG.debug("Joining in-flight token refresh")
        await asyncio.shield(inflight)

    async def _run_refresh(self, base: TokenState, refresher: Refresher) -> TokenState:
        try:
            token = await refresher(base)
        except AuthError as exc:
            _LOG.warning("Token refresh failed: %s", exc)
            raise
        self._slot.token = token
        _LOG.debug("Token refreshed (expires in %ss)", int(token.ttl))
        return token


def _retrieve_exception(fut: asyncio.Future) -> None:
    # A refresh whose every waiter was cancelled must not log
    # "exception was never retrieved".
    if not fut.cancelled():
        fut.exception()
