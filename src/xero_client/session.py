"""Authenticated session: the object callers hold on to.

A :class:`Session` aggregates one credential, one token (inside an
:class:`~xero_client.auth.policy.AutoRefreshPolicy`), one
:class:`~xero_client.tenant.TenantContext` and the ``httpx.AsyncClient`` all
requests go through.  Sessions share nothing unless the caller passes the same
HTTP client to several of them.

Example
-------
>>> async with await Session.from_client_credentials(
...     Credential("client-id", "secret"),
...     scope_string(Scope.common_accounting_read()),
...     auto_refresh=True,
...     refresh_credential=Credential("client-id", "secret"),
... ) as session:
...     session.set_tenant(tenant_id)
...     invoices = await session.invoices.list()
"""

from __future__ import annotations

import uuid
from typing import Any, Mapping

import httpx

from xero_client.auth.clock import Clock, default_clock
from xero_client.auth.models import Credential, TokenState
from xero_client.auth.oauth import TokenAcquirer
from xero_client.auth.policy import DEFAULT_SKEW_SECONDS, AuthState, AutoRefreshPolicy
from xero_client.auth.scopes import ScopeLike, scope_string
from xero_client.config import DEFAULT_TIMEOUT_SECONDS, ClientConfig
from xero_client.endpoints import Api, custom_url
from xero_client.errors import AuthUnavailableError, NotFoundError
from xero_client.executor import ApiResponse, Decoder, RequestExecutor
from xero_client.log_utils import get_client_logger, mask_sensitive
from xero_client.resources.accounts import AccountsResource
from xero_client.resources.connections import Connection, ConnectionsResource
from xero_client.resources.employees import EmployeesResource
from xero_client.resources.invoices import InvoicesResource
from xero_client.resources.timesheets import TimesheetsResource
from xero_client.tenant import TenantContext


def _http_client(http: httpx.AsyncClient | None, config: ClientConfig | None) -> tuple[httpx.AsyncClient, bool]:
    """Return ``(client, owned)``; an injected client is never closed by us."""
    if http is not None:
        return http, False
    timeout = config.timeout_seconds if config else DEFAULT_TIMEOUT_SECONDS
    return httpx.AsyncClient(timeout=timeout), True


def _check_refresh_credential(refresh_credential: Credential | None, *, has_refresh_token: bool) -> None:
    if refresh_credential is None:
        raise ValueError("auto_refresh requires a refresh_credential")
    if not has_refresh_token and not refresh_credential.is_confidential:
        raise ValueError("renewing a token without refresh_token needs a confidential refresh_credential")


def _acquirer(http: httpx.AsyncClient, config: ClientConfig | None, clock: Clock) -> TokenAcquirer:
    if config is None:
        return TokenAcquirer(http, clock=clock)
    return TokenAcquirer(
        http,
        token_url=config.token_url,
        authorize_url=config.authorize_url,
        client_auth=config.client_auth_method,  # type: ignore[arg-type]
        clock=clock,
    )


class Session:
    """Holds the token lifecycle, the tenant and the resource collaborators.

    Prefer the async factories (:meth:`from_client_credentials`,
    :meth:`from_authorization_code`, :meth:`from_config`) or
    :meth:`from_token` over calling the constructor directly.

    Raises
    ------
    ValueError
        When ``auto_refresh`` is requested without a ``refresh_credential``,
        or the token has no refresh token and the refresh credential has no
        client secret to re-run the client-credentials grant with.
    """

    def __init__(
        self,
        credential: Credential,
        token: TokenState,
        *,
        http: httpx.AsyncClient,
        acquirer: TokenAcquirer,
        auto_refresh: bool = False,
        refresh_credential: Credential | None = None,
        scopes: ScopeLike | None = None,
        tenant: TenantContext | None = None,
        skew_seconds: float = DEFAULT_SKEW_SECONDS,
        clock: Clock = default_clock,
        owns_http: bool = False,
        shared_with: AutoRefreshPolicy | None = None,
    ) -> None:
        if auto_refresh:
            _check_refresh_credential(refresh_credential, has_refresh_token=bool(token.refresh_token))

        self.credential = credential
        self.refresh_credential = refresh_credential
        self.scopes = scope_string(scopes) if scopes else None
        self.session_id = uuid.uuid4().hex[:12]
        self._http = http
        self._owns_http = owns_http
        self._acquirer = acquirer
        self._clock = clock
        self._tenant = tenant or TenantContext()
        if shared_with is not None:
            self._policy = shared_with.share(refresher=self._refresh, auto_refresh=auto_refresh)
        else:
            self._policy = AutoRefreshPolicy(
                token,
                refresher=self._refresh,
                auto_refresh=auto_refresh,
                skew_seconds=skew_seconds,
                clock=clock,
            )
        self._executor = RequestExecutor(http, self._policy, self._tenant, session_id=self.session_id)
        self._log = get_client_logger(base_logger_name="xero-client.session", session_id=self.session_id)

        self.accounts = AccountsResource(self._executor)
        self.invoices = InvoicesResource(self._executor)
        self.timesheets = TimesheetsResource(self._executor)
        self.employees = EmployeesResource(self._executor)
        self._connections = ConnectionsResource(self._executor)

        self._log.debug(
            "Session created client=%s auto_refresh=%s expires_in=%ss",
            mask_sensitive(credential.client_id, 6),
            auto_refresh,
            int(token.seconds_remaining(clock())),
        )

    # ------------------------------------------------------------------ #
    # Factories                                                          #
    # ------------------------------------------------------------------ #
    @classmethod
    async def from_client_credentials(
        cls,
        cred: Credential,
        scopes: ScopeLike | None = None,
        *,
        auto_refresh: bool = False,
        refresh_credential: Credential | None = None,
        tenant_id: uuid.UUID | str | None = None,
        config: ClientConfig | None = None,
        http: httpx.AsyncClient | None = None,
        clock: Clock = default_clock,
    ) -> Session:
        """Obtain a token with the client-credentials grant and wrap it."""
        if auto_refresh:
            _check_refresh_credential(refresh_credential, has_refresh_token=False)
        client, owned = _http_client(http, config)
        acquirer = _acquirer(client, config, clock)
        try:
            token = await acquirer.exchange_client_credentials(cred, scopes)
        except BaseException:
            if owned:
                await client.aclose()
            raise
        return cls(
            cred,
            token,
            http=client,
            acquirer=acquirer,
            auto_refresh=auto_refresh,
            refresh_credential=refresh_credential,
            scopes=scopes,
            tenant=TenantContext(tenant_id),
            skew_seconds=config.token_skew_seconds if config else DEFAULT_SKEW_SECONDS,
            clock=clock,
            owns_http=owned,
        )

    @classmethod
    async def from_authorization_code(
        cls,
        cred: Credential,
        redirect_uri: str | None,
        code: str,
        *,
        code_verifier: str | None = None,
        auto_refresh: bool = False,
        refresh_credential: Credential | None = None,
        tenant_id: uuid.UUID | str | None = None,
        config: ClientConfig | None = None,
        http: httpx.AsyncClient | None = None,
        clock: Clock = default_clock,
    ) -> Session:
        """Exchange an authorization code; the session can then refresh by refresh token."""
        redirect_uri = redirect_uri or (config.redirect_uri if config else None)
        if not redirect_uri:
            raise ValueError("redirect_uri is required (argument or ClientConfig.redirect_uri)")
        if auto_refresh and refresh_credential is None:
            raise ValueError("auto_refresh requires a refresh_credential")
        client, owned = _http_client(http, config)
        acquirer = _acquirer(client, config, clock)
        try:
            token = await acquirer.exchange_authorization_code(
                cred, redirect_uri, code, code_verifier=code_verifier
            )
        except BaseException:
            if owned:
                await client.aclose()
            raise
        return cls(
            cred,
            token,
            http=client,
            acquirer=acquirer,
            auto_refresh=auto_refresh,
            refresh_credential=refresh_credential,
            tenant=TenantContext(tenant_id),
            skew_seconds=config.token_skew_seconds if config else DEFAULT_SKEW_SECONDS,
            clock=clock,
            owns_http=owned,
        )

    @classmethod
    def from_token(
        cls,
        cred: Credential,
        token: TokenState,
        *,
        auto_refresh: bool = False,
        refresh_credential: Credential | None = None,
        scopes: ScopeLike | None = None,
        tenant_id: uuid.UUID | str | None = None,
        config: ClientConfig | None = None,
        http: httpx.AsyncClient | None = None,
        clock: Clock = default_clock,
    ) -> Session:
        """Resume from a previously stored :class:`TokenState`."""
        client, owned = _http_client(http, config)
        return cls(
            cred,
            token,
            http=client,
            acquirer=_acquirer(client, config, clock),
            auto_refresh=auto_refresh,
            refresh_credential=refresh_credential,
            scopes=scopes,
            tenant=TenantContext(tenant_id),
            skew_seconds=config.token_skew_seconds if config else DEFAULT_SKEW_SECONDS,
            clock=clock,
            owns_http=owned,
        )

    @classmethod
    async def from_config(
        cls,
        config: ClientConfig | None = None,
        *,
        http: httpx.AsyncClient | None = None,
        clock: Clock = default_clock,
    ) -> Session:
        """Client-credentials session described by :class:`ClientConfig` (env by default)."""
        config = config or ClientConfig.from_env()
        return await cls.from_client_credentials(
            config.credential,
            config.scopes,
            auto_refresh=config.auto_refresh,
            refresh_credential=config.credential if config.auto_refresh else None,
            tenant_id=config.tenant_id,
            config=config,
            http=http,
            clock=clock,
        )

    def _derive(self, *, auto_refresh: bool, refresh_credential: Credential | None) -> Session:
        return Session(
            self.credential,
            self._policy.token,
            http=self._http,
            acquirer=self._acquirer,
            auto_refresh=auto_refresh,
            refresh_credential=refresh_credential,
            scopes=self.scopes,
            tenant=self._tenant,
            skew_seconds=self._policy.skew_seconds,
            clock=self._clock,
            shared_with=self._policy,
        )

    def with_auto_refresh(self, refresh_credential: Credential) -> Session:
        """Return a new session that refreshes automatically.

        Both sessions share one token slot, so a refresh made through either
        one is seen by the other.  The tenant and HTTP client are shared too;
        the HTTP client stays owned by this session.
        """
        return self._derive(auto_refresh=True, refresh_credential=refresh_credential)

    def without_auto_refresh(self) -> Session:
        return self._derive(auto_refresh=False, refresh_credential=self.refresh_credential)

    # ------------------------------------------------------------------ #
    # Token lifecycle                                                    #
    # ------------------------------------------------------------------ #
    @property
    def auto_refresh(self) -> bool:
        return self._policy.auto_refresh

    @property
    def token(self) -> TokenState:
        return self._policy.token

    def auth_state(self) -> AuthState:
        return self._policy.state()

    def is_token_expiring(self) -> bool:
        return self._policy.is_token_expiring()

    async def ensure_valid_token(self) -> None:
        await self._policy.ensure_valid_token()

    async def exchange_refresh_token(self, cred: Credential | None = None) -> TokenState:
        """Refresh now, install the result and return it.

        Uses the refresh-token grant when the current token has a refresh
        token, otherwise re-runs the client-credentials grant.  Runs under
        the policy lock: when a concurrent refresh replaces the token first,
        that token is returned and no second exchange is made.
        """
        cred = cred or self.refresh_credential or self.credential

        async def refresher(current: TokenState) -> TokenState:
            return await self._exchange(cred, current)

        return await self._policy.force_refresh(refresher, seen=self._policy.token)

    def clear_access_token_for_testing(self) -> None:
        """Invalidate the cached token so the next call must refresh."""
        self._policy.invalidate()

    async def _refresh(self, current: TokenState) -> TokenState:
        return await self._exchange(self.refresh_credential or self.credential, current)

    async def _exchange(self, cred: Credential, current: TokenState) -> TokenState:
        if current.refresh_token:
            return await self._acquirer.exchange_refresh_token(cred, current.refresh_token)
        if not cred.is_confidential:
            raise AuthUnavailableError("token has no refresh_token and the credential has no client secret")
        return await self._acquirer.exchange_client_credentials(cred, self.scopes)

    # ------------------------------------------------------------------ #
    # Tenant                                                             #
    # ------------------------------------------------------------------ #
    @property
    def tenant_id(self) -> uuid.UUID | None:
        return self._tenant.get()

    def set_tenant(self, tenant_id: uuid.UUID | str | None) -> None:
        self._tenant.set(tenant_id)

    async def connections(self) -> list[Connection]:
        return await self._connections.list()

    async def select_tenant(self, tenant_id: uuid.UUID | str | None = None) -> Connection:
        """Select *tenant_id* (or the first connected tenant) after checking it is connected.

        Raises
        ------
        NotFoundError
            No connection matches.
        """
        connections = await self.connections()
        wanted = uuid.UUID(str(tenant_id)) if tenant_id is not None else None
        for connection in connections:
            if wanted is None or connection.tenant_id == wanted:
                self._tenant.set(connection.tenant_id)
                self._log.info("Selected tenant %s (%s)", connection.tenant_id, connection.tenant_name)
                return connection
        raise NotFoundError(entity="Connection", url=custom_url(Api.CONNECTIONS), status_code=200)

    # ------------------------------------------------------------------ #
    # Requests                                                           #
    # ------------------------------------------------------------------ #
    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    async def execute(
        self,
        method: str,
        url: str,
        *,
        decode: Decoder[Any] | None = None,
        entity: str | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        content: bytes | None = None,
        content_type: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse[Any]:
        return await self._executor.execute(
            method,
            url,
            decode=decode,
            entity=entity,
            params=params,
            json=json,
            content=content,
            content_type=content_type,
            headers=headers,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> Session:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"Session(id={self.session_id}, client={mask_sensitive(self.credential.client_id, 6)}, "
            f"tenant={self.tenant_id}, auto_refresh={self.auto_refresh}, state={self.auth_state().value})"
        )
