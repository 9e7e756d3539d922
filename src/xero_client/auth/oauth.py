"""Grant exchanges against the provider's token endpoint.

``TokenAcquirer`` performs the three supported exchanges:

* client-credentials (confidential clients only, no refresh token issued)
* authorization-code (optionally with a PKCE verifier, issues a refresh token)
* refresh-token (the provider may rotate the refresh token)

All three go through :meth:`TokenAcquirer._post_token_request`: a form-encoded
POST without any bearer header.  The client credential travels as HTTP Basic
auth (provider default) or as body fields, depending on ``client_auth``.

**No secret is ever logged.**  Tokens only appear masked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Final, Literal
from urllib.parse import urlencode

import httpx

from xero_client.auth.clock import Clock, default_clock
from xero_client.auth.models import Credential, TokenState
from xero_client.auth.pkce import code_challenge_s256, generate_code_verifier, generate_state
from xero_client.auth.scopes import ScopeLike, scope_string
from xero_client.errors import AuthDecodeError, AuthNetworkError, AuthProviderError
from xero_client.log_utils import mask_sensitive

_LOG = logging.getLogger("xero-client.auth.oauth")

XERO_AUTHORIZE_URL: Final[str] = "https://login.xero.com/identity/connect/authorize"
XERO_TOKEN_URL: Final[str] = "https://identity.xero.com/connect/token"

ClientAuthMethod = Literal["basic", "body"]


@dataclass(frozen=True, slots=True)
class AuthorizeRequest:
    """Everything the caller must keep between redirect and callback."""

    url: str
    state: str
    code_verifier: str | None = field(default=None, repr=False)


class TokenAcquirer:
    """Performs OAuth2 grant exchanges and returns :class:`TokenState` values."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        token_url: str = XERO_TOKEN_URL,
        authorize_url: str = XERO_AUTHORIZE_URL,
        client_auth: ClientAuthMethod = "basic",
        clock: Clock = default_clock,
    ) -> None:
        if client_auth not in ("basic", "body"):
            raise ValueError(f"unsupported client_auth {client_auth!r}")
        self._http = http
        self.token_url = token_url
        self.authorize_url = authorize_url
        self.client_auth = client_auth
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Grants                                                             #
    # ------------------------------------------------------------------ #
    async def exchange_client_credentials(
        self,
        cred: Credential,
        scopes: ScopeLike | None = None,
    ) -> TokenState:
        """Client-credentials grant.

        Omitting *scopes* lets the provider apply the app's default scopes.

        Raises
        ------
        ValueError
            If *cred* has no client secret (public clients cannot use this grant).
        """
        if not cred.is_confidential:
            raise ValueError("client-credentials grant requires a client secret")

        form = {"grant_type": "client_credentials"}
        scope = scope_string(scopes) if scopes else ""
        if scope:
            form["scope"] = scope
        token = await self._post_token_request(cred, form)
        _LOG.info(
            "Obtained client-credentials token for client=%s (expires in %ss)",
            mask_sensitive(cred.client_id, 6),
            int(token.ttl),
        )
        return token

    async def exchange_authorization_code(
        self,
        cred: Credential,
        redirect_uri: str,
        code: str,
        *,
        code_verifier: str | None = None,
    ) -> TokenState:
        """Authorization-code grant; the result carries a refresh token."""
        if not cred.is_confidential and not code_verifier:
            raise ValueError("public clients must supply the PKCE code_verifier")

        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }
        if code_verifier:
            form["code_verifier"] = code_verifier
        token = await self._post_token_request(cred, form)
        _LOG.info(
            "Exchanged authorization code for client=%s (expires in %ss, refresh=%s)",
            mask_sensitive(cred.client_id, 6),
            int(token.ttl),
            token.refresh_token is not None,
        )
        return token

    async def exchange_refresh_token(self, cred: Credential, refresh_token: str) -> TokenState:
        """Refresh-token grant.

        The provider rotates refresh tokens; the returned state holds the new
        one when present and falls back to *refresh_token* otherwise.
        """
        if not refresh_token:
            raise ValueError("refresh_token must not be empty")
        form = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        token = await self._post_token_request(cred, form, previous_refresh_token=refresh_token)
        _LOG.info(
            "Refreshed access token for client=%s (expires in %ss, rotated=%s)",
            mask_sensitive(cred.client_id, 6),
            int(token.ttl),
            token.refresh_token != refresh_token,
        )
        return token

    # ------------------------------------------------------------------ #
    # Authorize URL (browser step is the caller's job)                   #
    # ------------------------------------------------------------------ #
    def build_authorize_url(
        self,
        cred: Credential,
        redirect_uri: str,
        scopes: ScopeLike,
        *,
        state: str | None = None,
        code_verifier: str | None = None,
    ) -> AuthorizeRequest:
        """Return the authorize URL plus the state / PKCE verifier to keep.

        Public credentials always get a PKCE S256 challenge; confidential ones
        only when *code_verifier* is passed explicitly.
        """
        scope = scope_string(scopes)
        if not scope:
            raise ValueError("at least one scope is required")
        state = state or generate_state()
        if code_verifier is None and not cred.is_confidential:
            code_verifier = generate_code_verifier()

        query: dict[str, str] = {
            "response_type": "code",
            "client_id": cred.client_id,
            "redirect_uri": redirect_uri,
            "scope": scope,
            "state": state,
        }
        if code_verifier:
            query["code_challenge"] = code_challenge_s256(code_verifier)
            query["code_challenge_method"] = "S256"

        url = f"{self.authorize_url}?{urlencode(query)}"
        _LOG.debug("Built authorize URL state=%s pkce=%s", mask_sensitive(state, 6), bool(code_verifier))
        return AuthorizeRequest(url=url, state=state, code_verifier=code_verifier)

    # ---------------- internal helpers --------------------------------- #
    async def _post_token_request(
        self,
        cred: Credential,
        form: dict[str, str],
        *,
        previous_refresh_token: str | None = None,
    ) -> TokenState:
        body = dict(form)
        auth: httpx.BasicAuth | None = None
        if cred.is_confidential and self.client_auth == "basic":
            auth = httpx.BasicAuth(cred.client_id, cred.client_secret or "")
        else:
            body["client_id"] = cred.client_id
            if cred.is_confidential:
                body["client_secret"] = cred.client_secret or ""  # noqa: S105

        grant = form["grant_type"]
        try:
            resp = await self._http.post(
                self.token_url,
                data=body,
                auth=auth,
                headers={"Accept": "application/json"},
            )
        except httpx.TransportError as exc:
            _LOG.warning("Token request failed grant=%s: %s", grant, exc)
            raise AuthNetworkError(f"Token request failed: {exc}") from exc

        if not resp.is_success:
            error, description = _oauth_error_fields(resp)
            _LOG.warning(
                "Token endpoint rejected grant=%s status=%s error=%s",
                grant,
                resp.status_code,
                error,
            )
            raise AuthProviderError(
                status_code=resp.status_code,
                error=error,
                error_description=description,
            )

        try:
            payload = resp.json()
        except ValueError:
            raise AuthDecodeError("Token response is not valid JSON") from None
        return TokenState.from_token_response(
            payload,
            clock=self._clock,
            previous_refresh_token=previous_refresh_token,
        )


def _oauth_error_fields(resp: httpx.Response) -> tuple[str | None, str | None]:
    """Return ``(error, error_description)`` from an OAuth error body."""
    try:
        data = resp.json()
    except ValueError:
        text = resp.text.strip()
        return None, text[:200] or None
    if not isinstance(data, dict):
        return None, None
    return data.get("error"), data.get("error_description")
