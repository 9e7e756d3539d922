"""In-process fake of the identity server and the API.

``FakeXero`` is a Starlette app serving both the identity token endpoint
(``/connect/token``) and every API path.  Sessions talk to it through
``httpx.ASGITransport`` so the production URLs stay untouched: the transport
routes every host to the app and only the path matters.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

import anyio
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

CLIENT_ID = "client-id-123456"
CLIENT_SECRET = "client-secret-abcdef"
TENANT_ID = "6b1e1c3a-8f54-4a7e-9d3c-2c1f0b7e9a10"


# --------------------------------------------------------------------------- #
# Fake provider                                                               #
# --------------------------------------------------------------------------- #
@dataclass
class RecordedCall:
    method: str
    path: str
    headers: dict[str, str]
    query: dict[str, list[str]]
    body: bytes

    @property
    def bearer(self) -> str | None:
        auth = self.headers.get("authorization", "")
        return auth[len("Bearer ") :] if auth.startswith("Bearer ") else None

    def json(self) -> Any:
        return json.loads(self.body)


@dataclass
class FakeXero:
    """Fake identity server + API with scripted responses."""

    expires_in: int = 1800
    token_delay: float = 0.0
    token_calls: list[RecordedCall] = field(default_factory=list)
    api_calls: list[RecordedCall] = field(default_factory=list)
    valid_tokens: set[str] = field(default_factory=set)
    token_failures: list[tuple[int, Any]] = field(default_factory=list)
    responses: dict[tuple[str, str], list[tuple[int, Any, dict[str, str]]]] = field(default_factory=dict)
    reject_all: bool = False

    def __post_init__(self) -> None:
        self.app = Starlette(
            routes=[
                Route("/connect/token", self._token, methods=["POST"]),
                Route("/{path:path}", self._api, methods=["GET", "PUT", "POST", "DELETE"]),
            ]
        )

    # ----- scripting ---------------------------------------------------- #
    def respond(
        self,
        method: str,
        path: str,
        status: int = 200,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Queue a response; the last queued one is repeated once the queue drains."""
        self.responses.setdefault((method.upper(), path), []).append((status, body, headers or {}))

    def fail_token(self, status: int = 400, body: Any = None) -> None:
        self.token_failures.append((status, body if body is not None else {"error": "invalid_grant"}))

    def revoke(self, access_token: str) -> None:
        self.valid_tokens.discard(access_token)

    def grants(self) -> list[str]:
        return [parse_qs(c.body.decode())["grant_type"][0] for c in self.token_calls]

    @property
    def issued(self) -> list[str]:
        return [f"at-{n}" for n in range(1, len(self.token_calls) + 1)]

    # ----- handlers ----------------------------------------------------- #
    @staticmethod
    async def _record(request: Request) -> RecordedCall:
        return RecordedCall(
            method=request.method,
            path=request.url.path,
            headers={k.lower(): v for k, v in request.headers.items()},
            query=parse_qs(request.url.query),
            body=await request.body(),
        )

    async def _token(self, request: Request) -> Response:
        call = await self._record(request)
        self.token_calls.append(call)
        if self.token_delay:
            await anyio.sleep(self.token_delay)
        if self.token_failures:
            status, body = self.token_failures.pop(0)
            if isinstance(body, str):
                return Response(body, status_code=status)
            return JSONResponse(body, status_code=status)

        form = parse_qs(call.body.decode())
        n = len(self.token_calls)
        access_token = f"at-{n}"
        self.valid_tokens.add(access_token)
        payload: dict[str, Any] = {
            "access_token": access_token,
            "expires_in": self.expires_in,
            "token_type": "Bearer",
        }
        if "scope" in form:
            payload["scope"] = form["scope"][0]
        if form["grant_type"][0] != "client_credentials":
            payload["refresh_token"] = f"rt-{n}"
        return JSONResponse(payload)

    async def _api(self, request: Request) -> Response:
        call = await self._record(request)
        self.api_calls.append(call)
        if self.reject_all or call.bearer not in self.valid_tokens:
            return JSONResponse(
                {
                    "Title": "Unauthorized",
                    "Status": 401,
                    "Detail": "TokenExpired: token expired",
                    "Type": None,
                    "Instance": "8c1d2a4e",
                },
                status_code=401,
            )
        queue = self.responses.get((call.method, call.path))
        if not queue:
            return JSONResponse({"Message": "no scripted response"}, status_code=404)
        status, body, headers = queue.pop(0) if len(queue) > 1 else queue[0]
        if body is None:
            return Response(status_code=status, headers=headers)
        if isinstance(body, (bytes, str)):
            return Response(body, status_code=status, headers=headers)
        return JSONResponse(body, status_code=status, headers=headers)


