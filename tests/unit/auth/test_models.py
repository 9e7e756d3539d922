"""Unit tests for Credential and TokenState."""

from __future__ import annotations

import pytest

from xero_client.auth.clock import ManualClock
from xero_client.auth.models import Credential, TokenState
from xero_client.errors import AuthDecodeError


def test_credential_repr_hides_secret() -> None:
    cred = Credential("cid", "super-secret")
    assert "super-secret" not in repr(cred)
    assert cred.is_confidential
    assert not Credential("cid").is_confidential


def test_credential_requires_client_id() -> None:
    with pytest.raises(ValueError):
        Credential("")


def test_credential_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XERO_CLIENT_ID", "env-id")
    monkeypatch.delenv("XERO_CLIENT_SECRET", raising=False)
    cred = Credential.from_env()
    assert cred.client_id == "env-id"
    assert cred.client_secret is None

    monkeypatch.delenv("XERO_CLIENT_ID")
    with pytest.raises(ValueError):
        Credential.from_env()


def test_from_token_response_computes_expiry() -> None:
    clock = ManualClock(1_000.0)
    token = TokenState.from_token_response(
        {"access_token": "at", "expires_in": 1800, "token_type": "Bearer", "refresh_token": "rt"},
        clock=clock,
    )
    assert token.obtained_at == 1_000.0
    assert token.expires_at == 2_800.0
    assert token.ttl == 1800
    assert token.seconds_remaining(2_000.0) == 800
    assert token.refresh_token == "rt"
    assert "access_token" not in repr(token)
    assert "'rt'" not in repr(token)


def test_from_token_response_keeps_previous_refresh_token() -> None:
    token = TokenState.from_token_response(
        {"access_token": "at", "expires_in": 60},
        clock=ManualClock(0),
        previous_refresh_token="old-rt",
    )
    assert token.refresh_token == "old-rt"


@pytest.mark.parametrize(
    "payload",
    [
        {"expires_in": 1800},
        {"access_token": "at"},
        {"access_token": "at", "expires_in": "soon"},
        {"access_token": "at", "expires_in": 1800, "token_type": "mac"},
        ["not", "an", "object"],
    ],
)
def test_from_token_response_rejects_malformed(payload) -> None:
    with pytest.raises(AuthDecodeError):
        TokenState.from_token_response(payload, clock=ManualClock(0))


def test_invalidate_keeps_tokens_and_moves_expiry_to_past() -> None:
    token = TokenState(access_token="at", expires_at=5_000.0, obtained_at=3_200.0, refresh_token="rt")
    dead = token.invalidate()
    assert dead.invalidated
    assert dead.expires_at == 0.0
    assert dead.refresh_token == "rt"
    assert dead.access_token == "at"
    assert not token.invalidated
