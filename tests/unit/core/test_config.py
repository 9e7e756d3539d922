"""Unit tests for environment driven configuration."""

from __future__ import annotations

import pytest

from xero_client.auth.oauth import XERO_TOKEN_URL
from xero_client.config import ClientConfig

_VARS = (
    "CLIENT_ID",
    "CLIENT_SECRET",
    "TENANT_ID",
    "SCOPES",
    "AUTO_REFRESH",
    "TOKEN_SKEW_SECONDS",
    "TIMEOUT_SECONDS",
    "TOKEN_URL",
    "AUTHORIZE_URL",
    "CLIENT_AUTH_METHOD",
    "REDIRECT_URI",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(f"XERO_{name}", raising=False)
        monkeypatch.delenv(f"ACME_{name}", raising=False)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XERO_CLIENT_ID", "cid")
    config = ClientConfig.from_env()
    assert config.credential.client_id == "cid"
    assert not config.credential.is_confidential
    assert config.auto_refresh is False
    assert config.token_skew_seconds == 60
    assert config.timeout_seconds == 30
    assert config.token_url == XERO_TOKEN_URL
    assert config.client_auth_method == "basic"
    assert config.tenant_id is None


@pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("ON", True), ("no", False), ("", False)])
def test_auto_refresh_truthy(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("XERO_CLIENT_ID", "cid")
    monkeypatch.setenv("XERO_AUTO_REFRESH", raw)
    assert ClientConfig.from_env().auto_refresh is expected


def test_custom_prefix_and_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ACME_CLIENT_ID", "cid")
    monkeypatch.setenv("ACME_CLIENT_SECRET", "secret")
    monkeypatch.setenv("ACME_SCOPES", "accounting.transactions offline_access")
    monkeypatch.setenv("ACME_TOKEN_SKEW_SECONDS", "120")
    monkeypatch.setenv("ACME_TIMEOUT_SECONDS", "5.5")
    monkeypatch.setenv("ACME_CLIENT_AUTH_METHOD", "BODY")
    monkeypatch.setenv("ACME_TOKEN_URL", "http://localhost:8080/token")

    config = ClientConfig.from_env("ACME_")

    assert config.credential.is_confidential
    assert config.scopes == "accounting.transactions offline_access"
    assert config.token_skew_seconds == 120
    assert config.timeout_seconds == 5.5
    assert config.client_auth_method == "body"
    assert config.token_url == "http://localhost:8080/token"
    assert "secret" not in repr(config)


@pytest.mark.parametrize(
    "name,value",
    [
        ("TOKEN_SKEW_SECONDS", "sixty"),
        ("TIMEOUT_SECONDS", "-1"),
        ("CLIENT_AUTH_METHOD", "jwt"),
    ],
)
def test_malformed_values_raise(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv("XERO_CLIENT_ID", "cid")
    monkeypatch.setenv(f"XERO_{name}", value)
    with pytest.raises(ValueError):
        ClientConfig.from_env()


def test_missing_client_id_raises() -> None:
    with pytest.raises(ValueError):
        ClientConfig.from_env()
