"""PKCE (Proof Key for Code Exchange) helpers.

Xero lets public clients (no client secret, e.g. desktop or mobile apps)
use the authorization-code grant only together with PKCE.  The *code
verifier* is generated before redirecting the user; the S256 *code
challenge* goes on the authorize URL and the verifier is sent with the code
exchange.

Verifiers are never logged.
"""

from __future__ import annotations

import base64
import secrets
import string
from hashlib import sha256
from typing import Final

# RFC-7636 section 4.1 bounds the verifier length to 43..128 characters.
_MIN_LEN: Final[int] = 43
_MAX_LEN: Final[int] = 128
_DEFAULT_LEN: Final[int] = 64
_UNRESERVED: Final[str] = string.ascii_letters + string.digits + "-._~"


def generate_code_verifier(length: int = _DEFAULT_LEN) -> str:
    """Return a high-entropy verifier made of RFC-7636 unreserved characters."""
    if not _MIN_LEN <= length <= _MAX_LEN:
        raise ValueError(f"code verifier length must be {_MIN_LEN}-{_MAX_LEN} characters")
    return "".join(secrets.choice(_UNRESERVED) for _ in range(length))


def code_challenge_s256(verifier: str) -> str:
    """Base64url (unpadded) SHA-256 of *verifier*."""
    digest = sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_state() -> str:
    """Opaque anti-CSRF value for the authorize request."""
    return secrets.token_urlsafe(24)
