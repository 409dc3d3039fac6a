"""
Bearer‑token authentication.

Tokens are JSON Web Tokens signed with HMAC‑SHA256 using
``settings.secret_key``.  The ``sub`` claim holds the user's email; the
``get_current_user`` dependency resolves it to a row of the ``users``
table so endpoints receive the caller's ``user_id``.  Issuing tokens to
end users is the identity service's job; ``create_access_token`` exists
for that service, for ``create_token.py`` and for tests.

Tokens listed in ``settings.worker_tokens`` identify notification
workers.  They are accepted only by ``require_worker``.
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(data: Dict[str, object], expires_delta: Optional[int] = None) -> str:
    """Create a signed token carrying ``data`` plus an ``exp`` claim.

    Parameters
    ----------
    data : dict
        Claims to embed, e.g. ``{"sub": "ada@example.com"}``.
    expires_delta : Optional[int]
        Lifetime in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.
    """
    claims = dict(data)
    claims["exp"] = int(time.time()) + (expires_delta or settings.access_token_expire_minutes * 60)
    header = {"alg": settings.algorithm, "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str) -> Optional[Dict[str, object]]:
    """Verify a token and return its claims, or ``None`` if it is invalid or expired."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(_sign(signing_input, settings.secret_key), actual_sig):
            return None
        claims = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        # binascii.Error and json.JSONDecodeError are both ValueErrors
        return None
    if not isinstance(claims, dict) or claims.get("exp") is None:
        return None
    if int(claims["exp"]) < int(time.time()):
        return None
    return claims


security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _worker_tokens() -> list[str]:
    return [t.strip() for t in settings.worker_tokens.split(",") if t.strip()]


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict[str, object]:
    """Dependency that resolves the caller to a user.

    Returns the token claims extended with ``user_id`` and ``name``.
    Raises HTTP 401 when the header is missing, the token is invalid or
    expired, or the user no longer exists.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Invalid or expired token")

    from meetup_planner_api.app.repositories.sqlite import SQLiteUnitOfWork

    with SQLiteUnitOfWork() as uow:
        user = uow.users.find_by_email(str(payload.get("sub")))
    if user is None:
        raise _unauthorized("User no longer exists")
    payload["user_id"] = user.id
    payload["name"] = user.name
    return payload


def require_worker(credentials: HTTPAuthorizationCredentials = Depends(security)) -> str:
    """Dependency admitting only callers that present a worker token."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    token = credentials.credentials
    if not any(hmac.compare_digest(token, known) for known in _worker_tokens()):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Worker token required")
    return token
