# app/core/security.py
from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import InvalidTokenError

SESSION_TOKEN_PURPOSE = "session"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
)


# -------------------------
# Password hashing
# -------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Unrecognized / corrupted hash
        return False


# -------------------------
# Session token helpers
# -------------------------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _require_jwt_secret() -> None:
    # Auth is always on -> JWT_SECRET must always exist
    if not settings.JWT_SECRET or not settings.JWT_SECRET.strip():
        raise RuntimeError("JWT_SECRET must be set (auth is required).")


def session_token_lifetime() -> timedelta:
    return timedelta(days=int(getattr(settings, "SESSION_TOKEN_EXPIRE_DAYS", 7)))


def issue_session_token(user_id: str) -> str:
    """
    Bearer token used for API auth: Authorization: Bearer <token>

    Pure computation. The caller must record the token in the session registry
    before it will be accepted by the API.
    """
    _require_jwt_secret()

    now = _now_utc()
    exp = now + session_token_lifetime()

    payload = {
        "sub": str(user_id),
        "purpose": SESSION_TOKEN_PURPOSE,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        # Keeps two tokens minted for the same user in the same second distinct.
        "jti": secrets.token_urlsafe(16),
    }

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def session_token_claims(token: str) -> dict[str, Any]:
    """
    Verify signature, expiry and purpose and return the claims.

    Raises InvalidTokenError for every failure; callers should not try to tell
    the reasons apart.
    """
    _require_jwt_secret()
    if not token or not isinstance(token, str):
        raise InvalidTokenError("Missing token")

    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise InvalidTokenError("Invalid or expired token") from exc

    if payload.get("purpose") != SESSION_TOKEN_PURPOSE:
        raise InvalidTokenError("Invalid token purpose")
    if not str(payload.get("sub") or "").strip():
        raise InvalidTokenError("Token missing 'sub'")
    if not isinstance(payload.get("exp"), (int, float)):
        raise InvalidTokenError("Token missing 'exp'")

    return payload


def verify_session_token(token: str) -> str:
    """Returns the user id embedded in a valid token."""
    return str(session_token_claims(token)["sub"]).strip()


def hash_session_token(raw_token: str) -> str:
    """
    Registry key for a token. The raw token is never stored.
    HMAC keyed by JWT_SECRET so a leaked table can't be replayed or brute-forced.
    """
    secret = (settings.JWT_SECRET or "").encode("utf-8")
    if not secret:
        raise RuntimeError("JWT_SECRET must be set to hash session tokens.")
    return hmac.new(secret, raw_token.encode("utf-8"), hashlib.sha256).hexdigest()
