# app/services/sessions.py
"""
Session registry: the server-side allow-list of bearer tokens.

Each live token is its own row, so adding or removing one is a single
INSERT/DELETE. Concurrent logins and logouts for the same user never
overwrite each other.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.core.security import hash_session_token, session_token_claims
from app.models.session_token import SessionToken

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _is_expired(expires_at: datetime | None, now: datetime) -> bool:
    if expires_at is None:
        return True
    # SQLite may round-trip tz-aware datetimes as naive. Compare consistently.
    if getattr(expires_at, "tzinfo", None) is None and now.tzinfo is not None:
        now = now.replace(tzinfo=None)
    return expires_at <= now


def _purge_expired_for_user(db: Session, user_id: str, now: datetime) -> int:
    rows = db.query(SessionToken).filter(SessionToken.user_id == user_id).all()
    stale = [r.id for r in rows if _is_expired(r.expires_at, now)]
    if not stale:
        return 0
    return (
        db.query(SessionToken)
        .filter(SessionToken.id.in_(stale))
        .delete(synchronize_session=False)
    )


def record_session(db: Session, user_id: str, token: str) -> SessionToken:
    """
    Adds a freshly issued token to the user's active set.
    """
    claims = session_token_claims(token)
    expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)
    now = _now_utc()

    purged = _purge_expired_for_user(db, user_id, now)

    row = SessionToken(
        user_id=user_id,
        token_hash=hash_session_token(token),
        expires_at=expires_at,
    )
    db.add(row)
    db.commit()

    if purged:
        logger.info("Purged %s expired sessions for user id=%s", purged, user_id)
    return row


def is_session_active(db: Session, user_id: str, token: str) -> bool:
    row = (
        db.query(SessionToken)
        .filter(
            SessionToken.user_id == user_id,
            SessionToken.token_hash == hash_session_token(token),
        )
        .first()
    )
    if not row:
        return False
    return not _is_expired(row.expires_at, _now_utc())


def revoke_session(db: Session, user_id: str, token: str) -> bool:
    """Single-device logout. Returns True if a row was removed."""
    deleted = (
        db.query(SessionToken)
        .filter(
            SessionToken.user_id == user_id,
            SessionToken.token_hash == hash_session_token(token),
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    return bool(deleted)


def revoke_all_sessions(db: Session, user_id: str) -> int:
    """Logout from every device."""
    deleted = (
        db.query(SessionToken)
        .filter(SessionToken.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("Revoked %s sessions for user id=%s", deleted, user_id)
    return deleted


def drop_all_sessions(db: Session, user_id: str) -> int:
    """
    Removes the user's registry entry for account deletion.
    Does not commit; the caller owns the transaction.
    """
    return (
        db.query(SessionToken)
        .filter(SessionToken.user_id == user_id)
        .delete(synchronize_session=False)
    )


def count_active_sessions(db: Session, user_id: str) -> int:
    now = _now_utc()
    rows = db.query(SessionToken).filter(SessionToken.user_id == user_id).all()
    return sum(1 for r in rows if not _is_expired(r.expires_at, now))


def purge_expired_sessions(db: Session) -> int:
    """Deletes expired rows for every user."""
    now = _now_utc()
    rows = db.query(SessionToken.id, SessionToken.expires_at).all()
    stale = [row_id for row_id, expires_at in rows if _is_expired(expires_at, now)]
    if not stale:
        return 0
    deleted = (
        db.query(SessionToken)
        .filter(SessionToken.id.in_(stale))
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("Purged %s expired sessions", deleted)
    return deleted
