# app/dependencies/auth.py
from __future__ import annotations

import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.auth.identity import CallerIdentity
from app.core.database import get_db
from app.core.errors import AuthenticationError, InvalidTokenError
from app.core.security import verify_session_token
from app.models.user import User
from app.services.sessions import is_session_active
from app.services.users import get_user

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def authenticate_token(db: Session, token: str | None) -> CallerIdentity:
    """
    Validates, from scratch on every call:
      - a token is present
      - signature + exp
      - the token is still in the session registry (logout takes effect here)
      - the user still exists
    Every failure raises the same AuthenticationError.
    """
    if not token:
        raise AuthenticationError()

    try:
        user_id = verify_session_token(token)
    except InvalidTokenError:
        raise AuthenticationError()

    if not is_session_active(db, user_id, token):
        raise AuthenticationError()

    user = get_user(db, user_id)
    if not user:
        logger.info("Rejected token for missing user id=%s", user_id)
        raise AuthenticationError()

    return CallerIdentity(user_id=user.id, token=token, user=user)


def get_current_identity(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CallerIdentity:
    if not creds or creds.scheme.lower() != "bearer":
        raise AuthenticationError()
    return authenticate_token(db, creds.credentials)


def get_current_user(identity: CallerIdentity = Depends(get_current_identity)) -> User:
    return identity.user
