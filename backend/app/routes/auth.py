# app/routes/auth.py
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.auth.identity import CallerIdentity
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import AuthenticationError, InvalidCredentialsError
from app.core.rate_limit import maybe_limit, maybe_limit_api
from app.core.security import issue_session_token
from app.dependencies.auth import get_current_identity, get_current_user
from app.models.user import User
from app.schemas.auth import AuthOut, LoginIn, MessageOut, RegisterIn
from app.schemas.user import ProfileUpdate, UserOut
from app.services.accounts import delete_account
from app.services.sessions import (
    count_active_sessions,
    record_session,
    revoke_all_sessions,
    revoke_session,
)
from app.services.users import (
    LOGIN_FAILED_MESSAGE,
    authenticate,
    register_user,
    to_public_view,
    update_profile,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _start_session(db: Session, user: User) -> AuthOut:
    # Mint, then register; the token is useless until it is in the registry.
    token = issue_session_token(user.id)
    record_session(db, user.id, token)
    return AuthOut(user=to_public_view(user), token=token)


# -----------------------------
# Routes
# -----------------------------
@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
@maybe_limit(settings.AUTH_RATE_LIMIT)
def register(request: Request, payload: RegisterIn, db: Session = Depends(get_db)):  # noqa: ARG001
    user = register_user(db, name=payload.name, email=payload.email, password=payload.password)
    return _start_session(db, user)


@router.post("/login", response_model=AuthOut)
@maybe_limit(settings.AUTH_RATE_LIMIT)
def login(request: Request, payload: LoginIn, db: Session = Depends(get_db)):  # noqa: ARG001
    try:
        user = authenticate(db, payload.email, payload.password)
    except AuthenticationError:
        raise InvalidCredentialsError(LOGIN_FAILED_MESSAGE)

    logger.info("Login user id=%s", user.id)
    return _start_session(db, user)


@router.post("/logout", response_model=MessageOut)
@maybe_limit_api()
def logout(
    request: Request,  # noqa: ARG001
    identity: CallerIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Revoke only the token used for this request (this device).
    """
    revoke_session(db, identity.user_id, identity.token)
    logger.info(
        "Logout user id=%s remaining_sessions=%s",
        identity.user_id,
        count_active_sessions(db, identity.user_id),
    )
    return {"message": "Logged out successfully"}


@router.post("/logout-all", response_model=MessageOut)
@maybe_limit_api()
def logout_all(
    request: Request,  # noqa: ARG001
    identity: CallerIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    revoked = revoke_all_sessions(db, identity.user_id)
    logger.info("Logout-all user id=%s revoked=%s", identity.user_id, revoked)
    return {"message": "Logged out from all devices"}


@router.get("/me", response_model=UserOut)
@maybe_limit_api()
def get_me(request: Request, user: User = Depends(get_current_user)):  # noqa: ARG001
    return to_public_view(user)


@router.patch("/me", response_model=UserOut)
@maybe_limit_api()
def update_me(
    request: Request,  # noqa: ARG001
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return to_public_view(update_profile(db, user, payload))


@router.delete("/me", response_model=UserOut)
@maybe_limit_api()
def delete_me(
    request: Request,  # noqa: ARG001
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return delete_account(db, user)
