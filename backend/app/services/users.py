# app/services/users.py
"""
Credential store.

Responsibilities:
- Registering users (validation, case-insensitive email uniqueness, hashing)
- Authenticating email/password pairs
- Applying profile updates from the typed ProfileUpdate structure
- Producing the public (redacted) view of a user
"""
from __future__ import annotations

import logging
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError, ConflictError, ValidationError
from app.core.password_policy import ensure_valid_password
from app.core.security import hash_password, verify_password
from app.models.user import User
from app.schemas.user import ProfileUpdate, UserOut

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Unable to login"


def get_user(db: Session, user_id: str) -> Optional[User]:
    """Look up a user by id."""
    if not user_id:
        return None
    return db.query(User).filter(User.id == str(user_id)).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Look up a user by email address (case-insensitive)."""
    return db.query(User).filter(User.email == (email or "").strip().lower()).first()


def normalize_email(email: str | None) -> str:
    value = (email or "").strip().lower()
    if "@" not in value:
        raise ValidationError("Email is invalid")
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Email is invalid")
    return value


def normalize_name(name: str | None) -> str:
    clean = (name or "").strip()
    if not clean:
        raise ValidationError("Name is required")
    return clean


def _ensure_email_available(db: Session, email: str, *, exclude_user_id: str | None = None) -> None:
    qry = db.query(User.id).filter(User.email == email)
    if exclude_user_id is not None:
        qry = qry.filter(User.id != exclude_user_id)
    if qry.first() is not None:
        raise ConflictError("Email already registered")


def _commit_user(db: Session, user: User) -> None:
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration/update on the unique email index.
        db.rollback()
        raise ConflictError("Email already registered")
    db.refresh(user)


def register_user(db: Session, *, name: str, email: str, password: str) -> User:
    clean_name = normalize_name(name)
    clean_email = normalize_email(email)
    ensure_valid_password(password)

    _ensure_email_available(db, clean_email)

    user = User(
        name=clean_name,
        email=clean_email,
        password_hash=hash_password(password),
    )
    db.add(user)
    _commit_user(db, user)

    logger.info("Registered user id=%s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Returns the user for a matching email/password pair.

    A missing account and a wrong password fail identically.
    """
    user = get_user_by_email(db, email)
    if not user:
        raise AuthenticationError(LOGIN_FAILED_MESSAGE)

    if not verify_password(password, user.password_hash):
        logger.info("Failed login for user id=%s", user.id)
        raise AuthenticationError(LOGIN_FAILED_MESSAGE)

    return user


def update_profile(db: Session, user: User, payload: ProfileUpdate) -> User:
    data = payload.model_dump(exclude_unset=True)
    if not data:
        return user

    for key, value in data.items():
        if value is None:
            raise ValidationError(f"{key} cannot be null")

    # Validate everything before touching the row.
    changes: dict[str, str] = {}
    if "name" in data:
        changes["name"] = normalize_name(data["name"])

    if "email" in data:
        email = normalize_email(data["email"])
        if email != user.email:
            _ensure_email_available(db, email, exclude_user_id=user.id)
        changes["email"] = email

    if "password" in data:
        ensure_valid_password(data["password"])
        changes["password_hash"] = hash_password(data["password"])

    for key, value in changes.items():
        setattr(user, key, value)

    db.add(user)
    _commit_user(db, user)

    logger.info("Updated profile for user id=%s fields=%s", user.id, sorted(data.keys()))
    return user


def to_public_view(user: User) -> UserOut:
    return UserOut.model_validate(user)
