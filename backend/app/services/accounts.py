# app/services/accounts.py
"""
Account deletion cascade.

Order is fixed: the user's tasks, then the user row, then the session
registry. Everything runs in one transaction; every step is an idempotent
bulk delete, so re-running after an interruption finishes the job.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AccountDeletionError
from app.models.user import User
from app.schemas.user import UserOut
from app.services.sessions import drop_all_sessions
from app.services.tasks import delete_tasks_for_owner
from app.services.users import to_public_view

logger = logging.getLogger(__name__)


def delete_account(db: Session, user: User) -> UserOut:
    # Snapshot before the row disappears from the session.
    public = to_public_view(user)
    user_id = user.id

    try:
        tasks_deleted = delete_tasks_for_owner(db, user_id)
        users_deleted = (
            db.query(User)
            .filter(User.id == user_id)
            .delete(synchronize_session=False)
        )
        sessions_dropped = drop_all_sessions(db, user_id)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Account deletion failed for user id=%s", user_id)
        raise AccountDeletionError() from exc

    if user in db:
        db.expunge(user)

    logger.info(
        "Deleted account id=%s users=%s tasks=%s sessions=%s",
        user_id,
        users_deleted,
        tasks_deleted,
        sessions_dropped,
    )
    return public
