# app/models/user.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.orm import relationship

from app.core.base import Base


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)

    # Always stored lower-cased; uniqueness is therefore case-insensitive.
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    # Deletion goes through app.services.accounts.delete_account, which removes
    # children explicitly; passive_deletes keeps the ORM from nulling owner_id.
    tasks = relationship("Task", back_populates="user", passive_deletes=True)
    sessions = relationship("SessionToken", back_populates="user", passive_deletes=True)
