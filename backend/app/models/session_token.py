# app/models/session_token.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.base import Base
from app.models.user import utcnow


class SessionToken(Base):
    """
    One row per live bearer token. A token is honored only while its row exists,
    which is what makes logout take effect before the JWT itself expires.
    """

    __tablename__ = "session_tokens"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Store ONLY a hash of the token (never the raw bearer string)
    token_hash = Column(String(255), unique=True, index=True, nullable=False)

    # Copied from the token's `exp` claim so stale rows can be purged
    expires_at = Column(DateTime(timezone=True), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="sessions")
