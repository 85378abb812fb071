from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from app.core.base import Base
from app.models.user import new_id, utcnow

TASK_PRIORITIES = ("low", "medium", "high")
DEFAULT_PRIORITY = "medium"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)

    # ownership; fixed at creation
    owner_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    description = Column(Text, nullable=False)
    completed = Column(Boolean, nullable=False, default=False, server_default="false")
    priority = Column(String(16), nullable=False, default=DEFAULT_PRIORITY, server_default=DEFAULT_PRIORITY)
    due_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    user = relationship("User", back_populates="tasks")
