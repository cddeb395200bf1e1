import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Text, DateTime, Integer, Boolean
from sqlalchemy.orm import relationship

from featureboard.core.db import Base


class IdeaStatus(str, enum.Enum):
    PRIVATE = "private"
    NEEDS_REVIEW = "needs_review"
    UNDER_CONSIDERATION = "under_consideration"
    PLANNED = "planned"
    IN_DEVELOPMENT = "in_development"
    COMPLETED = "completed"
    WONT_IMPLEMENT = "wont_implement"


TERMINAL_STATUSES = {IdeaStatus.COMPLETED.value, IdeaStatus.WONT_IMPLEMENT.value}


class Idea(Base):
    __tablename__ = "ideas"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)

    # Denormalized so ideas survive their author's account
    author_id = Column(String(36), index=True, nullable=False)
    author_name = Column(String(255), nullable=True)

    status = Column(String(32), index=True, nullable=False, default=IdeaStatus.PRIVATE.value)
    is_public = Column(Boolean, index=True, nullable=False, default=False)
    is_pinned = Column(Boolean, nullable=False, default=False)

    vote_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, index=True, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_status_update = Column(DateTime, default=datetime.utcnow, nullable=False)

    votes = relationship("Vote", back_populates="idea", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="idea", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Idea id={self.id} title={self.title!r} status={self.status}>"
