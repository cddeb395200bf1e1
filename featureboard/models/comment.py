from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from featureboard.core.db import Base


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    idea_id = Column(String(36), ForeignKey("ideas.id", ondelete="CASCADE"), index=True, nullable=False)
    # Replies point at a top-level comment of the same idea
    parent_id = Column(String(36), nullable=True)

    content = Column(Text, nullable=False)
    author_id = Column(String(36), nullable=False)
    author_name = Column(String(255), nullable=True)

    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    idea = relationship("Idea", back_populates="comments")
