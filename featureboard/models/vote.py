from datetime import datetime

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from featureboard.core.db import Base


class Vote(Base):
    __tablename__ = "votes"

    # Composite primary key: at most one vote per (idea, user)
    idea_id = Column(String(36), ForeignKey("ideas.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), primary_key=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    idea = relationship("Idea", back_populates="votes")
