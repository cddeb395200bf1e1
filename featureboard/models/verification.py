# featureboard/models/verification.py

from sqlalchemy import Column, String, Text, Boolean, DateTime
from featureboard.core.db import Base
from datetime import datetime


class EmailVerificationToken(Base):
    __tablename__ = "email_verifications"

    token = Column(String(64), primary_key=True)
    email = Column(Text, nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
