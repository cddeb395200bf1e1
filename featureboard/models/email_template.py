from sqlalchemy import Column, Text, String, DateTime
from featureboard.core.db import Base
from datetime import datetime
import uuid


class EmailTemplate(Base):
    __tablename__ = "email_templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    template_key = Column(String(50), unique=True, nullable=False)
    subject = Column(Text, nullable=False)
    html = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


DEFAULT_TEMPLATES = {
    "verify_email": {
        "subject": "Verify your email address",
        "html": (
            "<p>Hi {{ first_name }} {{ last_name }},</p>"
            "<p>Please confirm your email address to finish creating your account.</p>"
            "<p><a href=\"{{ verification_link }}\">Verify email</a></p>"
            "<p>This link expires in {{ expires_hours }} hours.</p>"
        ),
    },
    "new_idea_submitted": {
        "subject": "New Idea Submitted: {{ title }}",
        "html": (
            "<h2>New Idea Submitted</h2>"
            "<p><strong>Author:</strong> {{ author_name }}</p>"
            "<p><strong>Title:</strong> {{ title }}</p>"
            "<p><strong>Description:</strong></p>"
            "<p>{{ description | e | replace('\\n', '<br>') }}</p>"
            "<p><a href=\"{{ idea_link }}\">View Idea</a></p>"
        ),
    },
}
