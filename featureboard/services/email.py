import logging
from datetime import datetime
from uuid import uuid4

import requests
from jinja2 import Template
from msal import ConfidentialClientApplication
from sqlalchemy.orm import Session
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from featureboard.core.config import settings
from featureboard.core.errors import UpstreamError
from featureboard.models.email_log import EmailLog
from featureboard.models.email_template import DEFAULT_TEMPLATES, EmailTemplate

GRAPH_URL = "https://graph.microsoft.com/v1.0"

logger = logging.getLogger(__name__)


# === Templates ===
def seed_default_templates(db: Session) -> int:
    existing = {row.template_key for row in db.query(EmailTemplate.template_key).all()}
    added = 0
    for key, template in DEFAULT_TEMPLATES.items():
        if key in existing:
            continue
        db.add(EmailTemplate(
            id=str(uuid4()),
            template_key=key,
            subject=template["subject"],
            html=template["html"],
            created_at=datetime.utcnow()
        ))
        added += 1
    if added:
        db.commit()
        logger.info(f"✉️ Seeded {added} default email template(s)")
    return added


# === Graph Transport ===
def _acquire_graph_token() -> str:
    app = ConfidentialClientApplication(
        client_id=settings.ms_client_id,
        client_credential=settings.ms_client_secret,
        authority=f"https://login.microsoftonline.com/{settings.ms_tenant_id}"
    )
    result = app.acquire_token_for_client(scopes=["https://graph.microsoft.com/.default"])
    if "access_token" not in result:
        raise UpstreamError("Microsoft Graph token acquisition failed")
    return result["access_token"]


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(requests.RequestException),
    reraise=True
)
def _deliver(access_token: str, payload: dict) -> requests.Response:
    return requests.post(
        f"{GRAPH_URL}/users/{settings.ms_sender_email}/sendMail",
        headers={
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json"
        },
        json=payload,
        timeout=10
    )


def _log(db: Session, user_id, to_email, subject, template_key, status, error=None):
    db.add(EmailLog(
        id=str(uuid4()),
        user_id=user_id,
        to_email=to_email,
        subject=subject,
        template_key=template_key,
        status=status,
        error=error,
        sent_at=datetime.utcnow()
    ))
    db.commit()


# === Reusable Email Sender ===
def send_template_email(
    to_email: str,
    name: str,
    template_key: str,
    db: Session,
    user_id: str = None,
    variables: dict = None
) -> bool:
    """
    Render a stored template and send it through Microsoft Graph.

    Returns False when mail is not configured (the attempt is logged as
    skipped). Raises UpstreamError on any failure after logging it.

    Callers must commit their own work before sending: the EmailLog row is
    committed on `db`, and a failure rolls `db` back before logging it.
    """
    variables = dict(variables or {})
    variables.update({"name": name, "email": to_email})

    try:
        # 1. Load Template
        template = db.query(EmailTemplate).filter(
            EmailTemplate.template_key == template_key
        ).first()
        if not template:
            raise UpstreamError(f"Email template '{template_key}' not found in DB")

        # 2. Render Template
        subject = Template(template.subject).render(**variables)
        body = Template(template.html).render(**variables)

        if not settings.email_configured:
            logger.info(f"📭 Mail not configured, skipping '{template_key}' to {to_email}")
            _log(db, user_id, to_email, subject, template_key, "skipped")
            return False

        # 3. Authenticate to Graph
        access_token = _acquire_graph_token()

        # 4. Send Email
        logger.info(f"📤 Sending '{template_key}' from {settings.ms_sender_email} to {to_email}")
        payload = {
            "message": {
                "subject": subject,
                "body": {"contentType": "HTML", "content": body},
                "toRecipients": [{"emailAddress": {"address": to_email}}]
            },
            "saveToSentItems": "false"
        }
        response = _deliver(access_token, payload)

        # 5. Log Email
        if not response.ok:
            raise UpstreamError(f"Graph sendMail failed: {response.status_code} {response.text}")
        _log(db, user_id, to_email, subject, template_key, "sent")

        logger.info(f"✅ Email sent: {template_key} → {to_email}")
        return True

    except Exception as e:
        logger.error(f"❌ Email error [{template_key}]: {str(e)}")
        db.rollback()
        try:
            _log(db, user_id, to_email, f"ERROR: {template_key}", template_key, "failed", error=str(e))
        except Exception as log_error:
            logger.critical(f"⚠️ Failed to write email log: {log_error}")

        if isinstance(e, UpstreamError):
            raise
        raise UpstreamError(f"Email delivery failed: {e}") from e


# === Public Shortcuts ===
def send_verification_email(record, db: Session) -> bool:
    return send_template_email(
        to_email=record.email,
        name=f"{record.first_name} {record.last_name}",
        template_key="verify_email",
        db=db,
        variables={
            "first_name": record.first_name,
            "last_name": record.last_name,
            "token": record.token,
            "verification_link": f"{settings.app_url}/verify-email?token={record.token}",
            "expires_hours": settings.email_token_expires_hours,
        }
    )


def notify_new_idea(idea, db: Session) -> bool:
    if not settings.notification_email:
        logger.info("📭 NOTIFICATION_EMAIL not set, skipping new idea notification")
        return False

    return send_template_email(
        to_email=settings.notification_email,
        name="Admin",
        template_key="new_idea_submitted",
        db=db,
        user_id=idea.author_id,
        variables={
            "title": idea.title,
            "description": idea.description,
            "author_name": idea.author_name,
            "idea_link": f"{settings.app_url}/ideas/{idea.id}",
        }
    )
