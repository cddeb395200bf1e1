"""
Email verification tokens and the registration flow built on them.

A token is issued for an email address, read back by the verify-email page,
and consumed once the account exists. Consumption is a conditional update so
two concurrent consumers cannot both succeed.
"""

import logging
from datetime import datetime, timedelta
from uuid import uuid4

from sqlalchemy import update
from sqlalchemy.orm import Session

from featureboard.core.config import settings
from featureboard.core.errors import (
    AlreadyUsed,
    Expired,
    NotFound,
    UpstreamError,
    ValidationError,
)
from featureboard.models.verification import EmailVerificationToken
from featureboard.schemas.verification import VerificationRequest
from featureboard.services.email import send_verification_email
from featureboard.services.identity import create_account

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 8


def issue_token(payload: VerificationRequest, db: Session) -> EmailVerificationToken:
    first_name = payload.first_name.strip()
    last_name = payload.last_name.strip()
    if not first_name or not last_name:
        raise ValidationError("First and last name are required")

    now = datetime.utcnow()
    record = EmailVerificationToken(
        token=str(uuid4()),
        email=payload.email.lower(),
        first_name=first_name,
        last_name=last_name,
        expires_at=now + timedelta(hours=settings.email_token_expires_hours),
        used=False,
        created_at=now
    )
    db.add(record)
    db.commit()
    logger.info(f"✨ Verification token issued for {record.email}")

    try:
        send_verification_email(record, db)
    except UpstreamError as e:
        logger.warning(f"⚠️ Verification email to {record.email} failed: {e}")

    return record


def redeem_token(token: str, db: Session) -> EmailVerificationToken:
    record = db.get(EmailVerificationToken, token)
    if not record:
        raise NotFound("Invalid verification token")
    if datetime.utcnow() > record.expires_at:
        raise Expired()
    if record.used:
        raise AlreadyUsed()
    return record


def consume_token(token: str, db: Session, commit: bool = True) -> None:
    redeem_token(token, db)

    result = db.execute(
        update(EmailVerificationToken)
        .where(EmailVerificationToken.token == token, EmailVerificationToken.used.is_(False))
        .values(used=True)
    )
    if result.rowcount == 0:
        db.rollback()
        raise AlreadyUsed()

    if commit:
        db.commit()
        logger.info("✅ Verification token consumed")


def register_with_token(token: str, password: str, db: Session):
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")

    record = redeem_token(token, db)
    try:
        user = create_account(record.email, password, record.first_name, record.last_name, db)
        # Only mark the token used once the account row exists
        consume_token(token, db, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"✅ Registered {user.email}")
    return user
