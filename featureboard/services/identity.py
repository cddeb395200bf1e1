import logging
from datetime import datetime, timedelta
from uuid import uuid4

import bcrypt
from jose import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from featureboard.core.config import settings
from featureboard.core.errors import AuthError, ValidationError
from featureboard.models.user import ROLE_CLIENT, ROLES, User

logger = logging.getLogger(__name__)


# === Hashing Utilities ===
def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


# === Token Utilities ===
def create_jwt_token(data: dict, expires_in_minutes: int) -> str:
    payload = data.copy()
    payload["exp"] = datetime.utcnow() + timedelta(minutes=expires_in_minutes)
    payload["iat"] = datetime.utcnow()
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def create_access_token(user: User) -> str:
    return create_jwt_token({
        "sub": str(user.id),
        "role": user.role
    }, settings.access_token_expire_minutes)


# === Identity Collaborator ===
def find_user_by_email(email: str, db: Session):
    return db.query(User).filter(User.email == email.strip().lower()).first()


def authenticate(email: str, password: str, db: Session) -> str:
    user = find_user_by_email(email, db)
    if not user or not verify_password(password, user.hashed_password):
        raise AuthError("Invalid email or password")
    return user.id


def create_account(
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    db: Session,
    role: str = ROLE_CLIENT
) -> User:
    """Adds the account and its profile to the session. The caller commits."""
    if role not in ROLES:
        raise ValidationError(f"Unknown role: {role}")
    if find_user_by_email(email, db):
        raise ValidationError("Email already registered")

    first_name = first_name.strip()
    last_name = last_name.strip()
    user = User(
        id=str(uuid4()),
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        first_name=first_name,
        last_name=last_name,
        display_name=f"{first_name} {last_name}".strip(),
        role=role,
        created_at=datetime.utcnow()
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # Another registration for the same email landed first
        db.rollback()
        raise ValidationError("Email already registered")
    logger.info(f"👤 Account created for {user.email} ({role})")
    return user


def login(email: str, password: str, db: Session) -> dict:
    user_id = authenticate(email, password, db)
    user = db.get(User, user_id)
    user.last_login_at = datetime.utcnow()
    db.commit()

    logger.info(f"🔑 Login: {user.email}")
    return {
        "access_token": create_access_token(user),
        "token_type": "bearer",
        "user_id": user.id,
        "role": user.role,
    }
