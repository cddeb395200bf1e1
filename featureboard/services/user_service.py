import logging

from sqlalchemy.orm import Session

from featureboard.core.errors import Forbidden, NotFound, ValidationError
from featureboard.models.user import ROLES, User
from featureboard.schemas.user import ProfileUpdate
from featureboard.services.moderation import require_admin

logger = logging.getLogger(__name__)


def get_user(user_id: str, db: Session) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def get_profile(user, db: Session) -> User:
    return get_user(user["id"], db)


def update_profile(user, payload: ProfileUpdate, db: Session) -> User:
    record = get_user(user["id"], db)
    changes = payload.model_dump(exclude_unset=True)

    for field in ("first_name", "last_name"):
        if field in changes:
            value = (changes[field] or "").strip()
            if not value:
                raise ValidationError(f"{field.replace('_', ' ').capitalize()} cannot be empty")
            setattr(record, field, value)

    record.display_name = f"{record.first_name or ''} {record.last_name or ''}".strip()
    db.commit()
    db.refresh(record)
    return record


# === Admin ===
def list_users(user, db: Session):
    require_admin(user, "manage users")
    return db.query(User).order_by(User.created_at.desc()).all()


def change_role(user_id: str, role: str, user, db: Session) -> User:
    require_admin(user, "manage users")
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")

    record = get_user(user_id, db)
    record.role = role
    db.commit()
    db.refresh(record)
    logger.info(f"🛡️ Role of {record.email} set to {role} by {user['id']}")
    return record


def delete_user(user_id: str, user, db: Session) -> None:
    require_admin(user, "manage users")
    if user_id == user["id"]:
        raise Forbidden("Administrators cannot delete their own account")

    record = get_user(user_id, db)
    db.delete(record)
    db.commit()
    logger.warning(f"⚠️ User {user_id} deleted by {user['id']}")
