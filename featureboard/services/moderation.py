"""
Moderation workflow for ideas.

    private -> needs_review -> under_consideration -> planned
            -> in_development -> completed | wont_implement

Approve only leaves `private`; reject works from any non-terminal status;
advance is a free admin override to one of the working statuses. Every
action is admin-only and checked before the idea is looked up.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from featureboard.core.errors import FeatureBoardError, Forbidden, InvalidTransition, ValidationError
from featureboard.models.idea import TERMINAL_STATUSES, Idea, IdeaStatus
from featureboard.models.user import User
from featureboard.services.idea_service import load_idea
from featureboard.services.visibility import is_admin

logger = logging.getLogger(__name__)

ADVANCE_TARGETS = (
    IdeaStatus.UNDER_CONSIDERATION.value,
    IdeaStatus.PLANNED.value,
    IdeaStatus.IN_DEVELOPMENT.value,
    IdeaStatus.COMPLETED.value,
)
ACTIVE_USER_WINDOW = timedelta(days=30)


def require_admin(user, action: str = "moderate ideas") -> None:
    if not is_admin(user):
        raise Forbidden(f"Only administrators can {action}")


# === Transitions (no commit) ===
def _set_status(idea: Idea, status: str, now: datetime) -> None:
    idea.status = status
    idea.last_status_update = now
    idea.updated_at = now


def _apply_approve(idea: Idea, now: datetime) -> None:
    if idea.status != IdeaStatus.PRIVATE.value:
        raise InvalidTransition(idea.status, "approve")
    _set_status(idea, IdeaStatus.NEEDS_REVIEW.value, now)
    idea.is_public = True


def _apply_reject(idea: Idea, now: datetime) -> None:
    if idea.status in TERMINAL_STATUSES:
        raise InvalidTransition(idea.status, "reject")
    _set_status(idea, IdeaStatus.WONT_IMPLEMENT.value, now)


# === Single-idea actions ===
def approve_idea(idea_id: str, user, db: Session) -> Idea:
    require_admin(user)
    idea = load_idea(idea_id, db)
    _apply_approve(idea, datetime.utcnow())
    db.commit()
    db.refresh(idea)
    logger.info(f"✅ Idea approved: {idea_id}")
    return idea


def reject_idea(idea_id: str, user, db: Session) -> Idea:
    require_admin(user)
    idea = load_idea(idea_id, db)
    _apply_reject(idea, datetime.utcnow())
    db.commit()
    db.refresh(idea)
    logger.info(f"🚫 Idea rejected: {idea_id}")
    return idea


def advance_idea(idea_id: str, status: str, user, db: Session) -> Idea:
    require_admin(user)
    status = getattr(status, "value", status)
    if status not in ADVANCE_TARGETS:
        raise ValidationError(f"Status must be one of: {', '.join(ADVANCE_TARGETS)}")

    idea = load_idea(idea_id, db)
    _set_status(idea, status, datetime.utcnow())
    db.commit()
    db.refresh(idea)
    logger.info(f"🔀 Idea {idea_id} moved to {status}")
    return idea


def set_pinned(idea_id: str, pinned: bool, user, db: Session) -> Idea:
    require_admin(user)
    idea = load_idea(idea_id, db)
    idea.is_pinned = pinned
    idea.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(idea)
    logger.info(f"📌 Idea {idea_id} {'pinned' if pinned else 'unpinned'}")
    return idea


# === Bulk actions ===
def _bulk(idea_ids: Iterable[str], apply, action: str, user, db: Session) -> dict:
    require_admin(user)
    result = {"succeeded": [], "failed": [], "errors": {}}
    now = datetime.utcnow()

    for idea_id in dict.fromkeys(idea_ids):
        try:
            apply(load_idea(idea_id, db), now)
        except FeatureBoardError as e:
            result["failed"].append(idea_id)
            result["errors"][idea_id] = e.message
            continue
        result["succeeded"].append(idea_id)

    # Whole batch is one transaction
    db.commit()
    logger.info(
        f"📦 Bulk {action}: {len(result['succeeded'])} succeeded, {len(result['failed'])} failed"
    )
    return result


def bulk_approve(idea_ids: Iterable[str], user, db: Session) -> dict:
    return _bulk(idea_ids, _apply_approve, "approve", user, db)


def bulk_reject(idea_ids: Iterable[str], user, db: Session) -> dict:
    return _bulk(idea_ids, _apply_reject, "reject", user, db)


# === Admin views ===
def list_review_queue(user, db: Session):
    require_admin(user)
    return (
        db.query(Idea)
        .filter(Idea.status == IdeaStatus.PRIVATE.value)
        .order_by(Idea.created_at.desc())
        .all()
    )


def get_statistics(user, db: Session) -> dict:
    require_admin(user)

    by_status = {status.value: 0 for status in IdeaStatus}
    for status, count in db.query(Idea.status, func.count(Idea.id)).group_by(Idea.status).all():
        by_status[status] = count

    since = datetime.utcnow() - ACTIVE_USER_WINDOW
    return {
        "total_ideas": sum(by_status.values()),
        "pending_reviews": by_status[IdeaStatus.PRIVATE.value],
        "total_users": db.query(func.count(User.id)).scalar(),
        "active_users": db.query(func.count(User.id)).filter(User.last_login_at >= since).scalar(),
        "ideas_by_status": by_status,
    }
