import logging
from datetime import datetime
from uuid import uuid4

from sqlalchemy import or_
from sqlalchemy.orm import Session

from featureboard.core.errors import Forbidden, NotFound, UpstreamError, ValidationError
from featureboard.models.idea import Idea, IdeaStatus
from featureboard.schemas.idea import IdeaCreate, IdeaUpdate
from featureboard.services.email import notify_new_idea
from featureboard.services.visibility import (
    DEFAULT_SORT,
    can_view,
    check_status_filter,
    is_admin,
    order_by_for,
    visibility_clause,
)

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 2000

DEFAULT_LIMIT = 50
MAX_LIMIT = 100

ADMIN_ONLY_FIELDS = ("is_public", "is_pinned", "status")


def validate_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return title


def validate_description(description: str) -> str:
    description = (description or "").strip()
    if len(description) < DESCRIPTION_MIN_LENGTH:
        raise ValidationError(f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters")
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters")
    return description


def _contains_pattern(text: str) -> str:
    # Search text is literal: % and _ must not act as wildcards
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def load_idea(id: str, db: Session) -> Idea:
    """Fetch an idea without any visibility check."""
    idea = db.get(Idea, id)
    if not idea:
        raise NotFound("Idea not found")
    return idea


def get_idea(id: str, user, db: Session) -> Idea:
    idea = db.get(Idea, id)
    # Hidden ideas are reported exactly like missing ones
    if not idea or not can_view(user, idea):
        raise NotFound("Idea not found")
    return idea


def create_idea(payload: IdeaCreate, user, db: Session) -> Idea:
    title = validate_title(payload.title)
    description = validate_description(payload.description)

    now = datetime.utcnow()
    idea = Idea(
        id=str(uuid4()),
        title=title,
        description=description,
        author_id=user["id"],
        author_name=user.get("name"),
        status=IdeaStatus.PRIVATE.value,
        is_public=False,
        is_pinned=False,
        vote_count=0,
        comment_count=0,
        created_at=now,
        updated_at=now,
        last_status_update=now
    )
    db.add(idea)
    db.commit()
    db.refresh(idea)
    logger.info(f"💡 Idea created: {idea.id} by {user['id']}")

    try:
        notify_new_idea(idea, db)
    except UpstreamError as e:
        logger.warning(f"⚠️ Failed to send new idea notification for {idea.id}: {e}")

    return idea


def update_idea(id: str, payload: IdeaUpdate, user, db: Session) -> Idea:
    idea = get_idea(id, user, db)
    changes = payload.model_dump(exclude_unset=True)

    if not is_admin(user):
        if idea.author_id != user["id"]:
            raise Forbidden("Only the author can edit this idea")
        if idea.status != IdeaStatus.PRIVATE.value:
            raise Forbidden("Ideas can only be edited while they are private")
        if any(field in changes for field in ADMIN_ONLY_FIELDS):
            raise Forbidden("Only administrators can change visibility, pinning or status")

    if "title" in changes:
        idea.title = validate_title(changes["title"])
    if "description" in changes:
        idea.description = validate_description(changes["description"])

    now = datetime.utcnow()
    if changes.get("is_public") is not None:
        idea.is_public = changes["is_public"]
    if changes.get("is_pinned") is not None:
        idea.is_pinned = changes["is_pinned"]
    if changes.get("status") is not None:
        status = IdeaStatus(changes["status"]).value
        if status != idea.status:
            idea.status = status
            idea.last_status_update = now

    idea.updated_at = now
    db.commit()
    db.refresh(idea)
    logger.info(f"✏️ Idea updated: {idea.id}")
    return idea


def delete_idea(id: str, user, db: Session) -> None:
    idea = get_idea(id, user, db)

    if not is_admin(user):
        if idea.author_id != user["id"]:
            raise Forbidden("Only the author or an administrator can delete this idea")
        if idea.status != IdeaStatus.PRIVATE.value:
            raise Forbidden("Ideas can only be deleted by their author while private")

    # Votes and comments go with it (ORM cascade)
    db.delete(idea)
    db.commit()
    logger.info(f"🗑️ Idea deleted: {id}")


def list_ideas(
    user,
    db: Session,
    status: str = "all",
    sort_by: str = DEFAULT_SORT,
    search: str = None,
    author_id: str = None,
    limit: int = DEFAULT_LIMIT,
    offset: int = 0
):
    if not user:
        return []

    status = check_status_filter(user, status)
    order_by = order_by_for(sort_by, db.get_bind().dialect.name)
    if limit < 1 or limit > MAX_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}")
    if offset < 0:
        raise ValidationError("offset must not be negative")

    query = db.query(Idea)
    clause = visibility_clause(user)
    if clause is not None:
        query = query.filter(clause)
    if status:
        query = query.filter(Idea.status == status)
    if author_id:
        query = query.filter(Idea.author_id == author_id)
    if search and search.strip():
        pattern = _contains_pattern(search.strip())
        query = query.filter(or_(
            Idea.title.ilike(pattern, escape="\\"),
            Idea.description.ilike(pattern, escape="\\")
        ))

    return query.order_by(*order_by).offset(offset).limit(limit).all()


def list_my_ideas(user, db: Session):
    return (
        db.query(Idea)
        .filter(Idea.author_id == user["id"])
        .order_by(Idea.created_at.desc())
        .all()
    )


def list_pinned_ideas(user, db: Session):
    query = db.query(Idea).filter(Idea.is_pinned.is_(True))
    clause = visibility_clause(user)
    if clause is not None:
        query = query.filter(clause)
    return query.order_by(Idea.created_at.desc()).all()
