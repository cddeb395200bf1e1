import logging
from datetime import datetime
from uuid import uuid4

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from featureboard.core.errors import Forbidden, NotFound, ValidationError
from featureboard.models.comment import Comment
from featureboard.models.idea import Idea
from featureboard.services.idea_service import get_idea
from featureboard.services.visibility import is_admin

logger = logging.getLogger(__name__)

CONTENT_MAX_LENGTH = 2000


def validate_content(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment cannot be empty")
    if len(content) > CONTENT_MAX_LENGTH:
        raise ValidationError(f"Comment must be at most {CONTENT_MAX_LENGTH} characters")
    return content


def _bump_comment_count(idea_id: str, delta: int, now: datetime, db: Session) -> None:
    if delta > 0:
        value = Idea.comment_count + delta
    else:
        value = case((Idea.comment_count > 0, Idea.comment_count - 1), else_=0)
    db.execute(
        update(Idea)
        .where(Idea.id == idea_id)
        .values(comment_count=value, updated_at=now)
        .execution_options(synchronize_session=False)
    )


def _load_comment(comment_id: str, user, db: Session) -> Comment:
    comment = db.get(Comment, comment_id)
    if not comment:
        raise NotFound("Comment not found")
    # Comments on hidden ideas are hidden too
    get_idea(comment.idea_id, user, db)
    return comment


def add_comment(idea_id: str, content: str, parent_id, user, db: Session) -> Comment:
    idea = get_idea(idea_id, user, db)
    content = validate_content(content)

    if parent_id:
        parent = db.get(Comment, parent_id)
        if not parent or parent.idea_id != idea.id:
            raise ValidationError("Parent comment does not belong to this idea")
        if parent.parent_id:
            raise ValidationError("Replies can only be made to top-level comments")

    now = datetime.utcnow()
    comment = Comment(
        id=str(uuid4()),
        idea_id=idea.id,
        parent_id=parent_id or None,
        content=content,
        author_id=user["id"],
        author_name=user.get("name"),
        is_deleted=False,
        created_at=now,
        updated_at=now
    )
    db.add(comment)
    db.flush()
    _bump_comment_count(idea.id, 1, now, db)
    db.commit()
    db.refresh(comment)
    logger.info(f"💬 Comment {comment.id} on idea {idea.id}")
    return comment


def list_comments(idea_id: str, user, db: Session):
    idea = get_idea(idea_id, user, db)
    comments = (
        db.query(Comment)
        .filter(Comment.idea_id == idea.id)
        .order_by(Comment.created_at.asc())
        .all()
    )
    # Deleted comments stay as blank placeholders so replies stay attached
    return [_present(c) for c in comments]


def _present(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "idea_id": comment.idea_id,
        "parent_id": comment.parent_id,
        "content": "" if comment.is_deleted else comment.content,
        "author_id": comment.author_id,
        "author_name": comment.author_name,
        "is_deleted": comment.is_deleted,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
    }


def edit_comment(comment_id: str, content: str, user, db: Session) -> Comment:
    comment = _load_comment(comment_id, user, db)
    if comment.author_id != user["id"]:
        raise Forbidden("Only the author can edit this comment")
    if comment.is_deleted:
        raise ValidationError("Deleted comments cannot be edited")

    comment.content = validate_content(content)
    comment.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(comment_id: str, user, db: Session) -> None:
    comment = _load_comment(comment_id, user, db)
    if comment.author_id != user["id"] and not is_admin(user):
        raise Forbidden("Only the author or an administrator can delete this comment")
    if comment.is_deleted:
        return

    now = datetime.utcnow()
    comment.is_deleted = True
    comment.updated_at = now
    db.flush()
    _bump_comment_count(comment.idea_id, -1, now, db)
    db.commit()
    logger.info(f"🗑️ Comment soft-deleted: {comment_id}")
