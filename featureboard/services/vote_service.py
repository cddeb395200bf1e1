"""
Vote ledger: at most one vote per (idea, user).

The vote row and the idea's vote_count change together in one transaction,
and the counter is updated with an in-database expression so concurrent
voters never overwrite each other's increments.
"""

import logging
from datetime import datetime

from sqlalchemy import case, delete, insert, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from featureboard.core.errors import AlreadyVoted, NotFound, NotVoted
from featureboard.models.idea import Idea
from featureboard.models.vote import Vote
from featureboard.services.idea_service import get_idea, load_idea
from featureboard.services.visibility import can_view, visibility_clause

logger = logging.getLogger(__name__)


def has_voted(idea_id: str, user_id: str, db: Session) -> bool:
    return db.query(Vote.user_id).filter(
        Vote.idea_id == idea_id,
        Vote.user_id == user_id
    ).first() is not None


def vote(idea_id: str, user, db: Session) -> Idea:
    idea = get_idea(idea_id, user, db)
    if has_voted(idea.id, user["id"], db):
        raise AlreadyVoted()

    now = datetime.utcnow()
    try:
        db.execute(insert(Vote).values(idea_id=idea.id, user_id=user["id"], created_at=now))
        db.execute(
            update(Idea)
            .where(Idea.id == idea.id)
            .values(vote_count=Idea.vote_count + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except IntegrityError:
        # A concurrent request inserted the same vote first
        db.rollback()
        raise AlreadyVoted()

    db.refresh(idea)
    logger.info(f"👍 Vote: {user['id']} → {idea.id} ({idea.vote_count})")
    return idea


def unvote(idea_id: str, user, db: Session) -> Idea:
    # A vote can be withdrawn after its idea is hidden from the voter
    idea = load_idea(idea_id, db)

    now = datetime.utcnow()
    result = db.execute(
        delete(Vote)
        .where(Vote.idea_id == idea.id, Vote.user_id == user["id"])
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        if not can_view(user, idea):
            raise NotFound("Idea not found")
        raise NotVoted()

    db.execute(
        update(Idea)
        .where(Idea.id == idea.id)
        .values(
            vote_count=case((Idea.vote_count > 0, Idea.vote_count - 1), else_=0),
            updated_at=now
        )
        .execution_options(synchronize_session=False)
    )
    db.commit()

    db.refresh(idea)
    logger.info(f"👎 Unvote: {user['id']} → {idea.id} ({idea.vote_count})")
    return idea


def list_voted_ideas(user, db: Session):
    query = (
        db.query(Idea)
        .join(Vote, Vote.idea_id == Idea.id)
        .filter(Vote.user_id == user["id"])
    )
    clause = visibility_clause(user)
    if clause is not None:
        query = query.filter(clause)
    return query.order_by(Idea.updated_at.desc()).all()
