from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from featureboard.dependencies.auth import get_current_user
from featureboard.core.db import get_db
from featureboard.services.idea_service import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    create_idea,
    delete_idea,
    get_idea,
    list_ideas,
    list_my_ideas,
    list_pinned_ideas,
    update_idea,
)
from featureboard.services.vote_service import has_voted, list_voted_ideas, unvote, vote
from featureboard.services.comment_service import add_comment, list_comments
from featureboard.schemas.idea import IdeaCreate, IdeaCreated, IdeaOut, IdeaUpdate, VoteState
from featureboard.schemas.comment import CommentCreate, CommentOut

router = APIRouter()


@router.get("/ideas", response_model=List[IdeaOut])
def list_ideas_route(
    status: str = Query("all"),
    sort_by: str = Query("newest"),
    q: Optional[str] = Query(None, description="Search in title and description"),
    author_id: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    offset: int = Query(0, ge=0),
    user=Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return list_ideas(user, db, status=status, sort_by=sort_by, search=q,
                      author_id=author_id, limit=limit, offset=offset)


@router.post("/ideas", response_model=IdeaCreated, status_code=201)
def create_idea_route(payload: IdeaCreate, user=Depends(get_current_user), db: Session = Depends(get_db)):
    idea = create_idea(payload, user, db)
    return IdeaCreated(id=idea.id, idea=IdeaOut.model_validate(idea))


@router.get("/ideas/mine", response_model=List[IdeaOut])
def my_ideas(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return list_my_ideas(user, db)


@router.get("/ideas/pinned", response_model=List[IdeaOut])
def pinned_ideas(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return list_pinned_ideas(user, db)


@router.get("/ideas/voted", response_model=List[IdeaOut])
def voted_ideas(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return list_voted_ideas(user, db)


@router.get("/ideas/{id}", response_model=IdeaOut)
def get_idea_route(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return get_idea(id, user, db)


@router.patch("/ideas/{id}", response_model=IdeaOut)
def update_idea_route(id: str, payload: IdeaUpdate, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return update_idea(id, payload, user, db)


@router.delete("/ideas/{id}")
def delete_idea_route(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    delete_idea(id, user, db)
    return {"detail": "Idea deleted"}


# === Votes ===
@router.get("/ideas/{id}/vote", response_model=VoteState)
def vote_state(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    idea = get_idea(id, user, db)
    return VoteState(idea_id=idea.id, has_voted=has_voted(idea.id, user["id"], db), vote_count=idea.vote_count)


@router.post("/ideas/{id}/vote", response_model=VoteState)
def vote_route(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    idea = vote(id, user, db)
    return VoteState(idea_id=idea.id, has_voted=True, vote_count=idea.vote_count)


@router.delete("/ideas/{id}/vote", response_model=VoteState)
def unvote_route(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    idea = unvote(id, user, db)
    return VoteState(idea_id=idea.id, has_voted=False, vote_count=idea.vote_count)


# === Comments ===
@router.get("/ideas/{id}/comments", response_model=List[CommentOut])
def comments(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return list_comments(id, user, db)


@router.post("/ideas/{id}/comments", response_model=CommentOut, status_code=201)
def add_comment_route(id: str, payload: CommentCreate, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return add_comment(id, payload.content, payload.parent_id, user, db)
