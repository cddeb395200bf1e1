from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from featureboard.dependencies.auth import get_current_user
from featureboard.core.db import get_db
from featureboard.services.comment_service import delete_comment, edit_comment
from featureboard.schemas.comment import CommentOut, CommentUpdate

router = APIRouter()


@router.patch("/comments/{id}", response_model=CommentOut)
def edit_comment_route(id: str, payload: CommentUpdate, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return edit_comment(id, payload.content, user, db)


@router.delete("/comments/{id}")
def delete_comment_route(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    delete_comment(id, user, db)
    return {"detail": "Comment deleted"}
