from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from featureboard.dependencies.auth import get_current_user
from featureboard.core.db import get_db
from featureboard.services.moderation import (
    advance_idea,
    approve_idea,
    bulk_approve,
    bulk_reject,
    get_statistics,
    list_review_queue,
    reject_idea,
    set_pinned,
)
from featureboard.services.user_service import change_role, delete_user, list_users
from featureboard.schemas.idea import AdminStats, BulkRequest, BulkResult, IdeaOut, StatusChange
from featureboard.schemas.user import RoleChange, UserOut

router = APIRouter(prefix="/admin")


@router.get("/review-queue", response_model=List[IdeaOut])
def review_queue(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return list_review_queue(user, db)


@router.get("/stats", response_model=AdminStats)
def stats(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return get_statistics(user, db)


# === Moderation ===
@router.post("/ideas/{id}/approve", response_model=IdeaOut)
def approve(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return approve_idea(id, user, db)


@router.post("/ideas/{id}/reject", response_model=IdeaOut)
def reject(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return reject_idea(id, user, db)


@router.put("/ideas/{id}/status", response_model=IdeaOut)
def change_status(id: str, payload: StatusChange, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return advance_idea(id, payload.status, user, db)


@router.post("/ideas/{id}/pin", response_model=IdeaOut)
def pin(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return set_pinned(id, True, user, db)


@router.post("/ideas/{id}/unpin", response_model=IdeaOut)
def unpin(id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return set_pinned(id, False, user, db)


@router.post("/ideas/bulk-approve", response_model=BulkResult)
def bulk_approve_route(payload: BulkRequest, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return bulk_approve(payload.idea_ids, user, db)


@router.post("/ideas/bulk-reject", response_model=BulkResult)
def bulk_reject_route(payload: BulkRequest, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return bulk_reject(payload.idea_ids, user, db)


# === Users (danger zone included) ===
@router.get("/users", response_model=List[UserOut])
def users(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return list_users(user, db)


@router.put("/users/{user_id}/role", response_model=UserOut)
def set_role(user_id: str, payload: RoleChange, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return change_role(user_id, payload.role, user, db)


@router.delete("/users/{user_id}")
def remove_user(user_id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    delete_user(user_id, user, db)
    return {"detail": "User deleted"}
