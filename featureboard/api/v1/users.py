from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from featureboard.dependencies.auth import get_current_user
from featureboard.core.db import get_db
from featureboard.services.user_service import get_profile, update_profile
from featureboard.schemas.user import ProfileUpdate, UserOut

router = APIRouter()


@router.get("/users/me", response_model=UserOut)
def me(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return get_profile(user, db)


@router.patch("/users/me", response_model=UserOut)
def update_me(payload: ProfileUpdate, user=Depends(get_current_user), db: Session = Depends(get_db)):
    return update_profile(user, payload, db)
