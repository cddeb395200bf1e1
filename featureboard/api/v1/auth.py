import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from featureboard.core.db import get_db
from featureboard.dependencies.auth import get_current_user
from featureboard.schemas.user import TokenResponse, UserLogin, UserOut, UserRegister
from featureboard.schemas.verification import TokenRequest, VerificationRequest, VerifiedIdentity
from featureboard.services.identity import login as login_user
from featureboard.services.user_service import get_profile
from featureboard.services.verification import (
    consume_token,
    issue_token,
    redeem_token,
    register_with_token,
)

# === CONFIG ===
logger = logging.getLogger(__name__)

router = APIRouter()


# === Email Verification ===
@router.post("/auth/send-verification")
def send_verification(payload: VerificationRequest, db: Session = Depends(get_db)):
    issue_token(payload, db)
    return {"success": True}


@router.post("/auth/verify-token", response_model=VerifiedIdentity)
def verify_token(body: TokenRequest, db: Session = Depends(get_db)):
    record = redeem_token(body.token, db)
    return VerifiedIdentity(email=record.email, first_name=record.first_name, last_name=record.last_name)


@router.put("/auth/verify-token")
def mark_token_used(body: TokenRequest, db: Session = Depends(get_db)):
    consume_token(body.token, db)
    return {"success": True}


# === Register ===
@router.post("/auth/register", response_model=TokenResponse, status_code=201)
def register(payload: UserRegister, db: Session = Depends(get_db)):
    user = register_with_token(payload.token, payload.password, db)
    return login_user(user.email, payload.password, db)


# === Login ===
@router.post("/auth/login", response_model=TokenResponse)
def login(payload: UserLogin, db: Session = Depends(get_db)):
    return login_user(payload.email, payload.password, db)


# === /auth/me ===
@router.get("/auth/me", response_model=UserOut)
def get_me(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return get_profile(user, db)
