from typing import Optional

from fastapi import Depends, Header, HTTPException
from jose import JWTError
from sqlalchemy.orm import Session
import logging

from featureboard.core.db import get_db
from featureboard.models.user import User
from featureboard.services.identity import decode_token

# === Setup logging
logger = logging.getLogger(__name__)


# === Auth Dependency
async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db)
):
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    if not authorization.startswith("Bearer "):
        logger.warning("⚠️ Missing 'Bearer' in token header.")
        raise HTTPException(status_code=401, detail="Invalid token format")

    token = authorization.split(" ", 1)[1]

    try:
        payload = decode_token(token)
        user_id = payload.get("sub")

        if not user_id:
            logger.warning("⚠️ JWT missing 'sub' claim.")
            raise HTTPException(status_code=401, detail="Token missing subject")

    except JWTError as e:
        logger.warning(f"⚠️ JWT decode failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    # Role comes from the database so role changes apply immediately
    user = db.query(User).filter(User.id == user_id).first()

    if not user:
        logger.warning(f"❌ User not found for ID: {user_id}")
        raise HTTPException(status_code=401, detail="User no longer exists")

    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.display_name,
        "role": user.role,
        "is_admin": user.is_admin,
        "created_at": user.created_at
    }
