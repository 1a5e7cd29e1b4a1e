from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..logging import get_logger
from ..models.models import User
from ..schemas.employees import LoginRequest
from .security import create_access_token


router = APIRouter(prefix="/api/auth", tags=["auth"])
log = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


def stored_password(user: User) -> Optional[str]:
    # password first, legacy password_hash column second
    return user.password or user.password_hash


@router.post("/login")
def login(req: LoginRequest, db: Optional[Session] = Depends(get_db)):
    if not req.username or not req.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    if db is None:
        if req.username == settings.fallback_admin_username and req.password == settings.fallback_admin_password:
            return {
                "success": True,
                "user": {"username": settings.fallback_admin_username, "id": "default-admin"},
            }
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    user = db.query(User).filter(User.username == req.username).first()
    # Same answer for unknown user and wrong password
    if user is None or stored_password(user) != req.password:
        log.info("login_failed", username=req.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    return {
        "success": True,
        "user": {"id": str(user.id), "username": user.username},
        "token": create_access_token(str(user.id), user.username),
    }
