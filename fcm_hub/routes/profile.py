from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.models import User, utcnow
from ..schemas.employees import ProfileUpdate
from .employees import serialize_user
from ..services.rows import get_or_404


router = APIRouter(prefix="/api/profile", tags=["profile"])

# position and employee_id are managed from the employees screen only
EDITABLE_FIELDS = ("full_name", "contact_number", "email", "address")


def fallback_profile(user_id: str) -> dict:
    return {
        "id": user_id,
        "username": "admin",
        "full_name": "Administrator",
        "position": "System Administrator",
        "contact_number": "",
        "email": "",
        "bio": "",
        "address": "",
        "employee_id": "",
        "department": "",
        "hire_date": None,
    }


@router.get("")
def get_profile(userId: Optional[str] = None, db: Optional[Session] = Depends(get_db)):
    if not userId:
        raise HTTPException(status_code=400, detail="User ID is required")
    if db is None:
        return fallback_profile(userId)
    user = get_or_404(db, User, userId, detail="User not found")
    return serialize_user(user)


@router.put("")
def update_profile(payload: ProfileUpdate, db: Optional[Session] = Depends(get_db)):
    if not payload.user_id:
        raise HTTPException(status_code=400, detail="User ID is required")

    if db is None:
        data = payload.echo(id=payload.user_id)
        data.pop("userId", None)
        return data

    user = get_or_404(db, User, payload.user_id, detail="User not found")

    changes = {k: getattr(payload, k) for k in EDITABLE_FIELDS if getattr(payload, k) is not None}

    if payload.old_password and payload.new_password:
        if user.password != payload.old_password:
            raise HTTPException(status_code=400, detail="Current password is incorrect")
        changes["password"] = payload.new_password
        changes["password_hash"] = payload.new_password
    elif payload.old_password or payload.new_password:
        raise HTTPException(
            status_code=400,
            detail="Please provide both current password and new password to change your password",
        )

    if not changes:
        return serialize_user(user)

    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = utcnow()
    db.commit()
    db.refresh(user)
    return serialize_user(user)
