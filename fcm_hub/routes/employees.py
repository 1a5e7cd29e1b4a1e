from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth.security import Caller, get_caller
from ..db import get_db
from ..errors import is_unique_violation
from ..logging import get_logger
from ..models.models import User, utcnow
from ..schemas.employees import EmployeeCreate, EmployeeUpdate
from ..services.rows import get_or_404, get_or_none, now_iso, row_to_dict, same_id, temp_id


router = APIRouter(prefix="/api/employees", tags=["employees"])
log = get_logger(__name__)

SECRET_COLUMNS = ("password", "password_hash")


def serialize_user(user: Optional[User]) -> Optional[Dict[str, Any]]:
    data = row_to_dict(user)
    if data is not None:
        for key in SECRET_COLUMNS:
            data.pop(key, None)
    return data


def commit_user(db: Session, user: User) -> User:
    """Commit, turning a username unique violation into a 400."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise HTTPException(status_code=400, detail="Username already exists")
        raise
    db.refresh(user)
    return user


@router.get("")
def list_employees(db: Optional[Session] = Depends(get_db)):
    if db is None:
        return []
    users = db.query(User).order_by(User.created_at.desc()).all()
    return [serialize_user(u) for u in users]


@router.post("", status_code=201)
def create_employee(payload: EmployeeCreate, db: Optional[Session] = Depends(get_db)):
    if db is None:
        now = now_iso()
        return payload.echo(id=temp_id(), created_at=now, updated_at=now)

    if not payload.username or not payload.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    user = User(
        username=payload.username,
        password=payload.password,
        password_hash=payload.password,
        full_name=payload.full_name or None,
        position=payload.position or None,
        contact_number=payload.contact_number or None,
        email=payload.email or None,
        employee_id=payload.employee_id or None,
        address=payload.address or None,
    )
    db.add(user)
    commit_user(db, user)
    log.info("employee_created", user_id=str(user.id), username=user.username)
    return serialize_user(user)


@router.get("/{employee_id}")
def get_employee(employee_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return None
    return serialize_user(get_or_none(db, User, employee_id))


@router.put("/{employee_id}")
def update_employee(employee_id: str, payload: EmployeeUpdate, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return payload.echo(id=employee_id, updated_at=now_iso())

    user = get_or_404(db, User, employee_id, detail="Employee not found")
    changes = payload.columns()
    password = changes.pop("password", None)
    if password is not None and password.strip():
        changes["password"] = password
        changes["password_hash"] = password
    if "username" in changes and not changes["username"]:
        # An empty username is never written
        changes.pop("username")

    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = utcnow()
    commit_user(db, user)
    return serialize_user(user)


@router.delete("/{employee_id}")
def delete_employee(
    employee_id: str,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        return {"success": True}

    if same_id(caller.user_id, employee_id):
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user = get_or_none(db, User, employee_id)
    if user is not None:
        db.delete(user)
        db.commit()
    return {"success": True}
