from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..auth.security import Caller, get_caller
from ..config import settings
from ..db import get_db
from ..errors import is_unique_violation
from ..logging import get_logger
from ..models.models import TaskReminder, TaskReminderCompletion, TaskReminderTag, utcnow
from ..schemas.task_reminders import ReminderCreate, ReminderUpdate, TagSet
from ..services.reminders import (
    build_tags,
    combine_date_time,
    day_bounds,
    filter_for_viewer,
    insert_tags,
    load_reminder,
    parse_deadline,
    reminder_query,
    replace_tags,
    serialize_completion,
    serialize_reminder,
    serialize_tag,
    side_effect_tags,
)
from ..services.rows import now_iso, parse_id, same_id, temp_id


router = APIRouter(prefix="/api/task-reminders", tags=["task-reminders"])
log = get_logger(__name__)


def _reminder_or_404(db: Session, reminder_id: str) -> TaskReminder:
    reminder = load_reminder(db, reminder_id)
    if reminder is None:
        raise HTTPException(status_code=404, detail="Task reminder not found")
    return reminder


def _check_owner(reminder: TaskReminder, caller: Caller, action: str) -> None:
    if caller.is_anonymous:
        if settings.require_identity_for_owner_check:
            raise HTTPException(status_code=401, detail="Authentication required")
        return
    if not same_id(caller.user_id, reminder.created_by):
        raise HTTPException(status_code=403, detail=f"You can only {action} reminders you created")


def _require_user(caller: Caller):
    user_uuid = caller.user_uuid()
    if user_uuid is None:
        raise HTTPException(status_code=400, detail="User ID is required")
    return user_uuid


@router.get("")
def list_reminders(
    date: Optional[str] = None,
    status: Optional[str] = None,
    user_id: Optional[str] = Query(None, alias="userId"),
    user_position: Optional[str] = Query(None, alias="userPosition"),
    db: Optional[Session] = Depends(get_db),
):
    if db is None:
        return []
    query = reminder_query(db).filter(TaskReminder.status == (status or "pending"))
    if date:
        start, end = day_bounds(date)
        query = query.filter(TaskReminder.reminder_date >= start, TaskReminder.reminder_date <= end)
    reminders = query.order_by(TaskReminder.reminder_date.asc(), TaskReminder.reminder_time.asc()).all()
    return filter_for_viewer([serialize_reminder(r) for r in reminders], user_id, user_position)


@router.post("", status_code=201)
def create_reminder(
    payload: ReminderCreate,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        now = now_iso()
        return payload.echo(id=temp_id(), created_at=now, updated_at=now)

    if not payload.title or not payload.reminder_date or not payload.reminder_time:
        raise HTTPException(status_code=400, detail="Title, reminder date, and reminder time are required")
    reminder_at = combine_date_time(payload.reminder_date, payload.reminder_time)

    reminder = TaskReminder(
        project_id=parse_id(payload.project_id),
        title=payload.title,
        description=payload.description or None,
        reminder_date=reminder_at,
        reminder_time=payload.reminder_time,
        deadline=parse_deadline(payload.deadline),
        priority=payload.priority or "medium",
        status="pending",
        created_by=caller.user_uuid(),
    )
    db.add(reminder)
    db.flush()
    tags = side_effect_tags(reminder.id, payload.user_ids, payload.positions, "reminder_tags_insert_failed")
    if tags:
        insert_tags(db, tags, "reminder_tags_insert_failed")
    db.commit()
    log.info("reminder_created", reminder_id=str(reminder.id), created_by=caller.user_id)
    return serialize_reminder(load_reminder(db, reminder.id))


@router.get("/{reminder_id}")
def get_reminder(reminder_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return None
    reminder = load_reminder(db, reminder_id)
    if reminder is None:
        return JSONResponse(None, status_code=404)
    return serialize_reminder(reminder)


@router.put("/{reminder_id}")
def update_reminder(
    reminder_id: str,
    payload: ReminderUpdate,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        return payload.echo(id=reminder_id, updated_at=now_iso())

    reminder = _reminder_or_404(db, reminder_id)
    _check_owner(reminder, caller, "edit")

    sent = payload.model_fields_set
    if "title" in sent:
        reminder.title = payload.title
    if "description" in sent:
        reminder.description = payload.description
    # Date and time only move together
    if "reminder_date" in sent and "reminder_time" in sent:
        reminder.reminder_date = combine_date_time(payload.reminder_date, payload.reminder_time)
        reminder.reminder_time = payload.reminder_time
    if "deadline" in sent:
        reminder.deadline = parse_deadline(payload.deadline)
    if "priority" in sent:
        reminder.priority = payload.priority
    if "status" in sent:
        reminder.status = payload.status
    if "project_id" in sent:
        reminder.project_id = parse_id(payload.project_id)
    reminder.updated_at = utcnow()
    db.flush()

    if payload.touches_tags:
        tags = side_effect_tags(reminder.id, payload.user_ids, payload.positions, "reminder_tags_replace_failed")
        if tags is not None:
            replace_tags(db, reminder, tags)

    db.commit()
    return serialize_reminder(load_reminder(db, reminder.id))


@router.delete("/{reminder_id}")
def delete_reminder(
    reminder_id: str,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        return {"success": True}
    reminder = _reminder_or_404(db, reminder_id)
    _check_owner(reminder, caller, "delete")
    db.delete(reminder)
    db.commit()
    log.info("reminder_deleted", reminder_id=reminder_id, deleted_by=caller.user_id)
    return {"success": True}


@router.get("/{reminder_id}/tags")
def list_tags(reminder_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return []
    pk = parse_id(reminder_id)
    if pk is None:
        return []
    tags = (
        db.query(TaskReminderTag)
        .options(selectinload(TaskReminderTag.user))
        .filter(TaskReminderTag.task_reminder_id == pk)
        .all()
    )
    return [serialize_tag(t) for t in tags]


@router.post("/{reminder_id}/tags")
def add_tags(reminder_id: str, payload: TagSet, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return {"success": True}
    reminder = _reminder_or_404(db, reminder_id)
    try:
        tags = build_tags(reminder.id, payload.user_ids, payload.positions)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not tags:
        return {"success": True, "message": "No tags to add"}
    db.add_all(tags)
    db.commit()
    return {"success": True}


@router.delete("/{reminder_id}/tags")
def remove_tags(
    reminder_id: str,
    payload: Optional[TagSet] = Body(None),
    db: Optional[Session] = Depends(get_db),
):
    if db is None:
        return {"success": True}
    pk = parse_id(reminder_id)
    if pk is None:
        return {"success": True}

    query = db.query(TaskReminderTag).filter(TaskReminderTag.task_reminder_id == pk)
    if payload is not None:
        # Filters narrow each other; none given clears every tag on the reminder
        user_ids = [u for u in (parse_id(raw) for raw in payload.user_ids or []) if u is not None]
        positions = [p for p in payload.positions or [] if p]
        if user_ids:
            query = query.filter(TaskReminderTag.user_id.in_(user_ids))
        if positions:
            query = query.filter(TaskReminderTag.position.in_(positions))
    query.delete(synchronize_session=False)
    db.commit()
    return {"success": True}


@router.post("/{reminder_id}/complete")
def complete_reminder(
    reminder_id: str,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        return {"success": True}
    user_uuid = _require_user(caller)
    reminder = _reminder_or_404(db, reminder_id)

    completion = TaskReminderCompletion(task_reminder_id=reminder.id, user_id=user_uuid)
    try:
        with db.begin_nested():
            db.add(completion)
    except IntegrityError as e:
        if not is_unique_violation(e):
            raise
        return {"success": True, "message": "Already marked as done"}
    db.commit()
    db.refresh(completion)
    return {"success": True, "data": serialize_completion(completion)}


@router.delete("/{reminder_id}/complete")
def uncomplete_reminder(
    reminder_id: str,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        return {"success": True}
    user_uuid = _require_user(caller)
    pk = parse_id(reminder_id)
    if pk is not None:
        db.query(TaskReminderCompletion).filter(
            TaskReminderCompletion.task_reminder_id == pk,
            TaskReminderCompletion.user_id == user_uuid,
        ).delete(synchronize_session=False)
        db.commit()
    return {"success": True}
