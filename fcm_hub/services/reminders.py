"""Task reminder reads with their relations, tag sets and visibility rules."""
import re
import uuid
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..logging import get_logger
from ..models.models import TaskReminder, TaskReminderCompletion, TaskReminderTag
from .rows import parse_id, row_to_dict


log = get_logger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^\d{2}:\d{2}(:\d{2})?$")

PROJECT_FIELDS = ("id", "project_name", "client_name", "building_address")
CREATOR_FIELDS = ("id", "full_name", "username")
TAG_USER_FIELDS = ("id", "full_name", "username", "position")


def reminder_query(db: Session):
    return db.query(TaskReminder).options(
        selectinload(TaskReminder.project),
        selectinload(TaskReminder.creator),
        selectinload(TaskReminder.tags).selectinload(TaskReminderTag.user),
        selectinload(TaskReminder.completions).selectinload(TaskReminderCompletion.user),
    )


def load_reminder(db: Session, reminder_id: Any) -> Optional[TaskReminder]:
    pk = parse_id(reminder_id)
    if pk is None:
        return None
    return reminder_query(db).filter(TaskReminder.id == pk).first()


def serialize_tag(tag: TaskReminderTag) -> Dict[str, Any]:
    return {
        "id": str(tag.id),
        "task_reminder_id": str(tag.task_reminder_id),
        "user_id": str(tag.user_id) if tag.user_id else None,
        "position": tag.position,
        "user": row_to_dict(tag.user, TAG_USER_FIELDS) if tag.user_id else None,
    }


def serialize_completion(completion: TaskReminderCompletion) -> Dict[str, Any]:
    return {
        "id": str(completion.id),
        "user_id": str(completion.user_id),
        "completed_at": completion.completed_at.isoformat() if completion.completed_at else None,
        "user": row_to_dict(completion.user, CREATOR_FIELDS),
    }


def serialize_reminder(reminder: TaskReminder) -> Dict[str, Any]:
    data = row_to_dict(reminder)
    data["projects"] = row_to_dict(reminder.project, PROJECT_FIELDS)
    data["creator"] = row_to_dict(reminder.creator, CREATOR_FIELDS)
    data["tags"] = [serialize_tag(t) for t in reminder.tags]
    data["completions"] = [serialize_completion(c) for c in reminder.completions]
    return data


def combine_date_time(date_str: str, time_str: str) -> datetime:
    """reminder_date + reminder_time as one UTC timestamp; 400 on bad input."""
    if not date_str or not DATE_RE.match(date_str):
        raise HTTPException(status_code=400, detail="Invalid reminder date format. Expected YYYY-MM-DD")
    if not time_str or not TIME_RE.match(time_str):
        raise HTTPException(status_code=400, detail="Invalid reminder time format. Expected HH:MM or HH:MM:SS")
    try:
        combined = datetime.fromisoformat(f"{date_str}T{time_str}")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid reminder date or time combination")
    return combined.replace(tzinfo=timezone.utc)


def parse_deadline(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def day_bounds(date_str: str) -> tuple[datetime, datetime]:
    try:
        day = datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date filter. Expected YYYY-MM-DD")
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def build_tags(reminder_id: uuid.UUID, user_ids: Optional[Iterable[Any]], positions: Optional[Iterable[Any]]) -> List[TaskReminderTag]:
    """One row per non-blank user id or position. Raises ValueError on a malformed user id."""
    tags: List[TaskReminderTag] = []
    for raw in user_ids or []:
        if not raw:
            continue
        user_uuid = parse_id(raw)
        if user_uuid is None:
            raise ValueError(f"Invalid user id: {raw}")
        tags.append(TaskReminderTag(task_reminder_id=reminder_id, user_id=user_uuid, position=None))
    for position in positions or []:
        if not position:
            continue
        tags.append(TaskReminderTag(task_reminder_id=reminder_id, user_id=None, position=str(position)))
    return tags


def side_effect_tags(
    reminder_id: uuid.UUID, user_ids: Optional[Iterable[Any]], positions: Optional[Iterable[Any]], event: str
) -> Optional[List[TaskReminderTag]]:
    """build_tags for writes where tagging is best effort.

    A malformed user id fails the whole tag set the same way a rejected
    insert does: it is logged under ``event`` and None is returned.
    """
    try:
        return build_tags(reminder_id, user_ids, positions)
    except ValueError as e:
        log.error(event, reminder_id=str(reminder_id), error=str(e))
        return None


def insert_tags(db: Session, tags: List[TaskReminderTag], event: str) -> bool:
    """Insert tags in a SAVEPOINT; failures are logged and leave prior state intact."""
    if not tags:
        return True
    try:
        with db.begin_nested():
            db.add_all(tags)
        return True
    except SQLAlchemyError as e:
        log.error(event, reminder_id=str(tags[0].task_reminder_id), error=str(e))
        return False


def replace_tags(db: Session, reminder: TaskReminder, tags: List[TaskReminderTag]) -> bool:
    """Swap the whole tag set for ``tags``.

    Delete and insert share one SAVEPOINT: when the insert fails the old tag
    set is restored and False is returned.
    """
    try:
        with db.begin_nested():
            db.query(TaskReminderTag).filter(TaskReminderTag.task_reminder_id == reminder.id).delete(
                synchronize_session=False
            )
            db.add_all(tags)
    except SQLAlchemyError as e:
        log.error("reminder_tags_replace_failed", reminder_id=str(reminder.id), error=str(e))
        return False
    finally:
        db.expire(reminder, ["tags"])
    return True


def is_visible_to(reminder: Dict[str, Any], user_id: Optional[str], position: Optional[str]) -> bool:
    if user_id and reminder.get("created_by") == user_id:
        return True
    for tag in reminder.get("tags") or []:
        if user_id and tag.get("user_id") == user_id:
            return True
        if position and tag.get("position") == position:
            return True
    return False


def filter_for_viewer(reminders: List[Dict[str, Any]], user_id: Optional[str], position: Optional[str]) -> List[Dict[str, Any]]:
    """Reminders the viewer created or is tagged on, minus those they already completed."""
    if user_id or position:
        reminders = [r for r in reminders if is_visible_to(r, user_id, position)]
    if user_id:
        reminders = [
            r for r in reminders
            if not any(c.get("user_id") == user_id for c in r.get("completions") or [])
        ]
    return reminders
