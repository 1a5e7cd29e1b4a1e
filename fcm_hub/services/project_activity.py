"""Last-edited bookkeeping for projects whose task list changed."""
import uuid
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.security import Caller
from ..logging import get_logger
from ..models.models import Project, ProjectTask, utcnow


log = get_logger(__name__)


def serialize_task(task: ProjectTask) -> Dict[str, Any]:
    return {
        "id": str(task.id),
        "name": task.name,
        "isFinished": bool(task.is_finished),
        "orderIndex": task.order_index,
    }


def touch_project(db: Session, project_id: uuid.UUID, caller: Caller) -> bool:
    """Stamp updated_at/last_edited_by on the parent project.

    Runs in a SAVEPOINT after the task write; a failure rolls back only the
    stamp, is logged and reported as False. It never raises.
    """
    try:
        with db.begin_nested():
            project = db.get(Project, project_id)
            if project is None:
                return False
            project.updated_at = utcnow()
            project.last_edited_by = caller.display_name()
        return True
    except SQLAlchemyError as e:
        log.warning("project_touch_failed", project_id=str(project_id), error=str(e))
        return False
