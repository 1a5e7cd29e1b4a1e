from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth.security import Caller, get_caller
from ..db import get_db
from ..models.models import Project, ProjectTask, utcnow
from ..schemas.projects import TaskBatch, TaskPayload
from ..services.project_activity import serialize_task, touch_project
from ..services.rows import get_or_404, parse_id, temp_id


router = APIRouter(prefix="/api/projects/{project_id}/tasks", tags=["project-tasks"])


def _get_task(db: Session, project: Project, task_id: str) -> ProjectTask:
    pk = parse_id(task_id)
    task = None
    if pk is not None:
        task = db.query(ProjectTask).filter(ProjectTask.id == pk, ProjectTask.project_id == project.id).first()
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _apply(task: ProjectTask, payload: TaskPayload) -> None:
    if payload.name is not None:
        task.name = payload.name
    if payload.is_finished is not None:
        task.is_finished = payload.is_finished
    task.order_index = payload.order_index or 0
    task.updated_at = utcnow()


@router.get("")
def list_tasks(project_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return []
    pk = parse_id(project_id)
    if pk is None:
        return []
    tasks = (
        db.query(ProjectTask)
        .filter(ProjectTask.project_id == pk)
        .order_by(ProjectTask.order_index.asc())
        .all()
    )
    return [serialize_task(t) for t in tasks]


@router.post("", status_code=201)
def create_task(
    project_id: str,
    payload: TaskPayload,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        return {
            "id": temp_id(),
            "name": payload.name,
            "isFinished": False,
            "orderIndex": payload.order_index or 0,
        }

    if not payload.name or not payload.name.strip():
        raise HTTPException(status_code=400, detail="Task name is required")
    project = get_or_404(db, Project, project_id, detail="Project not found")

    current_max = (
        db.query(func.max(ProjectTask.order_index))
        .filter(ProjectTask.project_id == project.id)
        .scalar()
    )
    next_index = 0 if current_max is None else current_max + 1

    task = ProjectTask(project_id=project.id, name=payload.name, is_finished=False, order_index=next_index)
    db.add(task)
    db.flush()
    touch_project(db, project.id, caller)
    db.commit()
    db.refresh(task)
    return serialize_task(task)


@router.put("")
def update_tasks(
    project_id: str,
    batch: TaskBatch,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None or not batch.tasks:
        return {"success": True, "updated": 0}

    project = get_or_404(db, Project, project_id, detail="Project not found")
    ids = [parse_id(t.id) for t in batch.tasks]
    existing = {
        t.id: t
        for t in db.query(ProjectTask).filter(
            ProjectTask.project_id == project.id,
            ProjectTask.id.in_([i for i in ids if i is not None]),
        )
    }
    updated = 0
    for pk, payload in zip(ids, batch.tasks):
        task = existing.get(pk)
        if task is None:
            # Unknown ids are skipped, the rest of the batch still applies
            continue
        _apply(task, payload)
        updated += 1
    db.flush()
    touch_project(db, project.id, caller)
    db.commit()
    return {"success": True, "updated": updated}


@router.put("/{task_id}")
def update_task(
    project_id: str,
    task_id: str,
    payload: TaskPayload,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        return {
            "id": task_id,
            "name": payload.name,
            "isFinished": payload.is_finished,
            "orderIndex": payload.order_index or 0,
        }

    project = get_or_404(db, Project, project_id, detail="Project not found")
    task = _get_task(db, project, task_id)
    _apply(task, payload)
    db.flush()
    touch_project(db, project.id, caller)
    db.commit()
    db.refresh(task)
    return serialize_task(task)


@router.delete("/{task_id}")
def delete_task(
    project_id: str,
    task_id: str,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        return {"success": True}

    project = get_or_404(db, Project, project_id, detail="Project not found")
    pk = parse_id(task_id)
    if pk is not None:
        db.query(ProjectTask).filter(ProjectTask.id == pk, ProjectTask.project_id == project.id).delete(
            synchronize_session=False
        )
        db.flush()
    touch_project(db, project.id, caller)
    db.commit()
    return {"success": True}
