from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..logging import get_logger
from ..models.models import Project, ProjectTask, utcnow
from ..schemas.projects import ProjectPayload
from ..services.project_activity import serialize_task
from ..services.rows import get_or_404, get_or_none, now_iso, row_to_dict, rows_to_list, temp_id


router = APIRouter(prefix="/api/projects", tags=["projects"])
log = get_logger(__name__)

# Written by POST/PUT; tasks live in project_tasks and are managed by the tasks routes
PROJECT_COLUMNS = (
    "project_name",
    "client_name",
    "client_contact",
    "building_address",
    "work_type",
    "scope_of_work",
    "project_cost",
    "deadline_date",
    "files",
)
# Cleared on PUT when the client leaves them out
CLEARED_WHEN_OMITTED = ("client_contact", "project_cost", "files")


@router.get("")
def list_projects(db: Optional[Session] = Depends(get_db)):
    if db is None:
        return []
    try:
        projects = db.query(Project).order_by(Project.created_at.desc()).all()
    except SQLAlchemyError as e:
        # The frontend falls back to local storage on an empty list
        log.error("projects_list_failed", error=str(e))
        return []
    return rows_to_list(projects)


@router.post("", status_code=201)
def create_project(payload: ProjectPayload, db: Optional[Session] = Depends(get_db)):
    values = {k: getattr(payload, k) for k in PROJECT_COLUMNS}
    values["tasks"] = payload.tasks
    if db is None:
        now = now_iso()
        return {"id": temp_id(), **values, "created_at": now, "updated_at": now}

    project = Project(**values)
    db.add(project)
    db.commit()
    db.refresh(project)
    return row_to_dict(project)


@router.get("/{project_id}")
def get_project(project_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return None
    project = get_or_none(db, Project, project_id)
    if project is None:
        return None
    data = row_to_dict(project)
    tasks = (
        db.query(ProjectTask)
        .filter(ProjectTask.project_id == project.id)
        .order_by(ProjectTask.order_index.asc())
        .all()
    )
    data["tasks"] = [serialize_task(t) for t in tasks]
    return data


@router.put("/{project_id}")
def update_project(project_id: str, payload: ProjectPayload, db: Optional[Session] = Depends(get_db)):
    if db is None:
        now_ms = int(utcnow().timestamp() * 1000)
        return {
            "id": project_id,
            "projectName": payload.project_name,
            "clientName": payload.client_name,
            "clientContact": payload.client_contact or "",
            "buildingAddress": payload.building_address,
            "workType": payload.work_type,
            "scopeOfWork": payload.scope_of_work,
            "projectCost": payload.project_cost or "",
            "deadlineDate": payload.deadline_date,
            "lastEditedBy": payload.last_edited_by or settings.default_editor_name,
            "files": payload.files,
            "tasks": payload.tasks or [],
            "updatedAt": now_ms,
            "createdAt": now_ms,
        }

    project = get_or_404(db, Project, project_id, detail="Project not found")
    sent = payload.columns()
    for key in PROJECT_COLUMNS:
        if key in sent:
            setattr(project, key, sent[key])
        elif key in CLEARED_WHEN_OMITTED:
            setattr(project, key, None)
    if "last_edited_by" in sent:
        project.last_edited_by = sent["last_edited_by"] or None
    project.updated_at = utcnow()
    db.commit()
    db.refresh(project)
    return row_to_dict(project)


@router.delete("/{project_id}")
def delete_project(project_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return {"success": True}
    project = get_or_none(db, Project, project_id)
    if project is not None:
        db.delete(project)
        db.commit()
    return {"success": True}
