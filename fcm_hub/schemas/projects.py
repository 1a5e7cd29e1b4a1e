from typing import Any, List, Optional

from pydantic import field_validator

from .common import CamelModel, empty_to_none, to_text


class ProjectPayload(CamelModel):
    project_name: Optional[str] = None
    client_name: Optional[str] = None
    client_contact: Optional[str] = None
    building_address: Optional[str] = None
    work_type: Optional[str] = None
    scope_of_work: Optional[str] = None
    project_cost: Optional[str] = None
    deadline_date: Optional[str] = None
    files: Optional[List[Any]] = None
    tasks: Optional[List[Any]] = None
    last_edited_by: Optional[str] = None

    @field_validator('project_cost', mode='before')
    @classmethod
    def cost_as_text(cls, v):
        return to_text(v)

    @field_validator('client_contact', 'project_cost', 'files', 'tasks', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if v == [] or v == "":
            return None
        return empty_to_none(v)


class TaskPayload(CamelModel):
    id: Optional[str] = None
    name: Optional[str] = None
    is_finished: Optional[bool] = None
    order_index: Optional[int] = None


class TaskBatch(CamelModel):
    tasks: List[TaskPayload] = []
