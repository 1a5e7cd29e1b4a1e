from typing import List, Optional

from pydantic import field_validator

from .common import CamelModel, to_text


class TagSet(CamelModel):
    user_ids: Optional[List[Optional[str]]] = None
    positions: Optional[List[Optional[str]]] = None

    @field_validator('user_ids', 'positions', mode='before')
    @classmethod
    def only_lists(cls, v):
        # Anything that is not a list is treated as "not supplied"
        if v is None or isinstance(v, list):
            return v
        return None

    @property
    def touches_tags(self) -> bool:
        return "user_ids" in self.model_fields_set or "positions" in self.model_fields_set


class ReminderCreate(TagSet):
    title: Optional[str] = None
    description: Optional[str] = None
    reminder_date: Optional[str] = None
    reminder_time: Optional[str] = None
    deadline: Optional[str] = None
    priority: Optional[str] = None
    project_id: Optional[str] = None

    @field_validator('project_id', mode='before')
    @classmethod
    def as_text(cls, v):
        return to_text(v)


class ReminderUpdate(ReminderCreate):
    status: Optional[str] = None
