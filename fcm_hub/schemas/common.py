from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body in the frontend's camelCase; attribute names match the snake_case columns."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def columns(self, **overrides: Any) -> Dict[str, Any]:
        """Only the fields the caller actually sent, keyed by column name."""
        data = self.model_dump(exclude_unset=True)
        data.update(overrides)
        return data

    def echo(self, **extra: Any) -> Dict[str, Any]:
        """The body as the frontend sent it, for fallback-mode responses."""
        data = self.model_dump(by_alias=True, exclude_unset=True)
        data.update(extra)
        return data


def empty_to_none(v):
    if v is None:
        return None
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


def to_text(v):
    if v is None or isinstance(v, str):
        return v
    return str(v)
