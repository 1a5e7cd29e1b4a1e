import time
import uuid
from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from sqlalchemy import inspect
from sqlalchemy.orm import Session

from ..models.models import utcnow


def row_to_dict(obj: Any, only: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
    """Column values of an ORM row, JSON-ready (UUIDs and datetimes as strings)."""
    if obj is None:
        return None
    keys = [attr.key for attr in inspect(obj).mapper.column_attrs]
    if only is not None:
        wanted = set(only)
        keys = [k for k in keys if k in wanted]
    return jsonable_encoder({k: getattr(obj, k) for k in keys})


def rows_to_list(objs: Iterable[Any]) -> List[Dict[str, Any]]:
    return [row_to_dict(o) for o in objs]


def parse_id(raw: Any) -> Optional[uuid.UUID]:
    """UUID from a path/body value; None for anything malformed (treated as "no such row")."""
    if raw is None or raw == "":
        return None
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


def same_id(a: Any, b: Any) -> bool:
    if not a or not b:
        return False
    if str(a) == str(b):
        return True
    pa = parse_id(a)
    return pa is not None and pa == parse_id(b)


def get_or_none(db: Session, model, row_id: Any):
    pk = parse_id(row_id)
    if pk is None:
        return None
    return db.get(model, pk)


def get_or_404(db: Session, model, row_id: Any, detail: str = "Not found"):
    row = get_or_none(db, model, row_id)
    if row is None:
        raise HTTPException(status_code=404, detail=detail)
    return row


def temp_id() -> str:
    """Placeholder id for fallback-mode echoes, mirrors the frontend's local ids."""
    return f"temp-{int(time.time() * 1000)}"


def now_iso() -> str:
    return utcnow().isoformat()
