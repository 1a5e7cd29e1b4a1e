from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..logging import get_logger
from ..models.models import Quotation, utcnow
from ..schemas.quotations import QuotationPayload
from ..services.rows import get_or_404, get_or_none, now_iso, row_to_dict, rows_to_list, temp_id
from ..utils.formatting import (
    calculate_total_from_items,
    capitalize_first_letters,
    format_currency,
    format_date_short,
)
from ..utils.terms import DEFAULT_TEMPLATE, get_terms_template


router = APIRouter(prefix="/api/quotations", tags=["quotations"])
log = get_logger(__name__)

QUOTATION_COLUMNS = (
    "quotation_number",
    "date",
    "valid_until",
    "client_name",
    "job_description",
    "client_contact",
    "installation_address",
    "attention",
    "total_due",
    "terms",
    "items",
)


TITLE_CASED = ("client_name", "job_description", "installation_address", "attention")


def _title_case_items(items):
    if not items:
        return items
    return [
        {**item, "description": capitalize_first_letters(item.get("description"))}
        if isinstance(item, dict) and isinstance(item.get("description"), str)
        else item
        for item in items
    ]


def quotation_values(payload: QuotationPayload) -> dict:
    values = {k: getattr(payload, k) for k in QUOTATION_COLUMNS}
    for key in TITLE_CASED:
        values[key] = capitalize_first_letters(values[key])
    values["items"] = _title_case_items(values["items"])
    values["terms_template"] = payload.terms_template or DEFAULT_TEMPLATE
    values["status"] = payload.status or "Draft"
    return values


@router.get("")
def list_quotations(db: Optional[Session] = Depends(get_db)):
    if db is None:
        return []
    try:
        quotations = db.query(Quotation).order_by(Quotation.created_at.desc()).all()
    except SQLAlchemyError as e:
        log.error("quotations_list_failed", error=str(e))
        return []
    return rows_to_list(quotations)


@router.post("", status_code=201)
def create_quotation(payload: QuotationPayload, db: Optional[Session] = Depends(get_db)):
    values = quotation_values(payload)
    values["created_by"] = payload.created_by
    if db is None:
        return {"id": temp_id(), **values, "created_at": now_iso()}

    quotation = Quotation(**values)
    db.add(quotation)
    db.commit()
    db.refresh(quotation)
    return row_to_dict(quotation)


@router.get("/{quotation_id}")
def get_quotation(quotation_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return None
    return row_to_dict(get_or_none(db, Quotation, quotation_id))


@router.get("/{quotation_id}/terms")
def get_quotation_terms(quotation_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return get_terms_template(DEFAULT_TEMPLATE, format_currency(0))
    quotation = get_or_404(db, Quotation, quotation_id, detail="Quotation not found")
    if quotation.items:
        total = format_currency(calculate_total_from_items(quotation.items))
    else:
        total = format_currency(quotation.total_due or 0)
    data = get_terms_template(quotation.terms_template or DEFAULT_TEMPLATE, total)
    data["dateFormatted"] = format_date_short(quotation.date)
    data["validUntilFormatted"] = format_date_short(quotation.valid_until)
    return data


@router.put("/{quotation_id}")
def update_quotation(quotation_id: str, payload: QuotationPayload, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return payload.echo(id=quotation_id)

    quotation = get_or_404(db, Quotation, quotation_id, detail="Quotation not found")
    sent = payload.model_fields_set
    for key, value in quotation_values(payload).items():
        # Template and status keep their stored value unless the client sent one
        if key in ("terms_template", "status") and key not in sent:
            continue
        setattr(quotation, key, value)
    quotation.last_edited_by = payload.last_edited_by
    quotation.updated_at = utcnow()
    db.commit()
    db.refresh(quotation)
    return row_to_dict(quotation)


@router.delete("/{quotation_id}")
def delete_quotation(quotation_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return {"success": True}
    quotation = get_or_none(db, Quotation, quotation_id)
    if quotation is not None:
        db.delete(quotation)
        db.commit()
    return {"success": True}
