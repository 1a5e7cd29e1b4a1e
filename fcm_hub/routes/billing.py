from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.security import Caller, get_caller
from ..db import get_db
from ..logging import get_logger
from ..models.models import Billing, User, utcnow
from ..schemas.billing import BillingPayload
from ..services.rows import get_or_404, get_or_none, now_iso, parse_id, row_to_dict, rows_to_list, temp_id
from ..utils.formatting import normalize_amount


router = APIRouter(prefix="/api/billing", tags=["billing"])
log = get_logger(__name__)

DEFAULT_STATUS = "Not Paid"


def billing_values(payload: BillingPayload) -> dict:
    return {
        "date": payload.date,
        "sales_invoice_number": payload.sales_invoice_number,
        "bs_number": payload.bs_number,
        "quote_number": payload.quote_number,
        "description": payload.description,
        "address": payload.address,
        "amount": normalize_amount(payload.amount),
        "payment": payload.payment,
        "check_info": payload.check_info,
        "check_number": payload.check_number,
        "payment_date": payload.payment_date,
        "status": payload.status or DEFAULT_STATUS,
    }


def resolve_editor(db: Session, caller: Caller, fallback: Optional[str]) -> Optional[str]:
    """The caller's full name, else username, else whatever the client sent."""
    pk = parse_id(caller.user_id)
    if pk is None:
        return fallback
    try:
        user = db.get(User, pk)
    except SQLAlchemyError as e:
        log.warning("billing_editor_lookup_failed", user_id=caller.user_id, error=str(e))
        return fallback
    if user is None:
        return fallback
    return (user.full_name or "").strip() or user.username or fallback


@router.get("")
def list_billing(db: Optional[Session] = Depends(get_db)):
    if db is None:
        return []
    try:
        entries = db.query(Billing).order_by(Billing.date.desc()).all()
    except SQLAlchemyError as e:
        log.error("billing_list_failed", error=str(e))
        return []
    return rows_to_list(entries)


@router.post("", status_code=201)
def create_billing(payload: BillingPayload, db: Optional[Session] = Depends(get_db)):
    if db is None:
        values = billing_values(payload)
        values["amount"] = payload.amount or 0
        return {"id": temp_id(), **values, "created_at": now_iso()}

    entry = Billing(**billing_values(payload))
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return row_to_dict(entry)


@router.get("/{billing_id}")
def get_billing(billing_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return None
    return row_to_dict(get_or_none(db, Billing, billing_id))


@router.put("/{billing_id}")
def update_billing(
    billing_id: str,
    payload: BillingPayload,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        return payload.echo(id=billing_id)

    entry = get_or_404(db, Billing, billing_id, detail="Billing entry not found")
    for key, value in billing_values(payload).items():
        setattr(entry, key, value)
    entry.last_edited_by = resolve_editor(db, caller, payload.last_edited_by)
    entry.updated_at = utcnow()
    db.commit()
    db.refresh(entry)
    return row_to_dict(entry)


@router.delete("/{billing_id}")
def delete_billing(billing_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return {"success": True}
    entry = get_or_none(db, Billing, billing_id)
    if entry is not None:
        db.delete(entry)
        db.commit()
    return {"success": True}
