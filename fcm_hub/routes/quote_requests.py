from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..auth.security import Caller, get_caller
from ..config import settings
from ..db import get_db
from ..limiter import limiter
from ..logging import get_logger
from ..models.models import QuoteRequest, utcnow
from ..schemas.quotations import QuoteRequestCreate, QuoteRequestUpdate
from ..services.rows import get_or_404, get_or_none, now_iso, row_to_dict, rows_to_list, temp_id
from ..utils.formatting import validate_email, validate_phone


router = APIRouter(prefix="/api/quote-requests", tags=["quote-requests"])
log = get_logger(__name__)

PENDING = "pending"


@router.get("")
def list_quote_requests(status: Optional[str] = None, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return []
    query = db.query(QuoteRequest)
    if status:
        query = query.filter(QuoteRequest.status == status)
    return rows_to_list(query.order_by(QuoteRequest.created_at.desc()).all())


@router.post("/validate")
def validate_quote_request(payload: QuoteRequestCreate):
    """Contact checks the public form runs before submitting.

    Intake itself only checks presence, so this never blocks a POST.
    """
    errors = {
        "email": validate_email(payload.email),
        "phoneNumber": validate_phone(payload.phone_number),
    }
    errors = {field: message for field, message in errors.items() if message}
    return {"valid": not errors, "errors": errors}


@router.post("", status_code=201)
@limiter.limit(settings.quote_request_rate_limit)
def create_quote_request(request: Request, payload: QuoteRequestCreate, db: Optional[Session] = Depends(get_db)):
    if db is None:
        now = now_iso()
        return payload.echo(id=temp_id(), status=PENDING, created_at=now, updated_at=now)

    if payload.missing_required():
        raise HTTPException(status_code=400, detail="All required fields must be provided")

    quote_request = QuoteRequest(
        full_name=payload.full_name,
        email=payload.email,
        phone_number=payload.phone_number,
        project_type=payload.project_type,
        project_location=payload.project_location,
        estimated_budget=payload.estimated_budget,
        project_details=payload.project_details,
        status=PENDING,
    )
    db.add(quote_request)
    db.commit()
    db.refresh(quote_request)
    log.info("quote_request_received", quote_request_id=str(quote_request.id), project_type=quote_request.project_type)
    return row_to_dict(quote_request)


@router.get("/{request_id}")
def get_quote_request(request_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return None
    quote_request = get_or_none(db, QuoteRequest, request_id)
    if quote_request is None:
        return JSONResponse(None, status_code=404)
    return row_to_dict(quote_request)


@router.put("/{request_id}")
def update_quote_request(
    request_id: str,
    payload: QuoteRequestUpdate,
    db: Optional[Session] = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    if db is None:
        return payload.echo(id=request_id, updated_at=now_iso())

    quote_request = get_or_404(db, QuoteRequest, request_id, detail="Quote request not found")
    now = utcnow()
    if "status" in payload.model_fields_set and payload.status is not None:
        quote_request.status = payload.status
        # Leaving "pending" records who reviewed it
        if payload.status != PENDING and caller.user_id:
            quote_request.reviewed_by = caller.user_id
            quote_request.reviewed_at = now
    quote_request.updated_at = now
    db.commit()
    db.refresh(quote_request)
    return row_to_dict(quote_request)


@router.delete("/{request_id}")
def delete_quote_request(request_id: str, db: Optional[Session] = Depends(get_db)):
    if db is None:
        return {"success": True}
    quote_request = get_or_none(db, QuoteRequest, request_id)
    if quote_request is not None:
        db.delete(quote_request)
        db.commit()
    return {"success": True}
