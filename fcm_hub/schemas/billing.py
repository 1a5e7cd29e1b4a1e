from typing import Any, Optional

from pydantic import field_validator

from .common import CamelModel, empty_to_none, to_text


class BillingPayload(CamelModel):
    date: Optional[str] = None
    sales_invoice_number: Optional[str] = None
    bs_number: Optional[str] = None
    quote_number: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    amount: Optional[Any] = None
    payment: Optional[str] = None
    check_info: Optional[str] = None
    check_number: Optional[str] = None
    payment_date: Optional[str] = None
    status: Optional[str] = None
    last_edited_by: Optional[str] = None

    @field_validator('sales_invoice_number', 'bs_number', 'quote_number', 'check_number', 'payment', mode='before')
    @classmethod
    def as_text(cls, v):
        return to_text(v)

    @field_validator('bs_number', 'quote_number', 'payment', 'check_info', 'check_number', 'payment_date', 'status', 'last_edited_by', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)
