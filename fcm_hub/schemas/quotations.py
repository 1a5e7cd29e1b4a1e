from typing import Any, List, Optional

from pydantic import field_validator

from .common import CamelModel, empty_to_none, to_text


class QuotationPayload(CamelModel):
    quotation_number: Optional[str] = None
    date: Optional[str] = None
    valid_until: Optional[str] = None
    client_name: Optional[str] = None
    job_description: Optional[str] = None
    client_contact: Optional[str] = None
    installation_address: Optional[str] = None
    attention: Optional[str] = None
    total_due: Optional[str] = None
    terms: Optional[List[Any]] = None
    terms_template: Optional[str] = None
    items: Optional[List[Any]] = None
    status: Optional[str] = None
    created_by: Optional[str] = None
    last_edited_by: Optional[str] = None

    @field_validator('quotation_number', 'total_due', mode='before')
    @classmethod
    def as_text(cls, v):
        return to_text(v)

    @field_validator('client_contact', 'attention', 'terms_template', 'status', 'created_by', 'last_edited_by', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)


class QuoteRequestCreate(CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    project_type: Optional[str] = None
    project_location: Optional[str] = None
    estimated_budget: Optional[str] = None
    project_details: Optional[str] = None

    @field_validator('phone_number', 'estimated_budget', mode='before')
    @classmethod
    def as_text(cls, v):
        return to_text(v)

    @field_validator('*', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        return empty_to_none(v)

    def missing_required(self) -> bool:
        return not all([
            self.full_name,
            self.email,
            self.phone_number,
            self.project_type,
            self.project_location,
            self.project_details,
        ])


class QuoteRequestUpdate(CamelModel):
    status: Optional[str] = None
