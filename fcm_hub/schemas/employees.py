from typing import Optional

from pydantic import Field, field_validator

from .common import CamelModel, to_text


class EmployeeBase(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None
    position: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    employee_id: Optional[str] = None
    address: Optional[str] = None

    @field_validator('contact_number', 'employee_id', mode='before')
    @classmethod
    def as_text(cls, v):
        return to_text(v)


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(EmployeeBase):
    pass


class ProfileUpdate(CamelModel):
    user_id: Optional[str] = None
    full_name: Optional[str] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    old_password: Optional[str] = None
    new_password: Optional[str] = None

    @field_validator('user_id', 'contact_number', mode='before')
    @classmethod
    def as_text(cls, v):
        return to_text(v)


class LoginRequest(CamelModel):
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)
