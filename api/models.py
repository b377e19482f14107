"""Pydantic schemas for Employee CRUD and import rows.

Python attributes are snake_case; the wire format is camelCase
(``phoneNumber``, ``dateOfBirth``).  Both spellings are accepted on input.
"""
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

EMAIL_MAX_LENGTH = 100

_WIRE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
)


def _check_email_length(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > EMAIL_MAX_LENGTH:
        raise ValueError(f"email must be at most {EMAIL_MAX_LENGTH} characters")
    return value


class EmployeeBase(BaseModel):
    model_config = _WIRE_CONFIG

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: Optional[str] = Field(None, max_length=15)
    address: Optional[str] = Field(None, max_length=200)
    date_of_birth: Optional[date] = None  # ISO 8601: "1990-05-20"
    position: Optional[str] = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def check_email_length(cls, value: str) -> str:
        return _check_email_length(value)


class EmployeeCreate(EmployeeBase):
    """Candidate record: what a POST body or an accepted import row becomes."""


class EmployeeUpdate(BaseModel):
    """All fields optional: only the supplied fields change."""

    model_config = _WIRE_CONFIG

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=15)
    address: Optional[str] = Field(None, max_length=200)
    date_of_birth: Optional[date] = None
    position: Optional[str] = Field(None, max_length=100)

    @field_validator("name", "email")
    @classmethod
    def reject_null(cls, value):
        # name/email may be omitted but never cleared
        if value is None:
            raise ValueError("cannot be null")
        return value

    @field_validator("email")
    @classmethod
    def check_email_length(cls, value: Optional[str]) -> Optional[str]:
        return _check_email_length(value)

    def changes(self) -> dict:
        """Explicitly supplied fields, keyed by column name."""
        return self.model_dump(exclude_unset=True)


class Employee(EmployeeBase):
    id: int

    model_config = ConfigDict(from_attributes=True)
