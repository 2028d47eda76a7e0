"""Customer lead models: financing applications and contact requests."""

from __future__ import annotations

import re
from typing import Any

from pydantic import Field, field_validator, model_validator

from autolot._constants import DEFAULT_LOAN_TERM, VALID_LOAN_TERMS
from autolot.models._base import AutolotBaseModel, LotEnum

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_email(value: str) -> str:
    if not _EMAIL.match(value):
        raise ValueError("Enter a valid email address")
    return value


def _check_phone(value: str) -> str:
    digits = re.sub(r"\D", "", value)
    if len(digits) < 7:
        raise ValueError("Enter a valid phone number")
    return value


class ContactMethod(LotEnum):
    EMAIL = "email"
    PHONE = "phone"


class CreditApplication(AutolotBaseModel):
    """Financing application submitted from the credit page."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str
    phone: str
    ssn: str
    income: float = Field(gt=0)
    """Annual income."""
    employment: str = Field(min_length=1)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str
    down_payment: float = Field(default=0, ge=0)
    loan_term: int = DEFAULT_LOAN_TERM
    """Loan length in months."""
    vehicle_id: str | None = Field(default=None, alias="carId")

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("phone")
    @classmethod
    def _valid_phone(cls, value: str) -> str:
        return _check_phone(value)

    @field_validator("ssn")
    @classmethod
    def _check_ssn(cls, value: str) -> str:
        digits = re.sub(r"\D", "", value)
        if len(digits) != 9:
            raise ValueError("SSN must have 9 digits")
        return f"{digits[:3]}-{digits[3:5]}-{digits[5:]}"

    @field_validator("zip_code")
    @classmethod
    def _check_zip(cls, value: str) -> str:
        if not re.fullmatch(r"\d{5}(-\d{4})?", value):
            raise ValueError("ZIP code must be 5 digits")
        return value

    @field_validator("loan_term", mode="before")
    @classmethod
    def _check_term(cls, value: Any) -> Any:
        if value in VALID_LOAN_TERMS or str(value).strip() in {str(t) for t in VALID_LOAN_TERMS}:
            return int(value)
        raise ValueError(f"loan term must be one of {VALID_LOAN_TERMS} months")


class ContactRequest(AutolotBaseModel):
    """Message sent from the contact page, optionally about one vehicle."""

    name: str = Field(min_length=1)
    email: str
    phone: str = ""
    message: str = Field(min_length=1)
    preferred_contact: ContactMethod = ContactMethod.EMAIL
    vehicle_id: str | None = Field(default=None, alias="carId")

    @field_validator("email")
    @classmethod
    def _valid_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("phone")
    @classmethod
    def _phone_if_given(cls, value: str) -> str:
        return _check_phone(value) if value else value

    @model_validator(mode="after")
    def _phone_for_phone_contact(self) -> ContactRequest:
        if self.preferred_contact == ContactMethod.PHONE and not self.phone:
            raise ValueError("phone: a phone number is required when phone contact is preferred")
        return self
