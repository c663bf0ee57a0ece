"""Pydantic schemas for tenant invites (temp_tenants) and verification."""

import calendar
from datetime import date, datetime

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from app.schemas.validators import validate_email, validate_phone


def add_months(d: date, months: int) -> date:
    """Same day `months` later, clamped to the end of shorter months."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class TenantInviteCreate(BaseModel):
    property_id: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    email: str
    phone: str
    lease_start_date: date
    lease_end_date: date
    deposit: float = Field(..., ge=0, le=1_000_000)
    rent_amount: float = Field(..., ge=0, le=1_000_000)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return validate_phone(v)

    @field_validator("deposit", "rent_amount")
    @classmethod
    def _two_decimals(cls, v: float) -> float:
        return round(v, 2)

    @field_validator("lease_start_date")
    @classmethod
    def _start_not_past(cls, v: date) -> date:
        if v < date.today():
            raise ValueError("Start date must be today or in the future")
        return v

    @field_validator("lease_end_date")
    @classmethod
    def _end_after_start(cls, v: date, info: ValidationInfo) -> date:
        if v < date.today():
            raise ValueError("End date must be today or in the future")
        start = info.data.get("lease_start_date")
        if start is None:
            return v
        if v <= start:
            raise ValueError("End date must be after start date")
        if v < add_months(start, 1):
            raise ValueError("Lease duration must be at least 1 month")
        return v


class TenantInviteOut(BaseModel):
    id: str
    landlord_id: str
    property_id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    lease_start_date: date
    lease_end_date: date
    deposit: float
    rent_amount: float
    status: str
    expires_at: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class InviteCreateResult(BaseModel):
    """The invite is created even when the email could not be sent."""
    invite: TenantInviteOut
    invite_link: str
    email_sent: bool
    email_error: str | None = None


class InviteVerifyRequest(BaseModel):
    email: str
    token: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return validate_email(v)


class InviteVerifyResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    invite: TenantInviteOut
