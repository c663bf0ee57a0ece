"""Pydantic schemas for leases."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator

LeaseStatus = Literal["draft", "active", "terminated", "expired"]


class LeaseCreate(BaseModel):
    tenant_id: str = Field(..., min_length=1)
    property_id: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    rent_amount: float = Field(..., ge=0)
    deposit_amount: float = Field(0.0, ge=0)
    payment_due_date: int = Field(1, ge=1, le=31)
    status: LeaseStatus = "draft"

    @field_validator("end_date")
    @classmethod
    def _end_after_start(cls, v: date, info: ValidationInfo) -> date:
        start = info.data.get("start_date")
        if start is not None and v <= start:
            raise ValueError("End date must be after start date")
        return v


class LeaseOut(BaseModel):
    id: str
    user_id: str | None = None
    tenant_id: str
    property_id: str
    start_date: date
    end_date: date
    rent_amount: float
    deposit_amount: float
    payment_due_date: int
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}
