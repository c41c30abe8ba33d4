from __future__ import annotations

import re
import datetime as dt
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

ExpenseCategory = Literal["Utilities", "Salaries", "Maintenance", "Events"]


class ExpenseCreateRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    date: dt.date = Field(default_factory=dt.date.today)
    category: ExpenseCategory = "Utilities"
    payee: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=1000)
    has_receipt: bool = False

    @field_validator("payee")
    @classmethod
    def _payee_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("payee is required")
        return cleaned


class StaffCreateRequest(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone_number: str
    role: str = Field(..., min_length=1, max_length=100)
    joined_date: dt.date

    @field_validator("phone_number")
    @classmethod
    def _phone_has_ten_digits(cls, value: str) -> str:
        digits = re.sub(r"\D", "", value)
        if len(digits) < 10:
            raise ValueError("Phone number must be at least 10 digits.")
        return digits


class RecordCreatedResponse(BaseModel):
    dataset: str
    record: dict[str, Any]
    refreshed_views: int
    trace_id: str
