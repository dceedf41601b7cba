"""Payroll request / response schemas."""


import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from optitalent.common.constants import PayrollStatus


class PayrollRunCreate(BaseModel):
    period_start: date
    period_end: date
    pay_date: Optional[date] = None

    @model_validator(mode="after")
    def end_not_before_start(self) -> "PayrollRunCreate":
        if self.period_end < self.period_start:
            raise ValueError("period_end must be on or after period_start")
        return self


class PayrollStatusUpdate(BaseModel):
    status: PayrollStatus


class PayrollEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    gross: Decimal
    deductions: Decimal
    net: Decimal


class PayrollRunOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    period_start: date
    period_end: date
    pay_date: Optional[date] = None
    status: PayrollStatus
    employee_count: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal
    created_at: datetime


class PayrollRunDetail(PayrollRunOut):
    entries: list[PayrollEntryOut] = []
