from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

class PayStubOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    paystub_id: UUID
    employee_id: UUID
    pay_period_start: date
    pay_period_end: date
    pay_date: date
    gross_pay: Decimal
    net_pay: Decimal
    deductions: Optional[str] = None
    hours_worked: Optional[Decimal] = None
    hourly_rate: Optional[Decimal] = None
    file_name: str
    file_url: str
    created_at: Optional[datetime] = None
