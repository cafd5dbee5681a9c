from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from hrportal.models.pto import PTOStatus, PTOType

class PTOCreate(BaseModel):
    type: PTOType
    start_date: date
    end_date: date
    reason: Optional[str] = None

class PTOApprove(BaseModel):
    notes: Optional[str] = None

class PTODecision(BaseModel):
    # required by the service; kept optional here so blank reasons get the service's message
    reason: Optional[str] = None

class PTORequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    request_id: UUID
    employee_id: UUID
    type: PTOType
    start_date: date
    end_date: date
    total_days: Decimal
    reason: Optional[str] = None
    status: PTOStatus
    was_revoked: bool = False
    reviewed_by_id: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: Optional[datetime] = None

class BalanceLine(BaseModel):
    allotment: Decimal
    used: Decimal
    remaining: Decimal

class EmployeePTOOut(BaseModel):
    requests: list[PTORequestOut]
    balance: dict[PTOType, BalanceLine]
