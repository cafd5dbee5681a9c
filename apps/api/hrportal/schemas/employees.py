from pydantic import BaseModel, ConfigDict, EmailStr
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from hrportal.models.employee import EmploymentType, OnboardingStatus

class EmployeeInvite(BaseModel):
    email: EmailStr
    password: str

class PasswordSet(BaseModel):
    new_password: str

class OnboardingDetails(BaseModel):
    full_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    role_title: Optional[str] = None
    start_date: Optional[date] = None
    employment_type: Optional[EmploymentType] = None
    wage: Optional[Decimal] = None

class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    user_id: UUID
    full_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_relationship: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    role_title: Optional[str] = None
    start_date: Optional[date] = None
    employment_type: Optional[EmploymentType] = None
    wage: Optional[Decimal] = None
    onboarding_status: OnboardingStatus
    onboarding_completed_at: Optional[datetime] = None
    onboarding_pdf_url: Optional[str] = None
