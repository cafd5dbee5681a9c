from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from hrportal.models.bank_details import BankAccountType

class BankDetailsUpdate(BaseModel):
    bank_name: Optional[str] = None
    account_type: Optional[BankAccountType] = None
    routing_number: Optional[str] = None
    account_number: Optional[str] = None

class BankDetailsOut(BaseModel):
    """Masked view: the full routing and account numbers never leave the service."""
    model_config = ConfigDict(from_attributes=True)

    bank_details_id: UUID
    bank_name: str
    account_type: BankAccountType
    last4_account: str
    confirmed: bool
    updated_at: Optional[datetime] = None
