from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from hrportal.models.audit_log import AuditAction

class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    log_id: UUID
    user_id: Optional[UUID] = None
    action: AuditAction
    entity_type: str
    entity_id: Optional[str] = None
    details: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

class AuditLogPage(BaseModel):
    logs: list[AuditLogOut]
    pagination: Pagination
