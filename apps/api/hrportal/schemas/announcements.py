from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

class AnnouncementIn(BaseModel):
    title: str
    body: str
    is_active: bool = True

class AnnouncementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    announcement_id: UUID
    title: str
    body: str
    is_active: bool
    created_by_admin_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
