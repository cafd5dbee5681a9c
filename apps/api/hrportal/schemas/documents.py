from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from hrportal.models.document import DocumentType

class DocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    document_id: UUID
    employee_id: UUID
    document_type: DocumentType
    file_name: str
    file_url: str
    mime_type: str
    file_size: int
    uploaded_at: Optional[datetime] = None
