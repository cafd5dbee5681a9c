import enum
import uuid
from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Integer, Uuid
from sqlalchemy.sql import func

from hrportal.core.database import Base

class DocumentType(str, enum.Enum):
    ID = "ID"
    DRIVERS_LICENSE = "DRIVERS_LICENSE"
    PASSPORT = "PASSPORT"
    OTHER = "OTHER"

class EmployeeDocument(Base):
    __tablename__ = "employee_documents"

    document_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    employee_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("employee_profiles.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    document_type = Column(Enum(DocumentType, name="document_type"), nullable=False)
    file_name = Column(String, nullable=False)
    file_url = Column(String, nullable=False)
    mime_type = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)

    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
