import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.sql import func

from hrportal.core.database import Base

class Announcement(Base):
    __tablename__ = "announcements"

    announcement_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    # kept when the authoring admin account is deleted
    created_by_admin_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
