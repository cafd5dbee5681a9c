import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func

from hrportal.core.database import Base

class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"

    token_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    token_hash = Column(String(64), nullable=False, unique=True)  # SHA-256 hex; raw token only travels by email
    expires_at = Column(DateTime, nullable=False)  # naive UTC
    used_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
