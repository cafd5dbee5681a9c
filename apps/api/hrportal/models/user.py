import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Enum, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hrportal.core.database import Base

class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"

class User(Base):
    __tablename__ = "users"

    user_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    email = Column(String, nullable=False, unique=True, index=True)  # always lowercase
    password_hash = Column(String, nullable=False)
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.EMPLOYEE)

    totp_enabled = Column(Boolean, nullable=False, default=False)
    totp_secret = Column(Text, nullable=True)  # AES-GCM ciphertext; set while setup is pending or enabled
    backup_codes = Column(Text, nullable=True)  # JSON list of SHA-256 digests; only while totp_enabled

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    employee_profile = relationship(
        "EmployeeProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    reset_tokens = relationship(
        "PasswordResetToken",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
