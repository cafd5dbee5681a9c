import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Enum, ForeignKey, Text, Uuid
from sqlalchemy.sql import func

from hrportal.core.database import Base

class BankAccountType(str, enum.Enum):
    CHECKING = "CHECKING"
    SAVINGS = "SAVINGS"

class BankDetails(Base):
    __tablename__ = "bank_details"

    bank_details_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # one direct-deposit account per employee
    employee_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("employee_profiles.employee_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    bank_name = Column(String, nullable=False)
    account_type = Column(Enum(BankAccountType, name="bank_account_type"), nullable=False)

    # FieldEncryptor ciphertexts, never plaintext
    routing_number = Column(Text, nullable=False)
    account_number = Column(Text, nullable=False)
    last4_account = Column(String(4), nullable=False)

    confirmed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
