import enum
import uuid
from decimal import Decimal
from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, Enum, ForeignKey, Numeric, Text, Uuid, func

from hrportal.core.database import Base

class PTOType(str, enum.Enum):
    VACATION = "VACATION"
    SICK = "SICK"
    PERSONAL = "PERSONAL"

class PTOStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    CANCELLED = "CANCELLED"

# Numeric(6, 2): day counts are Decimals so half days never drift
DAYS = Numeric(6, 2)

class PTOBalance(Base):
    __tablename__ = "pto_balances"

    balance_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    employee_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("employee_profiles.employee_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    vacation_days = Column(DAYS, nullable=False)
    sick_days = Column(DAYS, nullable=False)
    personal_days = Column(DAYS, nullable=False)

    vacation_used = Column(DAYS, nullable=False, default=Decimal("0"))
    sick_used = Column(DAYS, nullable=False, default=Decimal("0"))
    personal_used = Column(DAYS, nullable=False, default=Decimal("0"))

    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

class PTORequest(Base):
    __tablename__ = "pto_requests"
    __table_args__ = (CheckConstraint("end_date >= start_date", name="ck_pto_requests_date_order"),)

    request_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    employee_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("employee_profiles.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = Column(Enum(PTOType, name="pto_type"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_days = Column(DAYS, nullable=False)
    reason = Column(Text, nullable=True)

    status = Column(Enum(PTOStatus, name="pto_status"), nullable=False, default=PTOStatus.PENDING, index=True)
    was_revoked = Column(Boolean, nullable=False, default=False)  # DENIED after having been APPROVED

    reviewed_by_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
    )
    reviewed_at = Column(DateTime, nullable=True)
    review_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
