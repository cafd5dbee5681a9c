import uuid
from sqlalchemy import Column, String, Date, DateTime, ForeignKey, Numeric, Text, Uuid
from sqlalchemy.sql import func

from hrportal.core.database import Base

class PayStub(Base):
    __tablename__ = "pay_stubs"

    paystub_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    employee_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("employee_profiles.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    pay_period_start = Column(Date, nullable=False)
    pay_period_end = Column(Date, nullable=False)
    pay_date = Column(Date, nullable=False)

    gross_pay = Column(Numeric(12, 2), nullable=False)
    net_pay = Column(Numeric(12, 2), nullable=False)
    deductions = Column(Text, nullable=True)
    hours_worked = Column(Numeric(8, 2), nullable=True)
    hourly_rate = Column(Numeric(10, 2), nullable=True)

    file_name = Column(String, nullable=False)
    file_url = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
