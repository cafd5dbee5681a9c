import enum
import uuid
from sqlalchemy import Column, String, Date, DateTime, Enum, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hrportal.core.database import Base

class EmploymentType(str, enum.Enum):
    HOURLY = "HOURLY"
    SALARY = "SALARY"

class OnboardingStatus(str, enum.Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

class EmployeeProfile(Base):
    __tablename__ = "employee_profiles"

    employee_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    # personal
    full_name = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    emergency_contact_name = Column(String, nullable=True)
    emergency_contact_relationship = Column(String, nullable=True)
    emergency_contact_phone = Column(String, nullable=True)

    # employment
    role_title = Column(String, nullable=True)
    start_date = Column(Date, nullable=True)
    employment_type = Column(Enum(EmploymentType, name="employment_type"), nullable=True)
    wage = Column(Numeric(10, 2), nullable=True)

    onboarding_status = Column(
        Enum(OnboardingStatus, name="onboarding_status"),
        nullable=False,
        default=OnboardingStatus.NOT_STARTED,
    )
    onboarding_completed_at = Column(DateTime, nullable=True)
    onboarding_pdf_url = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="employee_profile")
