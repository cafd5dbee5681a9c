import enum
import uuid
from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, Text, Uuid
from sqlalchemy.sql import func

from hrportal.core.database import Base

class AuditAction(str, enum.Enum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    LOGIN_FAILED = "LOGIN_FAILED"
    PASSWORD_RESET_REQUEST = "PASSWORD_RESET_REQUEST"
    PASSWORD_RESET_COMPLETE = "PASSWORD_RESET_COMPLETE"
    TWO_FACTOR_ENABLED = "TWO_FACTOR_ENABLED"
    TWO_FACTOR_DISABLED = "TWO_FACTOR_DISABLED"
    PROFILE_UPDATE = "PROFILE_UPDATE"
    EMPLOYEE_CREATE = "EMPLOYEE_CREATE"
    EMPLOYEE_UPDATE = "EMPLOYEE_UPDATE"
    EMPLOYEE_DELETE = "EMPLOYEE_DELETE"
    PTO_REQUEST_CREATE = "PTO_REQUEST_CREATE"
    PTO_REQUEST_APPROVE = "PTO_REQUEST_APPROVE"
    PTO_REQUEST_DENY = "PTO_REQUEST_DENY"
    PTO_REQUEST_CANCEL = "PTO_REQUEST_CANCEL"
    PAYSTUB_UPLOAD = "PAYSTUB_UPLOAD"
    PAYSTUB_VIEW = "PAYSTUB_VIEW"
    DOCUMENT_UPLOAD = "DOCUMENT_UPLOAD"
    DOCUMENT_VIEW = "DOCUMENT_VIEW"
    SETTINGS_UPDATE = "SETTINGS_UPDATE"

class AuditLog(Base):
    __tablename__ = "audit_logs"

    log_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # NULL for unauthenticated events, e.g. a failed login against an unknown email
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    action = Column(Enum(AuditAction, name="audit_action"), nullable=False, index=True)
    entity_type = Column(String, nullable=False)
    entity_id = Column(String, nullable=True)
    details = Column(Text, nullable=True)  # JSON

    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
