"""
Employee accounts and onboarding records, administered by HR.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hrportal.core.security import get_password_hash, utcnow
from hrportal.models.audit_log import AuditAction
from hrportal.models.employee import EmployeeProfile, EmploymentType, OnboardingStatus
from hrportal.models.user import Role, User
from hrportal.services.audit import RequestMeta, record_audit
from hrportal.services.auth import normalize_email, validate_new_password
from hrportal.services.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from hrportal.services.pdf import PdfRenderer
from hrportal.services.storage import BlobStorage

logger = logging.getLogger(__name__)

ONBOARDING_FIELDS = (
    "full_name",
    "date_of_birth",
    "phone",
    "address",
    "emergency_contact_name",
    "emergency_contact_relationship",
    "emergency_contact_phone",
    "role_title",
    "start_date",
    "employment_type",
    "wage",
)

# fields an employee may still change on their own record after onboarding
CONTACT_FIELDS = (
    "phone",
    "address",
    "emergency_contact_name",
    "emergency_contact_relationship",
    "emergency_contact_phone",
)

REQUIRED_FOR_COMPLETION = (
    "full_name",
    "date_of_birth",
    "phone",
    "address",
    "emergency_contact_name",
    "emergency_contact_relationship",
    "emergency_contact_phone",
    "role_title",
    "start_date",
    "employment_type",
)


def _audit(db: Session, action: AuditAction, actor_id: Optional[UUID], entity_id, meta: Optional[RequestMeta], details: Optional[dict] = None):
    meta = meta or RequestMeta()
    record_audit(
        db,
        action=action,
        entity_type="EmployeeProfile",
        user_id=actor_id,
        entity_id=entity_id,
        details=details,
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
    )


def require_employee(db: Session, employee_id: UUID) -> EmployeeProfile:
    emp = db.get(EmployeeProfile, employee_id)
    if not emp:
        raise NotFoundError("Employee not found")
    return emp


def profile_for_user(db: Session, user: User) -> EmployeeProfile:
    profile = db.execute(
        select(EmployeeProfile).where(EmployeeProfile.user_id == user.user_id)
    ).scalar_one_or_none()
    if not profile:
        raise NotFoundError("Employee profile not found")
    return profile


def list_employees(db: Session) -> list:
    return db.execute(
        select(EmployeeProfile).order_by(EmployeeProfile.created_at.desc())
    ).scalars().all()


def invite_employee(db: Session, admin: User, email: str, password: str, meta: Optional[RequestMeta] = None) -> EmployeeProfile:
    """Create an EMPLOYEE login with an empty profile."""
    email = normalize_email(email)
    if not email:
        raise ValidationError("Email is required")
    validate_new_password(password)

    existing = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if existing:
        raise ConflictError("User with this email already exists")

    user = User(email=email, password_hash=get_password_hash(password), role=Role.EMPLOYEE, totp_enabled=False)
    profile = EmployeeProfile(onboarding_status=OnboardingStatus.NOT_STARTED)
    user.employee_profile = profile
    db.add(user)
    db.commit()
    db.refresh(profile)

    _audit(db, AuditAction.EMPLOYEE_CREATE, admin.user_id, profile.employee_id, meta, {"email": email})
    logger.info("Employee %s invited by %s", profile.employee_id, admin.user_id)
    return profile


def delete_employee(db: Session, admin: User, employee_id: UUID, meta: Optional[RequestMeta] = None) -> None:
    """Delete the employee's login; the profile and everything hanging off it cascade."""
    emp = require_employee(db, employee_id)
    user = emp.user
    email = user.email
    db.delete(user)
    db.commit()

    _audit(db, AuditAction.EMPLOYEE_DELETE, admin.user_id, employee_id, meta, {"email": email})


def set_employee_password(db: Session, admin: User, employee_id: UUID, new_password: str, meta: Optional[RequestMeta] = None) -> None:
    validate_new_password(new_password)
    emp = require_employee(db, employee_id)
    emp.user.password_hash = get_password_hash(new_password)
    db.commit()

    _audit(db, AuditAction.EMPLOYEE_UPDATE, admin.user_id, employee_id, meta, {"action": "password_changed"})


def save_onboarding_details(db: Session, actor: User, emp: EmployeeProfile, fields: dict, meta: Optional[RequestMeta] = None) -> EmployeeProfile:
    """Store onboarding fields (partial updates allowed) and move NOT_STARTED to IN_PROGRESS."""
    unknown = set(fields) - set(ONBOARDING_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown onboarding fields: {', '.join(sorted(unknown))}")

    if actor.role != Role.ADMIN and emp.onboarding_status == OnboardingStatus.COMPLETED:
        locked = set(fields) - set(CONTACT_FIELDS)
        if locked:
            logger.warning("Employee %s tried to change locked fields %s", emp.employee_id, sorted(locked))
            raise AuthorizationError(f"Onboarding is complete; only contact details can be changed: {', '.join(sorted(locked))}")

    for name, value in fields.items():
        if name == "employment_type" and value is not None:
            value = EmploymentType(value)
        if name == "wage" and value is not None:
            value = Decimal(str(value))
            if value < 0:
                raise ValidationError("wage must not be negative")
        setattr(emp, name, value)

    if emp.onboarding_status == OnboardingStatus.NOT_STARTED:
        emp.onboarding_status = OnboardingStatus.IN_PROGRESS
    db.commit()

    action = AuditAction.EMPLOYEE_UPDATE if actor.role == Role.ADMIN else AuditAction.PROFILE_UPDATE
    _audit(db, action, actor.user_id, emp.employee_id, meta, {"fields": sorted(fields)})
    return emp


def onboarding_document(emp: EmployeeProfile) -> dict:
    """Structured data handed to the PDF renderer."""
    def fmt(value):
        if isinstance(value, date):
            return value.isoformat()
        if hasattr(value, "value"):
            return value.value
        return value

    return {
        "Personal information": {
            "Full name": emp.full_name,
            "Date of birth": fmt(emp.date_of_birth),
            "Phone": emp.phone,
            "Address": emp.address,
        },
        "Emergency contact": {
            "Name": emp.emergency_contact_name,
            "Relationship": emp.emergency_contact_relationship,
            "Phone": emp.emergency_contact_phone,
        },
        "Employment": {
            "Email": emp.user.email if emp.user else None,
            "Title": emp.role_title,
            "Start date": fmt(emp.start_date),
            "Type": fmt(emp.employment_type),
            "Wage": emp.wage,
        },
    }


def complete_onboarding(
    db: Session,
    actor: User,
    emp: EmployeeProfile,
    renderer: PdfRenderer,
    storage: BlobStorage,
    meta: Optional[RequestMeta] = None,
) -> EmployeeProfile:
    """
    Mark onboarding COMPLETED once every required field is present.

    The status change is committed before the summary PDF is rendered and
    uploaded; a rendering or upload failure leaves the record completed and
    only ``onboarding_pdf_url`` unset.
    """
    missing = [name for name in REQUIRED_FOR_COMPLETION if getattr(emp, name) in (None, "")]
    if missing:
        raise ValidationError(f"Please complete all required fields before submitting: {', '.join(missing)}")

    emp.onboarding_status = OnboardingStatus.COMPLETED
    emp.onboarding_completed_at = utcnow()
    db.commit()

    try:
        pdf_bytes = renderer.render(onboarding_document(emp))
        emp.onboarding_pdf_url = storage.put(
            f"onboarding/{emp.employee_id}/onboarding_summary.pdf",
            pdf_bytes,
            "application/pdf",
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Onboarding PDF generation failed for employee %s", emp.employee_id)

    _audit(db, AuditAction.EMPLOYEE_UPDATE, actor.user_id, emp.employee_id, meta, {"onboarding_status": OnboardingStatus.COMPLETED.value})
    return emp
