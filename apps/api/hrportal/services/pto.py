"""
PTO request lifecycle and balance bookkeeping.

    PENDING --approve--> APPROVED --revoke--> DENIED (was_revoked)
    PENDING --deny-----> DENIED
    PENDING --cancel---> CANCELLED

Balances are only charged on approval and credited back on revocation. The
request update and the balance change are committed together.
"""

import enum
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hrportal.core.config import settings
from hrportal.core.security import utcnow
from hrportal.models.audit_log import AuditAction
from hrportal.models.pto import PTOBalance, PTORequest, PTOStatus, PTOType
from hrportal.services.audit import RequestMeta, record_audit
from hrportal.services.errors import (
    AuthorizationError,
    ConflictError,
    InvariantViolation,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class PTOAction(str, enum.Enum):
    APPROVE = "APPROVE"
    DENY = "DENY"
    REVOKE = "REVOKE"
    CANCEL = "CANCEL"


# every legal (status, action) pair; anything else is a conflict
TRANSITIONS: Dict[Tuple[PTOStatus, PTOAction], PTOStatus] = {
    (PTOStatus.PENDING, PTOAction.APPROVE): PTOStatus.APPROVED,
    (PTOStatus.PENDING, PTOAction.DENY): PTOStatus.DENIED,
    (PTOStatus.PENDING, PTOAction.CANCEL): PTOStatus.CANCELLED,
    (PTOStatus.APPROVED, PTOAction.REVOKE): PTOStatus.DENIED,
}

REJECTION_MESSAGES = {
    PTOAction.APPROVE: "Request has already been processed",
    PTOAction.DENY: "Request has already been processed",
    PTOAction.REVOKE: "Only approved requests can be revoked",
    PTOAction.CANCEL: "Can only cancel pending requests",
}

# PTOType -> (allotment column, used column)
BALANCE_FIELDS = {
    PTOType.VACATION: ("vacation_days", "vacation_used"),
    PTOType.SICK: ("sick_days", "sick_used"),
    PTOType.PERSONAL: ("personal_days", "personal_used"),
}


def next_status(current: PTOStatus, action: PTOAction) -> PTOStatus:
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        raise ConflictError(REJECTION_MESSAGES[action])


def count_days(start_date: date, end_date: date) -> Decimal:
    """Inclusive number of calendar days between two dates."""
    if end_date < start_date:
        raise ValidationError("end_date must be >= start_date")
    return Decimal((end_date - start_date).days + 1)


def default_allotments() -> Dict[PTOType, Decimal]:
    return {
        PTOType.VACATION: Decimal(settings.default_vacation_days),
        PTOType.SICK: Decimal(settings.default_sick_days),
        PTOType.PERSONAL: Decimal(settings.default_personal_days),
    }


def new_balance(employee_id: UUID) -> PTOBalance:
    defaults = default_allotments()
    return PTOBalance(
        employee_id=employee_id,
        vacation_days=defaults[PTOType.VACATION],
        sick_days=defaults[PTOType.SICK],
        personal_days=defaults[PTOType.PERSONAL],
        vacation_used=ZERO,
        sick_used=ZERO,
        personal_used=ZERO,
    )


def available_days(balance: Optional[PTOBalance], pto_type: PTOType) -> Decimal:
    """Remaining days of ``pto_type``; the default allotment when no balance row exists yet."""
    if balance is None:
        return default_allotments()[pto_type]
    allotment_field, used_field = BALANCE_FIELDS[pto_type]
    return Decimal(getattr(balance, allotment_field)) - Decimal(getattr(balance, used_field))


def _get_balance(db: Session, employee_id: UUID, for_update: bool = False) -> Optional[PTOBalance]:
    stmt = select(PTOBalance).where(PTOBalance.employee_id == employee_id)
    if for_update:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalar_one_or_none()


def _require_request(db: Session, request_id: UUID) -> PTORequest:
    req = db.execute(
        select(PTORequest).where(PTORequest.request_id == request_id).with_for_update()
    ).scalar_one_or_none()
    if not req:
        raise NotFoundError("PTO request not found")
    return req


def _require_reason(reason: Optional[str], verb: str) -> str:
    if not reason or not reason.strip():
        raise ValidationError(f"A reason is required to {verb} a request")
    return reason.strip()


def _audit(db: Session, action: AuditAction, req: PTORequest, user_id: Optional[UUID], meta: Optional[RequestMeta], details: dict):
    meta = meta or RequestMeta()
    record_audit(
        db,
        action=action,
        entity_type="PTORequest",
        user_id=user_id,
        entity_id=req.request_id,
        details=details,
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
    )


def create_request(
    db: Session,
    employee_id: UUID,
    pto_type: PTOType,
    start_date: date,
    end_date: date,
    reason: Optional[str] = None,
    user_id: Optional[UUID] = None,
    meta: Optional[RequestMeta] = None,
) -> PTORequest:
    """Submit a PENDING request if the balance covers it. Nothing is deducted yet."""
    total_days = count_days(start_date, end_date)

    available = available_days(_get_balance(db, employee_id), pto_type)
    if total_days > available:
        raise ValidationError(
            f"Insufficient {pto_type.value.lower()} days. Available: {available}, Requested: {total_days}"
        )

    req = PTORequest(
        employee_id=employee_id,
        type=pto_type,
        start_date=start_date,
        end_date=end_date,
        total_days=total_days,
        reason=(reason or "").strip() or None,
        status=PTOStatus.PENDING,
        was_revoked=False,
    )
    db.add(req)
    db.commit()
    db.refresh(req)

    _audit(db, AuditAction.PTO_REQUEST_CREATE, req, user_id, meta, {
        "type": pto_type.value,
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "total_days": str(total_days),
    })
    return req


def approve_request(
    db: Session,
    request_id: UUID,
    admin_id: UUID,
    notes: Optional[str] = None,
    meta: Optional[RequestMeta] = None,
) -> PTORequest:
    req = _require_request(db, request_id)
    try:
        req.status = next_status(req.status, PTOAction.APPROVE)
        req.reviewed_by_id = admin_id
        req.reviewed_at = utcnow()
        req.review_notes = (notes or "").strip() or None

        balance = _get_balance(db, req.employee_id, for_update=True)
        if balance is None:
            balance = new_balance(req.employee_id)
            db.add(balance)
        _, used_field = BALANCE_FIELDS[req.type]
        setattr(balance, used_field, Decimal(getattr(balance, used_field)) + Decimal(req.total_days))

        db.commit()
    except Exception:
        db.rollback()
        raise

    _audit(db, AuditAction.PTO_REQUEST_APPROVE, req, admin_id, meta, {
        "employee_id": req.employee_id,
        "type": req.type.value,
        "total_days": str(req.total_days),
        "notes": req.review_notes,
    })
    return req


def deny_request(
    db: Session,
    request_id: UUID,
    admin_id: UUID,
    reason: Optional[str],
    meta: Optional[RequestMeta] = None,
) -> PTORequest:
    reason = _require_reason(reason, "deny")
    req = _require_request(db, request_id)
    try:
        req.status = next_status(req.status, PTOAction.DENY)
        req.reviewed_by_id = admin_id
        req.reviewed_at = utcnow()
        req.review_notes = reason
        db.commit()
    except Exception:
        db.rollback()
        raise

    _audit(db, AuditAction.PTO_REQUEST_DENY, req, admin_id, meta, {
        "employee_id": req.employee_id,
        "type": req.type.value,
        "total_days": str(req.total_days),
        "notes": reason,
        "was_revoked": False,
    })
    return req


def revoke_request(
    db: Session,
    request_id: UUID,
    admin_id: UUID,
    reason: Optional[str],
    meta: Optional[RequestMeta] = None,
) -> PTORequest:
    """Withdraw an approval and give the days back."""
    reason = _require_reason(reason, "revoke")
    req = _require_request(db, request_id)
    previous_status = req.status
    try:
        req.status = next_status(req.status, PTOAction.REVOKE)
        req.was_revoked = True
        req.reviewed_by_id = admin_id
        req.reviewed_at = utcnow()
        req.review_notes = reason

        balance = _get_balance(db, req.employee_id, for_update=True)
        if balance is None:
            logger.error("Approved PTO request %s has no balance row to credit", req.request_id)
            raise InvariantViolation("PTO balance missing for an approved request")

        _, used_field = BALANCE_FIELDS[req.type]
        restored = Decimal(getattr(balance, used_field)) - Decimal(req.total_days)
        if restored < ZERO:
            logger.error("Revoking PTO request %s would make %s negative", req.request_id, used_field)
            raise InvariantViolation("PTO balance is lower than the approved request")
        setattr(balance, used_field, restored)

        db.commit()
    except Exception:
        db.rollback()
        raise

    _audit(db, AuditAction.PTO_REQUEST_DENY, req, admin_id, meta, {
        "employee_id": req.employee_id,
        "type": req.type.value,
        "total_days": str(req.total_days),
        "notes": reason,
        "was_revoked": True,
        "previous_status": previous_status.value,
    })
    return req


def cancel_request(
    db: Session,
    request_id: UUID,
    employee_id: UUID,
    user_id: Optional[UUID] = None,
    meta: Optional[RequestMeta] = None,
) -> PTORequest:
    """Employee withdraws their own pending request."""
    req = _require_request(db, request_id)
    try:
        if req.employee_id != employee_id:
            raise AuthorizationError("Not authorized to cancel this request")
        req.status = next_status(req.status, PTOAction.CANCEL)
        db.commit()
    except Exception:
        db.rollback()
        raise

    _audit(db, AuditAction.PTO_REQUEST_CANCEL, req, user_id, meta, {"employee_id": employee_id})
    return req


def get_balance_summary(db: Session, employee_id: UUID) -> dict:
    balance = _get_balance(db, employee_id)
    defaults = default_allotments()
    summary = {}
    for pto_type, (allotment_field, used_field) in BALANCE_FIELDS.items():
        if balance is None:
            allotment, used = defaults[pto_type], ZERO
        else:
            allotment = Decimal(getattr(balance, allotment_field))
            used = Decimal(getattr(balance, used_field))
        summary[pto_type.value] = {
            "allotment": allotment,
            "used": used,
            "remaining": allotment - used,
        }
    return summary


def list_employee_requests(db: Session, employee_id: UUID) -> list:
    return db.execute(
        select(PTORequest)
        .where(PTORequest.employee_id == employee_id)
        .order_by(PTORequest.created_at.desc(), PTORequest.start_date.desc())
    ).scalars().all()


def list_requests(db: Session, status: Optional[PTOStatus] = None, employee_id: Optional[UUID] = None) -> list:
    stmt = select(PTORequest)
    if status is not None:
        stmt = stmt.where(PTORequest.status == status)
    if employee_id is not None:
        stmt = stmt.where(PTORequest.employee_id == employee_id)
    return db.execute(stmt.order_by(PTORequest.created_at.desc())).scalars().all()
