import logging
import time
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hrportal.models.audit_log import AuditAction
from hrportal.models.paystub import PayStub
from hrportal.models.user import User
from hrportal.services.audit import RequestMeta, record_audit
from hrportal.services.employees import require_employee
from hrportal.services.errors import ValidationError
from hrportal.services.storage import BlobStorage

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


def upload_paystub(
    db: Session,
    admin: User,
    storage: BlobStorage,
    employee_id: UUID,
    file_name: str,
    content: bytes,
    pay_period_start: date,
    pay_period_end: date,
    pay_date: date,
    gross_pay: Decimal,
    net_pay: Decimal,
    deductions: Optional[str] = None,
    hours_worked: Optional[Decimal] = None,
    hourly_rate: Optional[Decimal] = None,
    meta: Optional[RequestMeta] = None,
) -> PayStub:
    require_employee(db, employee_id)
    if not content.startswith(PDF_MAGIC):
        raise ValidationError("Pay stub must be a PDF file")
    if pay_period_end < pay_period_start:
        raise ValidationError("pay_period_end must be >= pay_period_start")

    path = f"paystubs/{employee_id}/paystub_{int(time.time() * 1000)}.pdf"
    file_url = storage.put(path, content, "application/pdf")

    stub = PayStub(
        employee_id=employee_id,
        pay_period_start=pay_period_start,
        pay_period_end=pay_period_end,
        pay_date=pay_date,
        gross_pay=gross_pay,
        net_pay=net_pay,
        deductions=deductions,
        hours_worked=hours_worked,
        hourly_rate=hourly_rate,
        file_name=file_name,
        file_url=file_url,
    )
    db.add(stub)
    db.commit()
    db.refresh(stub)

    meta = meta or RequestMeta()
    record_audit(
        db,
        action=AuditAction.PAYSTUB_UPLOAD,
        entity_type="PayStub",
        user_id=admin.user_id,
        entity_id=stub.paystub_id,
        details={"employee_id": employee_id, "pay_date": pay_date, "gross_pay": gross_pay, "net_pay": net_pay},
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
    )
    return stub


def list_paystubs(db: Session, employee_id: Optional[UUID] = None) -> list:
    stmt = select(PayStub)
    if employee_id is not None:
        stmt = stmt.where(PayStub.employee_id == employee_id)
    return db.execute(stmt.order_by(PayStub.pay_date.desc())).scalars().all()


def view_paystubs(db: Session, user: User, employee_id: UUID, meta: Optional[RequestMeta] = None) -> list:
    """Pay stubs as seen by the employee; the viewing is audited."""
    stubs = list_paystubs(db, employee_id)
    meta = meta or RequestMeta()
    record_audit(
        db,
        action=AuditAction.PAYSTUB_VIEW,
        entity_type="PayStub",
        user_id=user.user_id,
        entity_id=employee_id,
        details={"count": len(stubs)},
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
    )
    return stubs
