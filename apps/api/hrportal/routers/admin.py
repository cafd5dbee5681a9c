import math
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from hrportal.core.database import get_db
from hrportal.core.dependencies import get_pdf_renderer, get_request_meta, get_storage
from hrportal.models.audit_log import AuditAction
from hrportal.models.pto import PTOStatus
from hrportal.models.user import User
from hrportal.routers.auth import get_current_admin
from hrportal.schemas.announcements import AnnouncementIn, AnnouncementOut
from hrportal.schemas.audit import AuditLogPage
from hrportal.schemas.documents import DocumentOut
from hrportal.schemas.employees import EmployeeInvite, EmployeeOut, OnboardingDetails, PasswordSet
from hrportal.schemas.paystubs import PayStubOut
from hrportal.schemas.pto import PTOApprove, PTODecision, PTORequestOut
from hrportal.services import announcements, documents, employees, paystubs, pto
from hrportal.services.audit import MAX_PAGE_SIZE, RequestMeta, list_audit_logs
from hrportal.services.pdf import PdfRenderer
from hrportal.services.storage import BlobStorage

router = APIRouter()


# --- PTO ---
@router.get("/pto", response_model=list[PTORequestOut])
def list_pto_requests(
    status: Optional[PTOStatus] = None,
    employee_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    """All PTO requests, optionally filtered (admin only)."""
    return pto.list_requests(db, status=status, employee_id=employee_id)


@router.post("/pto/{request_id}/approve", response_model=PTORequestOut)
def approve_pto_request(
    request_id: UUID,
    payload: PTOApprove,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    meta: RequestMeta = Depends(get_request_meta),
):
    return pto.approve_request(db, request_id, current_admin.user_id, payload.notes, meta)


@router.post("/pto/{request_id}/deny", response_model=PTORequestOut)
def deny_pto_request(
    request_id: UUID,
    payload: PTODecision,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    meta: RequestMeta = Depends(get_request_meta),
):
    return pto.deny_request(db, request_id, current_admin.user_id, payload.reason, meta)


@router.post("/pto/{request_id}/revoke", response_model=PTORequestOut)
def revoke_pto_request(
    request_id: UUID,
    payload: PTODecision,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    meta: RequestMeta = Depends(get_request_meta),
):
    return pto.revoke_request(db, request_id, current_admin.user_id, payload.reason, meta)


# --- Employees ---
@router.get("/employees", response_model=list[EmployeeOut])
def list_employees(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return employees.list_employees(db)


@router.post("/employees", response_model=EmployeeOut)
def invite_employee(
    payload: EmployeeInvite,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Create a login and empty profile for a new hire (admin only)."""
    return employees.invite_employee(db, current_admin, payload.email, payload.password, meta)


@router.delete("/employees/{employee_id}")
def delete_employee(
    employee_id: UUID,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    meta: RequestMeta = Depends(get_request_meta),
):
    employees.delete_employee(db, current_admin, employee_id, meta)
    return {"status": "ok"}


@router.post("/employees/{employee_id}/password")
def set_employee_password(
    employee_id: UUID,
    payload: PasswordSet,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    meta: RequestMeta = Depends(get_request_meta),
):
    employees.set_employee_password(db, current_admin, employee_id, payload.new_password, meta)
    return {"message": "Password set successfully"}


@router.put("/employees/{employee_id}/onboarding", response_model=EmployeeOut)
def save_onboarding(
    employee_id: UUID,
    payload: OnboardingDetails,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    meta: RequestMeta = Depends(get_request_meta),
):
    emp = employees.require_employee(db, employee_id)
    return employees.save_onboarding_details(db, current_admin, emp, payload.model_dump(exclude_unset=True), meta)


@router.post("/employees/{employee_id}/onboarding/complete", response_model=EmployeeOut)
def complete_onboarding(
    employee_id: UUID,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    renderer: PdfRenderer = Depends(get_pdf_renderer),
    storage: BlobStorage = Depends(get_storage),
    meta: RequestMeta = Depends(get_request_meta),
):
    emp = employees.require_employee(db, employee_id)
    return employees.complete_onboarding(db, current_admin, emp, renderer, storage, meta)


@router.get("/employees/{employee_id}/documents", response_model=list[DocumentOut])
def list_employee_documents(
    employee_id: UUID,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    employees.require_employee(db, employee_id)
    return documents.list_documents(db, employee_id)


@router.post("/employees/{employee_id}/documents", response_model=DocumentOut)
def upload_employee_document(
    employee_id: UUID,
    file: UploadFile = File(...),
    document_type: str = Form(...),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    storage: BlobStorage = Depends(get_storage),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Attach an ID or other document to an employee record (admin only)."""
    content = file.file.read()
    return documents.upload_document(
        db,
        current_admin,
        storage,
        employee_id=employee_id,
        document_type=document_type,
        file_name=file.filename or "document",
        content=content,
        meta=meta,
    )

# --- Audit logs ---
@router.get("/audit-logs", response_model=AuditLogPage)
def get_audit_logs(
    page: int = 1,
    limit: int = 50,
    action: Optional[AuditAction] = None,
    user_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    logs, total = list_audit_logs(db, page, limit, action, user_id, entity_type, start, end)
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    return {
        "logs": logs,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
        },
    }


# --- Pay stubs ---
@router.get("/paystubs", response_model=list[PayStubOut])
def list_paystubs(
    employee_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return paystubs.list_paystubs(db, employee_id)


@router.post("/paystubs", response_model=PayStubOut)
def upload_paystub(
    file: UploadFile = File(...),
    employee_id: UUID = Form(...),
    pay_period_start: date = Form(...),
    pay_period_end: date = Form(...),
    pay_date: date = Form(...),
    gross_pay: Decimal = Form(...),
    net_pay: Decimal = Form(...),
    deductions: Optional[str] = Form(None),
    hours_worked: Optional[Decimal] = Form(None),
    hourly_rate: Optional[Decimal] = Form(None),
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    storage: BlobStorage = Depends(get_storage),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Upload a pay stub PDF for an employee (admin only)."""
    content = file.file.read()
    return paystubs.upload_paystub(
        db,
        current_admin,
        storage,
        employee_id=employee_id,
        file_name=file.filename or "paystub.pdf",
        content=content,
        pay_period_start=pay_period_start,
        pay_period_end=pay_period_end,
        pay_date=pay_date,
        gross_pay=gross_pay,
        net_pay=net_pay,
        deductions=deductions,
        hours_worked=hours_worked,
        hourly_rate=hourly_rate,
        meta=meta,
    )


# --- Announcements ---
@router.get("/announcements", response_model=list[AnnouncementOut])
def list_announcements(
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return announcements.list_announcements(db)


@router.post("/announcements", response_model=AnnouncementOut)
def create_announcement(
    payload: AnnouncementIn,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    meta: RequestMeta = Depends(get_request_meta),
):
    return announcements.create_announcement(db, current_admin, payload.title, payload.body, payload.is_active, meta)


@router.get("/announcements/{announcement_id}", response_model=AnnouncementOut)
def get_announcement(
    announcement_id: UUID,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    return announcements.get_announcement(db, announcement_id)


@router.put("/announcements/{announcement_id}", response_model=AnnouncementOut)
def update_announcement(
    announcement_id: UUID,
    payload: AnnouncementIn,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    meta: RequestMeta = Depends(get_request_meta),
):
    return announcements.update_announcement(
        db, current_admin, announcement_id, payload.title, payload.body, payload.is_active, meta
    )


@router.delete("/announcements/{announcement_id}")
def delete_announcement(
    announcement_id: UUID,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
    meta: RequestMeta = Depends(get_request_meta),
):
    announcements.delete_announcement(db, current_admin, announcement_id, meta)
    return {"message": "Announcement deleted successfully"}
