from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrportal.core.database import get_db
from hrportal.core.dependencies import get_encryptor, get_pdf_renderer, get_request_meta, get_storage
from hrportal.core.encryption import FieldEncryptor
from hrportal.models.user import User
from hrportal.routers.auth import get_current_employee_user
from hrportal.schemas.announcements import AnnouncementOut
from hrportal.schemas.bank import BankDetailsOut, BankDetailsUpdate
from hrportal.schemas.documents import DocumentOut
from hrportal.schemas.employees import EmployeeOut, OnboardingDetails
from hrportal.schemas.paystubs import PayStubOut
from hrportal.services import announcements, bank, documents, employees, paystubs
from hrportal.services.audit import RequestMeta
from hrportal.services.pdf import PdfRenderer
from hrportal.services.storage import BlobStorage

router = APIRouter()


@router.get("/profile", response_model=EmployeeOut)
def get_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
):
    return employees.profile_for_user(db, current_user)


@router.put("/profile", response_model=EmployeeOut)
def update_profile(
    payload: OnboardingDetails,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Save onboarding/profile fields; only fields present in the body change."""
    profile = employees.profile_for_user(db, current_user)
    return employees.save_onboarding_details(db, current_user, profile, payload.model_dump(exclude_unset=True), meta)


@router.post("/onboarding/complete", response_model=EmployeeOut)
def complete_onboarding(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
    renderer: PdfRenderer = Depends(get_pdf_renderer),
    storage: BlobStorage = Depends(get_storage),
    meta: RequestMeta = Depends(get_request_meta),
):
    profile = employees.profile_for_user(db, current_user)
    return employees.complete_onboarding(db, current_user, profile, renderer, storage, meta)


@router.get("/paystubs", response_model=list[PayStubOut])
def list_my_paystubs(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    profile = employees.profile_for_user(db, current_user)
    return paystubs.view_paystubs(db, current_user, profile.employee_id, meta)


@router.get("/documents", response_model=list[DocumentOut])
def list_my_documents(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    profile = employees.profile_for_user(db, current_user)
    return documents.view_documents(db, current_user, profile.employee_id, meta)


@router.get("/payment", response_model=Optional[BankDetailsOut])
def get_payment_details(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
):
    """Direct-deposit details on file, or null; account numbers are masked."""
    profile = employees.profile_for_user(db, current_user)
    return bank.get_bank_details(db, profile.employee_id)


@router.put("/payment", response_model=BankDetailsOut)
def update_payment_details(
    payload: BankDetailsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
    encryptor: FieldEncryptor = Depends(get_encryptor),
    meta: RequestMeta = Depends(get_request_meta),
):
    profile = employees.profile_for_user(db, current_user)
    return bank.update_bank_details(
        db,
        current_user,
        encryptor,
        profile.employee_id,
        bank_name=payload.bank_name,
        account_type=payload.account_type,
        routing_number=payload.routing_number,
        account_number=payload.account_number,
        meta=meta,
    )


@router.get("/announcements", response_model=list[AnnouncementOut])
def list_portal_announcements(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
):
    return announcements.list_active_announcements(db)
