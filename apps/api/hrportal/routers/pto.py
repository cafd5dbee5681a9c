from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hrportal.core.database import get_db
from hrportal.core.dependencies import get_request_meta
from hrportal.models.user import User
from hrportal.routers.auth import get_current_employee_user
from hrportal.schemas.pto import EmployeePTOOut, PTOCreate, PTORequestOut
from hrportal.services import pto
from hrportal.services.audit import RequestMeta
from hrportal.services.employees import profile_for_user

router = APIRouter()


@router.get("", response_model=EmployeePTOOut)
def get_my_pto(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
):
    """PTO requests and remaining balance for the current employee."""
    profile = profile_for_user(db, current_user)
    return {
        "requests": pto.list_employee_requests(db, profile.employee_id),
        "balance": pto.get_balance_summary(db, profile.employee_id),
    }


@router.post("", response_model=PTORequestOut)
def create_pto_request(
    payload: PTOCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    profile = profile_for_user(db, current_user)
    return pto.create_request(
        db,
        employee_id=profile.employee_id,
        pto_type=payload.type,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        user_id=current_user.user_id,
        meta=meta,
    )


@router.delete("/{request_id}", response_model=PTORequestOut)
def cancel_pto_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_employee_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Employees can cancel their own pending requests."""
    profile = profile_for_user(db, current_user)
    return pto.cancel_request(db, request_id, profile.employee_id, user_id=current_user.user_id, meta=meta)
