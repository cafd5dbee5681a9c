"""
Direct-deposit bank details for the employee portal.

Routing and account numbers are stored as FieldEncryptor ciphertexts; only
the last four digits of the account number are kept in the clear, and that
is all the API ever returns.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hrportal.core.encryption import EncryptionError, FieldEncryptor
from hrportal.models.audit_log import AuditAction
from hrportal.models.bank_details import BankAccountType, BankDetails
from hrportal.models.user import User
from hrportal.services.audit import RequestMeta, record_audit
from hrportal.services.errors import InvariantViolation, ValidationError

logger = logging.getLogger(__name__)

ROUTING_NUMBER_LENGTH = 9
MIN_ACCOUNT_NUMBER_LENGTH = 4
MAX_ACCOUNT_NUMBER_LENGTH = 17


def get_bank_details(db: Session, employee_id: UUID) -> Optional[BankDetails]:
    return db.execute(
        select(BankDetails).where(BankDetails.employee_id == employee_id)
    ).scalar_one_or_none()


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def update_bank_details(
    db: Session,
    user: User,
    encryptor: FieldEncryptor,
    employee_id: UUID,
    bank_name: Optional[str],
    account_type: Optional[str],
    routing_number: Optional[str],
    account_number: Optional[str],
    meta: Optional[RequestMeta] = None,
) -> BankDetails:
    """Create or replace the employee's bank details; saving marks them confirmed."""
    bank_name = _clean(bank_name)
    routing_number = _clean(routing_number)
    account_number = _clean(account_number)
    if not bank_name or not account_type or not routing_number or not account_number:
        raise ValidationError("All fields are required")

    try:
        account_type = BankAccountType(account_type)
    except ValueError:
        raise ValidationError("account_type must be CHECKING or SAVINGS")

    if len(routing_number) != ROUTING_NUMBER_LENGTH or not routing_number.isdigit():
        raise ValidationError("Routing number must be 9 digits")
    if not account_number.isdigit() or not (
        MIN_ACCOUNT_NUMBER_LENGTH <= len(account_number) <= MAX_ACCOUNT_NUMBER_LENGTH
    ):
        raise ValidationError("Account number must be 4 to 17 digits")

    try:
        routing_cipher = encryptor.encrypt(routing_number)
        account_cipher = encryptor.encrypt(account_number)
    except EncryptionError:
        logger.error("Bank details for employee %s could not be encrypted", employee_id)
        raise InvariantViolation("Bank details could not be stored securely")

    details = db.execute(
        select(BankDetails).where(BankDetails.employee_id == employee_id).with_for_update()
    ).scalar_one_or_none()
    created = details is None
    if created:
        details = BankDetails(employee_id=employee_id)
        db.add(details)

    details.bank_name = bank_name
    details.account_type = account_type
    details.routing_number = routing_cipher
    details.account_number = account_cipher
    details.last4_account = account_number[-4:]
    details.confirmed = True
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(details)

    meta = meta or RequestMeta()
    record_audit(
        db,
        action=AuditAction.PROFILE_UPDATE,
        entity_type="BankDetails",
        user_id=user.user_id,
        entity_id=details.bank_details_id,
        details={"action": "bank_details_created" if created else "bank_details_updated"},
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
    )
    logger.info("Bank details saved for employee %s", employee_id)
    return details
