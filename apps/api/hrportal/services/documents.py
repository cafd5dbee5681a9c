"""
Employee documents (ID scans, licences, passports) uploaded by HR.

Files go to blob storage under ``documents/<employee_id>/``; the database
row keeps the original file name, the storage URL and the size. Employees
can list their own documents and every listing is audited.
"""

import logging
import time
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from hrportal.models.audit_log import AuditAction
from hrportal.models.document import DocumentType, EmployeeDocument
from hrportal.models.user import User
from hrportal.services.audit import RequestMeta, record_audit
from hrportal.services.employees import require_employee
from hrportal.services.errors import ValidationError
from hrportal.services.storage import BlobStorage

logger = logging.getLogger(__name__)

MAX_DOCUMENT_BYTES = 10 * 1024 * 1024

# extension -> stored content type
ALLOWED_EXTENSIONS = {
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
}


def upload_document(
    db: Session,
    admin: User,
    storage: BlobStorage,
    employee_id: UUID,
    document_type: str,
    file_name: str,
    content: bytes,
    meta: Optional[RequestMeta] = None,
) -> EmployeeDocument:
    require_employee(db, employee_id)
    if not content:
        raise ValidationError("No file provided")
    if len(content) > MAX_DOCUMENT_BYTES:
        raise ValidationError("File is larger than 10 MB")
    try:
        document_type = DocumentType(document_type)
    except ValueError:
        raise ValidationError(f"Unknown document type: {document_type}")

    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    mime_type = ALLOWED_EXTENSIONS.get(extension)
    if mime_type is None:
        raise ValidationError("Documents must be PDF, JPEG or PNG files")

    path = f"documents/{employee_id}/{document_type.value.lower()}_{int(time.time() * 1000)}.{extension}"
    file_url = storage.put(path, content, mime_type)

    document = EmployeeDocument(
        employee_id=employee_id,
        document_type=document_type,
        file_name=file_name,
        file_url=file_url,
        mime_type=mime_type,
        file_size=len(content),
    )
    db.add(document)
    db.commit()
    db.refresh(document)

    meta = meta or RequestMeta()
    record_audit(
        db,
        action=AuditAction.DOCUMENT_UPLOAD,
        entity_type="EmployeeDocument",
        user_id=admin.user_id,
        entity_id=document.document_id,
        details={"employee_id": employee_id, "type": document_type.value, "file_name": file_name},
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
    )
    logger.info("Document %s uploaded for employee %s", document.document_id, employee_id)
    return document


def list_documents(db: Session, employee_id: UUID) -> list:
    return db.execute(
        select(EmployeeDocument)
        .where(EmployeeDocument.employee_id == employee_id)
        .order_by(EmployeeDocument.uploaded_at.desc())
    ).scalars().all()


def view_documents(db: Session, user: User, employee_id: UUID, meta: Optional[RequestMeta] = None) -> list:
    docs = list_documents(db, employee_id)
    meta = meta or RequestMeta()
    record_audit(
        db,
        action=AuditAction.DOCUMENT_VIEW,
        entity_type="EmployeeDocument",
        user_id=user.user_id,
        entity_id=employee_id,
        details={"count": len(docs)},
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
    )
    return docs
