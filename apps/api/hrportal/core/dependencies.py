from fastapi import Depends, Request
from sqlalchemy.orm import Session

from hrportal.core.database import get_db
from hrportal.core.encryption import FieldEncryptor
from hrportal.services.audit import RequestMeta
from hrportal.services.auth import AuthService
from hrportal.services.email import EmailSender
from hrportal.services.pdf import PdfRenderer
from hrportal.services.rate_limiter import RateLimiter
from hrportal.services.storage import BlobStorage

# Collaborators are created once in hrportal.main and kept on app.state so
# tests can swap them out.

def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter

def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender

def get_encryptor(request: Request) -> FieldEncryptor:
    return request.app.state.encryptor

def get_storage(request: Request) -> BlobStorage:
    return request.app.state.storage

def get_pdf_renderer(request: Request) -> PdfRenderer:
    return request.app.state.pdf_renderer

def get_request_meta(request: Request) -> RequestMeta:
    return RequestMeta.from_headers(request.headers)

def get_auth_service(
    db: Session = Depends(get_db),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    email_sender: EmailSender = Depends(get_email_sender),
    encryptor: FieldEncryptor = Depends(get_encryptor),
) -> AuthService:
    return AuthService(db, rate_limiter, email_sender, encryptor)
