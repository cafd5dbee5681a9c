import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hrportal.core.config import settings
from hrportal.core.encryption import FieldEncryptor
from hrportal.core.logging import configure_logging
from hrportal.services.email import SmtpEmailSender
from hrportal.services.errors import RateLimited, ServiceError
from hrportal.services.pdf import OnboardingPdfRenderer
from hrportal.services.rate_limiter import InMemoryRateLimitStore, RateLimiter, RedisRateLimitStore
from hrportal.services.storage import LocalDirectoryStorage

# register every mapper before the first query
from hrportal.models import announcement, audit_log, bank_details, document, employee, password_reset_token, paystub, pto, user  # noqa: F401

from hrportal.routers.admin import router as admin_router
from hrportal.routers.auth import router as auth_router
from hrportal.routers.portal import router as portal_router
from hrportal.routers.pto import router as pto_router

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="HR Portal API")

# Comma-separated list, e.g.:
# CORS_ORIGINS="http://localhost:3000,https://hr.example.com"
cors_origins = settings.cors_origins
allow_origins = [o.strip() for o in cors_origins.split(",") if o.strip()]

# Safe fallback for local dev if env var not set
if not allow_origins:
  allow_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
  ]

app.add_middleware(
  CORSMiddleware,
  allow_origins=allow_origins,
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)

if settings.rate_limit_redis_url:
  rate_limit_store = RedisRateLimitStore.from_url(settings.rate_limit_redis_url)
else:
  rate_limit_store = InMemoryRateLimitStore()

app.state.rate_limiter = RateLimiter(rate_limit_store)
app.state.email_sender = SmtpEmailSender()
app.state.encryptor = FieldEncryptor()
app.state.storage = LocalDirectoryStorage(settings.storage_dir, settings.storage_base_url)
app.state.pdf_renderer = OnboardingPdfRenderer()


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
  headers = {"Retry-After": str(exc.retry_after)} if isinstance(exc, RateLimited) else None
  return JSONResponse(status_code=exc.status_code, content=exc.payload(), headers=headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
  logger.exception("Unhandled error on %s %s", request.method, request.url.path)
  return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(pto_router, prefix="/pto", tags=["pto"])
app.include_router(portal_router, prefix="/portal", tags=["portal"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])

@app.get("/health")
def health():
  return {"status": "ok"}
