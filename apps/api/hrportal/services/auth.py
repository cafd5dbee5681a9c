"""
Authentication flows: login with optional TOTP, password reset, password
change and two-factor enrollment.

Login failures for an unknown email and for a wrong password are
indistinguishable to the caller. Every security-relevant outcome is written
to the audit log.
"""

import hashlib
import json
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional
from urllib.parse import urlencode
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from hrportal.core.config import settings
from hrportal.core.encryption import EncryptionError, FieldEncryptor
from hrportal.core.security import (
    burn_password_check,
    create_access_token,
    decode_token,
    get_password_hash,
    utcnow,
    verify_password,
)
from hrportal.models.audit_log import AuditAction
from hrportal.models.employee import EmployeeProfile  # noqa: F401  registers the User.employee_profile mapper
from hrportal.models.password_reset_token import PasswordResetToken
from hrportal.models.user import Role, User
from hrportal.services import totp
from hrportal.services.audit import RequestMeta, record_audit
from hrportal.services.email import EmailSender, password_reset_email
from hrportal.services.errors import (
    AlreadyEnabled,
    AuthenticationError,
    InvalidCredentials,
    InvalidTwoFactorCode,
    InvariantViolation,
    NotEnabled,
    RateLimited,
    TokenExpiredOrInvalid,
    TwoFactorRequired,
    ValidationError,
)
from hrportal.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(hours=1)
MIN_PASSWORD_LENGTH = 8
FORGOT_PASSWORD_MESSAGE = "If an account exists with that email, you will receive a password reset link."


@dataclass
class LoginResult:
    token: str
    user: dict


@dataclass
class TwoFactorSetup:
    secret: str
    otpauth_uri: str
    qr_code: str


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def validate_new_password(password: Optional[str]) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def user_summary(user: User) -> dict:
    profile = user.employee_profile if user.role == Role.EMPLOYEE else None
    return {
        "user_id": str(user.user_id),
        "email": user.email,
        "role": user.role.value,
        "employee_id": str(profile.employee_id) if profile else None,
        "onboarding_status": profile.onboarding_status.value if profile else None,
        "totp_enabled": user.totp_enabled,
    }


class AuthService:
    """Auth flows bound to one database session and the shared collaborators."""

    def __init__(
        self,
        db: Session,
        rate_limiter: RateLimiter,
        email_sender: EmailSender,
        encryptor: Optional[FieldEncryptor] = None,
    ):
        self.db = db
        self.rate_limiter = rate_limiter
        self.email_sender = email_sender
        self.encryptor = encryptor or FieldEncryptor()

    # --- helpers ---

    def _audit(self, action: AuditAction, user_id: Optional[UUID], meta: Optional[RequestMeta], details: Optional[dict] = None):
        meta = meta or RequestMeta()
        record_audit(
            self.db,
            action=action,
            entity_type="User",
            user_id=user_id,
            entity_id=user_id,
            details=details,
            ip_address=meta.ip_address,
            user_agent=meta.user_agent,
        )

    def _find_by_email(self, email: str) -> Optional[User]:
        return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    def _totp_secret(self, user: User) -> str:
        try:
            return self.encryptor.decrypt(user.totp_secret)
        except EncryptionError:
            logger.error("Stored TOTP secret for user %s cannot be decrypted", user.user_id)
            raise InvariantViolation("Two-factor secret is unreadable")

    def _check_second_factor(self, user: User, code: str) -> bool:
        """TOTP first, then backup codes; a matching backup code is spent."""
        secret = self._totp_secret(user)
        if totp.verify_code(secret, code):
            return True

        hashed_codes: List[str] = json.loads(user.backup_codes) if user.backup_codes else []
        index = totp.match_backup_code(code, hashed_codes)
        if index == -1:
            return False

        del hashed_codes[index]
        user.backup_codes = json.dumps(hashed_codes)
        self.db.commit()
        logger.info("Backup code used for user %s (%d left)", user.user_id, len(hashed_codes))
        return True

    # --- login / logout ---

    def login(self, email: str, password: str, totp_code: Optional[str] = None, meta: Optional[RequestMeta] = None) -> LoginResult:
        email = normalize_email(email)
        key = f"login:{email}"

        limit = self.rate_limiter.check(key, settings.login_window_seconds, settings.login_max_attempts)
        if not limit.success:
            logger.warning("Login rate limit hit for %s", email)
            raise RateLimited(limit.retry_after)

        user = self._find_by_email(email)
        if user is None:
            burn_password_check(password or "")
            self._audit(AuditAction.LOGIN_FAILED, None, meta, {"email": email, "reason": "not found"})
            raise InvalidCredentials()

        if not verify_password(password or "", user.password_hash):
            self._audit(AuditAction.LOGIN_FAILED, user.user_id, meta, {"reason": "invalid password"})
            raise InvalidCredentials()

        if user.totp_enabled:
            if not totp_code:
                raise TwoFactorRequired()
            if not self._check_second_factor(user, totp_code):
                self._audit(AuditAction.LOGIN_FAILED, user.user_id, meta, {"reason": "invalid 2fa code"})
                raise TwoFactorRequired("Invalid two-factor code")

        token = create_access_token(
            data={"sub": str(user.user_id), "email": user.email, "role": user.role.value}
        )
        self.rate_limiter.reset(key)
        self._audit(AuditAction.LOGIN, user.user_id, meta)
        logger.info("User %s logged in", user.user_id)

        return LoginResult(token=token, user=user_summary(user))

    def logout(self, user: User, meta: Optional[RequestMeta] = None) -> None:
        # tokens are stateless; the router clears the cookie
        self._audit(AuditAction.LOGOUT, user.user_id, meta)

    def resolve_token(self, token: Optional[str]) -> User:
        """Load the user a session token belongs to."""
        payload = decode_token(token) if token else None
        subject = payload.get("sub") if payload else None
        if not subject:
            raise AuthenticationError("Invalid authentication credentials")
        try:
            user_id = UUID(subject)
        except ValueError:
            raise AuthenticationError("Invalid authentication credentials")

        user = self.db.get(User, user_id)
        if user is None:
            raise AuthenticationError("Invalid authentication credentials")
        return user

    # --- passwords ---

    def forgot_password(self, email: str, meta: Optional[RequestMeta] = None) -> str:
        """Issue a reset link if the account exists. Always returns the same message."""
        email = normalize_email(email)
        if not email:
            raise ValidationError("Email is required")

        user = self._find_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return FORGOT_PASSWORD_MESSAGE

        raw_token = secrets.token_urlsafe(32)
        self.db.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user.user_id))
        self.db.add(
            PasswordResetToken(
                user_id=user.user_id,
                token_hash=hash_reset_token(raw_token),
                expires_at=utcnow() + RESET_TOKEN_TTL,
            )
        )
        self.db.commit()

        reset_url = f"{settings.app_url}/reset-password?" + urlencode({"token": raw_token, "email": user.email})
        try:
            sent = self.email_sender.send(user.email, **password_reset_email(reset_url))
        except Exception:
            logger.exception("Email sender raised while sending reset link")
            sent = False
        if not sent:
            logger.error("Password reset email for user %s was not delivered", user.user_id)

        self._audit(AuditAction.PASSWORD_RESET_REQUEST, user.user_id, meta)
        return FORGOT_PASSWORD_MESSAGE

    def reset_password(self, email: str, token: str, new_password: str, meta: Optional[RequestMeta] = None) -> None:
        if not email or not token or not new_password:
            raise ValidationError("Missing required fields")
        validate_new_password(new_password)

        user = self._find_by_email(normalize_email(email))
        if user is None:
            raise TokenExpiredOrInvalid()

        record = self.db.execute(
            select(PasswordResetToken)
            .where(
                PasswordResetToken.user_id == user.user_id,
                PasswordResetToken.token_hash == hash_reset_token(token),
            )
            .with_for_update()
        ).scalar_one_or_none()

        now = utcnow()
        if record is None or record.used_at is not None or record.expires_at <= now:
            self.db.rollback()
            raise TokenExpiredOrInvalid()

        # one transaction: the password never changes without the token being spent
        try:
            user.password_hash = get_password_hash(new_password)
            record.used_at = now
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self._audit(AuditAction.PASSWORD_RESET_COMPLETE, user.user_id, meta)

    def change_password(self, user: User, current_password: str, new_password: str, meta: Optional[RequestMeta] = None) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current and new password are required")
        validate_new_password(new_password)

        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")

        user.password_hash = get_password_hash(new_password)
        self.db.commit()
        self._audit(AuditAction.PROFILE_UPDATE, user.user_id, meta, {"action": "password_changed"})

    # --- two-factor ---

    def setup_two_factor(self, user: User) -> TwoFactorSetup:
        if user.totp_enabled:
            raise AlreadyEnabled("2FA is already enabled. Disable it first to set up a new device.")

        secret = totp.generate_secret()
        uri = totp.provisioning_uri(user.email, secret)

        # pending until verified
        user.totp_secret = self.encryptor.encrypt(secret)
        self.db.commit()

        return TwoFactorSetup(secret=secret, otpauth_uri=uri, qr_code=totp.qr_code_data_url(uri))

    def verify_two_factor(self, user: User, code: str, meta: Optional[RequestMeta] = None) -> List[str]:
        """Confirm the pending secret and enable 2FA. Returns the backup codes, shown once."""
        code = (code or "").strip()
        if len(code) != totp.TOTP_DIGITS or not code.isdigit():
            raise ValidationError("Invalid code format")
        if user.totp_enabled:
            raise AlreadyEnabled()
        if not user.totp_secret:
            raise NotEnabled("No 2FA setup in progress")

        secret = self._totp_secret(user)
        if not totp.verify_code(secret, code):
            raise InvalidTwoFactorCode()

        backup_codes = totp.generate_backup_codes()
        user.backup_codes = json.dumps([totp.hash_backup_code(c) for c in backup_codes])
        user.totp_enabled = True
        self.db.commit()

        self._audit(AuditAction.TWO_FACTOR_ENABLED, user.user_id, meta)
        return backup_codes

    def disable_two_factor(self, user: User, password: str, meta: Optional[RequestMeta] = None) -> None:
        if not password:
            raise ValidationError("Password is required")
        if not user.totp_enabled:
            raise NotEnabled()
        if not verify_password(password, user.password_hash):
            raise ValidationError("Incorrect password")

        user.totp_enabled = False
        user.totp_secret = None
        user.backup_codes = None
        self.db.commit()

        self._audit(AuditAction.TWO_FACTOR_DISABLED, user.user_id, meta)
