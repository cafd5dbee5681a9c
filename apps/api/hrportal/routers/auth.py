from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from hrportal.core.config import settings
from hrportal.core.dependencies import get_auth_service, get_request_meta
from hrportal.core.security import ACCESS_TOKEN_EXPIRE_MINUTES, SESSION_COOKIE_NAME
from hrportal.models.user import Role, User
from hrportal.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    TwoFactorDisableRequest,
    TwoFactorSetupResponse,
    TwoFactorVerifyRequest,
    TwoFactorVerifyResponse,
    UserSummary,
)
from hrportal.services.audit import RequestMeta
from hrportal.services.auth import AuthService, user_summary
from hrportal.services.errors import AuthenticationError, AuthorizationError

router = APIRouter()
security = HTTPBearer(auto_error=False)


def _session_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Session cookie first, then an Authorization: Bearer header."""
    return request.cookies.get(SESSION_COOKIE_NAME) or (credentials.credentials if credentials else None)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Get the current authenticated user from the session token."""
    token = _session_token(request, credentials)
    if not token:
        raise AuthenticationError()
    return auth.resolve_token(token)


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    token = _session_token(request, credentials)
    if not token:
        return None
    try:
        return auth.resolve_token(token)
    except AuthenticationError:
        return None


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != Role.ADMIN:
        raise AuthorizationError("This endpoint requires the admin role")
    return current_user


def get_current_employee_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != Role.EMPLOYEE:
        raise AuthorizationError("This endpoint requires the employee role")
    return current_user


@router.post("/login", response_model=LoginResponse)
def login(
    req: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Login endpoint for admins and employees."""
    result = auth.login(req.email, req.password, req.totp_code, meta)

    response.set_cookie(
        SESSION_COOKIE_NAME,
        result.token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )
    return LoginResponse(access_token=result.token, user=UserSummary(**result.user))


@router.post("/logout")
def logout(
    response: Response,
    current_user: Optional[User] = Depends(get_optional_user),
    auth: AuthService = Depends(get_auth_service),
    meta: RequestMeta = Depends(get_request_meta),
):
    if current_user is not None:
        auth.logout(current_user, meta)
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserSummary)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user info."""
    return UserSummary(**user_summary(current_user))


@router.post("/forgot-password")
def forgot_password(
    req: ForgotPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
    meta: RequestMeta = Depends(get_request_meta),
):
    return {"message": auth.forgot_password(req.email, meta)}


@router.post("/reset-password")
def reset_password(
    req: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
    meta: RequestMeta = Depends(get_request_meta),
):
    auth.reset_password(req.email, req.token, req.new_password, meta)
    return {"message": "Password reset successfully. You can now log in with your new password."}


@router.post("/change-password")
def change_password(
    req: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
    meta: RequestMeta = Depends(get_request_meta),
):
    auth.change_password(current_user, req.current_password, req.new_password, meta)
    return {"message": "Password changed successfully"}


@router.post("/2fa/setup", response_model=TwoFactorSetupResponse)
def setup_two_factor(
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    setup = auth.setup_two_factor(current_user)
    return TwoFactorSetupResponse(secret=setup.secret, otpauth_uri=setup.otpauth_uri, qr_code=setup.qr_code)


@router.post("/2fa/verify", response_model=TwoFactorVerifyResponse)
def verify_two_factor(
    req: TwoFactorVerifyRequest,
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
    meta: RequestMeta = Depends(get_request_meta),
):
    backup_codes = auth.verify_two_factor(current_user, req.code, meta)
    return TwoFactorVerifyResponse(backup_codes=backup_codes)


@router.post("/2fa/disable")
def disable_two_factor(
    req: TwoFactorDisableRequest,
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
    meta: RequestMeta = Depends(get_request_meta),
):
    auth.disable_two_factor(current_user, req.password, meta)
    return {"message": "2FA has been disabled"}
