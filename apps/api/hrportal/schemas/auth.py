from pydantic import BaseModel, EmailStr, Field
from typing import Optional

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    totp_code: Optional[str] = None

class UserSummary(BaseModel):
    user_id: str
    email: str
    role: str
    employee_id: Optional[str] = None
    onboarding_status: Optional[str] = None
    totp_enabled: bool = False

class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSummary

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    email: EmailStr
    token: str
    new_password: str

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

class TwoFactorSetupResponse(BaseModel):
    secret: str
    otpauth_uri: str
    qr_code: str

class TwoFactorVerifyRequest(BaseModel):
    code: str

class TwoFactorVerifyResponse(BaseModel):
    backup_codes: list[str]
    message: str = "2FA enabled successfully. Save your backup codes!"

class TwoFactorDisableRequest(BaseModel):
    password: str
