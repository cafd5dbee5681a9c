from decimal import Decimal

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    database_url: str
    jwt_secret_key: str
    encryption_key: str | None = None  # base64-encoded 32 bytes, required for 2FA
    bcrypt_rounds: int = 12

    app_url: str = "http://localhost:3000"
    cors_origins: str = ""
    cookie_secure: bool = True
    log_level: str = "INFO"

    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    smtp_from: str = "HR Portal <noreply@hrportal.local>"

    login_window_seconds: int = 15 * 60
    login_max_attempts: int = 5
    rate_limit_redis_url: str | None = None  # in-process counters when unset

    storage_dir: str = "uploads"
    storage_base_url: str = "/files"

    default_vacation_days: Decimal = Decimal("10")
    default_sick_days: Decimal = Decimal("5")
    default_personal_days: Decimal = Decimal("3")

    class Config:
        env_file = ".env"

settings = Settings()
