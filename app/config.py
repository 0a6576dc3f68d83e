from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # ─── Application ───────────────────────────────────────────────────────────
    APP_NAME: str = "Password Reset Service"
    APP_ENV:  str = "development"
    APP_DEBUG: bool = True
    APP_HOST:  str = "0.0.0.0"
    APP_PORT:  int = 8000

    # ─── Database ──────────────────────────────────────────────────────────────
    DATABASE_URL:          str
    DATABASE_POOL_SIZE:    int  = 10
    DATABASE_MAX_OVERFLOW: int  = 20
    DATABASE_POOL_TIMEOUT: int  = 30
    DATABASE_ECHO:         bool = False

    # ─── OTP ───────────────────────────────────────────────────────────────────
    OTP_EXPIRE_MINUTES: int = 10
    OTP_LENGTH:         int = 6

    # ─── Email ─────────────────────────────────────────────────────────────────
    # "console" logs the code instead of sending it; "emailjs" calls the REST API
    EMAIL_BACKEND:         str = "console"
    EMAILJS_API_URL:       str = "https://api.emailjs.com/api/v1.0/email/send"
    EMAILJS_SERVICE_ID:    Optional[str] = None
    EMAILJS_TEMPLATE_ID:   Optional[str] = None
    EMAILJS_PUBLIC_KEY:    Optional[str] = None
    EMAILJS_PRIVATE_KEY:   Optional[str] = None
    EMAIL_TIMEOUT_SECONDS: int = 10

    # ─── Admin ─────────────────────────────────────────────────────────────────
    ADMIN_API_KEY: Optional[str] = None

    # ─── Reset Flows ───────────────────────────────────────────────────────────
    FLOW_IDLE_MINUTES: int = 30

    # ─── CORS ──────────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    def get_cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}


settings = Settings()
