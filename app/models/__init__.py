"""
Import all models here so that:
1. Alembic can auto-detect them when generating migrations
2. Base.metadata.create_all() sees every table
"""

from app.models.app_user import AppUser, UserStatus
from app.models.password_reset_otp import PasswordResetOTP

__all__ = [
    "AppUser",
    "UserStatus",
    "PasswordResetOTP",
]
