import secrets
from datetime import datetime, timedelta, timezone

from app.config import settings


# ─── Clock ────────────────────────────────────────────────────────────────────
def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# ─── OTP ──────────────────────────────────────────────────────────────────────
def generate_otp(length: int | None = None) -> str:
    """
    Generate a numeric OTP with no leading zero, uniform over its range.
    For the default length of 6 that is [100000, 999999].
    """
    length = length or settings.OTP_LENGTH
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def otp_expiry(issued_at: datetime | None = None) -> datetime:
    """Return OTP expiry timestamp (UTC)."""
    issued_at = issued_at or utcnow()
    return issued_at + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
