"""
Delete expired password reset OTPs. Meant to be run by cron or another scheduler:

    python -m app.cleanup_otps
"""
import logging
import sys

from app.database import SessionLocal
from app.services.otp_service import otp_service
from app.utils.exceptions import BackingStoreError

logger = logging.getLogger("app.cleanup_otps")


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    db = SessionLocal()
    try:
        deleted = otp_service.cleanup_expired_otps(db)
    except BackingStoreError as e:
        logger.error(f"OTP cleanup failed: {e.message} ({e.reason})")
        return 1
    finally:
        db.close()

    logger.info(f"OTP cleanup finished, {deleted} row(s) deleted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
