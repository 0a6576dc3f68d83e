import logging

from sqlalchemy.orm import Session

from app.database import store_errors
from app.models.password_reset_otp import PasswordResetOTP
from app.utils.otp import otp_expiry, utcnow

logger = logging.getLogger(__name__)

OTPS_TABLE = PasswordResetOTP.__tablename__


class PasswordResetOtpService:

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_password_reset_otp(self, db: Session, email: str, otp: str) -> PasswordResetOTP:
        """
        Store a new code for `email`, valid for OTP_EXPIRE_MINUTES from now.
        Earlier outstanding codes for the same email are left untouched.
        """
        issued_at = utcnow()
        row = PasswordResetOTP(
            email=email,
            otp=otp,
            created_at=issued_at,
            expires_at=otp_expiry(issued_at),
            used=False,
        )
        with store_errors(db, "create password reset OTP", table=OTPS_TABLE):
            db.add(row)
            db.commit()
            db.refresh(row)
        logger.info(f"Password reset OTP #{row.id} created for {email}")
        return row

    # ─── Verify ───────────────────────────────────────────────────────────────
    def verify_password_reset_otp(self, db: Session, email: str, otp: str) -> bool:
        """
        Consume the newest unused, unexpired code matching (email, otp).

        Returns False when no such code exists. Backing store failures in either
        the lookup or the consume step raise BackingStoreError.
        """
        with store_errors(db, "verify password reset OTP", table=OTPS_TABLE):
            row = db.query(PasswordResetOTP).filter(
                PasswordResetOTP.email == email,
                PasswordResetOTP.otp == otp,
                PasswordResetOTP.used == False,
                PasswordResetOTP.expires_at > utcnow(),
            ).order_by(
                PasswordResetOTP.created_at.desc(),
                PasswordResetOTP.id.desc(),
            ).first()

            if row is None:
                logger.info(f"OTP verification failed for {email}: no valid code")
                return False

            # Conditional so that two concurrent verifications cannot both win
            claimed = db.query(PasswordResetOTP).filter(
                PasswordResetOTP.id == row.id,
                PasswordResetOTP.used == False,
            ).update({"used": True}, synchronize_session="fetch")
            db.commit()

        if claimed != 1:
            logger.info(f"OTP #{row.id} for {email} was consumed concurrently")
            return False

        logger.info(f"OTP #{row.id} verified for {email}")
        return True

    # ─── Cleanup ──────────────────────────────────────────────────────────────
    def cleanup_expired_otps(self, db: Session) -> int:
        """Delete every code whose expiry is in the past. Returns the number removed."""
        with store_errors(db, "clean up expired OTPs", table=OTPS_TABLE):
            deleted = db.query(PasswordResetOTP).filter(
                PasswordResetOTP.expires_at < utcnow(),
            ).delete(synchronize_session=False)
            db.commit()
        logger.info(f"Removed {deleted} expired password reset OTP(s)")
        return deleted


otp_service = PasswordResetOtpService()
