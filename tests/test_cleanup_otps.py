from datetime import timedelta
from unittest.mock import patch

from app import cleanup_otps
from app.models.password_reset_otp import PasswordResetOTP
from app.utils.exceptions import BackingErrorKind, BackingStoreError
from app.utils.otp import utcnow


def test_cleanup_command_deletes_expired(db):
    now = utcnow()
    db.add(PasswordResetOTP(email="a@x.com", otp="111111", created_at=now - timedelta(minutes=30),
                            expires_at=now - timedelta(minutes=20), used=False))
    db.commit()

    with patch.object(cleanup_otps, "SessionLocal", return_value=db):
        assert cleanup_otps.main() == 0

    assert db.query(PasswordResetOTP).count() == 0


def test_cleanup_command_reports_store_failure(db):
    with patch.object(cleanup_otps, "SessionLocal", return_value=db), \
         patch.object(cleanup_otps.otp_service, "cleanup_expired_otps",
                      side_effect=BackingStoreError(BackingErrorKind.UNAVAILABLE, reason="down")):
        assert cleanup_otps.main() == 1
