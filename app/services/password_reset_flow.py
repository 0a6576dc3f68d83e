"""
Three-step password reset: collect email, verify the emailed code, set a new password.

Each ``submit_*`` method takes the current state plus the user's input and
returns a StepOutcome holding the next state and the notice to show. Failures
leave the state where it was. After a successful reset the account is Pending
until an administrator approves it again.
"""
import logging
from typing import Callable

from sqlalchemy.orm import Session

from app.schemas.password_reset import (
    EmailStep, OtpStep, PasswordStep, ResetState, Notice, StepOutcome,
)
from app.services.otp_service import otp_service, PasswordResetOtpService
from app.services.user_service import user_service, UserService, Found, NotFound, BackingError
from app.utils.email import send_otp_email
from app.utils.exceptions import (
    AppException, BackingStoreError, BackingErrorKind, EmailDispatchError,
    ErrorCode, FlowStepMismatchException,
)
from app.utils.otp import generate_otp

logger = logging.getLogger(__name__)


# ─── Outcome Helpers ──────────────────────────────────────────────────────────
def _success(state: ResetState, title: str, text: str) -> StepOutcome:
    return StepOutcome(state=state, notice=Notice(level="success", title=title, text=text))


def _failure(state: ResetState, title: str, text: str, status_code: int, error_code: str) -> StepOutcome:
    return StepOutcome(
        state=state,
        notice=Notice(level="error", title=title, text=text),
        status_code=status_code,
        error_code=error_code,
    )


def _invalid(state: ResetState, title: str, text: str, error_code: str = ErrorCode.VALIDATION_ERROR) -> StepOutcome:
    return _failure(state, title, text, 400, error_code)


def _from_error(state: ResetState, error: AppException, title: str, text: str) -> StepOutcome:
    return _failure(state, title, text, error.status_code, error.error_code)


def _send_otp_failure(state: ResetState, error: AppException) -> StepOutcome:
    """Pick the message for a failed OTP request by what failed."""
    if isinstance(error, EmailDispatchError):
        return _from_error(state, error, "Email Not Sent", error.message)
    if isinstance(error, BackingStoreError) and error.kind in (
        BackingErrorKind.PERMISSION_DENIED, BackingErrorKind.MISSING_RESOURCE,
    ):
        return _from_error(state, error, "Error", error.message)
    return _from_error(state, error, "Error", f"Failed to send OTP: {error.message}")


def _require_step(state: ResetState, expected: str) -> None:
    if state.step != expected:
        raise FlowStepMismatchException(expected=expected, actual=state.step)


class PasswordResetFlow:

    def __init__(
        self,
        db: Session,
        send_email: Callable[[str, str], None] = send_otp_email,
        users: UserService = user_service,
        otps: PasswordResetOtpService = otp_service,
        otp_generator: Callable[[], str] = generate_otp,
    ):
        self.db = db
        self.send_email = send_email
        self.users = users
        self.otps = otps
        self.otp_generator = otp_generator

    # ─── Step 1: Email ────────────────────────────────────────────────────────
    def submit_email(self, state: ResetState, email: str) -> StepOutcome:
        _require_step(state, "email")
        email = email.strip()
        if not email:
            return _invalid(state, "Missing Email", "Please enter your email address.")

        lookup = self.users.get_user_by_email(self.db, email)
        if isinstance(lookup, NotFound):
            return _failure(
                state, "User Not Found", "No account found with this email address.",
                404, ErrorCode.NOT_FOUND,
            )
        if isinstance(lookup, BackingError):
            return _send_otp_failure(state, lookup.error)

        otp = self.otp_generator()
        try:
            self.otps.create_password_reset_otp(self.db, email, otp)
            self.send_email(email, otp)
        except (BackingStoreError, EmailDispatchError) as e:
            logger.warning(f"OTP request for {email} failed: {e.error_code}")
            return _send_otp_failure(state, e)

        return _success(OtpStep(email=email), "OTP Sent", "Please check your email for the OTP.")

    # ─── Step 2: OTP ──────────────────────────────────────────────────────────
    def submit_otp(self, state: ResetState, otp: str) -> StepOutcome:
        _require_step(state, "otp")
        otp = otp.strip()
        if not otp:
            return _invalid(state, "Missing OTP", "Please enter the OTP.")

        try:
            valid = self.otps.verify_password_reset_otp(self.db, state.email, otp)
        except BackingStoreError as e:
            return _from_error(state, e, "Error", "Failed to verify OTP. Please try again.")

        if not valid:
            return _invalid(
                state, "Invalid OTP", "The OTP you entered is incorrect or has expired.",
                ErrorCode.OTP_INVALID,
            )
        return _success(PasswordStep(email=state.email), "OTP Verified", "Please choose a new password.")

    # ─── Step 3: New Password ─────────────────────────────────────────────────
    def submit_password(self, state: ResetState, new_password: str, confirm_password: str) -> StepOutcome:
        _require_step(state, "password")
        if not new_password or not confirm_password:
            return _invalid(state, "Missing Fields", "Please fill in all fields.")
        if new_password != confirm_password:
            return _invalid(
                state, "Password Mismatch", "New password and confirm password do not match.",
                ErrorCode.PASSWORD_MISMATCH,
            )

        try:
            self.users.reset_password(self.db, state.email, new_password)
        except AppException as e:
            logger.warning(f"Password reset for {state.email} failed: {e.error_code}")
            return _from_error(state, e, "Error", "Failed to reset password. Please try again.")

        return _success(
            EmailStep(),
            "Password Reset Successful",
            "Your password has been reset. Please wait for admin approval before logging in.",
        )
