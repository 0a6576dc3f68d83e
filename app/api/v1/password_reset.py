from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_flow_registry, get_reset_flow, require_admin_key
from app.schemas.common import ErrorResponse, SuccessResponse, success_response, error_body
from app.schemas.password_reset import (
    SubmitEmailRequest, SubmitOtpRequest, SubmitPasswordRequest, StepOutcome, FlowOut, CleanupOut,
)
from app.services.flow_registry import FlowRecord, FlowRegistry
from app.services.otp_service import otp_service
from app.services.password_reset_flow import PasswordResetFlow

router = APIRouter(prefix="/password-reset")

# Step submissions answer with the flow plus a notice, or with an ErrorResponse
STEP_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or mismatched input, invalid OTP"},
    404: {"model": ErrorResponse, "description": "Unknown flow or account"},
    409: {"model": ErrorResponse, "description": "Flow busy or at a different step"},
    502: {"model": ErrorResponse, "description": "OTP email could not be sent"},
    503: {"model": ErrorResponse, "description": "Database unavailable or misconfigured"},
}


def _flow_data(record: FlowRecord, outcome: StepOutcome | None = None) -> dict:
    return {
        "flowId": record.id,
        "step":   record.state.step,
        "email":  getattr(record.state, "email", None),
        "notice": outcome.notice.model_dump() if outcome else None,
    }


def _outcome_response(record: FlowRecord, outcome: StepOutcome) -> JSONResponse:
    content = {
        "success": outcome.ok,
        "message": outcome.notice.text,
        "data":    _flow_data(record, outcome),
    }
    if not outcome.ok:
        content["error"] = error_body(outcome.error_code)
    return JSONResponse(status_code=outcome.status_code, content=content)


# ─── POST /password-reset ─────────────────────────────────────────────────────
@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Start a password reset",
    response_model=SuccessResponse[FlowOut],
)
def start_flow(registry: FlowRegistry = Depends(get_flow_registry)):
    record = registry.create()
    return success_response("Enter your email to reset your password.", _flow_data(record))


# ─── GET /password-reset/{flow_id} ────────────────────────────────────────────
@router.get(
    "/{flow_id}",
    status_code=status.HTTP_200_OK,
    summary="Get the current step of a password reset",
    response_model=SuccessResponse[FlowOut],
    responses={404: {"model": ErrorResponse}},
)
def get_flow(flow_id: str, registry: FlowRegistry = Depends(get_flow_registry)):
    record = registry.get(flow_id)
    return success_response("Password reset retrieved", _flow_data(record))


# ─── POST /password-reset/{flow_id}/email ─────────────────────────────────────
@router.post("/{flow_id}/email", summary="Submit email and receive an OTP", responses=STEP_RESPONSES)
def submit_email(
    flow_id: str,
    data: SubmitEmailRequest,
    registry: FlowRegistry = Depends(get_flow_registry),
    flow: PasswordResetFlow = Depends(get_reset_flow),
):
    with registry.submission(flow_id) as record:
        outcome = flow.submit_email(record.state, data.email)
        record.state = outcome.state
    return _outcome_response(record, outcome)


# ─── POST /password-reset/{flow_id}/otp ───────────────────────────────────────
@router.post("/{flow_id}/otp", summary="Verify the emailed OTP", responses=STEP_RESPONSES)
def submit_otp(
    flow_id: str,
    data: SubmitOtpRequest,
    registry: FlowRegistry = Depends(get_flow_registry),
    flow: PasswordResetFlow = Depends(get_reset_flow),
):
    with registry.submission(flow_id) as record:
        outcome = flow.submit_otp(record.state, data.otp)
        record.state = outcome.state
    return _outcome_response(record, outcome)


# ─── POST /password-reset/{flow_id}/password ──────────────────────────────────
@router.post("/{flow_id}/password", summary="Set the new password", responses=STEP_RESPONSES)
def submit_password(
    flow_id: str,
    data: SubmitPasswordRequest,
    registry: FlowRegistry = Depends(get_flow_registry),
    flow: PasswordResetFlow = Depends(get_reset_flow),
):
    with registry.submission(flow_id) as record:
        outcome = flow.submit_password(record.state, data.newPassword, data.confirmPassword)
        record.state = outcome.state
    return _outcome_response(record, outcome)


# ─── POST /password-reset/otps/cleanup ────────────────────────────────────────
@router.post(
    "/otps/cleanup",
    status_code=status.HTTP_200_OK,
    summary="Delete expired OTPs (admin, for schedulers)",
    response_model=SuccessResponse[CleanupOut],
    responses={403: {"model": ErrorResponse}},
    dependencies=[Depends(require_admin_key)],
)
def cleanup_otps(db: Session = Depends(get_db)):
    deleted = otp_service.cleanup_expired_otps(db)
    return success_response(f"Removed {deleted} expired OTP(s)", {"deleted": deleted})
