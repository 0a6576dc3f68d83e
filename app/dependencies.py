import secrets
from typing import Callable

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.services.flow_registry import FlowRegistry, flow_registry
from app.services.password_reset_flow import PasswordResetFlow
from app.utils.email import send_otp_email
from app.utils.exceptions import ForbiddenException


# ─── Collaborators ────────────────────────────────────────────────────────────
# Separate dependencies so tests can swap them through app.dependency_overrides

def get_otp_sender() -> Callable[[str, str], None]:
    return send_otp_email


def get_flow_registry() -> FlowRegistry:
    return flow_registry


def get_reset_flow(
    db: Session = Depends(get_db),
    send_email: Callable[[str, str], None] = Depends(get_otp_sender),
) -> PasswordResetFlow:
    return PasswordResetFlow(db, send_email=send_email)


# ─── Admin Guard ──────────────────────────────────────────────────────────────
def require_admin_key(x_admin_key: str | None = Header(default=None)) -> None:
    """
    Allow the request only if X-Admin-Key matches ADMIN_API_KEY.
    With no ADMIN_API_KEY configured every admin call is refused.

    Usage:
        @router.patch("/users/{email}/status", dependencies=[Depends(require_admin_key)])
    """
    if not settings.ADMIN_API_KEY:
        raise ForbiddenException("Admin operations are disabled on this server")
    if not x_admin_key or not secrets.compare_digest(x_admin_key, settings.ADMIN_API_KEY):
        raise ForbiddenException("A valid admin key is required for this action")
