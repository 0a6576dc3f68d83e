import logging

import requests

from app.config import settings
from app.utils.exceptions import EmailDispatchError

logger = logging.getLogger(__name__)


def _send_via_console(to_email: str, otp_code: str) -> None:
    """Development backend: the OTP is written to the log instead of mailed."""
    logger.info("=" * 60)
    logger.info(f"[OTP EMAIL]  To   : {to_email}")
    logger.info(f"[OTP CODE]   >>>  : {otp_code}")
    logger.info("=" * 60)


def _send_via_emailjs(to_email: str, otp_code: str) -> None:
    missing = [
        name for name in ("EMAILJS_SERVICE_ID", "EMAILJS_TEMPLATE_ID", "EMAILJS_PUBLIC_KEY")
        if not getattr(settings, name)
    ]
    if missing:
        raise EmailDispatchError(f"email service is not configured ({', '.join(missing)})")

    payload = {
        "service_id":  settings.EMAILJS_SERVICE_ID,
        "template_id": settings.EMAILJS_TEMPLATE_ID,
        "user_id":     settings.EMAILJS_PUBLIC_KEY,
        "template_params": {
            "to_email": to_email,
            "otp":      otp_code,
        },
    }
    if settings.EMAILJS_PRIVATE_KEY:
        payload["accessToken"] = settings.EMAILJS_PRIVATE_KEY

    try:
        response = requests.post(
            settings.EMAILJS_API_URL,
            json=payload,
            timeout=settings.EMAIL_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error(f"EmailJS request to {to_email} failed: {e}")
        raise EmailDispatchError(str(e)) from e

    if response.status_code != 200:
        logger.error(f"EmailJS rejected OTP email to {to_email}: {response.status_code} {response.text}")
        raise EmailDispatchError(f"{response.status_code} {response.text}".strip())

    logger.info(f"OTP email sent to {to_email}")


EMAIL_BACKENDS = {
    "console": _send_via_console,
    "emailjs": _send_via_emailjs,
}


def send_otp_email(to_email: str, otp_code: str) -> None:
    """
    Deliver a password reset OTP using the configured EMAIL_BACKEND.
    Raises EmailDispatchError on any delivery failure.
    """
    backend = EMAIL_BACKENDS.get(settings.EMAIL_BACKEND)
    if backend is None:
        raise EmailDispatchError(f"unknown email backend '{settings.EMAIL_BACKEND}'")
    backend(to_email, otp_code)
