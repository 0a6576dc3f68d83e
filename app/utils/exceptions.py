import enum

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES: machine-readable constants for frontend switch/case
# ═══════════════════════════════════════════════════════════════════════════════
class ErrorCode:
    VALIDATION_ERROR        = "VALIDATION_ERROR"
    PASSWORD_MISMATCH       = "PASSWORD_MISMATCH"
    FORBIDDEN               = "FORBIDDEN"
    NOT_FOUND               = "NOT_FOUND"
    DUPLICATE_ENTRY         = "DUPLICATE_ENTRY"
    OTP_INVALID             = "OTP_INVALID"
    FLOW_NOT_FOUND          = "FLOW_NOT_FOUND"
    FLOW_BUSY               = "FLOW_BUSY"
    FLOW_STEP_MISMATCH      = "FLOW_STEP_MISMATCH"
    DB_PERMISSION_DENIED    = "DB_PERMISSION_DENIED"
    DB_RESOURCE_MISSING     = "DB_RESOURCE_MISSING"
    DB_UNAVAILABLE          = "DB_UNAVAILABLE"
    DB_ERROR                = "DB_ERROR"
    EMAIL_DELIVERY_FAILED   = "EMAIL_DELIVERY_FAILED"
    INTERNAL_SERVER_ERROR   = "INTERNAL_SERVER_ERROR"


# ═══════════════════════════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════════════════════════
class AppException(HTTPException):
    """
    Base exception for all application-level errors.
    Carries a machine-readable error_code for frontend handling.
    """
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str,
        details: list | None = None,
        field: str | None = None,
    ):
        super().__init__(status_code=status_code, detail={
            "message": message,
            "error": {
                "code": error_code,
                "details": details,
                "field": field,
            }
        })

    @property
    def message(self) -> str:
        return self.detail["message"]

    @property
    def error_code(self) -> str:
        return self.detail["error"]["code"]


# ═══════════════════════════════════════════════════════════════════════════════
# CONCRETE EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class ForbiddenException(AppException):
    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(status.HTTP_403_FORBIDDEN, message, ErrorCode.FORBIDDEN)


class NotFoundException(AppException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(status.HTTP_404_NOT_FOUND, f"{resource} not found", ErrorCode.NOT_FOUND)


class FlowNotFoundException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "Password reset session not found or expired. Please start again.",
            ErrorCode.FLOW_NOT_FOUND,
        )


class FlowBusyException(AppException):
    def __init__(self):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "A request for this password reset is already in progress",
            ErrorCode.FLOW_BUSY,
        )


class FlowStepMismatchException(AppException):
    def __init__(self, expected: str, actual: str):
        super().__init__(
            status.HTTP_409_CONFLICT,
            f"This password reset is at the '{actual}' step, not '{expected}'",
            ErrorCode.FLOW_STEP_MISMATCH,
        )


class EmailDispatchError(AppException):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            status.HTTP_502_BAD_GATEWAY,
            f"Failed to send OTP email: {reason}",
            ErrorCode.EMAIL_DELIVERY_FAILED,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# BACKING STORE ERRORS
# ═══════════════════════════════════════════════════════════════════════════════
class BackingErrorKind(str, enum.Enum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
    MISSING_RESOURCE  = "MISSING_RESOURCE"
    UNIQUE_VIOLATION  = "UNIQUE_VIOLATION"
    UNAVAILABLE       = "UNAVAILABLE"
    GENERIC           = "GENERIC"


# PostgreSQL SQLSTATE codes (psycopg2 exposes them as orig.pgcode)
PG_ERROR_KINDS = {
    "42501": BackingErrorKind.PERMISSION_DENIED,   # insufficient_privilege, RLS rejections
    "42P01": BackingErrorKind.MISSING_RESOURCE,    # undefined_table
    "42703": BackingErrorKind.MISSING_RESOURCE,    # undefined_column
    "23505": BackingErrorKind.UNIQUE_VIOLATION,    # unique_violation
}

# sqlite3 extended result names (orig.sqlite_errorname, Python 3.11+)
SQLITE_ERROR_KINDS = {
    "SQLITE_PERM":                  BackingErrorKind.PERMISSION_DENIED,
    "SQLITE_AUTH":                  BackingErrorKind.PERMISSION_DENIED,
    "SQLITE_CONSTRAINT_UNIQUE":     BackingErrorKind.UNIQUE_VIOLATION,
    "SQLITE_CONSTRAINT_PRIMARYKEY": BackingErrorKind.UNIQUE_VIOLATION,
}

_KIND_RESPONSES = {
    BackingErrorKind.PERMISSION_DENIED: (
        status.HTTP_503_SERVICE_UNAVAILABLE,
        ErrorCode.DB_PERMISSION_DENIED,
        "Database permission error. Please contact administrator to check the access policies for table '{table}'.",
    ),
    BackingErrorKind.MISSING_RESOURCE: (
        status.HTTP_503_SERVICE_UNAVAILABLE,
        ErrorCode.DB_RESOURCE_MISSING,
        "Database table not found. Please contact administrator to create table '{table}'.",
    ),
    BackingErrorKind.UNIQUE_VIOLATION: (
        status.HTTP_409_CONFLICT,
        ErrorCode.DUPLICATE_ENTRY,
        "A record with this data already exists.",
    ),
    BackingErrorKind.UNAVAILABLE: (
        status.HTTP_503_SERVICE_UNAVAILABLE,
        ErrorCode.DB_UNAVAILABLE,
        "Database is unavailable. Please try again later.",
    ),
    BackingErrorKind.GENERIC: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.DB_ERROR,
        "Database error. Please try again.",
    ),
}


def classify_db_error(exc: SQLAlchemyError) -> BackingErrorKind:
    """
    Map a SQLAlchemy error to a BackingErrorKind using the driver's error code.
    Falls back on the exception class only when the driver supplies no known code.
    """
    orig = getattr(exc, "orig", None)

    pgcode = getattr(orig, "pgcode", None)
    if pgcode in PG_ERROR_KINDS:
        return PG_ERROR_KINDS[pgcode]

    sqlite_name = getattr(orig, "sqlite_errorname", None)
    if sqlite_name in SQLITE_ERROR_KINDS:
        return SQLITE_ERROR_KINDS[sqlite_name]

    if isinstance(exc, IntegrityError) and pgcode is None and sqlite_name is None:
        return BackingErrorKind.UNIQUE_VIOLATION
    if isinstance(exc, OperationalError) and pgcode is None and sqlite_name is None:
        return BackingErrorKind.UNAVAILABLE
    return BackingErrorKind.GENERIC


class BackingStoreError(AppException):
    """A failure reported by the relational store, tagged with its kind."""

    def __init__(self, kind: BackingErrorKind, table: str | None = None, reason: str | None = None):
        self.kind = kind
        self.table = table
        self.reason = reason
        status_code, error_code, template = _KIND_RESPONSES[kind]
        super().__init__(status_code, template.format(table=table or "unknown"), error_code)

    @classmethod
    def from_exception(cls, exc: SQLAlchemyError, table: str | None = None) -> "BackingStoreError":
        return cls(classify_db_error(exc), table=table, reason=str(getattr(exc, "orig", exc)))
