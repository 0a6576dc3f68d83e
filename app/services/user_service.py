import logging
from dataclasses import dataclass
from typing import Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import store_errors
from app.models.app_user import AppUser, UserStatus
from app.utils.exceptions import BackingStoreError, NotFoundException

logger = logging.getLogger(__name__)

USERS_TABLE = AppUser.__tablename__


# ─── Lookup Results ───────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Found:
    user: AppUser


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class BackingError:
    error: BackingStoreError


UserLookup = Union[Found, NotFound, BackingError]


class UserService:

    # ─── Create ───────────────────────────────────────────────────────────────
    def add_user(self, db: Session, full_name: str, email: str, password: str) -> AppUser:
        """Insert a new account. New accounts always start out Pending."""
        user = AppUser(
            full_name=full_name,
            email=email,
            password=password,
            status=UserStatus.PENDING,
        )
        with store_errors(db, "add user", table=USERS_TABLE):
            db.add(user)
            db.commit()
            db.refresh(user)
        logger.info(f"User registered: {email} (Pending)")
        return user

    # ─── Lookup ───────────────────────────────────────────────────────────────
    def get_user_by_email(self, db: Session, email: str) -> UserLookup:
        try:
            user = db.query(AppUser).filter(AppUser.email == email).first()
        except SQLAlchemyError as e:
            db.rollback()
            error = BackingStoreError.from_exception(e, table=USERS_TABLE)
            logger.error(f"User lookup for {email} failed: kind={error.kind.value} {e}")
            return BackingError(error)

        if user is None:
            return NotFound()
        return Found(user)

    # ─── Status ───────────────────────────────────────────────────────────────
    def update_user_status(self, db: Session, email: str, status: UserStatus) -> int:
        """Set the approval status. Matching nothing is not an error; returns rows touched."""
        with store_errors(db, "update user status", table=USERS_TABLE):
            updated = db.query(AppUser).filter(AppUser.email == email).update(
                {"status": status}, synchronize_session="fetch"
            )
            db.commit()
        logger.info(f"Status of {email} set to {status.value} ({updated} row(s))")
        return updated

    # ─── Reset Password ───────────────────────────────────────────────────────
    def reset_password(self, db: Session, email: str, new_password: str) -> None:
        """
        Replace the password and send the account back to Pending for re-approval.

        The existence check and the update are separate statements. If the row
        disappears in between, the update silently touches nothing.
        """
        lookup = self.get_user_by_email(db, email)
        if isinstance(lookup, BackingError):
            raise lookup.error
        if isinstance(lookup, NotFound):
            raise NotFoundException("User")

        with store_errors(db, "reset password", table=USERS_TABLE):
            db.query(AppUser).filter(AppUser.email == email).update(
                {"password": new_password, "status": UserStatus.PENDING},
                synchronize_session="fetch",
            )
            db.commit()
        logger.info(f"Password reset for {email}; account returned to Pending")


user_service = UserService()
