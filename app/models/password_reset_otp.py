from sqlalchemy import Column, Integer, String, Boolean, Index, TIMESTAMP
from sqlalchemy.sql import func
from app.database import Base


class PasswordResetOTP(Base):
    __tablename__ = "password_reset_otps"

    id        = Column(Integer, primary_key=True, index=True)
    # Refers to AppUsers.email, not enforced as a foreign key
    email     = Column(String(255), nullable=False)
    otp       = Column(String(10), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(TIMESTAMP(timezone=True), nullable=False)
    used      = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_password_reset_otps_email_otp", "email", "otp"),
        Index("ix_password_reset_otps_expires_at", "expires_at"),
    )

    def __repr__(self):
        return f"<PasswordResetOTP id={self.id} email={self.email} used={self.used}>"
