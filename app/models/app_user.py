import enum
from sqlalchemy import Column, String, Enum
from app.database import Base


class UserStatus(str, enum.Enum):
    PENDING  = "Pending"
    APPROVED = "Approved"


class AppUser(Base):
    __tablename__ = "AppUsers"

    email     = Column(String(255), primary_key=True, index=True)
    full_name = Column(String(150), nullable=False)
    # Plain value as submitted, no hashing at this layer
    password  = Column(String(255), nullable=False)
    status    = Column(
        Enum(UserStatus, name="user_status", native_enum=False, length=20,
             values_callable=lambda e: [m.value for m in e]),
        default=UserStatus.PENDING,
        nullable=False,
    )

    def __repr__(self):
        return f"<AppUser email={self.email} status={self.status}>"
