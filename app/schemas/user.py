from pydantic import BaseModel, EmailStr, field_validator

from app.models.app_user import UserStatus


# ─── Request ──────────────────────────────────────────────────────────────────
class UserCreateRequest(BaseModel):
    full_name: str
    email:     EmailStr
    password:  str

    @field_validator("full_name")
    @classmethod
    def check_name(cls, v):
        if not v.strip(): raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if not v: raise ValueError("Password cannot be empty")
        return v


class UserStatusUpdateRequest(BaseModel):
    status: UserStatus


# ─── Response ─────────────────────────────────────────────────────────────────
class AppUserOut(BaseModel):
    full_name: str
    email:     str
    status:    UserStatus
    model_config = {"from_attributes": True}
