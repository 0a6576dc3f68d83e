from pydantic import BaseModel, Field
from typing import Literal, Optional, Union


# ─── Flow States ──────────────────────────────────────────────────────────────
# One model per step, each carrying only the fields that step needs.
class EmailStep(BaseModel):
    step: Literal["email"] = "email"


class OtpStep(BaseModel):
    step:  Literal["otp"] = "otp"
    email: str


class PasswordStep(BaseModel):
    step:  Literal["password"] = "password"
    email: str


ResetState = Union[EmailStep, OtpStep, PasswordStep]


# ─── Notices & Outcomes ───────────────────────────────────────────────────────
class Notice(BaseModel):
    level: Literal["success", "error"]
    title: str
    text:  str


class StepOutcome(BaseModel):
    state:       ResetState = Field(discriminator="step")
    notice:      Notice
    status_code: int = 200
    error_code:  Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_code is None


# ─── Request Schemas ──────────────────────────────────────────────────────────
# Fields default to "" so missing input reaches the flow's own empty-field checks
class SubmitEmailRequest(BaseModel):
    email: str = ""


class SubmitOtpRequest(BaseModel):
    otp: str = ""


class SubmitPasswordRequest(BaseModel):
    newPassword:     str = ""
    confirmPassword: str = ""


# ─── Response Schemas ─────────────────────────────────────────────────────────
class FlowOut(BaseModel):
    flowId: str
    step:   str
    email:  Optional[str] = None
    notice: Optional[Notice] = None


class CleanupOut(BaseModel):
    deleted: int
