from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_admin_key
from app.schemas.common import ErrorResponse, SuccessResponse, success_response
from app.schemas.user import AppUserOut, UserCreateRequest, UserStatusUpdateRequest
from app.services.user_service import user_service, Found, BackingError
from app.utils.exceptions import NotFoundException

router = APIRouter(prefix="/users")


# POST /users  (every new account starts Pending)
@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    response_model=SuccessResponse[AppUserOut],
    responses={409: {"model": ErrorResponse}},
)
def register(data: UserCreateRequest, db: Session = Depends(get_db)):
    user = user_service.add_user(db, data.full_name, str(data.email), data.password)
    return success_response(
        "Registration successful. Please wait for admin approval before logging in.",
        AppUserOut.model_validate(user).model_dump(mode="json"),
    )


# GET /users/{email}
@router.get(
    "/{email}",
    status_code=status.HTTP_200_OK,
    summary="Get an account by email",
    response_model=SuccessResponse[AppUserOut],
    responses={404: {"model": ErrorResponse}},
)
def get_user(email: str, db: Session = Depends(get_db)):
    lookup = user_service.get_user_by_email(db, email)
    if isinstance(lookup, BackingError):
        raise lookup.error
    if not isinstance(lookup, Found):
        raise NotFoundException("User")
    return success_response("User retrieved", AppUserOut.model_validate(lookup.user).model_dump(mode="json"))


# PATCH /users/{email}/status  (admin only)
@router.patch(
    "/{email}/status",
    status_code=status.HTTP_200_OK,
    summary="Approve an account or send it back to Pending",
    responses={403: {"model": ErrorResponse}},
    dependencies=[Depends(require_admin_key)],
)
def update_status(email: str, data: UserStatusUpdateRequest, db: Session = Depends(get_db)):
    updated = user_service.update_user_status(db, email, data.status)
    return success_response(
        f"Status set to {data.status.value}",
        {"email": email, "status": data.status.value, "updated": updated},
    )
