from fastapi import APIRouter, File, Request, UploadFile, status
from utils.deps import user_dependency, db_dependency, settings_dependency
from schemas.auth_schemas import ChangePasswordRequest, DeleteAccountRequest, UserResponse
from services.auth_service import AuthService
from middleware.rate_limiter import limiter
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/users",
    tags=["users"]
)


@router.get("/me", status_code=status.HTTP_200_OK, response_model=UserResponse)
@limiter.limit("30/minute")
async def get_user_info(request: Request, user: user_dependency):
    """
    Current user's profile, including verification state.
    """
    return user


@router.put("/me/password", status_code=status.HTTP_200_OK)
@limiter.limit("5/minute")
def change_password(request: Request, body: ChangePasswordRequest, user: user_dependency, db: db_dependency):
    AuthService.change_password(user, body, db)
    return {"message": "Password changed successfully"}


@router.delete("/me", status_code=status.HTTP_200_OK)
@limiter.limit("3/minute")
def delete_account(request: Request, body: DeleteAccountRequest, user: user_dependency, db: db_dependency):
    AuthService.delete_account(user, body.password, db)
    return {"message": "Account deleted successfully"}


@router.post("/me/photo", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
async def upload_profile_photo(request: Request, user: user_dependency, db: db_dependency,
    settings: settings_dependency, photo: UploadFile = File(...)):
    user = await AuthService.update_profile_photo(user, photo, db, settings)
    return {
        "message": "Profile photo updated successfully",
        "data": {"profile_photo": user.profile_photo}
    }
