from fastapi import APIRouter, Request
from starlette import status
from utils.deps import db_dependency, settings_dependency, user_dependency
from schemas.auth_schemas import (Token, CreateUserRequest, LoginRequest, ResendVerificationRequest,
    VerifyPhoneRequest, UserResponse)
from services.auth_service import AuthService
from services.token_service import TokenService
from services.verification_service import VerificationService
from middleware.rate_limiter import limiter, VERIFICATION_REQUEST_LIMIT
from utils.logger import get_logger

# Setup logger
logger = get_logger(__name__)


router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit("10/hour")
async def register(request: Request, body: CreateUserRequest, db: db_dependency, settings: settings_dependency):
    user = await AuthService.create_user(body, db, settings)

    logger.info(
        "User registered successfully",
        extra={"user_id": user.id, "email": user.email}
    )

    return {
        "message": "Registration successful. Please check your email to verify your account.",
        "data": {"id": user.id, "name": user.name, "username": user.username, "email": user.email}
    }


@router.post("/login", response_model=Token)
@limiter.limit("5/minute")
async def login(request: Request, body: LoginRequest, db: db_dependency, settings: settings_dependency):
    user = AuthService.authenticate_user(body.email, body.password, db)
    access_token = TokenService.create_access_token(user, settings)

    logger.info(
        "User logged in successfully",
        extra={"user_id": user.id, "email": user.email}
    )

    return Token(access_token=access_token, user=UserResponse.model_validate(user))


@router.get("/verify-email/{token}", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
def verify_email(request: Request, token: str, db: db_dependency, settings: settings_dependency):
    VerificationService.redeem_email_token(token, db, settings)
    return {"message": "Email verified successfully"}


@router.post("/resend-verification", status_code=status.HTTP_200_OK)
@limiter.limit(VERIFICATION_REQUEST_LIMIT)
async def resend_verification(request: Request, body: ResendVerificationRequest,
    db: db_dependency, settings: settings_dependency):
    """
    Same response whether or not the email belongs to an account.
    """
    message = await VerificationService.resend_email_verification(body.email, db, settings)
    return {"message": message}


@router.post("/send-phone-verification", status_code=status.HTTP_200_OK)
@limiter.limit(VERIFICATION_REQUEST_LIMIT)
async def send_phone_verification(request: Request, user: user_dependency,
    db: db_dependency, settings: settings_dependency):
    await VerificationService.send_phone_code(user, db, settings)
    return {"message": "Verification code sent to your phone"}


@router.post("/verify-phone", status_code=status.HTTP_200_OK)
@limiter.limit("10/minute")
def verify_phone(request: Request, body: VerifyPhoneRequest, user: user_dependency,
    db: db_dependency, settings: settings_dependency):
    VerificationService.redeem_phone_code(user, body.code, db, settings)
    return {"message": "Phone verified successfully"}
