from fastapi import UploadFile
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.config import Settings
from core.exceptions import Conflict, InvalidCredentials, IncorrectPassword
from models.favourites import Favourite
from models.products import Product
from models.users import User
from schemas.auth_schemas import CreateUserRequest, ChangePasswordRequest
from services.email_service import send_verification_email
from services.image_service import ImageService
from services.verification_service import VerificationService
from utils.hashing import verify_password, get_password_hash
from utils.logger import get_logger

logger = get_logger(__name__)


class AuthService:

    @staticmethod
    async def create_user(request: CreateUserRequest, db: Session, settings: Settings) -> User:
        """
        Creates a new, unverified user and emails the verification link.

        Flow:
        1. Reject duplicate email / username
        2. Create user with a hashed email token
        3. Commit, then await delivery of the plaintext token
        """
        if db.query(User).filter(User.email == request.email).first():
            logger.warning(
                "Registration attempt with existing email",
                extra={"email": request.email}
            )
            raise Conflict("User already exists with this email")

        if db.query(User).filter(User.username == request.username).first():
            logger.warning(
                "Registration attempt with existing username",
                extra={"username": request.username}
            )
            raise Conflict("Username is already taken")

        model = User(
            name=request.name,
            username=request.username,
            email=request.email,
            phone=request.phone,
            hashed_password=get_password_hash(request.password),
            email_verified=False,
            phone_verified=False
        )
        token = VerificationService.stage_email_token(model, settings)

        db.add(model)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            db.rollback()
            raise Conflict("User already exists with this email or username")

        db.refresh(model)

        await send_verification_email(settings, model.email, token)

        return model

    @staticmethod
    def authenticate_user(email: str, password: str, db: Session) -> User:
        """
        Unverified users may log in; verification only gates mutations.
        """
        user = db.query(User).filter(User.email == email).first()

        if not user:
            logger.warning(
                "Login failed - user not found",
                extra={"email": email}
            )
            raise InvalidCredentials()

        if not verify_password(password, user.hashed_password):
            logger.warning(
                "Login failed - invalid password",
                extra={"user_id": user.id, "email": email}
            )
            raise InvalidCredentials()

        logger.debug(
            "User authenticated successfully",
            extra={"user_id": user.id, "email": email}
        )

        return user

    @staticmethod
    def change_password(user: User, body: ChangePasswordRequest, db: Session) -> None:
        if not verify_password(body.current_password, user.hashed_password):
            logger.warning("Password change failed - incorrect current password", extra={"user_id": user.id})
            raise IncorrectPassword("Current password is incorrect")

        user.hashed_password = get_password_hash(body.new_password)
        db.commit()

        logger.info("Password changed", extra={"user_id": user.id})

    @staticmethod
    def delete_account(user: User, password: str, db: Session) -> None:
        """
        Delete a user together with their listings and every favourite that
        points at the user or at one of those listings, in one transaction.
        """
        if not verify_password(password, user.hashed_password):
            logger.warning("Account deletion failed - incorrect password", extra={"user_id": user.id})
            raise IncorrectPassword("Password is incorrect")

        user_id = user.id
        owned_products = select(Product.id).where(Product.seller_id == user_id)

        favourites = db.execute(
            delete(Favourite)
            .where(or_(Favourite.user_id == user_id, Favourite.product_id.in_(owned_products)))
            .execution_options(synchronize_session=False)
        )
        products = db.execute(
            delete(Product)
            .where(Product.seller_id == user_id)
            .execution_options(synchronize_session=False)
        )
        db.execute(
            delete(User)
            .where(User.id == user_id)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.expunge_all()

        logger.info(
            "Account deleted",
            extra={
                "user_id": user_id,
                "products_deleted": products.rowcount,
                "favourites_deleted": favourites.rowcount
            }
        )

    @staticmethod
    async def update_profile_photo(user: User, photo: UploadFile, db: Session, settings: Settings) -> User:
        url = await ImageService(settings).upload(photo, folder="profiles")

        user.profile_photo = url
        db.commit()
        db.refresh(user)

        logger.info("Profile photo updated", extra={"user_id": user.id})
        return user
