from datetime import timedelta
from sqlalchemy import update
from sqlalchemy.orm import Session
from core.config import Settings
from core.exceptions import AlreadyVerified, Expired, InvalidCode, InvalidToken
from models.users import User
from services.email_service import send_verification_email
from services.sms_service import send_verification_sms
from utils.hashing import hash_secret
from utils.logger import get_logger
from utils.verification import (generate_verification_code, generate_verification_token,
    get_code_expiry_time, is_expired, utcnow)

logger = get_logger(__name__)

GENERIC_RESEND_MESSAGE = "If an account exists with that email, a verification link has been sent."


class VerificationService:
    """
    Email tokens and phone codes: issue, deliver, redeem.

    Only keyed hashes are stored. Redemption is a single conditional UPDATE
    that matches on the hash and the expiry, so an artifact can be consumed
    at most once even under concurrent attempts.
    """

    @staticmethod
    def stage_email_token(user: User, settings: Settings) -> str:
        """
        Put a fresh email token on the (uncommitted) user and return the
        plaintext for delivery. Any previous token is replaced.
        """
        token = generate_verification_token()
        user.email_verification_token_hash = hash_secret(token, settings.SECRET_KEY)
        user.email_verification_expires_at = utcnow() + timedelta(hours=settings.EMAIL_TOKEN_EXPIRE_HOURS)
        return token

    @staticmethod
    async def resend_email_verification(email: str, db: Session, settings: Settings) -> str:
        user = db.query(User).filter(User.email == email).first()

        if not user:
            logger.info("Verification resend requested for unknown email", extra={"email": email})
            return GENERIC_RESEND_MESSAGE

        if user.email_verified:
            raise AlreadyVerified("Email is already verified")

        token = VerificationService.stage_email_token(user, settings)
        db.commit()

        await send_verification_email(settings, user.email, token)

        logger.info("Verification email resent", extra={"user_id": user.id})
        return GENERIC_RESEND_MESSAGE

    @staticmethod
    def redeem_email_token(token: str, db: Session, settings: Settings) -> None:
        token_hash = hash_secret(token, settings.SECRET_KEY)
        now = utcnow()

        result = db.execute(
            update(User)
            .where(
                User.email_verification_token_hash == token_hash,
                User.email_verification_expires_at > now
            )
            .values(
                email_verified=True,
                email_verification_token_hash=None,
                email_verification_expires_at=None
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 1:
            db.commit()
            db.expire_all()
            logger.info("Email verified successfully")
            return

        # Nothing redeemed: either the token never matched, or it matched but lapsed
        cleared = db.execute(
            update(User)
            .where(User.email_verification_token_hash == token_hash)
            .values(email_verification_token_hash=None, email_verification_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.expire_all()

        if cleared.rowcount:
            logger.warning("Email verification failed - token expired")
            raise Expired("Verification link has expired. Please request a new one")

        logger.warning("Email verification failed - invalid token")
        raise InvalidToken("Invalid or expired verification token")

    @staticmethod
    async def send_phone_code(user: User, db: Session, settings: Settings) -> None:
        if user.phone_verified:
            raise AlreadyVerified("Phone number is already verified")

        code = generate_verification_code()
        user.phone_verification_code_hash = hash_secret(code, settings.SECRET_KEY)
        user.phone_verification_expires_at = get_code_expiry_time(settings.PHONE_CODE_EXPIRE_MINUTES)
        db.commit()

        await send_verification_sms(settings, user.phone, code)

        logger.info("Phone verification code issued", extra={"user_id": user.id})

    @staticmethod
    def redeem_phone_code(user: User, code: str, db: Session, settings: Settings) -> None:
        code_hash = hash_secret(code, settings.SECRET_KEY)
        user_id = user.id

        result = db.execute(
            update(User)
            .where(
                User.id == user_id,
                User.phone_verification_code_hash == code_hash,
                User.phone_verification_expires_at > utcnow()
            )
            .values(
                phone_verified=True,
                phone_verification_code_hash=None,
                phone_verification_expires_at=None
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 1:
            db.commit()
            db.expire_all()
            logger.info("Phone verified successfully", extra={"user_id": user_id})
            return

        db.rollback()
        db.refresh(user)

        if user.phone_verification_code_hash != code_hash:
            logger.warning("Phone verification failed - invalid code", extra={"user_id": user_id})
            raise InvalidCode()

        if is_expired(user.phone_verification_expires_at):
            db.execute(
                update(User)
                .where(User.id == user_id, User.phone_verification_code_hash == code_hash)
                .values(phone_verification_code_hash=None, phone_verification_expires_at=None)
                .execution_options(synchronize_session=False)
            )
            db.commit()
            db.expire_all()
            logger.warning("Phone verification failed - code expired", extra={"user_id": user_id})
            raise Expired("Verification code has expired. Please request a new one")

        # Hash matched and not expired, but the update lost a race with another redemption
        raise InvalidCode()
