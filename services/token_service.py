from datetime import datetime, timezone, timedelta
from jose import jwt, JWTError
from core.config import Settings
from core.exceptions import Unauthenticated
from models.users import User


class TokenService:
    """
    Issues and validates bearer access tokens.
    """

    @staticmethod
    def create_access_token(user: User, settings: Settings, expires_delta: timedelta | None = None) -> str:
        """
        Creates a JWT access token for a user.

        Args:
            user: The authenticated user
            settings: Application settings (secret, algorithm, lifetime)
            expires_delta: Token lifetime (default: ACCESS_TOKEN_EXPIRE_MINUTES)

        Returns:
            Encoded JWT string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        payload = {
            "sub": user.id,
            "email": user.email,
            "type": "access",
            "exp": datetime.now(timezone.utc) + expires_delta
        }

        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_access_token(token: str, settings: Settings) -> str:
        """
        Validates an access token and returns the user id it was issued for.

        Raises:
            Unauthenticated: bad signature, expired, wrong type or missing subject
        """
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            raise Unauthenticated("Not authorized, invalid token")

        if payload.get("type") != "access":
            raise Unauthenticated("Invalid token type. Access token required.")

        user_id = payload.get("sub")
        if not user_id:
            raise Unauthenticated("Not authorized, invalid token")

        return user_id
