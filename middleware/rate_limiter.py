from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from jose import jwt, JWTError


def get_user_id(request: Request):
    """Rate limit key: the JWT user id when present, else the client address."""
    token = request.headers.get("Authorization")
    settings = getattr(request.app.state, "settings", None)

    if token and settings is not None:
        try:
            token = token.replace("Bearer ", "")
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            user_id = payload.get("sub")
            if user_id:
                return f"user:{user_id}"
        except JWTError:
            pass

    return get_remote_address(request)


def rate_limiting_enabled(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings is None or settings.RATE_LIMIT_ENABLED


class AppLimiter(Limiter):
    """
    Limiter that honours the serving app's RATE_LIMIT_ENABLED setting.

    Route decorators need one instance at import time, so the switch is read
    per request from ``request.app.state.settings`` instead of being stored
    on the limiter.
    """

    def _check_request_limit(self, request, endpoint_func, in_middleware=True):
        if not rate_limiting_enabled(request):
            return
        return super()._check_request_limit(request, endpoint_func, in_middleware)


limiter = AppLimiter(
    key_func=get_user_id,
    default_limits=["200/hour"]
)

VERIFICATION_REQUEST_LIMIT = "5 per 15 minutes"
