"""
Error taxonomy for the API.

Every deterministic rejection is an ``AppError`` with a stable ``code`` that
the exception handler in ``main.py`` sends next to the human readable detail.
Infrastructure failures (``DeliveryError``, ``StorageError``) do
not inherit from ``AppError`` so they surface as a 500, never as one of the
kinds below.
"""

from fastapi import HTTPException
from starlette import status


class AppError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"
    message: str = "Bad request"

    def __init__(self, detail: str | None = None, headers: dict | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.message,
            headers=headers
        )


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"
    message = "Not authorized, no valid token provided"

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentials(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password"


class EmailNotVerified(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "EMAIL_NOT_VERIFIED"
    message = "Please verify your email to perform this action"


class PhoneNotVerified(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "PHONE_NOT_VERIFIED"
    message = "Please verify your phone number to perform this action"


class AlreadyVerified(AppError):
    code = "ALREADY_VERIFIED"
    message = "Already verified"


class Expired(AppError):
    code = "EXPIRED"
    message = "Verification has expired. Please request a new one"


class InvalidCode(AppError):
    code = "INVALID_CODE"
    message = "Invalid verification code"


class InvalidToken(AppError):
    code = "INVALID_TOKEN"
    message = "Invalid verification token"


class NotOwner(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "NOT_OWNER"
    message = "You are not allowed to modify this resource"


class CannotFavouriteOwnListing(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "CANNOT_FAVOURITE_OWN_LISTING"
    message = "You cannot favourite your own product"


class InvalidIdentifier(AppError):
    code = "INVALID_IDENTIFIER"
    message = "Invalid identifier"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Resource not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    message = "Resource already exists"


class IncorrectPassword(AppError):
    code = "INCORRECT_PASSWORD"
    message = "Password is incorrect"


class ImageRejected(AppError):
    code = "IMAGE_REJECTED"
    message = "Invalid image"


class DeliveryError(Exception):
    """An email or SMS could not be handed to the provider."""


class StorageError(Exception):
    """An image could not be stored."""
