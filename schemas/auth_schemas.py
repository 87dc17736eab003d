from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
import phonenumbers
import re

USERNAME_RE = re.compile(r'^[a-zA-Z0-9_]+$')


def check_password_strength(value: str) -> str:
    """
    Password must be at least 8 characters and contain:
    - At least one uppercase letter
    - At least one number
    - At least one special character
    """
    if len(value) < 8:
        raise ValueError('Password must be at least 8 characters')

    if not re.search(r'[A-Z]', value):
        raise ValueError('Password must contain at least one uppercase letter')

    if not re.search(r'\d', value):
        raise ValueError('Password must contain at least one number')

    if not re.search(r'[^a-zA-Z0-9]', value):
        raise ValueError('Password must contain at least one special character')

    return value


class CreateUserRequest(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    username: str = Field(min_length=3, max_length=30)
    email: EmailStr
    password: str
    phone: str

    @field_validator('name')
    @classmethod
    def strip_name(cls, value):
        value = value.strip()
        if len(value) < 2:
            raise ValueError('Name must be at least 2 characters')
        return value

    @field_validator('username')
    @classmethod
    def validate_username(cls, value):
        if not USERNAME_RE.match(value):
            raise ValueError('Username can only contain letters, numbers, and underscores')
        return value.lower()

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.lower().strip()

    @field_validator('password')
    @classmethod
    def validate_password(cls, value):
        return check_password_strength(value)

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, value):
        """
        Validates phone number format using Google's phonenumbers library.
        Accepts international format: +359888123456
        """
        try:
            parsed = phonenumbers.parse(value, None)
        except phonenumbers.NumberParseException:
            raise ValueError('Invalid phone number. Please include country code (e.g., +359888123456)')

        if not phonenumbers.is_valid_number(parsed):
            raise ValueError('Invalid phone number')

        return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.lower().strip()


class ResendVerificationRequest(BaseModel):
    email: EmailStr

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value):
        return value.lower().strip()


class VerifyPhoneRequest(BaseModel):
    code: str

    @field_validator('code')
    @classmethod
    def validate_code(cls, value):
        if not re.fullmatch(r'\d{6}', value):
            raise ValueError('Verification code must be 6 digits')
        return value


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str
    confirm_password: str

    @field_validator('new_password')
    @classmethod
    def validate_password(cls, value):
        return check_password_strength(value)

    @model_validator(mode='after')
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError('Passwords do not match')
        return self


class DeleteAccountRequest(BaseModel):
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    username: str
    email: str
    phone: str
    profile_photo: Optional[str] = None
    email_verified: bool
    phone_verified: bool
    created_at: datetime


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
