from core.database import Base
from sqlalchemy import (Column, String, Boolean, DateTime)
from .mixins import UUIDPrimaryKeyMixin, CreatedAtMixin, UpdatedAtMixin

class User(Base, UUIDPrimaryKeyMixin, CreatedAtMixin, UpdatedAtMixin):
    __tablename__ = "users"

    # email and username are stored lower-cased
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(30), unique=True, nullable=False, index=True)
    name = Column(String(50), nullable=False)
    phone = Column(String(20), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    profile_photo = Column(String(1024), nullable=True)

    # Email verification fields
    email_verified = Column(Boolean, default=False, nullable=False)
    email_verification_token_hash = Column(String(64), nullable=True, index=True)
    email_verification_expires_at = Column(DateTime(timezone=True), nullable=True)

    # Phone verification fields
    phone_verified = Column(Boolean, default=False, nullable=False)
    phone_verification_code_hash = Column(String(64), nullable=True)
    phone_verification_expires_at = Column(DateTime(timezone=True), nullable=True)
