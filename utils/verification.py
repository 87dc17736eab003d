import secrets
from datetime import datetime, timezone, timedelta

def generate_verification_code() -> str:
    return str(secrets.randbelow(900000) + 100000)

def generate_verification_token() -> str:
    return secrets.token_urlsafe(32)

def get_code_expiry_time(minutes: int = 10) -> datetime:
    return utcnow() + timedelta(minutes=minutes)

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def is_expired(expires_at: datetime | None) -> bool:
    if expires_at is None:
        return True
    # SQLite hands back naive datetimes; everything is stored as UTC
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= utcnow()
