import hashlib
import hmac
from passlib.context import CryptContext

bcrypt_context = CryptContext(schemes=['bcrypt'], deprecated='auto')

def get_password_hash(password: str):
    # Bcrypt has a 72-byte limit, truncate if necessary
    return bcrypt_context.hash(password[:72])


def verify_password(plain_password: str, hashed_password: str):
    return bcrypt_context.verify(plain_password[:72], hashed_password)


def hash_secret(secret: str, key: str) -> str:
    """
    Keyed one-way hash (HMAC-SHA256) for verification tokens and codes.
    Deterministic, so stored values can be matched in a WHERE clause.
    """
    return hmac.new(key.encode(), secret.encode(), hashlib.sha256).hexdigest()
