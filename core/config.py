from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = "development"

    DATABASE_URL: str = "sqlite:///./sellit.db"
    AUTO_CREATE_TABLES: bool = True

    SECRET_KEY: str = "change-this-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Verification artifacts
    EMAIL_TOKEN_EXPIRE_HOURS: int = 24
    PHONE_CODE_EXPIRE_MINUTES: int = 10
    CLIENT_URL: str = "http://localhost:5173"

    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = "no-reply@sellit.local"
    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_PORT: int = 587

    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""

    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    RATE_LIMIT_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    @property
    def is_testing(self) -> bool:
        return self.ENV == "testing"


@lru_cache
def get_settings() -> Settings:
    """
    Build settings once for the process entry point.

    Everything downstream receives the instance explicitly (app.state,
    dependencies, service arguments) instead of importing a module global.
    """
    return Settings()
