from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):
    PROJECT_NAME: str = "Parity"
    DATABASE_URL: str
    JWT_ACCESS_TOKEN_SECRET: str | None = None
    JWT_REFRESH_TOKEN_SECRET: str | None = None
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRY_SECONDS: int = 900
    REFRESH_TOKEN_EXPIRY_SECONDS: int = 7 * 24 * 60 * 60
    EMAIL_VERIFICATION_TOKEN_EXPIRE_MINUTES: int = 60
    APP_URL: str = "http://localhost:3000"
    ALLOWED_ORIGINS: list[str] = []
    COOKIE_SECURE: bool = True
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env")


@lru_cache
def get_settings():
    return Settings()
