from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./vidshare.db"
    SQL_ECHO: bool = False

    # JWT Authentication
    SECRET_KEY: str = "supersecretkey"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 7 * 24 * 60

    # Uploads
    UPLOAD_ROOT: str = "uploads"
    MAX_UPLOAD_SIZE: int = 100 * 1024 * 1024

    # Reactions
    REACTION_CONFLICT_RETRIES: int = 1

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Optional[str] = None

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra='ignore')

settings = Settings()
