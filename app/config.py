from pydantic_settings import BaseSettings
from typing import List, Optional, Union
from pydantic import field_validator


class Settings(BaseSettings):
    APP_NAME: str = "Helpdesk Portal"
    APP_ENV: str = "development"
    APP_DEBUG: bool = False
    APP_VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api"

    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Handle comma-separated string from environment variables
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # sqlite+aiosqlite for local development, postgresql+asyncpg in production
    DATABASE_URL: str = "sqlite+aiosqlite:///./helpdesk.db"
    STORAGE_BACKEND: str = "sql"  # "sql" or "memory"
    DATABASE_AUTO_CREATE: bool = True

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def check_storage_backend(cls, v):
        if v not in ("sql", "memory"):
            raise ValueError("STORAGE_BACKEND must be 'sql' or 'memory'")
        return v

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    # Registering with this code grants the admin role
    ADMIN_SIGNUP_CODE: Optional[str] = None

    CHAT_POLL_INTERVAL_SECONDS: int = 5

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
