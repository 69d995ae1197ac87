# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Literal, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./salon_inventory.db"

    # Which row store backs the service: local SQLAlchemy database or the hosted REST backend
    STORE_BACKEND: Literal["sql", "rest"] = "sql"
    REST_URL: Optional[str] = None
    REST_API_KEY: Optional[str] = None
    REST_TIMEOUT: float = 10.0

    # Tokens are issued by the hosted auth provider, we only verify them
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ADMIN_ROLE: str = "admin"

    LOG_LEVEL: str = "INFO"
    FRONTEND_URL: Optional[str] = None

    class Config:
        env_file: ClassVar[str] = str(env_path)

settings = Settings()
