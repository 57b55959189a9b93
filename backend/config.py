# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./database_warehouseapp.db"

    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Default stock alert thresholds; Product.min_quantity / max_quantity override them
    LOW_STOCK_THRESHOLD: int = 10
    OVER_STOCK_THRESHOLD: int = 100

    # Initial administrator created by populate_db.py
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@warehouse.com"
    ADMIN_PASSWORD: str = "Admin123!"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
