"""Application settings loaded from environment variables (prefix MYFINANCE_)."""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MYFINANCE_",
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "MyFinance"
    version: str = "0.1.0"
    log_level: str = "INFO"

    # Argon2id settings
    argon2_memory_cost: int = 65536  # 64 MB
    argon2_time_cost: int = 3
    argon2_parallelism: int = 1
    max_password_length: int = 256

    seed_demo_user: bool = True
    demo_email: str = "demo@myfinance.com"
    demo_password: str = "demo"

    # Original unauthenticated /api/user/{id} routes
    enable_legacy_api: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
