# gameledger/core/config.py

from pathlib import Path
from typing import List, Optional
from pydantic import EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "Game Ledger API"
    DEBUG: bool = False
    VERSION: str = "0.1.0"

    # Database Configuration
    DATABASE_URL: str

    # JWT / Security Configuration
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080
    COOKIE_SECURE: bool = False

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"

    # SendGrid Configuration
    SENDGRID_API_KEY: str = ""
    EMAIL_FROM: EmailStr = "no-reply@gameledger.app"
    EMAIL_FROM_NAME: str = "Game Ledger Team"

    # OAuth sign-in; a provider is only offered when its client id is set
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GITHUB_CLIENT_ID: str = ""
    GITHUB_CLIENT_SECRET: str = ""

    # Backend Configuration
    BACKEND_BASE_URL: str = "http://localhost:8000"

    # File storage (avatars bucket lives under MEDIA_ROOT)
    MEDIA_ROOT: str = str(BASE_DIR / "media")
    MEDIA_URL: str = "/media"
    MAX_AVATAR_BYTES: int = 5 * 1024 * 1024

    # Optional built frontend served behind the route guard
    FRONTEND_DIST_DIR: Optional[str] = None
    PROTECTED_PATHS: List[str] = ["/dashboard", "/transactions", "/profile"]
    AUTH_PATHS: List[str] = ["/login", "/signup"]

    # Gamification / onboarding
    ONBOARDING_AUTO_START_MINUTES: int = 5

    # Optional: Environment
    ENVIRONMENT: str = "development"

    @property
    def is_sqlite(self) -> bool:
        """Check if we're running against SQLite (development and tests)"""
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_supabase(self) -> bool:
        """Check if we're using a Supabase-hosted Postgres behind PgBouncer"""
        return any(d in self.DATABASE_URL for d in [
            "supabase.co",
            "supabase.com",
            "pooler.supabase",
        ])

# Create a global settings instance
settings = Settings()
