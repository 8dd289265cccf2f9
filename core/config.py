from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "RBAC Admin API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # CORS (comma-separated origins also accepted, see below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # -------------------------------------------------
    # Database
    # -------------------------------------------------
    DATABASE_URL: str = Field("", description="Postgres URL; empty falls back to local SQLite")

    # -------------------------------------------------
    # JWT / auth
    # -------------------------------------------------
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: int = Field(7 * 24 * 60 * 60, description="Access token lifetime in seconds (default: 7 days)")
    JWT_REFRESH_EXPIRES_IN: int = Field(30 * 24 * 60 * 60, description="Refresh token lifetime in seconds (default: 30 days)")

    BCRYPT_ROUNDS: int = 10

    # -------------------------------------------------
    # Roles
    # -------------------------------------------------
    SUPER_ADMIN_ROLE_NAME: str = "SUPERADMIN"
    DEFAULT_ROLE_NAME: Optional[str] = "USER"
    SYSTEM_ROLE_NAMES: List[str] = ["SUPERADMIN", "ADMIN", "USER"]

    # -------------------------------------------------
    # Login rate limiting
    # -------------------------------------------------
    LOGIN_RATE_LIMIT: int = 10
    LOGIN_RATE_WINDOW_SECONDS: int = 900

    # -------------------------------------------------
    # Seeder (bootstrap super admin)
    # -------------------------------------------------
    SEED_ADMIN_NAME: str = "Super Admin"
    SEED_ADMIN_EMAIL: Optional[str] = None
    SEED_ADMIN_PASSWORD: Optional[str] = None

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Normalize the database URL after loading settings
# -------------------------------------------------
# Heroku/Render often provide 'postgres://'. SQLAlchemy expects 'postgresql+psycopg2://'
if settings.DATABASE_URL.startswith("postgres://"):
    settings.DATABASE_URL = settings.DATABASE_URL.replace("postgres://", "postgresql+psycopg2://", 1)

if not settings.DATABASE_URL:
    # Local SQLite for quick testing (not for production)
    settings.DATABASE_URL = "sqlite:///./local.db"

settings.BACKEND_CORS_ORIGINS = sorted({o.rstrip("/") for o in settings.BACKEND_CORS_ORIGINS})
