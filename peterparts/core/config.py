

import os
from typing import List, Optional
from urllib.parse import quote, urlencode

from pydantic import model_validator
from pydantic_settings import BaseSettings


DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./peterparts.db"


class Settings(BaseSettings):
    """
    Application settings model.

    All configuration variables are loaded from environment variables
    with fallback defaults for development.
    """

    environment: str = os.getenv("ENVIRONMENT", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    database_url: Optional[str] = os.getenv("DATABASE_URL")

    # libpq-style connection parts, used when DATABASE_URL is unset
    pghost: Optional[str] = os.getenv("PGHOST")
    pgdatabase: Optional[str] = os.getenv("PGDATABASE")
    pguser: Optional[str] = os.getenv("PGUSER")
    pgpassword: Optional[str] = os.getenv("PGPASSWORD")
    pgsslmode: Optional[str] = os.getenv("PGSSLMODE")
    pgchannelbinding: Optional[str] = os.getenv("PGCHANNELBINDING")

    # JWT settings
    jwt_secret: Optional[str] = os.getenv("JWT_SECRET")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_days: int = int(os.getenv("JWT_EXPIRE_DAYS", "7"))

    # Google OAuth settings
    google_client_id: Optional[str] = os.getenv("GOOGLE_CLIENT_ID")
    google_client_secret: Optional[str] = os.getenv("GOOGLE_CLIENT_SECRET")
    google_redirect_uri: str = os.getenv(
        "GOOGLE_REDIRECT_URI", "http://localhost:8000/auth/google/callback"
    )

    # Browser redirect target after OAuth
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3001")
    cors_origins: List[str] = ["http://localhost:3001"]

    # Email settings
    email_provider: str = os.getenv("EMAIL_PROVIDER", "resend")
    resend_api_key: Optional[str] = os.getenv("RESEND_API_KEY")
    resend_base_url: str = os.getenv("RESEND_BASE_URL", "https://api.resend.com")
    email_from: str = os.getenv("EMAIL_FROM", "PeterParts <noreply@peterparts.com>")

    @model_validator(mode="after")
    def assemble_database_url(self) -> "Settings":
        """
        Fill in DATABASE_URL when only PG* variables are provided.

        Needs host, database, user and password; otherwise falls back to
        the local SQLite file. asyncpg takes the SSL mode as ``ssl`` and has
        no channel binding option, so PGCHANNELBINDING is not forwarded.
        """
        if self.database_url:
            return self

        parts = (self.pghost, self.pgdatabase, self.pguser, self.pgpassword)
        if not all(parts):
            self.database_url = DEFAULT_DATABASE_URL
            return self

        credentials = f"{quote(self.pguser, safe='')}:{quote(self.pgpassword, safe='')}"
        url = f"postgresql+asyncpg://{credentials}@{self.pghost}/{self.pgdatabase}"
        if self.pgsslmode:
            url = f"{url}?{urlencode({'ssl': self.pgsslmode})}"
        self.database_url = url
        return self

    @property
    def is_production(self) -> bool:
        """Whether the service runs with production cookie and logging policy."""
        return self.environment.lower() == "production"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()
