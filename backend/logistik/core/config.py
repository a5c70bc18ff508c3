"""
Application Configuration
"""
from pydantic_settings import BaseSettings
from typing import List
import warnings

# Placeholder secrets that must never reach production
INSECURE_SECRET_KEYS = {
    "logistik-dev-secret-key-change-before-deploying",
    "dev-secret-key-change-in-production",
    "secret-key",
    "change-me",
}
MIN_SECRET_KEY_LENGTH = 32


class Settings(BaseSettings):
    """Backend settings, read from the environment and .env"""

    APP_NAME: str = "Logistik ERP API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production

    DATABASE_URL: str = "sqlite:///./logistik.db"

    # JWT session tokens and signed download links share the key
    SECRET_KEY: str = "logistik-dev-secret-key-change-before-deploying"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    # Required "apikey" header on /manage-users; empty disables the check
    API_KEY: str = ""

    RATE_LIMIT_ENABLED: bool = True
    CORS_ORIGINS: str = "*"

    # Job-order attachments live under STORAGE_ROOT/STORAGE_BUCKET
    STORAGE_ROOT: str = "./storage"
    STORAGE_BUCKET: str = "job-order-invoices"
    SIGNED_URL_EXPIRE_SECONDS: int = 3600

    # Per worker process; 0 disables the list cache
    CACHE_TTL_SECONDS: int = 30

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def database_url(self) -> str:
        """DATABASE_URL with the bare ``file:`` form turned into a sqlite URL"""
        if self.DATABASE_URL.startswith("file:"):
            return "sqlite:///" + self.DATABASE_URL[len("file:"):]
        return self.DATABASE_URL

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def security_problems(self) -> List[str]:
        problems = []
        if self.SECRET_KEY in INSECURE_SECRET_KEYS:
            problems.append("SECRET_KEY is a placeholder value")
        elif len(self.SECRET_KEY) < MIN_SECRET_KEY_LENGTH:
            problems.append(f"SECRET_KEY is shorter than {MIN_SECRET_KEY_LENGTH} characters")
        if self.DEBUG and self.is_production:
            problems.append("DEBUG is enabled")
        if not self.API_KEY and self.is_production:
            problems.append("API_KEY is empty, /manage-users accepts requests without an apikey header")
        if self.SIGNED_URL_EXPIRE_SECONDS <= 0:
            problems.append("SIGNED_URL_EXPIRE_SECONDS must be positive")
        return problems

    def validate_security_settings(self):
        """Raise in production, warn elsewhere"""
        problems = self.security_problems()
        if not problems:
            return True
        if self.is_production:
            raise ValueError("Insecure production settings: " + "; ".join(problems))
        for problem in problems:
            warnings.warn(f"Configuration: {problem}", UserWarning)
        return False

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
settings.validate_security_settings()
