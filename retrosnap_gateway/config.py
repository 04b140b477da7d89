"""Configuration settings for the RetroSnap gateway."""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

STORAGE_BACKENDS = ("dynamodb", "memory")


class Settings(BaseSettings):
    """Gateway configuration, read once at process start."""

    # Identity provider (Auth0 tenant domain, e.g. "tenant.us.auth0.com")
    AUTH0_DOMAIN: str = ""
    IDENTITY_TIMEOUT_SECONDS: float = 30.0

    # Upstream model API
    API_KEY: str = ""
    GEMINI_API_BASE_URL: str = "https://generativelanguage.googleapis.com"
    UPSTREAM_TIMEOUT_SECONDS: float = 30.0

    # Admin identity: a single email or a comma-separated allow-list
    ADMIN_EMAIL: str = ""

    # Credits granted to an account the first time it is seen
    INITIAL_CREDITS: int = 3

    # Deployment context. Only "dev" enables the development token.
    CONTEXT: str = "production"
    DEV_TOKEN: str = "dev-token"

    # Account storage ("dynamodb" or "memory")
    STORAGE_BACKEND: str = "dynamodb"
    DYNAMODB_ENDPOINT: str = "http://dynamodb-local:8000"
    DYNAMODB_REGION: str = "us-east-1"
    DYNAMODB_ACCESS_KEY: str = "dummy"
    DYNAMODB_SECRET_KEY: str = "dummy"
    ACCOUNTS_TABLE_NAME: str = "accounts"

    # Logging service
    LOGGING_HOST: str = ""
    LOGGING_PORT: int = 9999

    # Service Configuration
    SERVICE_NAME: str = "retrosnap-gateway"
    SERVICE_VERSION: str = "1.0.0"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8888",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True
    )

    @property
    def admin_emails(self) -> List[str]:
        """Configured admin identities, split on commas, blanks dropped."""
        return [e.strip() for e in self.ADMIN_EMAIL.split(",") if e.strip()]

    @property
    def is_dev_context(self) -> bool:
        return self.CONTEXT.strip().lower() == "dev"

    def missing_required(self) -> List[str]:
        """Names of required settings that are unset or invalid."""
        required = {
            "AUTH0_DOMAIN": self.AUTH0_DOMAIN,
            "API_KEY": self.API_KEY,
            "ADMIN_EMAIL": self.ADMIN_EMAIL,
        }
        missing = [name for name, value in required.items() if not value.strip()]
        if self.STORAGE_BACKEND.strip().lower() not in STORAGE_BACKENDS:
            missing.append("STORAGE_BACKEND")
        if self.INITIAL_CREDITS < 0:
            missing.append("INITIAL_CREDITS")
        return missing


# Global settings instance
settings = Settings()
