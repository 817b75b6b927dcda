"""Configuration management for binday."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="binday.db", description="Path to the SQLite database file")

    # Stripe Configuration
    stripe_secret_key: str | None = Field(default=None, description="Stripe secret API key")
    stripe_meter_event_name: str = Field(
        default="can_completed", description="Stripe billing meter event name for completed tasks"
    )
    stripe_price_lookup_keys: dict[str, str] = Field(
        default={
            "single_can": "kids_can_single_can_task_price",
            "double_can": "kids_can_double_can_task_price",
            "triple_can": "kids_can_triple_can_task_price",
        },
        description="Stripe price lookup key per plan type",
    )
    billing_gateway_timeout_seconds: float = Field(
        default=10.0, description="Upper bound for a single billing gateway call (seconds)"
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment name")

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_BAD_REQUEST: int = 400
    HTTP_FORBIDDEN: int = 403
    HTTP_NOT_FOUND: int = 404
    HTTP_CONFLICT: int = 409
    HTTP_SERVER_ERROR: int = 500

    # Short codes (referral codes)
    SHORT_CODE_ALPHABET: str = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"  # no 0, O, I, 1
    SHORT_CODE_LENGTH: int = 4
    SHORT_CODE_MAX_ATTEMPTS: int = 10

    # Scheduling
    DAYS_PER_WEEK: int = 7
    UPCOMING_TASKS_DEFAULT_DAYS: int = 7
    USAGE_QUANTITY_PER_TASK: int = 1


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
