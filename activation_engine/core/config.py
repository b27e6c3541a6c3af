"""Configuration management for the Activation Engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")
    SUPABASE_TIMEOUT_SECONDS: int = Field(
        default=5, ge=1, description="PostgREST request timeout for directory reads and audit writes"
    )

    # Environment
    ACTIVATION_ENGINE_ENV: str = Field(
        default="dev", description="Environment: dev, staging, prod, test"
    )

    # Best Next Action resolver
    BNA_FOLLOW_UP_CANDIDATE_LIMIT: int = Field(
        default=10, ge=1, description="Max follow-up contacts considered per resolution"
    )
    BNA_EARLY_CADENCE_LAST_DAY: int = Field(
        default=3, ge=0, description="Last cadence day on which OPS actions are held back"
    )
    BNA_PERSIST_RECOMMENDATIONS: bool = Field(
        default=True, description="Write each resolved recommendation to the audit table"
    )
    BNA_RESOLVE_TIMEOUT_SECONDS: float = Field(
        default=10.0, gt=0, description="Request deadline for a single resolution"
    )

    # Cadence program
    CADENCE_DAY_MIN: int = Field(default=1, description="First day of the cadence program")
    CADENCE_DAY_MAX: int = Field(default=10, description="Last day of the cadence program")
    CADENCE_DAY_OVERRIDE: int | None = Field(
        default=None, description="Pin the cadence day (dev/test only)"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
