"""Application configuration loaded from environment variables."""

from __future__ import annotations

from datetime import timedelta

from pydantic import Field
from pydantic_settings import BaseSettings

from cashdesk.core.constants import DEFAULT_CODE_MAX_ATTEMPTS, DEFAULT_TICKET_VALIDITY_HOURS


class Settings(BaseSettings):
    """CashDesk application settings."""

    # App
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_debug: bool = True
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"

    # CORS (the customer-facing display runs in a separate browser window)
    cors_origins: str = "*"  # Comma-separated origins; "*" for dev only

    # Tickets
    ticket_validity_hours: int = Field(default=DEFAULT_TICKET_VALIDITY_HOURS, ge=1)
    code_max_attempts: int = Field(default=DEFAULT_CODE_MAX_ATTEMPTS, ge=1)

    # Load one demo ticket per status into an empty store at startup
    seed_demo_tickets: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "CASHDESK_",
        "extra": "ignore",
    }

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_testing(self) -> bool:
        return self.app_env == "testing"

    @property
    def ticket_validity(self) -> timedelta:
        return timedelta(hours=self.ticket_validity_hours)

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def get_settings() -> Settings:
    """Return a settings instance built from the current environment."""
    return Settings()
