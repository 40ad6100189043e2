"""Configuration management for Recruit Portal."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="RECRUIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Remote service
    api_base_url: str = Field(
        "http://localhost:8000/functions/v1/recruit-server",
        description="Base URL of the screening and matching service"
    )
    auth_token_url: Optional[str] = Field(
        None,
        description="Credential exchange endpoint (defaults to <api_base_url>/auth/token)"
    )
    anon_key: str = Field("", description="Public key used for unauthenticated calls such as registration")
    request_timeout: float = Field(30.0, description="HTTP request timeout in seconds")

    # Local state
    session_file: str = Field("~/.recruit_portal/session.json", description="Durable session storage file")
    reports_dir: str = Field(".", description="Directory where exported CSV reports are written")

    # Validation
    min_password_length: int = Field(6, description="Minimum password length accepted at registration")

    # Application Configuration
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")

    @property
    def resolved_auth_token_url(self) -> str:
        """Credential exchange URL, derived from the base URL when unset."""
        if self.auth_token_url:
            return self.auth_token_url
        return f"{self.api_base_url.rstrip('/')}/auth/token"


# Global settings instance
settings = Settings()
