"""
Shared configuration management for the dashboard gateway.
"""

from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendPoolConfig(BaseModel):
    """Connection settings for one backend pool."""

    name: str
    base_url: str
    token: Optional[str] = None
    auth_header: str = "Authorization"
    auth_scheme: Optional[str] = "Bearer"
    timeout_seconds: float = 30.0

    def auth_value(self) -> Optional[str]:
        """Render the service credential for the configured header."""
        if not self.token:
            return None
        if self.auth_scheme:
            return f"{self.auth_scheme} {self.token}"
        return self.token


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ACCESS_",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = "local"
    log_level: str = "info"
    cors_origins: List[str] = Field(default_factory=list)

    # General backend pool
    backend_url: str = "http://localhost:4000"
    backend_token: Optional[str] = None

    # PR backend pool
    pr_backend_url: str = "http://localhost:4000"
    pr_backend_token: Optional[str] = None
    pr_backend_auth_header: str = "Authorization"

    # Outbound calls
    backend_timeout_seconds: float = 30.0


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def backend_pool(self) -> BackendPoolConfig:
        """Settings for the general backend pool."""
        return BackendPoolConfig(
            name="backend",
            base_url=self.backend_url,
            token=self.backend_token,
            timeout_seconds=self.backend_timeout_seconds,
        )

    def pr_backend_pool(self) -> BackendPoolConfig:
        """Settings for the PR backend pool."""
        scheme = "Bearer" if self.pr_backend_auth_header.lower() == "authorization" else None
        return BackendPoolConfig(
            name="pr",
            base_url=self.pr_backend_url,
            token=self.pr_backend_token,
            auth_header=self.pr_backend_auth_header,
            auth_scheme=scheme,
            timeout_seconds=self.backend_timeout_seconds,
        )


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
