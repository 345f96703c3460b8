"""Configuration management for LLM Security Core."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from llm_security_core import __version__

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="",
    )

    # Application
    environment: str = Field(default="production", description="Environment name")
    service_name: str = Field(
        default="security-core", description="Service name reported by the health endpoint"
    )
    version: str = Field(default=__version__, description="Version reported by status/health")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=False, description="Enable file-based logging")
    log_directory: str = Field(default="logs", description="Directory for log files")
    log_file_prefix: str = Field(
        default="llm_security_core", description="Prefix for log file names"
    )
    log_file_max_bytes: int = Field(
        default=10485760,  # 10MB
        description="Max size per log file before rotation",
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of rotated log files to keep"
    )

    # HTTP server
    host: str = Field(
        default="0.0.0.0",  # nosec B104 - Intentional for Cloud Run container
        description="HTTP server bind host",
    )
    port: int = Field(default=8080, description="HTTP server listen port")

    # Collaborator backends (unset -> simulator adapter)
    policy_engine_url: str | None = Field(default=None, description="LLM-Policy-Engine base URL")
    shield_url: str | None = Field(default=None, description="LLM-Shield base URL")
    edge_agent_url: str | None = Field(default=None, description="LLM-Edge-Agent base URL")
    incident_manager_url: str | None = Field(
        default=None, description="LLM-Incident-Manager base URL"
    )
    config_manager_url: str | None = Field(
        default=None, description="LLM-Config-Manager base URL"
    )
    backend_api_secret: SecretStr | None = Field(
        default=None, description="Shared secret sent to collaborator backends"
    )
    backend_timeout: float = Field(
        default=10.0, description="Timeout in seconds for collaborator backend requests"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level choice."""
        if v.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(_VALID_LOG_LEVELS)}, got: {v}")
        return v.upper()

    @field_validator("backend_timeout")
    @classmethod
    def validate_backend_timeout(cls, v: float) -> float:
        """Validate backend timeout is positive."""
        if v <= 0:
            raise ValueError(f"backend_timeout must be positive, got: {v}")
        return v

    @property
    def log_file_path(self) -> str:
        """Get the full log file path."""
        return f"{self.log_directory}/{self.log_file_prefix}.log"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def simulator_mode(self) -> bool:
        """True when no collaborator backend is configured."""
        return not any(
            (
                self.policy_engine_url,
                self.shield_url,
                self.edge_agent_url,
                self.incident_manager_url,
                self.config_manager_url,
            )
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
