"""
Configuration management using Pydantic Settings.
Loads the worker endpoint, assistant copy and server options from the environment.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


WORKER_URL_PLACEHOLDER = "REPLACE_WITH_YOUR_WORKER_URL"

DEFAULT_SYSTEM_DIRECTIVE = (
    "You are a helpful assistant specialized only in L'Oréal products, routines, "
    "and beauty recommendations. Answer user questions concisely and accurately "
    "about L'Oréal products, ingredients, routines, skin/hair concerns, and how to "
    "use products. If a user asks about topics outside L'Oréal products or unrelated "
    "non-beauty topics, politely refuse and say you can only help with L'Oréal "
    "product and routine-related questions. Always be friendly and professional."
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Uses .env file in development, environment variables in production.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Completion worker
    worker_url: Optional[str] = Field(
        default=None,
        description="Locally supplied worker URL, takes priority over the default"
    )
    default_worker_url: str = Field(
        default="https://loreal-chatbot-worker.seffar-elyes.workers.dev/",
        description="Deployed worker URL used when no local override is set"
    )
    worker_url_placeholder: str = Field(
        default=WORKER_URL_PLACEHOLDER,
        description="Token marking a worker URL that was never filled in"
    )

    # Assistant copy
    system_directive: str = Field(
        default=DEFAULT_SYSTEM_DIRECTIVE,
        description="Directive prepended to every completion request"
    )
    greeting_message: str = Field(
        default=(
            "👋 Hello! I'm the L'Oréal Smart Product Advisor — ask me about "
            "L'Oréal products, routines, or recommendations."
        ),
        description="Shown when a session opens, never sent to the worker"
    )
    apology_message: str = Field(
        default="Sorry — I couldn't get a response. Please try again.",
        description="Shown when the worker reply has no usable content"
    )
    transport_error_message: str = Field(
        default="Sorry — an error occurred while contacting the chat service.",
        description="Shown when the worker call fails"
    )
    configuration_error_message: str = Field(
        default=(
            "Sorry — the chat service is not configured yet. "
            "Please set WORKER_URL and try again."
        ),
        description="Shown when no worker URL is configured"
    )

    # Environment
    environment: str = Field(
        default="development",
        description="Environment: development, staging, or production"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )

    # Server Settings
    host: str = Field(
        default="0.0.0.0",
        description="Server host address"
    )
    port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="Server port"
    )

    # CORS
    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Frontend URL for CORS"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v_lower

    @property
    def worker_endpoint(self) -> str:
        """
        Resolve the worker URL.

        Priority:
        1) worker_url (local override)
        2) default_worker_url
        """
        if self.worker_url and self.worker_url.strip():
            return self.worker_url.strip()
        return self.default_worker_url.strip()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"


# Global settings instance
settings = Settings()
