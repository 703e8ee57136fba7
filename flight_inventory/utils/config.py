"""
Environment configuration loader with validation for the flight inventory.
"""

import os
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv

_TRUTHY = ("true", "1", "yes", "on")


class AppConfig(BaseModel):
    """Validated application settings."""

    # Database Configuration
    database_url: Optional[str] = Field(
        default=None,
        description="Database connection URL; built from DB_TYPE and DB_* variables when unset",
    )
    db_echo: bool = Field(default=False, description="Log SQL statements")

    # Valkey Configuration (distributed flight locks)
    valkey_host: str = Field(default="localhost", description="Valkey server host")
    valkey_port: int = Field(
        default=6379, ge=1, le=65535, description="Valkey server port"
    )
    valkey_password: Optional[str] = Field(
        default=None, description="Valkey server password"
    )
    valkey_database: int = Field(
        default=0, ge=0, le=15, description="Valkey database number"
    )
    valkey_socket_timeout: float = Field(
        default=5.0, gt=0, description="Valkey connect and command timeout in seconds"
    )

    # Locking
    lock_backend: str = Field(
        default="local", description="Flight lock backend: local or valkey"
    )
    lock_ttl_seconds: int = Field(
        default=30, ge=1, le=300, description="Expiry of distributed lock keys"
    )
    lock_timeout_seconds: float = Field(
        default=5.0, gt=0, description="How long a booking waits for a flight lock"
    )

    # Application
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("lock_backend")
    @classmethod
    def validate_lock_backend(cls, v: str) -> str:
        if v.lower() not in ("local", "valkey"):
            raise ValueError("Lock backend must be 'local' or 'valkey'")
        return v.lower()


def load_config(env_file: Optional[str] = None) -> AppConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Optional path to .env file. If None, looks for .env in current directory.

    Returns:
        AppConfig: Validated configuration object

    Raises:
        ValueError: If configuration is invalid
    """
    if env_file is None:
        env_file = ".env"

    if os.path.exists(env_file):
        load_dotenv(env_file)

    config_data: Dict[str, Any] = {
        "database_url": os.getenv("DATABASE_URL") or None,
        "db_echo": os.getenv("DB_ECHO", "false").lower() in _TRUTHY,
        "valkey_host": os.getenv("VALKEY_HOST", "localhost"),
        "valkey_port": os.getenv("VALKEY_PORT", "6379"),
        "valkey_password": os.getenv("VALKEY_PASSWORD") or None,
        "valkey_database": os.getenv("VALKEY_DATABASE", "0"),
        "valkey_socket_timeout": os.getenv("VALKEY_SOCKET_TIMEOUT", "5.0"),
        "lock_backend": os.getenv("LOCK_BACKEND", "local"),
        "lock_ttl_seconds": os.getenv("LOCK_TTL_SECONDS", "30"),
        "lock_timeout_seconds": os.getenv("LOCK_TIMEOUT_SECONDS", "5.0"),
        "debug": os.getenv("APP_DEBUG", "false").lower() in _TRUTHY,
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }

    try:
        return AppConfig(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}") from e


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance, loading it if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the cached configuration so the next get_config() reloads it."""
    global _config
    _config = None
