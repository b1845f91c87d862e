"""
Environment configuration for the hotel reservation system.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application configuration
    APP_NAME: str = "Hotel ABC Reservation System"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Database configuration
    DATABASE_URL: str = "sqlite:///./hotel_reservation.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_POOL_OVERFLOW: int = 5
    DB_CONNECT_TIMEOUT: int = 10  # seconds
    DB_STATEMENT_TIMEOUT_MS: int = 10000
    DB_CONNECT_ARGS: Dict[str, Any] = Field(default_factory=dict)

    # Writer lock around allocation / lifecycle transitions
    STORE_LOCK_TIMEOUT: float = 5.0

    # Admin console server
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5555
    MAX_CLIENTS: int = 10
    MAX_PENDING_CLIENTS: int = 0  # 0 = unbounded waiting queue
    SHUTDOWN_GRACE_PERIOD: float = 10.0

    # Billing
    TAX_RATE: float = 0.13
    CURRENCY_SYMBOL: str = "$"

    # Security
    PASSWORD_BCRYPT_ROUNDS: int = 12
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"
    DEFAULT_ADMIN_NAME: str = "System Administrator"

    # Provisioning
    SEED_SAMPLE_ROOMS: bool = True

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Validators
    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case and check the log level name"""
        level = str(v).upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @field_validator('LOG_FORMAT', mode='before')
    @classmethod
    def normalize_log_format(cls, v: str) -> str:
        fmt = str(v).lower()
        if fmt not in {"json", "console"}:
            raise ValueError(f"LOG_FORMAT must be 'json' or 'console', got {v!r}")
        return fmt

    @field_validator('MAX_CLIENTS')
    @classmethod
    def validate_max_clients(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_CLIENTS must be at least 1")
        return v

    @field_validator('MAX_PENDING_CLIENTS')
    @classmethod
    def validate_max_pending(cls, v: int) -> int:
        if v < 0:
            raise ValueError("MAX_PENDING_CLIENTS cannot be negative")
        return v

    @field_validator('TAX_RATE')
    @classmethod
    def validate_tax_rate(cls, v: float) -> float:
        if not 0 <= v <= 1:
            raise ValueError("TAX_RATE must be between 0 and 1")
        return v

    def is_sqlite(self) -> bool:
        """Check if the configured store is SQLite"""
        return self.DATABASE_URL.startswith("sqlite")

    def has_bounded_queue(self) -> bool:
        """Whether waiting admin connections beyond MAX_PENDING_CLIENTS are rejected"""
        return self.MAX_PENDING_CLIENTS > 0

    def redacted(self) -> Dict[str, Optional[Any]]:
        """Settings snapshot safe for logging"""
        data = self.model_dump()
        for key in list(data):
            if "PASSWORD" in key or "SECRET" in key:
                data[key] = "[REDACTED]"
        return data


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
