"""
Configuration management for the schedule services.

Provides typed configuration classes with environment variable
injection and validation.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Any
from urllib.parse import urlsplit, urlunsplit

from shared.utils.errors import ConfigurationError


VALID_ENVIRONMENTS = ("local", "dev", "staging", "prod")


@dataclass
class DatabaseConfig:
    """Database configuration."""
    postgres_dsn: str = field(default_factory=lambda: os.getenv("SCHEDULE_POSTGRES_DSN", "postgresql://localhost:5432/schedule"))
    pool_min_size: int = field(default_factory=lambda: int(os.getenv("SCHEDULE_POSTGRES_POOL_MIN", "2")))
    pool_max_size: int = field(default_factory=lambda: int(os.getenv("SCHEDULE_POSTGRES_POOL_MAX", "10")))
    command_timeout: int = field(default_factory=lambda: int(os.getenv("SCHEDULE_POSTGRES_COMMAND_TIMEOUT", "30")))


@dataclass
class ObservabilityConfig:
    """Observability configuration."""
    log_level: str = field(default_factory=lambda: os.getenv("SCHEDULE_LOG_LEVEL", "info"))
    log_format: str = field(default_factory=lambda: os.getenv("SCHEDULE_LOG_FORMAT", "json"))
    http_port: int = field(default_factory=lambda: int(os.getenv("SCHEDULE_HTTP_PORT", "8080")))
    metrics_interval_seconds: float = field(default_factory=lambda: float(os.getenv("SCHEDULE_METRICS_INTERVAL", "30")))


@dataclass
class ServiceConfig:
    """Base service configuration."""
    service_name: str
    environment: str = field(default_factory=lambda: os.getenv("SCHEDULE_ENV", "local"))
    version: str = field(default_factory=lambda: os.getenv("SCHEDULE_VERSION", "1.0.0"))

    # Sub-configurations
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    # Upper bound for a single store round trip, in seconds
    query_timeout: float = field(default_factory=lambda: float(os.getenv("SCHEDULE_QUERY_TIMEOUT", "5")))

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.service_name:
            raise ConfigurationError("service_name is required", config_key="service_name")

        if self.environment not in VALID_ENVIRONMENTS:
            raise ConfigurationError(
                f"Invalid environment: {self.environment}",
                config_key="environment",
                config_value=self.environment,
            )

        if self.query_timeout <= 0:
            raise ConfigurationError(
                "query_timeout must be positive",
                config_key="query_timeout",
                config_value=self.query_timeout,
            )

        if self.database.pool_min_size > self.database.pool_max_size:
            raise ConfigurationError(
                "pool_min_size cannot exceed pool_max_size",
                config_key="pool_min_size",
                config_value=self.database.pool_min_size,
            )

    @classmethod
    def from_env(cls, service_name: str) -> "ServiceConfig":
        """Create configuration from environment variables."""
        return cls(service_name=service_name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "service_name": self.service_name,
            "environment": self.environment,
            "version": self.version,
            "database": {
                "postgres_dsn": redact_dsn(self.database.postgres_dsn),
                "pool_min_size": self.database.pool_min_size,
                "pool_max_size": self.database.pool_max_size,
                "command_timeout": self.database.command_timeout,
            },
            "observability": {
                "log_level": self.observability.log_level,
                "log_format": self.observability.log_format,
                "http_port": self.observability.http_port,
                "metrics_interval_seconds": self.observability.metrics_interval_seconds,
            },
            "query_timeout": self.query_timeout,
        }


def redact_dsn(dsn: str) -> str:
    """Mask the password component of a connection string."""
    parts = urlsplit(dsn)
    if not parts.password:
        return dsn
    netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
