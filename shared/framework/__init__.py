"""
Core framework components for the schedule services.

Provides base classes and abstractions for building
observable aiohttp services backed by PostgreSQL.
"""

from .service import AsyncService
from .config import ServiceConfig, DatabaseConfig, ObservabilityConfig
from .health import HealthChecker, HealthCheck
from .metrics import MetricsCollector

__all__ = [
    "AsyncService",
    "ServiceConfig",
    "DatabaseConfig",
    "ObservabilityConfig",
    "HealthChecker",
    "HealthCheck",
    "MetricsCollector",
]
