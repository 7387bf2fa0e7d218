"""
Health check system for the schedule services.

Aggregates named checks into health and readiness reports:
- Service health status
- Readiness checks
- Dependency health (e.g. the PostgreSQL store)
"""

import asyncio
import inspect
from typing import Dict, Any, List, Optional, Callable, Awaitable, Union
from dataclasses import dataclass
from enum import Enum
import time

import structlog

from .config import VALID_ENVIRONMENTS


logger = structlog.get_logger()


class HealthStatus(Enum):
    """Health status enumeration."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class HealthCheck:
    """Individual health check definition."""
    name: str
    check_func: Callable[[], Union[bool, Awaitable[bool]]]
    timeout: float = 5.0
    critical: bool = True
    description: Optional[str] = None


class HealthChecker:
    """
    Health checker for a service.

    A failing critical check makes the service unhealthy and not ready;
    a failing non-critical check only degrades it.
    """

    def __init__(self, config):
        self.config = config
        self.logger = structlog.get_logger("health-checker")
        self.checks: List[HealthCheck] = []
        self.last_check_time: Optional[float] = None
        self.last_status: Optional[HealthStatus] = None

        self.add_check(
            HealthCheck(
                name="config",
                check_func=self._check_config,
                description="Service configuration validation"
            )
        )

    def add_check(self, check: HealthCheck) -> None:
        """Add a health check."""
        self.checks.append(check)
        self.logger.debug("Added health check", name=check.name)

    def remove_check(self, name: str) -> None:
        """Remove a health check by name."""
        self.checks = [check for check in self.checks if check.name != name]
        self.logger.debug("Removed health check", name=name)

    async def check_health(self) -> Dict[str, Any]:
        """Perform all health checks and return aggregated status."""
        results = {}
        overall_status = HealthStatus.HEALTHY
        critical_failures = 0

        for check in self.checks:
            started = time.time()
            error: Optional[str] = None
            try:
                result = await asyncio.wait_for(self._run_check(check), timeout=check.timeout)
            except asyncio.TimeoutError:
                self.logger.warning("Health check timeout", name=check.name, timeout=check.timeout)
                result = False
                error = "timeout"

            entry = {
                "status": "healthy" if result else "unhealthy",
                "description": check.description,
                "critical": check.critical,
                "duration_ms": (time.time() - started) * 1000,
            }
            if error:
                entry["error"] = error
            results[check.name] = entry

            if not result and check.critical:
                critical_failures += 1
                overall_status = HealthStatus.UNHEALTHY
            elif not result and overall_status == HealthStatus.HEALTHY:
                overall_status = HealthStatus.DEGRADED

        self.last_check_time = time.time()
        self.last_status = overall_status

        return {
            "healthy": overall_status == HealthStatus.HEALTHY,
            "status": overall_status.value,
            "checks": results,
            "critical_failures": critical_failures,
            "total_checks": len(self.checks),
            "timestamp": self.last_check_time,
        }

    async def check_readiness(self) -> Dict[str, Any]:
        """Check if service is ready to accept traffic."""
        health_result = await self.check_health()
        ready = health_result["critical_failures"] == 0

        return {
            "ready": ready,
            "status": "ready" if ready else "not_ready",
            "health": health_result,
            "timestamp": time.time(),
        }

    async def _run_check(self, check: HealthCheck) -> bool:
        """Run a single health check; an exception counts as a failure."""
        try:
            result = check.check_func()
            if inspect.isawaitable(result):
                result = await result
            return bool(result)
        except Exception as e:
            self.logger.error(
                "Health check execution error",
                name=check.name,
                error=str(e),
                exc_info=True
            )
            return False

    def _check_config(self) -> bool:
        """Check service configuration."""
        return bool(self.config.service_name) and self.config.environment in VALID_ENVIRONMENTS

    def get_last_status(self) -> Optional[Dict[str, Any]]:
        """Get the last health check status."""
        if self.last_check_time is None:
            return None

        return {
            "status": self.last_status.value if self.last_status else None,
            "timestamp": self.last_check_time,
        }
