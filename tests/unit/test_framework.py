"""Unit tests for shared framework components."""

import asyncio

import pytest
import structlog
from structlog.testing import capture_logs
from unittest.mock import AsyncMock

from app.config import ScheduleServiceConfig
from app.main import ScheduleService
from shared.framework.config import ServiceConfig, redact_dsn
from shared.framework.health import HealthCheck, HealthChecker
from shared.framework.metrics import MetricsCollector
from shared.utils.errors import ConfigurationError, StoreUnavailableError
from shared.utils.logging import add_event_id, add_group_id, get_logger, setup_logging
from tests.fixtures.mock_services import FakePostgresClient


class TestServiceConfig:
    """Test environment-driven configuration."""

    def test_from_env(self, schedule_env):
        config = ScheduleServiceConfig()

        assert config.service_name == "schedule"
        assert config.environment == "local"
        assert config.query_timeout == 2.0
        assert config.database.postgres_dsn == "postgresql://svc:secret@db:5432/schedule"
        assert config.require_store_on_startup is True

    def test_to_dict_redacts_password(self, schedule_env):
        data = ScheduleServiceConfig().to_dict()

        assert data["database"]["postgres_dsn"] == "postgresql://svc:***@db:5432/schedule"
        assert "secret" not in str(data)

    def test_redact_without_password(self):
        assert redact_dsn("postgresql://localhost:5432/schedule") == "postgresql://localhost:5432/schedule"

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("SCHEDULE_ENV", "qa")

        with pytest.raises(ConfigurationError) as exc_info:
            ServiceConfig.from_env("schedule")

        assert exc_info.value.config_key == "environment"

    def test_non_positive_timeout(self, monkeypatch):
        monkeypatch.setenv("SCHEDULE_ENV", "local")
        monkeypatch.setenv("SCHEDULE_QUERY_TIMEOUT", "0")

        with pytest.raises(ConfigurationError) as exc_info:
            ServiceConfig.from_env("schedule")

        assert exc_info.value.config_key == "query_timeout"

    def test_pool_bounds(self, monkeypatch):
        monkeypatch.setenv("SCHEDULE_ENV", "local")
        monkeypatch.setenv("SCHEDULE_POSTGRES_POOL_MIN", "20")
        monkeypatch.setenv("SCHEDULE_POSTGRES_POOL_MAX", "5")

        with pytest.raises(ConfigurationError):
            ServiceConfig.from_env("schedule")

    def test_missing_service_name(self, schedule_env):
        with pytest.raises(ConfigurationError):
            ServiceConfig(service_name="")


class TestHealthChecker:
    """Test HealthChecker aggregation."""

    @pytest.mark.asyncio
    async def test_all_healthy(self, schedule_env):
        checker = HealthChecker(ServiceConfig.from_env("schedule"))

        result = await checker.check_health()

        assert result["healthy"] is True
        assert result["status"] == "healthy"
        assert "config" in result["checks"]

    @pytest.mark.asyncio
    async def test_critical_failure(self, schedule_env):
        checker = HealthChecker(ServiceConfig.from_env("schedule"))
        checker.add_check(HealthCheck(name="store", check_func=AsyncMock(return_value=False)))

        result = await checker.check_health()
        ready = await checker.check_readiness()

        assert result["healthy"] is False
        assert result["critical_failures"] == 1
        assert ready["ready"] is False

    @pytest.mark.asyncio
    async def test_non_critical_failure_degrades(self, schedule_env):
        checker = HealthChecker(ServiceConfig.from_env("schedule"))
        checker.add_check(HealthCheck(name="cache", check_func=lambda: False, critical=False))

        result = await checker.check_health()
        ready = await checker.check_readiness()

        assert result["status"] == "degraded"
        assert ready["ready"] is True

    @pytest.mark.asyncio
    async def test_exception_counts_as_failure(self, schedule_env):
        def broken() -> bool:
            raise RuntimeError("boom")

        checker = HealthChecker(ServiceConfig.from_env("schedule"))
        checker.add_check(HealthCheck(name="broken", check_func=broken))

        result = await checker.check_health()

        assert result["checks"]["broken"]["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_timeout(self, schedule_env):
        async def slow() -> bool:
            await asyncio.sleep(1)
            return True

        checker = HealthChecker(ServiceConfig.from_env("schedule"))
        checker.add_check(HealthCheck(name="slow", check_func=slow, timeout=0.01))

        result = await checker.check_health()

        assert result["checks"]["slow"]["error"] == "timeout"
        assert result["healthy"] is False

    @pytest.mark.asyncio
    async def test_remove_check(self, schedule_env):
        checker = HealthChecker(ServiceConfig.from_env("schedule"))
        checker.add_check(HealthCheck(name="store", check_func=lambda: False))
        checker.remove_check("store")

        result = await checker.check_health()

        assert result["healthy"] is True
        assert checker.get_last_status()["status"] == "healthy"


class TestMetricsCollector:
    """Test MetricsCollector."""

    def test_service_name_is_sanitised(self):
        metrics = MetricsCollector("schedule-read")

        metrics.record_query("list_by_group", "ok", 0.01)

        value = metrics.registry.get_sample_value(
            "schedule_read_queries_total", {"operation": "list_by_group", "outcome": "ok"}
        )
        assert value == 1.0

    def test_errors_and_health(self):
        metrics = MetricsCollector("schedule")

        metrics.record_error("store_unavailable", "events_api")
        metrics.set_health_status(False)

        assert metrics.registry.get_sample_value(
            "schedule_errors_total", {"error_type": "store_unavailable", "component": "events_api"}
        ) == 1.0
        assert metrics.registry.get_sample_value("schedule_health_status") == 0.0
        assert b"schedule_errors_total" in metrics.get_metrics()


class TestScheduleServiceLifecycle:
    """Test service startup and shutdown."""

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self, schedule_env, monkeypatch):
        monkeypatch.setenv("SCHEDULE_HTTP_PORT", "0")
        postgres = FakePostgresClient()
        service = ScheduleService(postgres=postgres)

        await service.startup()
        assert postgres.is_connected
        assert service.app is not None

        await service.shutdown()
        assert not postgres.is_connected
        assert service.shutdown_event.is_set()

    @pytest.mark.asyncio
    async def test_unreachable_store_fails_startup(self, schedule_env, monkeypatch):
        monkeypatch.setenv("SCHEDULE_HTTP_PORT", "0")
        postgres = FakePostgresClient()
        postgres.connect = AsyncMock(side_effect=ConnectionRefusedError("refused"))
        service = ScheduleService(postgres=postgres)

        with pytest.raises(StoreUnavailableError):
            await service.startup()

        await service.shutdown()

    @pytest.mark.asyncio
    async def test_unreachable_store_tolerated_when_configured(self, schedule_env, monkeypatch):
        monkeypatch.setenv("SCHEDULE_HTTP_PORT", "0")
        monkeypatch.setenv("SCHEDULE_REQUIRE_STORE_ON_STARTUP", "false")
        postgres = FakePostgresClient()
        postgres.connect = AsyncMock(side_effect=ConnectionRefusedError("refused"))
        service = ScheduleService(postgres=postgres)

        await service.startup()
        assert service.site is not None

        await service.shutdown()


class TestLogging:
    """Test structured logging setup."""

    def teardown_method(self):
        structlog.contextvars.clear_contextvars()
        structlog.reset_defaults()

    def test_json_setup_binds_service(self):
        setup_logging("schedule", log_level="info", format_type="json")

        assert structlog.contextvars.get_contextvars()["service"] == "schedule"
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.contextvars.merge_contextvars in processors

    def test_console_setup(self):
        setup_logging("schedule", log_level="debug", format_type="console")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_context_helpers(self):
        logger = add_group_id(add_event_id(get_logger("test"), 160), 7)

        with capture_logs() as logs:
            logger.info("looked up")

        assert len(logs) == 1
        assert logs[0]["event"] == "looked up"
        assert logs[0]["event_id"] == 160
        assert logs[0]["group_id"] == 7
