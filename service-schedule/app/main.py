"""Main entry point for the schedule read service."""

import asyncio

import structlog

from shared.framework.health import HealthCheck
from shared.framework.service import AsyncService
from shared.storage.postgres import PostgresClient, PostgresConfig
from shared.utils.errors import StoreUnavailableError
from shared.utils.logging import setup_logging

from .apis.events import EventsAPI
from .config import ScheduleServiceConfig
from .queries.schedule_events import STORE_ERRORS, ScheduleEventQueries


logger = structlog.get_logger(__name__)


class ScheduleService(AsyncService):
    """Serves flat schedule event records over HTTP."""

    def __init__(self, config: ScheduleServiceConfig = None, postgres: PostgresClient = None):
        config = config or ScheduleServiceConfig()
        super().__init__(config)
        self.config = config
        self.postgres = postgres or PostgresClient(
            PostgresConfig(
                dsn=config.database.postgres_dsn,
                min_size=config.database.pool_min_size,
                max_size=config.database.pool_max_size,
                timeout=config.database.command_timeout,
            )
        )
        self.queries = ScheduleEventQueries(
            self.postgres,
            timeout=config.query_timeout,
            metrics=self.metrics,
            service_name=config.service_name,
        )
        self.events_api = EventsAPI(self.queries, metrics=self.metrics)

        self.health_checker.add_check(
            HealthCheck(
                name="postgres",
                check_func=self.postgres.health_check,
                timeout=config.query_timeout,
                description="Schedule store connectivity"
            )
        )

    def _setup_service_routes(self) -> None:
        self.events_api.register(self.app)

    async def _startup_hook(self) -> None:
        setup_logging(
            self.config.service_name,
            log_level=self.config.observability.log_level,
            format_type=self.config.observability.log_format,
        )
        logger.info("Starting schedule service components", config=self.config.to_dict())

        try:
            await self.postgres.connect()
        except STORE_ERRORS as e:
            if self.config.require_store_on_startup:
                raise StoreUnavailableError(
                    f"Could not connect to the schedule store: {e}",
                    operation="connect",
                ) from e
            logger.warning("Schedule store unreachable at startup", error=str(e))

    async def _shutdown_hook(self) -> None:
        logger.info("Stopping schedule service components")
        await self.postgres.disconnect()
        logger.info("Schedule service stopped")


async def main():
    """Main entry point."""
    service = ScheduleService()
    await service.run()


if __name__ == "__main__":
    asyncio.run(main())
