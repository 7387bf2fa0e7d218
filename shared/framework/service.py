"""
Base AsyncService class for the schedule services.

Provides lifecycle management, HTTP server, health checks,
request metrics and graceful shutdown capabilities.
"""

import asyncio
import signal
import time
from abc import ABC, abstractmethod
from typing import Optional

from aiohttp import web
import structlog
import psutil

from .config import ServiceConfig
from .health import HealthChecker
from .metrics import MetricsCollector


logger = structlog.get_logger(__name__)


class AsyncService(ABC):
    """
    Base class for async services.

    Provides common functionality:
    - HTTP API server
    - Health checks
    - Metrics collection
    - Graceful shutdown
    """

    def __init__(self, config: ServiceConfig):
        self.config = config
        self.logger = structlog.get_logger(self.config.service_name).bind(service=self.config.service_name)

        # Core components
        self.app: Optional[web.Application] = None
        self.runner: Optional[web.AppRunner] = None
        self.site: Optional[web.TCPSite] = None

        # Framework components
        self.health_checker = HealthChecker(self.config)
        self.metrics = MetricsCollector(self.config.service_name)

        self.shutdown_event = asyncio.Event()
        self.metrics_task: Optional[asyncio.Task] = None
        self._stopped = False

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(signum, self._handle_signal, signum)

    def _handle_signal(self, signum: int) -> None:
        self.logger.info("Received shutdown signal", signal=signum)
        self.shutdown_event.set()

    def build_app(self) -> web.Application:
        """Create the web application with framework and service routes."""
        self.app = web.Application(middlewares=[self._metrics_middleware])
        self._setup_routes()
        return self.app

    async def startup(self) -> None:
        """Initialize service components."""
        self.logger.info("Starting service")

        await self._startup_hook()
        self.build_app()

        self.metrics_task = asyncio.create_task(self._update_metrics_periodically())

        self.runner = web.AppRunner(self.app)
        await self.runner.setup()

        self.site = web.TCPSite(
            self.runner,
            host="0.0.0.0",
            port=self.config.observability.http_port
        )
        await self.site.start()

        self.logger.info(
            "Service started",
            port=self.config.observability.http_port
        )

    async def shutdown(self) -> None:
        """Gracefully shutdown service."""
        if self._stopped:
            return
        self._stopped = True
        self.logger.info("Shutting down service")

        # Stop accepting new requests
        if self.site:
            await self.site.stop()

        if self.metrics_task:
            self.metrics_task.cancel()
            try:
                await self.metrics_task
            except asyncio.CancelledError:
                pass

        if self.runner:
            await self.runner.cleanup()

        await self._shutdown_hook()

        self.shutdown_event.set()
        self.logger.info("Service shutdown complete")

    def _setup_routes(self) -> None:
        """Setup HTTP routes."""
        if not self.app:
            return

        # Health check endpoints
        self.app.router.add_get("/health", self._health_handler)
        self.app.router.add_get("/health/ready", self._readiness_handler)
        self.app.router.add_get("/health/live", self._liveness_handler)

        # Metrics endpoint
        self.app.router.add_get("/metrics", self._metrics_handler)

        # Service-specific routes
        self._setup_service_routes()

    def _setup_service_routes(self) -> None:
        """Setup service-specific HTTP routes. Override in subclasses."""
        pass

    @web.middleware
    async def _metrics_middleware(self, request: web.Request, handler):
        """Record request count and latency per route."""
        started = time.perf_counter()
        status = 500
        try:
            response = await handler(request)
            status = response.status
            return response
        except web.HTTPException as exc:
            status = exc.status
            raise
        finally:
            resource = request.match_info.route.resource
            endpoint = resource.canonical if resource is not None else "unmatched"
            self.metrics.record_request(
                request.method, endpoint, str(status), time.perf_counter() - started
            )

    async def _health_handler(self, request: web.Request) -> web.Response:
        """Health check handler."""
        health_status = await self.health_checker.check_health()
        status_code = 200 if health_status["healthy"] else 503

        return web.json_response(health_status, status=status_code)

    async def _readiness_handler(self, request: web.Request) -> web.Response:
        """Readiness check handler."""
        ready_status = await self.health_checker.check_readiness()
        status_code = 200 if ready_status["ready"] else 503

        return web.json_response(ready_status, status=status_code)

    async def _liveness_handler(self, request: web.Request) -> web.Response:
        """Liveness check handler."""
        return web.json_response({"alive": True})

    async def _metrics_handler(self, request: web.Request) -> web.Response:
        """Metrics handler."""
        return web.Response(
            body=self.metrics.get_metrics(),
            headers={"Content-Type": self.metrics.get_content_type()}
        )

    @abstractmethod
    async def _startup_hook(self) -> None:
        """Service-specific startup logic. Override in subclasses."""

    @abstractmethod
    async def _shutdown_hook(self) -> None:
        """Service-specific shutdown logic. Override in subclasses."""

    async def _update_metrics_periodically(self) -> None:
        """Update metrics periodically."""
        interval = self.config.observability.metrics_interval_seconds
        while not self.shutdown_event.is_set():
            try:
                self.metrics.update_service_info(
                    version=self.config.version,
                    environment=self.config.environment
                )

                health_status = await self.health_checker.check_health()
                self.metrics.set_health_status(health_status["healthy"])

                self.metrics.set_memory_usage(psutil.Process().memory_info().rss)

                await asyncio.sleep(interval)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Error updating metrics", error=str(e))
                await asyncio.sleep(interval)

    async def run(self) -> None:
        """Run the service until a shutdown signal arrives."""
        try:
            self._setup_signal_handlers()
            await self.startup()
            await self.shutdown_event.wait()
        except Exception as e:
            self.logger.error("Service error", error=str(e), exc_info=True)
            raise
        finally:
            await self.shutdown()
