"""HTTP API for reading scheduling events."""

from datetime import datetime
from typing import Optional, Tuple

import structlog
from aiohttp import web

from shared.framework.metrics import MetricsCollector
from shared.utils.errors import (
    DataProcessingError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)

from ..queries.schedule_events import ScheduleEventQueries


logger = structlog.get_logger(__name__)


def _status_for(error: DataProcessingError) -> int:
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, StoreUnavailableError):
        return 503
    return 500


def _parse_identifier(raw: str, field: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{field} must be an integer", field=field, value=raw) from None


def _parse_timestamp(raw: str, field: str) -> datetime:
    # A literal '+' in a query string decodes to a space
    text = raw.strip().replace(" ", "+")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO 8601 timestamp", field=field, value=raw) from None


def _parse_range(request: web.Request) -> Optional[Tuple[datetime, datetime]]:
    start = request.query.get("start")
    end = request.query.get("end")
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise ValidationError(
            "start and end must be given together",
            field="start" if start is None else "end",
        )
    return _parse_timestamp(start, "start"), _parse_timestamp(end, "end")


class EventsAPI:
    """Read-only event endpoints backed by ``ScheduleEventQueries``."""

    def __init__(self, queries: ScheduleEventQueries, metrics: Optional[MetricsCollector] = None):
        self.queries = queries
        self.metrics = metrics

    def register(self, app: web.Application) -> None:
        """Attach the event routes to an application."""
        app.router.add_get("/events/{id}", self.get_event)
        app.router.add_get("/events/group/{group_id}", self.list_group_events)

    async def get_event(self, request: web.Request) -> web.Response:
        """GET /events/{id}"""
        try:
            event_id = _parse_identifier(request.match_info["id"], "event_id")
            event = await self.queries.get_by_id(event_id)
        except DataProcessingError as e:
            return self._error_response(e, "get_event")

        return web.json_response(event.to_dict())

    async def list_group_events(self, request: web.Request) -> web.Response:
        """GET /events/group/{group_id}[?start=...&end=...]"""
        try:
            group_id = _parse_identifier(request.match_info["group_id"], "group_id")
            window = _parse_range(request)
            if window is None:
                events = await self.queries.list_by_group(group_id)
            else:
                events = await self.queries.list_by_group_in_range(group_id, *window)
        except DataProcessingError as e:
            return self._error_response(e, "list_group_events")

        return web.json_response([event.to_dict() for event in events])

    def _error_response(self, error: DataProcessingError, handler: str) -> web.Response:
        status = _status_for(error)
        if status >= 500:
            logger.error("Event request failed", handler=handler, error_code=error.error_code, error=error.message)
            if self.metrics:
                self.metrics.record_error(error.error_code.lower(), "events_api")
        else:
            logger.info("Event request rejected", handler=handler, error_code=error.error_code, status=status)

        return web.json_response({"error": error.to_dict()}, status=status)
