"""
Read-path queries for scheduling events.

Each operation is a single SQL round trip that joins an event with its
team and owner and projects the joined columns straight into
``ScheduleEvent`` records. Team and owner names are therefore resolved
by the same statement that resolves the event itself, and the records
returned stay fully readable after the pooled connection is released.
"""

import asyncio
import time
from datetime import datetime
from typing import Any, Awaitable, List, Optional

import asyncpg
import structlog

from shared.framework.metrics import MetricsCollector
from shared.schemas.models import ScheduleEvent
from shared.utils.errors import (
    NotFoundError,
    ProjectionError,
    StoreUnavailableError,
    ValidationError,
    create_error_context,
)


logger = structlog.get_logger(__name__)

# Largest value a BIGINT identifier column can hold
MAX_IDENTIFIER = 2 ** 63 - 1

STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

_SELECT_EVENTS = """
    SELECT
        e.id,
        e.team_id AS group_id,
        t.name AS group_name,
        e.owner_id,
        o.display_name AS owner_name,
        e.title,
        e.starts_at,
        e.ends_at,
        e.is_fixed,
        e.location,
        e.attendees,
        e.notes,
        e.recurrence_kind,
        e.recurrence_end_date,
        e.created_at,
        e.updated_at
    FROM schedule_events e
    JOIN teams t ON t.id = e.team_id
    LEFT JOIN owners o ON o.id = e.owner_id
"""

SELECT_EVENT_BY_ID = _SELECT_EVENTS + "WHERE e.id = $1"

SELECT_EVENTS_BY_GROUP = _SELECT_EVENTS + """WHERE e.team_id = $1
    ORDER BY e.starts_at, e.id"""

SELECT_EVENTS_BY_GROUP_IN_RANGE = _SELECT_EVENTS + """WHERE e.team_id = $1
      AND e.starts_at >= $2
      AND e.starts_at <= $3
    ORDER BY e.starts_at, e.id"""


def _require_identifier(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field, value=value)
    if value < 1 or value > MAX_IDENTIFIER:
        raise ValidationError(f"{field} is out of range", field=field, value=value)
    return value


def _require_zoned(value: Any, field: str) -> datetime:
    if not isinstance(value, datetime):
        raise ValidationError(f"{field} must be a timestamp", field=field, value=value)
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(f"{field} must carry a time zone", field=field, value=value.isoformat())
    return value


class ScheduleEventQueries:
    """
    Projection queries over the schedule store.

    Holds no per-call state, so one instance can serve concurrent
    callers. Store failures and timeouts are raised as
    ``StoreUnavailableError`` and never retried here.
    """

    def __init__(
        self,
        client,
        timeout: float = 5.0,
        metrics: Optional[MetricsCollector] = None,
        service_name: str = "schedule",
    ):
        self.client = client
        self.timeout = timeout
        self.metrics = metrics
        self.service_name = service_name

    async def get_by_id(self, event_id: int, timeout: Optional[float] = None) -> ScheduleEvent:
        """
        Fetch one event with its team and owner names resolved.

        Raises:
            ValidationError: event_id is not a positive integer.
            NotFoundError: no event has this identifier.
            StoreUnavailableError: the store round trip failed or timed out.
        """
        event_id = _require_identifier(event_id, "event_id")
        operation = "get_by_id"

        row = await self._round_trip(
            operation,
            self.client.execute_one(SELECT_EVENT_BY_ID, event_id),
            timeout,
            event_id=event_id,
        )
        if row is None:
            logger.debug("Schedule event not found", event_id=event_id)
            raise NotFoundError(
                f"Schedule event {event_id} does not exist",
                resource="schedule_event",
                resource_id=event_id,
                context=create_error_context(self.service_name, operation, event_id=event_id),
            )

        return self._project(operation, row)

    async def list_by_group(self, group_id: int, timeout: Optional[float] = None) -> List[ScheduleEvent]:
        """List every event owned by a team, ordered by start time."""
        group_id = _require_identifier(group_id, "group_id")
        operation = "list_by_group"

        rows = await self._round_trip(
            operation,
            self.client.execute(SELECT_EVENTS_BY_GROUP, group_id),
            timeout,
            group_id=group_id,
        )
        return [self._project(operation, row) for row in rows]

    async def list_by_group_in_range(
        self,
        group_id: int,
        start: datetime,
        end: datetime,
        timeout: Optional[float] = None,
    ) -> List[ScheduleEvent]:
        """
        List a team's events whose start falls within [start, end].

        Both bounds are inclusive and must be zoned. A start later than
        the end is rejected as a ValidationError before the store is
        consulted.
        """
        group_id = _require_identifier(group_id, "group_id")
        start = _require_zoned(start, "start")
        end = _require_zoned(end, "end")
        if start > end:
            raise ValidationError(
                "start must not be later than end",
                field="start",
                value=start.isoformat(),
                details={"end": end.isoformat()},
            )
        operation = "list_by_group_in_range"

        rows = await self._round_trip(
            operation,
            self.client.execute(SELECT_EVENTS_BY_GROUP_IN_RANGE, group_id, start, end),
            timeout,
            group_id=group_id,
            start=start.isoformat(),
            end=end.isoformat(),
        )
        return [self._project(operation, row) for row in rows]

    async def _round_trip(
        self,
        operation: str,
        call: Awaitable[Any],
        timeout: Optional[float],
        **log_fields: Any,
    ) -> Any:
        """Await a single store call, mapping failures to StoreUnavailableError."""
        limit = self.timeout if timeout is None else timeout
        started = time.perf_counter()
        try:
            result = await asyncio.wait_for(call, timeout=limit)
        except asyncio.TimeoutError:
            elapsed = time.perf_counter() - started
            logger.error("Schedule store query timed out", operation=operation, timeout=limit, **log_fields)
            self._record(operation, "timeout", elapsed)
            raise StoreUnavailableError(
                f"Schedule store did not answer {operation} within {limit}s",
                operation=operation,
                timeout_seconds=limit,
                context=create_error_context(self.service_name, operation, metadata=log_fields),
            ) from None
        except STORE_ERRORS as e:
            elapsed = time.perf_counter() - started
            logger.error(
                "Schedule store query failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
                **log_fields,
            )
            self._record(operation, "unavailable", elapsed)
            raise StoreUnavailableError(
                f"Schedule store failed during {operation}: {e}",
                operation=operation,
                context=create_error_context(self.service_name, operation, metadata=log_fields),
            ) from e

        self._record(operation, "ok", time.perf_counter() - started)
        return result

    def _project(self, operation: str, row) -> ScheduleEvent:
        try:
            return ScheduleEvent.from_row(row)
        except ProjectionError as e:
            logger.error(
                "Schedule event row could not be projected",
                operation=operation,
                error=e.message,
                event_id=row.get("id"),
            )
            if self.metrics:
                self.metrics.record_error("projection_error", "schedule_event_queries")
            e.context = create_error_context(self.service_name, operation, event_id=row.get("id"))
            raise

    def _record(self, operation: str, outcome: str, duration: float) -> None:
        if self.metrics:
            self.metrics.record_query(operation, outcome, duration)
