"""
Record shapes shared across the schedule services.
"""

from .models import ScheduleEvent, RecurrenceKind, PROJECTION_COLUMNS

__all__ = [
    "ScheduleEvent",
    "RecurrenceKind",
    "PROJECTION_COLUMNS",
]
