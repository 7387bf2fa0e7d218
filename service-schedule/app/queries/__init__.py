from .schedule_events import ScheduleEventQueries

__all__ = ["ScheduleEventQueries"]
